# keypoint_converter.py
import json
from typing import Sequence

import numpy as np

from app.schemas.keypoint_dto import KeypointPosition


class KeypointConverter:
    """snapshot history(프레임별 {name,x,y} 리스트) ↔ JSON / numpy 변환"""

    def __init__(self, history: Sequence[Sequence[KeypointPosition]]):
        self._history = [list(snapshot) for snapshot in history]

    def to_json_string(self, indent: int = 2) -> str:
        data = [[kp.model_dump() for kp in snapshot] for snapshot in self._history]
        return json.dumps(data, indent=indent)

    def to_numpy(self) -> np.ndarray:
        """shape = (frames, landmarks, 2) [x, y]"""
        if not self._history:
            return np.empty((0, 0, 2), dtype=float)
        return np.array(
            [[[kp.x, kp.y] for kp in snapshot] for snapshot in self._history],
            dtype=float,
        )

    def to_history(self) -> list[list[KeypointPosition]]:
        return [list(snapshot) for snapshot in self._history]

    @classmethod
    def from_json_string(cls, json_str: str) -> "KeypointConverter":
        data = json.loads(json_str)
        history = [[KeypointPosition(**kp) for kp in frame] for frame in data]
        return cls(history)
