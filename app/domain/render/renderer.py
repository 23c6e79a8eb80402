"""
Keypoint 렌더링 Domain Logic
프레임(BGR ndarray) 위에 keypoint 점과 스켈레톤 선을 그린다.
score_threshold 미만인 keypoint/연결은 그리지 않는다.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import cv2
import numpy as np

from app.domain.constants import (
    ADJACENT_PAIRS,
    COLOR_LEFT,
    COLOR_MIDDLE,
    COLOR_RIGHT,
    COLOR_SKELETON,
    DEFAULT_KEYPOINT_RADIUS,
    DEFAULT_LINE_WIDTH,
    DEFAULT_OVERLAY_CODEC,
    DEFAULT_SCORE_THRESHOLD,
)
from app.schemas.keypoint_dto import Keypoint, Pose

logger = logging.getLogger(__name__)


class PoseRenderer:
    """포즈 오버레이 렌더러"""

    def __init__(
        self,
        score_threshold: float = DEFAULT_SCORE_THRESHOLD,
        radius: int = DEFAULT_KEYPOINT_RADIUS,
        line_width: int = DEFAULT_LINE_WIDTH,
        adjacent_pairs: Sequence[Tuple[str, str]] = ADJACENT_PAIRS,
    ):
        self.score_threshold = score_threshold or 0.0
        self.radius = radius
        self.line_width = line_width
        self.adjacent_pairs = tuple(adjacent_pairs)

    def draw_results(self, frame: np.ndarray, poses: Iterable[Pose]) -> np.ndarray:
        """포즈 리스트 전체를 그린다 (keypoints가 없는 포즈는 건너뜀)"""
        for pose in poses:
            if pose.keypoints is not None:
                self.draw_keypoints(frame, pose.keypoints)
                self.draw_skeleton(frame, pose.keypoints)
        return frame

    def draw_keypoints(self, frame: np.ndarray, keypoints: Sequence[Keypoint]) -> np.ndarray:
        """가운데=흰색, left_*=초록, right_*=주황"""
        for kp in keypoints:
            self.draw_keypoint(frame, kp, side_color(kp.name))
        return frame

    def draw_keypoint(self, frame: np.ndarray, kp: Keypoint, color=COLOR_MIDDLE) -> bool:
        """score가 임계값 이상이면 원을 그리고 True"""
        if not self.is_visible(kp):
            return False
        center = (int(round(kp.x)), int(round(kp.y)))
        # 채운 원 + 흰 테두리
        cv2.circle(frame, center, self.radius, color, thickness=-1, lineType=cv2.LINE_AA)
        cv2.circle(frame, center, self.radius, COLOR_MIDDLE, thickness=self.line_width, lineType=cv2.LINE_AA)
        return True

    def draw_skeleton(self, frame: np.ndarray, keypoints: Sequence[Keypoint]) -> np.ndarray:
        """인접 landmark 쌍을 선으로 잇는다. 두 끝점 모두 임계값을 넘어야 그린다."""
        by_name: Dict[str, Keypoint] = {kp.name: kp for kp in keypoints}
        for a, b in self.adjacent_pairs:
            kp1, kp2 = by_name.get(a), by_name.get(b)
            if kp1 is None or kp2 is None:
                continue
            if self.is_visible(kp1) and self.is_visible(kp2):
                cv2.line(
                    frame,
                    (int(round(kp1.x)), int(round(kp1.y))),
                    (int(round(kp2.x)), int(round(kp2.y))),
                    COLOR_SKELETON,
                    thickness=self.line_width,
                    lineType=cv2.LINE_AA,
                )
        return frame

    def is_visible(self, kp: Keypoint) -> bool:
        # score가 없으면 그냥 보여준다
        score = kp.score if kp.score is not None else 1.0
        return score >= self.score_threshold


def side_color(name: str):
    if name.startswith("left_"):
        return COLOR_LEFT
    if name.startswith("right_"):
        return COLOR_RIGHT
    return COLOR_MIDDLE


class OverlayRecorder:
    """렌더링된 프레임을 비디오 파일로 기록 (start → write* → stop)"""

    def __init__(self, codec: str = DEFAULT_OVERLAY_CODEC):
        self.codec = codec
        self._writer: Optional[cv2.VideoWriter] = None
        self.path: Optional[Path] = None
        self.frames_written = 0

    @property
    def is_recording(self) -> bool:
        return self._writer is not None

    def start(self, path: Union[str, Path], fps: float, size: Tuple[int, int]) -> None:
        """
        Args:
            path: 출력 파일 경로
            fps: 출력 FPS
            size: (width, height)
        """
        if self._writer is not None:
            raise RuntimeError("recorder already started")
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fourcc = cv2.VideoWriter_fourcc(*self.codec)
        writer = cv2.VideoWriter(str(self.path), fourcc, float(fps), (int(size[0]), int(size[1])))
        if not writer.isOpened():
            raise RuntimeError(f"Cannot open video writer: {self.path} (codec={self.codec})")
        self._writer = writer
        self.frames_written = 0
        logger.info(f"🎬 오버레이 녹화 시작: {self.path}")

    def write(self, frame: np.ndarray) -> None:
        if self._writer is None:
            raise RuntimeError("recorder is not started")
        self._writer.write(frame)
        self.frames_written += 1

    def stop(self) -> Optional[Path]:
        if self._writer is None:
            return None
        self._writer.release()
        self._writer = None
        logger.info(f"✅ 오버레이 녹화 종료: {self.path} ({self.frames_written} frames)")
        return self.path
