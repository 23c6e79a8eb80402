"""
프레임 단위 ingest(HTTP)용 세션 저장소
세션마다 MovementAggregator를 하나씩 소유한다.
"""
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional

from app.domain.movement.aggregator import MovementAggregator
from app.schemas.movement_dto import SessionInfo


@dataclass
class MovementSession:
    session_id: str
    video_file_name: str
    aggregator: MovementAggregator
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    # 같은 세션에 대한 프레임 ingest 직렬화
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def info(self) -> SessionInfo:
        return SessionInfo(
            session_id=self.session_id,
            video_file_name=self.video_file_name,
            landmarks=self.aggregator.landmark_names,
            frame_count=self.aggregator.frame_count,
            transition_count=len(self.aggregator.movement_log),
        )


class SessionRegistry:
    """thread-safe in-memory 세션 맵"""

    def __init__(
        self,
        tracked_landmarks: Iterable[str],
        movement_threshold: float,
        decimals: int,
    ):
        self.tracked_landmarks = list(tracked_landmarks)
        self.movement_threshold = movement_threshold
        self.decimals = decimals
        self._sessions: Dict[str, MovementSession] = {}
        self._lock = threading.Lock()

    def create(self, video_file_name: str, tracked_landmarks: Optional[Iterable[str]] = None) -> MovementSession:
        aggregator = MovementAggregator(
            tracked_landmarks=tracked_landmarks or self.tracked_landmarks,
            movement_threshold=self.movement_threshold,
            decimals=self.decimals,
        )
        session = MovementSession(
            session_id=uuid.uuid4().hex,
            video_file_name=video_file_name,
            aggregator=aggregator,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> MovementSession:
        """없으면 KeyError"""
        with self._lock:
            return self._sessions[session_id]

    def remove(self, session_id: str) -> MovementSession:
        with self._lock:
            return self._sessions.pop(session_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
