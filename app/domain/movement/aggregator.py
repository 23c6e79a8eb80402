"""
움직임 통계 Domain Logic
프레임별 keypoint snapshot → 프레임 간 이동량 누적 → 요약 통계(표준편차/총 이동량/빈도)

왜 객체로 분리했나?
- 세션(영상 1개) 단위로 상태를 소유하고, 새 세션은 새 인스턴스로 시작한다.
- 모듈 전역 상태가 없어서 여러 세션을 동시에 들고 있어도 서로 섞이지 않는다.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np

from app.domain.constants import (
    TRACKED_LANDMARKS,
    DEFAULT_MOVEMENT_THRESHOLD,
    DEFAULT_COORD_DECIMALS,
    LABEL_COLUMN,
    STAT_SUFFIXES,
)
from app.domain.movement.exceptions import EmptyHistoryError, LandmarkMismatchError
from app.schemas.keypoint_dto import Keypoint, KeypointMovement, KeypointPosition
from app.schemas.movement_dto import LandmarkStats, MovementSummary

logger = logging.getLogger(__name__)

KeypointLike = Union[Keypoint, Mapping[str, Any]]
Snapshot = List[KeypointPosition]
MovementRecord = List[KeypointMovement]


class MovementAggregator:
    """세션 1개의 keypoint 이동량 누적기"""

    def __init__(
        self,
        tracked_landmarks: Optional[Iterable[str]] = None,
        movement_threshold: float = DEFAULT_MOVEMENT_THRESHOLD,
        decimals: int = DEFAULT_COORD_DECIMALS,
    ):
        """
        Args:
            tracked_landmarks: 통계 대상 landmark allow-list (기본 8개)
            movement_threshold: 이동량이 이 값을 "초과"하면 움직임 1회로 센다
            decimals: 좌표/이동량/통계 반올림 자릿수
        """
        names = list(tracked_landmarks) if tracked_landmarks is not None else list(TRACKED_LANDMARKS)
        if not names:
            raise ValueError("tracked_landmarks must not be empty")
        self.tracked_landmarks = frozenset(names)
        self.movement_threshold = movement_threshold
        self.decimals = decimals

        self._history: List[Snapshot] = []
        self._movement_log: List[MovementRecord] = []
        self._frequencies: Dict[str, int] = {}

    # ---------- 상태 조회 ----------
    @property
    def history(self) -> List[Snapshot]:
        return list(self._history)

    @property
    def movement_log(self) -> List[MovementRecord]:
        return list(self._movement_log)

    @property
    def frequencies(self) -> Dict[str, int]:
        return dict(self._frequencies)

    @property
    def frame_count(self) -> int:
        return len(self._history)

    @property
    def landmark_names(self) -> List[str]:
        """baseline(첫 snapshot) landmark 순서. 아직 없으면 빈 리스트."""
        if not self._history:
            return []
        return [kp.name for kp in self._history[0]]

    # ---------- 입력 ----------
    def filter_keypoints(self, keypoints: Iterable[KeypointLike]) -> Snapshot:
        """
        allow-list landmark만 남기고 x/y를 반올림, score는 버린다.
        입력 순서를 유지하며, 이미 필터링된 snapshot을 다시 넣어도 결과가 같다.
        """
        snapshot: Snapshot = []
        for kp in keypoints:
            name, x, y = _unpack(kp)
            if name not in self.tracked_landmarks:
                continue
            snapshot.append(
                KeypointPosition(
                    name=name,
                    x=round(x, self.decimals),
                    y=round(y, self.decimals),
                )
            )
        return snapshot

    def ingest(self, keypoints: Iterable[KeypointLike]) -> Optional[MovementRecord]:
        """
        프레임 1개 분량의 keypoint를 누적한다.

        Returns:
            이전 snapshot이 있으면 이번 프레임의 movement record, 첫 프레임이면 None

        Raises:
            LandmarkMismatchError: landmark 구성이 baseline과 다를 때 (상태는 변경되지 않음)
        """
        snapshot = self.filter_keypoints(keypoints)

        if not self._history:
            if not snapshot:
                raise LandmarkMismatchError("snapshot has no tracked landmarks")
            names = [kp.name for kp in snapshot]
            if len(set(names)) != len(names):
                raise LandmarkMismatchError(f"duplicated landmark names: {names}")
            self._history.append(snapshot)
            logger.debug(f"baseline landmarks: {names}")
            return None

        snapshot = self._align_to_baseline(snapshot)
        previous = self._history[-1]
        record = self._calculate_movements(snapshot, previous)

        self._movement_log.append(record)
        self._update_frequencies(record)
        self._history.append(snapshot)
        return record

    # ---------- 요약 통계 ----------
    def compute_standard_deviation(self) -> Dict[str, float]:
        """landmark별 이동량 시계열의 모표준편차 (baseline 순서)"""
        names, series = self._movement_series()
        if series.size == 0:
            return {name: 0.0 for name in names}
        stds = np.std(series, axis=0)
        return {name: self._round(v) for name, v in zip(names, stds)}

    def compute_total_magnitude(self) -> Dict[str, float]:
        """landmark별 이동량 합 (순변위가 아니라 총 이동 경로 길이)"""
        names, series = self._movement_series()
        if series.size == 0:
            return {name: 0.0 for name in names}
        totals = np.sum(series, axis=0)
        return {name: self._round(v) for name, v in zip(names, totals)}

    def compute_frequency(self, duration_seconds: float) -> Dict[str, float]:
        """
        landmark별 움직임 횟수 / 실제 경과 시간(초) → 초당 움직임 횟수.
        duration은 데이터에서 추정하지 않는다. 호출자가 실제 녹화 시간을 넘겨야 한다.
        """
        self._require_history()
        if not math.isfinite(duration_seconds) or duration_seconds <= 0:
            raise ValueError(f"duration_seconds must be > 0, got {duration_seconds}")
        return {
            name: self._round(self._frequencies.get(name, 0) / duration_seconds)
            for name in self.landmark_names
        }

    def summarize(self, label: str, duration_seconds: float) -> MovementSummary:
        """세 통계를 landmark 단위로 묶어서 반환"""
        frequencies = self.compute_frequency(duration_seconds)
        stds = self.compute_standard_deviation()
        magnitudes = self.compute_total_magnitude()

        return MovementSummary(
            label=label,
            frame_count=self.frame_count,
            transition_count=len(self._movement_log),
            duration_seconds=duration_seconds,
            landmarks=[
                LandmarkStats(
                    name=name,
                    standard_deviation=stds[name],
                    magnitude_of_movement=magnitudes[name],
                    frequency=frequencies[name],
                )
                for name in self.landmark_names
            ],
        )

    def csv_header(self, label_column: str = LABEL_COLUMN) -> List[str]:
        """summary 행에 대응하는 헤더 (라벨 컬럼 + landmark당 3개 컬럼)"""
        self._require_history()
        header = [label_column]
        for name in self.landmark_names:
            header.extend(f"{name}_{suffix}" for suffix in STAT_SUFFIXES)
        return header

    def to_csv_row(self, label: str, duration_seconds: float) -> List[Any]:
        """라벨 + (표준편차, 총 이동량, 빈도)를 landmark 순서대로 interleave한 1행"""
        return self.summarize(label, duration_seconds).csv_row()

    # ---------- 내부 유틸 ----------
    def _align_to_baseline(self, snapshot: Snapshot) -> Snapshot:
        """이름으로 baseline 순서에 맞춰 재정렬. 빠지거나 남는 landmark가 있으면 예외."""
        baseline = self.landmark_names
        by_name = {kp.name: kp for kp in snapshot}

        missing = [n for n in baseline if n not in by_name]
        extra = [n for n in by_name if n not in baseline]
        if missing or extra or len(by_name) != len(snapshot):
            raise LandmarkMismatchError(
                f"landmarks differ from session baseline "
                f"(missing={missing}, extra={extra}, count={len(snapshot)}/{len(baseline)})"
            )
        return [by_name[n] for n in baseline]

    def _calculate_movements(self, current: Snapshot, previous: Snapshot) -> MovementRecord:
        record: MovementRecord = []
        for cur, prev in zip(current, previous):
            movement = euclidean_distance((cur.x, cur.y), (prev.x, prev.y))
            record.append(KeypointMovement(name=cur.name, movement=self._round(movement)))
        return record

    def _update_frequencies(self, record: MovementRecord) -> None:
        for km in record:
            if km.movement > self.movement_threshold:
                self._frequencies[km.name] = self._frequencies.get(km.name, 0) + 1

    def _movement_series(self):
        """(landmark 이름 리스트, shape=(전이 수, landmark 수) 배열)"""
        self._require_history()
        names = self.landmark_names
        series = np.array(
            [[km.movement for km in record] for record in self._movement_log],
            dtype=float,
        )
        return names, series

    def _require_history(self) -> None:
        if not self._history:
            raise EmptyHistoryError("no keypoint snapshots have been ingested")

    def _round(self, v: float) -> float:
        return round(float(v), self.decimals)


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """2D 유클리드 거리 (대칭, 항상 0 이상)"""
    return math.hypot(a[0] - b[0], a[1] - b[1])


def _unpack(kp: KeypointLike):
    """Keypoint DTO / dict 어느 쪽이든 (name, x, y)로"""
    if isinstance(kp, Mapping):
        return str(kp["name"]), float(kp["x"]), float(kp["y"])
    return kp.name, float(kp.x), float(kp.y)
