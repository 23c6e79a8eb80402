"""
CSV 직렬화 Domain Logic
- raw dump: 프레임별 keypoint 좌표 (name,x,y)
- summary: 세션 1행 요약 (라벨 + landmark당 표준편차/총 이동량/빈도)
- summary table: 여러 세션의 summary 행을 모아 두었다가 한 번에 내보내기
"""
import csv
import io
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence

import pandas as pd

from app.domain.constants import LABEL_COLUMN
from app.domain.movement.aggregator import MovementAggregator, Snapshot
from app.domain.movement.exceptions import EmptyTableError, TableHeaderMismatchError
from app.schemas.movement_dto import MovementSummary

RAW_HEADER = ("name", "x", "y")
LONG_HEADER = ("name", "standard_deviation", "magnitude_of_movement", "frequency")


def rows_to_csv(rows: Iterable[Sequence[Any]]) -> str:
    """행 리스트 → CSV 문자열 (줄바꿈 \\n, 마지막 줄바꿈 없음)"""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerows(rows)
    return buf.getvalue().rstrip("\n")


def keypoints_to_csv(history: Iterable[Snapshot]) -> str:
    """snapshot history → `name,x,y` CSV (모든 프레임을 이어 붙임)"""
    rows: List[Sequence[Any]] = [RAW_HEADER]
    for snapshot in history:
        for kp in snapshot:
            rows.append((kp.name, kp.x, kp.y))
    return rows_to_csv(rows)


def summary_to_csv(
    aggregator: MovementAggregator,
    label: str,
    duration_seconds: float,
    label_column: str = LABEL_COLUMN,
) -> str:
    """세션 1개 → 헤더 + 값 1행짜리 새 CSV"""
    header = aggregator.csv_header(label_column)
    row = aggregator.to_csv_row(label, duration_seconds)
    return rows_to_csv([header, row])


def summary_to_long_csv(summary: MovementSummary) -> str:
    """landmark당 1행 형식 (name,standard_deviation,magnitude_of_movement,frequency)"""
    rows: List[Sequence[Any]] = [LONG_HEADER]
    for stats in summary.landmarks:
        rows.append(
            (stats.name, stats.standard_deviation, stats.magnitude_of_movement, stats.frequency)
        )
    return rows_to_csv(rows)


# ---------- 파일명 규칙 ----------
def _stem(video_file_name: str) -> str:
    stem = Path(video_file_name).stem
    return stem or "session"


def keypoints_csv_name(video_file_name: str) -> str:
    return f"{_stem(video_file_name)}_keypoints.csv"


def keypoints_json_name(video_file_name: str) -> str:
    return f"{_stem(video_file_name)}_keypoints.json"


def stats_csv_name(video_file_name: str) -> str:
    return f"{_stem(video_file_name)}_stats.csv"


TABLE_DOWNLOAD_NAME = "_stats.csv"


class SummaryTable:
    """
    여러 세션의 summary 행을 순서대로 모으는 테이블.
    헤더는 첫 행을 추가할 때 고정되고, 이후 다른 헤더의 행은 거부한다.
    """

    def __init__(self, header: Optional[Sequence[str]] = None):
        self._header: Optional[List[str]] = list(header) if header else None
        self._rows: List[List[Any]] = []

    @property
    def header(self) -> Optional[List[str]]:
        return list(self._header) if self._header else None

    @property
    def rows(self) -> List[List[Any]]:
        return [list(r) for r in self._rows]

    @property
    def is_empty(self) -> bool:
        return not self._rows

    def __len__(self) -> int:
        return len(self._rows)

    def append_row(self, header: Sequence[str], row: Sequence[Any]) -> None:
        header = list(header)
        if len(header) != len(row):
            raise TableHeaderMismatchError(
                f"row has {len(row)} values but header has {len(header)} columns"
            )
        if self._header is None:
            self._header = header
        elif self._header != header:
            raise TableHeaderMismatchError("row header differs from table header")
        self._rows.append(list(row))

    def append_session(
        self,
        aggregator: MovementAggregator,
        label: str,
        duration_seconds: float,
        label_column: str = LABEL_COLUMN,
    ) -> None:
        self.append_row(
            aggregator.csv_header(label_column),
            aggregator.to_csv_row(label, duration_seconds),
        )

    def serialize(self) -> str:
        if self._header is None or not self._rows:
            raise EmptyTableError("summary table has no rows")
        return rows_to_csv([self._header, *self._rows])

    def flush(self) -> str:
        """직렬화 후 비운다"""
        text = self.serialize()
        self.clear()
        return text

    def clear(self) -> None:
        self._header = None
        self._rows = []

    def to_dataframe(self) -> pd.DataFrame:
        if self._header is None:
            return pd.DataFrame()
        return pd.DataFrame(self._rows, columns=self._header)
