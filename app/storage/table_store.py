"""
멀티 세션 통계 테이블 저장소
고정 키(STATS_TABLE_KEY)로 디스크에 CSV를 누적하고, flush 시 내용을 돌려준 뒤 지운다.
"""
import csv
import logging
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from app.domain.export.csv_export import rows_to_csv
from app.domain.movement.exceptions import EmptyTableError, TableHeaderMismatchError

logger = logging.getLogger(__name__)

# 같은 파일을 가리키는 TableStore 인스턴스끼리 lock 공유 (요청마다 새 인스턴스여도 직렬화)
_PATH_LOCKS: Dict[Path, threading.Lock] = {}
_PATH_LOCKS_GUARD = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = path.resolve()
    with _PATH_LOCKS_GUARD:
        return _PATH_LOCKS.setdefault(key, threading.Lock())


class TableStore:
    """파일 1개(<table_dir>/<key>.csv)에 summary 행을 이어 붙이는 저장소"""

    def __init__(self, table_dir: Path, key: str):
        self.table_dir = Path(table_dir)
        self.key = key
        self._lock = _lock_for(self.path)

    @property
    def path(self) -> Path:
        return self.table_dir / f"{self.key}.csv"

    def exists(self) -> bool:
        return self.path.exists()

    def header(self) -> Optional[List[str]]:
        if not self.path.exists():
            return None
        with self.path.open("r", encoding="utf-8", newline="") as f:
            return next(csv.reader(f), None)

    def append_row(self, header: Sequence[str], row: Sequence[Any]) -> int:
        """
        행 1개 추가. 저장소가 비어 있으면 헤더와 함께 새로 만든다.

        Returns:
            추가 후 데이터 행 수
        """
        header = list(header)
        if len(header) != len(row):
            raise TableHeaderMismatchError(
                f"row has {len(row)} values but header has {len(header)} columns"
            )

        with self._lock:
            self.table_dir.mkdir(parents=True, exist_ok=True)
            current = self.header()
            if current is None:
                self.path.write_text(rows_to_csv([header, row]), encoding="utf-8")
            elif current != header:
                raise TableHeaderMismatchError(
                    f"row header differs from stored table '{self.key}'"
                )
            else:
                with self.path.open("a", encoding="utf-8", newline="") as f:
                    f.write("\n" + rows_to_csv([row]))
            count = self._row_count()

        logger.info(f"📊 통계 행 추가: key={self.key}, rows={count}")
        return count

    def read(self) -> str:
        if not self.path.exists():
            raise EmptyTableError(f"stats table '{self.key}' is empty")
        return self.path.read_text(encoding="utf-8")

    def flush(self) -> str:
        """저장된 CSV 전체를 반환하고 저장소를 비운다"""
        with self._lock:
            text = self.read()
            self.path.unlink()
        logger.info(f"🗑️ 통계 테이블 flush: key={self.key}")
        return text

    def _row_count(self) -> int:
        with self.path.open("r", encoding="utf-8", newline="") as f:
            return max(sum(1 for _ in csv.reader(f)) - 1, 0)
