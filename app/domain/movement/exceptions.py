"""
움직임 통계 도메인 예외
전부 ValueError 계열이라 기존 `except ValueError` 처리와도 호환된다.
"""


class MovementError(ValueError):
    """움직임 통계 관련 예외의 공통 부모"""


class EmptyHistoryError(MovementError):
    """snapshot이 하나도 없는데 요약 통계를 요청한 경우"""


class LandmarkMismatchError(MovementError):
    """새 snapshot의 landmark 구성이 세션 baseline과 다른 경우"""


class EmptyTableError(MovementError):
    """비어 있는 통계 테이블을 flush 하려는 경우"""


class TableHeaderMismatchError(MovementError):
    """테이블 헤더와 다른 헤더의 행을 추가하려는 경우"""
