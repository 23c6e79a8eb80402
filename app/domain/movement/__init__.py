from .aggregator import MovementAggregator, euclidean_distance
from .exceptions import (
    MovementError,
    EmptyHistoryError,
    LandmarkMismatchError,
    EmptyTableError,
    TableHeaderMismatchError,
)
