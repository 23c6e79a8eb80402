# re-exports: 다른 모듈에서 짧게 import 하도록

from .mediapipe_landmarks import (
    LANDMARK_NAMES,
    TRACKED_LANDMARKS,
    ADJACENT_PAIRS,
)

from .model_params import (
    DEFAULT_MOVEMENT_THRESHOLD,
    DEFAULT_COORD_DECIMALS,
    DEFAULT_SCORE_THRESHOLD,
    DEFAULT_KEYPOINT_RADIUS,
    DEFAULT_LINE_WIDTH,
    DEFAULT_VIDEO_FPS,
    DEFAULT_OVERLAY_CODEC,
    STATS_TABLE_KEY,
    LABEL_COLUMN,
    STAT_SUFFIXES,
    COLOR_MIDDLE,
    COLOR_LEFT,
    COLOR_RIGHT,
    COLOR_SKELETON,
)
