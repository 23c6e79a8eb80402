# Fallback defaults (settings에서 ENV 미지정 시 사용)
DEFAULT_MOVEMENT_THRESHOLD = 0.01   # 프레임 간 이동량이 이 값을 넘으면 "움직임" 1회
DEFAULT_COORD_DECIMALS = 4          # 좌표/이동량 반올림 자릿수
DEFAULT_SCORE_THRESHOLD = 0.3       # 렌더링 시 keypoint score 하한

DEFAULT_KEYPOINT_RADIUS = 4
DEFAULT_LINE_WIDTH = 2

DEFAULT_VIDEO_FPS = 30
DEFAULT_OVERLAY_CODEC = "mp4v"

# 멀티 세션 통계 테이블 저장 키 (고정 이름)
STATS_TABLE_KEY = "csvData"

# summary CSV 첫 컬럼(라벨) 이름
LABEL_COLUMN = "videoFileName"

# summary CSV 컬럼 접미사 (landmark 당 3개, 이 순서로 interleave)
STAT_SUFFIXES = ("standard_deviation", "magnitude_of_movement", "frequency")

# BGR 색상 (OpenCV)
COLOR_MIDDLE = (255, 255, 255)   # White
COLOR_LEFT = (0, 128, 0)         # Green
COLOR_RIGHT = (0, 165, 255)      # Orange
COLOR_SKELETON = (255, 255, 255)
