from __future__ import annotations
import os
from pathlib import Path

from dotenv import load_dotenv

# helpers
from app.config.env_utils import env_bool, env_float, env_list, env_path
from app.domain.constants import (
    TRACKED_LANDMARKS,
    DEFAULT_MOVEMENT_THRESHOLD,
    DEFAULT_COORD_DECIMALS,
    DEFAULT_SCORE_THRESHOLD,
    DEFAULT_KEYPOINT_RADIUS,
    DEFAULT_LINE_WIDTH,
    DEFAULT_VIDEO_FPS,
    DEFAULT_OVERLAY_CODEC,
    STATS_TABLE_KEY,
)


# ─────────────────────────────────────────────────────────
# Project root 탐색
#   - .git / pyproject.toml / requirements.txt 중 하나가 보이는 최상단을 루트로 간주
#   - 실패 시 BASE_DIR 환경변수 사용
# ─────────────────────────────────────────────────────────
def find_project_root() -> Path:
    env_root = os.getenv("BASE_DIR")
    if env_root:
        return Path(env_root).resolve()
    cur = Path(__file__).resolve()
    for parent in cur.parents:
        if any(
            (parent / m).exists()
            for m in (".git", "pyproject.toml", "requirements.txt")
        ):
            return parent
    raise RuntimeError(
        "프로젝트 루트를 찾을 수 없습니다. "
        "루트에 .git/pyproject.toml/requirements.txt 중 하나를 두거나, "
        "환경변수 BASE_DIR을 지정하세요."
    )


ROOT: Path = find_project_root()

# ─────────────────────────────────────────────────────────
# .env 로딩
#   - ENV_FILE 지정 시 우선
#   - 없으면 ROOT/.env.<ENV> → 없으면 ROOT/.env
# ─────────────────────────────────────────────────────────
_DEFAULT_ENV = os.getenv("ENV", "test")
_env_file_candidate = ROOT / f".env.{_DEFAULT_ENV}"
_ENV_FILE = (
    Path(os.getenv("ENV_FILE")).resolve()
    if os.getenv("ENV_FILE")
    else (_env_file_candidate if _env_file_candidate.exists() else (ROOT / ".env"))
)
load_dotenv(dotenv_path=_ENV_FILE, override=False)


class Settings:
    # ── App / Runtime ─────────────────────────────────────
    ENV: str = os.getenv("ENV", _DEFAULT_ENV)
    FASTAPI_PORT: int = int(os.getenv("FASTAPI_PORT", 8000))
    DEBUG_MODE: bool = env_bool("DEBUG_MODE", False)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # 내부 호출용 API Key (X-Internal-Api-Key)
    INTERNAL_API_KEY: str = os.getenv("INTERNAL_API_KEY", "test-api-key")

    # ── Base Paths ────────────────────────────────────────
    ROOT: Path = ROOT
    DATA_DIR: Path = env_path("DATA_DIR", ROOT / "data")

    # ── Standard data subdirs (모두 DATA_DIR 기준) ────────
    OUTPUT_DIR: Path = env_path("OUTPUT_DIR", DATA_DIR / "output")
    TABLE_DIR: Path = env_path("TABLE_DIR", DATA_DIR / "tables")

    # 업로드(외부 입력) 기본 폴더
    UPLOADS_DIR: Path = env_path("UPLOADS_DIR", ROOT / "uploads")

    # ── Movement statistics ───────────────────────────────
    TRACKED_LANDMARKS = env_list("TRACKED_LANDMARKS", TRACKED_LANDMARKS)
    MOVEMENT_THRESHOLD: float = env_float("MOVEMENT_THRESHOLD", DEFAULT_MOVEMENT_THRESHOLD)
    COORD_DECIMALS: int = int(os.getenv("COORD_DECIMALS", DEFAULT_COORD_DECIMALS))

    # 멀티 세션 통계 테이블 저장 키
    STATS_TABLE_KEY: str = os.getenv("STATS_TABLE_KEY", STATS_TABLE_KEY)

    # ── Rendering ─────────────────────────────────────────
    SCORE_THRESHOLD: float = env_float("SCORE_THRESHOLD", DEFAULT_SCORE_THRESHOLD)
    KEYPOINT_RADIUS: int = int(os.getenv("KEYPOINT_RADIUS", DEFAULT_KEYPOINT_RADIUS))
    LINE_WIDTH: int = int(os.getenv("LINE_WIDTH", DEFAULT_LINE_WIDTH))
    OVERLAY_CODEC: str = os.getenv("OVERLAY_CODEC", DEFAULT_OVERLAY_CODEC)

    # ── Video / Pose model ────────────────────────────────
    # 0이면 원본 FPS 유지
    VIDEO_TARGET_FPS: int = int(os.getenv("VIDEO_TARGET_FPS", 0))
    VIDEO_DEFAULT_FPS: int = int(os.getenv("VIDEO_DEFAULT_FPS", DEFAULT_VIDEO_FPS))
    POSE_MODEL_COMPLEXITY: int = int(os.getenv("POSE_MODEL_COMPLEXITY", 1))
    MIN_DETECTION_CONFIDENCE: float = env_float("MIN_DETECTION_CONFIDENCE", 0.5)

    def __init__(self) -> None:
        # 자주 쓰는 디렉토리 존재 보장
        dirs = [
            self.UPLOADS_DIR,
            self.OUTPUT_DIR,
            self.TABLE_DIR,
        ]
        for d in dirs:
            Path(d).mkdir(parents=True, exist_ok=True)


# 전역 싱글톤처럼 사용
settings = Settings()
