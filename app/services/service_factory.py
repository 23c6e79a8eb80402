from typing import Optional

from app.config.settings import settings
from app.domain.movement.aggregator import MovementAggregator
from app.domain.render.renderer import OverlayRecorder, PoseRenderer
from app.domain.video.preprocessor import VideoPreprocessor
from app.services.movement_analysis_service import MovementAnalysisService
from app.services.session_registry import SessionRegistry
from app.storage.local_fs import LocalFS
from app.storage.table_store import TableStore


def create_aggregator() -> MovementAggregator:
    """settings 기준 새 MovementAggregator"""
    return MovementAggregator(
        tracked_landmarks=settings.TRACKED_LANDMARKS,
        movement_threshold=settings.MOVEMENT_THRESHOLD,
        decimals=settings.COORD_DECIMALS,
    )


def create_table_store() -> TableStore:
    return TableStore(table_dir=settings.TABLE_DIR, key=settings.STATS_TABLE_KEY)


def create_session_registry() -> SessionRegistry:
    return SessionRegistry(
        tracked_landmarks=settings.TRACKED_LANDMARKS,
        movement_threshold=settings.MOVEMENT_THRESHOLD,
        decimals=settings.COORD_DECIMALS,
    )


def create_movement_analysis_service(
        score_threshold: Optional[float] = None,
        output_dir=None,
        table_store: Optional[TableStore] = None,
) -> MovementAnalysisService:
    """
    MovementAnalysisService 인스턴스 생성

    Args:
        score_threshold: 오버레이 렌더링 score 임계값 (없으면 settings)
        output_dir: CSV/JSON/오버레이 저장 폴더 (없으면 settings.OUTPUT_DIR)
        table_store: 통계 테이블 (없으면 settings 기준 기본 저장소)

    Returns:
        MovementAnalysisService 인스턴스
    """
    # MediaPipe 로딩이 무거워서 실제 생성 시점에 import
    from app.domain.pose.extractor import PoseExtractor

    # Domain 컴포넌트 초기화
    video_preprocessor = VideoPreprocessor(default_fps=settings.VIDEO_DEFAULT_FPS)
    pose_extractor = PoseExtractor(
        model_complexity=settings.POSE_MODEL_COMPLEXITY,
        min_detection_confidence=settings.MIN_DETECTION_CONFIDENCE,
    )
    renderer = PoseRenderer(
        score_threshold=settings.SCORE_THRESHOLD if score_threshold is None else score_threshold,
        radius=settings.KEYPOINT_RADIUS,
        line_width=settings.LINE_WIDTH,
    )

    return MovementAnalysisService(
        video_preprocessor=video_preprocessor,
        pose_extractor=pose_extractor,
        aggregator_factory=create_aggregator,
        output_fs=LocalFS(output_dir or settings.OUTPUT_DIR),
        renderer=renderer,
        recorder=OverlayRecorder(codec=settings.OVERLAY_CODEC),
        table_store=table_store or create_table_store(),
        target_fps=settings.VIDEO_TARGET_FPS or None,
    )
