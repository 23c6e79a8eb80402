"""
움직임 분석 Service Layer
Domain 컴포넌트들을 조합하여 영상 1개의 분석 파이프라인 실행
"""
import logging
import uuid
from datetime import datetime
from typing import Optional

import cv2

from app.domain.export.csv_export import (
    keypoints_csv_name,
    keypoints_json_name,
    keypoints_to_csv,
    stats_csv_name,
    summary_to_csv,
)
from app.domain.movement.aggregator import MovementAggregator
from app.domain.movement.exceptions import EmptyHistoryError, LandmarkMismatchError
from app.domain.render.renderer import OverlayRecorder, PoseRenderer
from app.domain.video.preprocessor import VideoPreprocessor
from app.schemas.analyze_dto import AnalyzeMovementRequest, AnalyzeMovementResponse
from app.schemas.video_dto import VideoPreprocessRequest
from app.storage.local_fs import LocalFS
from app.storage.table_store import TableStore
from app.utils.keypoint_converter import KeypointConverter

logger = logging.getLogger(__name__)


class MovementAnalysisService:
    """
    움직임 분석 메인 서비스

    책임:
    - 비디오 → 포즈 검출 → 이동량 누적 → CSV/JSON 저장 파이프라인 오케스트레이션
    - 오버레이 렌더링/녹화 (선택적)
    - 멀티 세션 통계 테이블 누적 (선택적)
    """

    def __init__(
        self,
        video_preprocessor: VideoPreprocessor,
        pose_extractor,
        aggregator_factory,
        output_fs: LocalFS,
        renderer: Optional[PoseRenderer] = None,
        recorder: Optional[OverlayRecorder] = None,
        table_store: Optional[TableStore] = None,
        target_fps: Optional[int] = None,
    ):
        """
        Args:
            video_preprocessor: 비디오 리더
            pose_extractor: 포즈 추출기 (detect(frame) -> list[Pose])
            aggregator_factory: 호출할 때마다 새 MovementAggregator를 돌려주는 callable
            output_fs: CSV/JSON/오버레이 저장 위치
            renderer: 오버레이 렌더러 (선택적)
            recorder: 오버레이 녹화기 (선택적)
            table_store: 멀티 세션 통계 테이블 (선택적)
            target_fps: 다운샘플링 목표 FPS (None이면 원본)
        """
        self.video_preprocessor = video_preprocessor
        self.pose_extractor = pose_extractor
        self.aggregator_factory = aggregator_factory
        self.output_fs = output_fs
        self.renderer = renderer
        self.recorder = recorder
        self.table_store = table_store
        self.target_fps = target_fps

    async def analyze(self, request: AnalyzeMovementRequest) -> AnalyzeMovementResponse:
        """
        움직임 분석 파이프라인 실행

        Process:
        1. 비디오 읽기
        2. 프레임별 포즈 검출 + 이동량 누적 (+ 오버레이)
        3. 요약 통계 (실제 영상 길이로 frequency 계산)
        4. CSV/JSON 저장
        5. 통계 테이블 누적 (선택적)
        """
        analysis_id = self._generate_analysis_id()

        # ========== Step 1: 비디오 읽기 ==========
        frames, video_metadata = self.video_preprocessor.process(
            VideoPreprocessRequest(
                file_path=request.file_path,
                target_fps=self.target_fps,
                mirror=request.mirror,
            )
        )

        # ========== Step 2: 포즈 검출 + 누적 ==========
        aggregator: MovementAggregator = self.aggregator_factory()
        overlay_path = None
        recording = request.render_overlay and self.renderer is not None and self.recorder is not None
        if recording:
            self.recorder.start(
                self.output_fs.root / f"{analysis_id}_overlay.mp4",
                video_metadata.fps,
                (video_metadata.width, video_metadata.height),
            )

        detected = 0
        skipped = 0
        try:
            for frame in frames:
                rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
                poses = self.pose_extractor.detect(rgb)

                # 통계는 첫 번째 포즈만 사용
                if poses and poses[0].keypoints:
                    try:
                        aggregator.ingest(poses[0].keypoints)
                        detected += 1
                    except LandmarkMismatchError as e:
                        skipped += 1
                        logger.warning(f"⚠️ 프레임 스킵 (landmark 불일치): {e}")

                if recording:
                    self.recorder.write(self.renderer.draw_results(frame.copy(), poses))
        finally:
            if recording:
                overlay_path = self.recorder.stop()
            close = getattr(self.pose_extractor, "close", None)
            if callable(close):
                close()

        if aggregator.frame_count == 0:
            raise EmptyHistoryError(f"no pose detected in video: {request.video_file_name}")

        # ========== Step 3: 요약 통계 ==========
        duration = video_metadata.duration
        summary = aggregator.summarize(request.video_file_name, duration)

        # ========== Step 4: 저장 ==========
        name = request.video_file_name
        keypoints_csv = self.output_fs.write_text(
            keypoints_csv_name(name), keypoints_to_csv(aggregator.history)
        )
        keypoints_json = self.output_fs.write_text(
            keypoints_json_name(name), KeypointConverter(aggregator.history).to_json_string()
        )
        stats_csv = self.output_fs.write_text(
            stats_csv_name(name), summary_to_csv(aggregator, name, duration)
        )

        # ========== Step 5: 테이블 누적 (선택적) ==========
        table_rows = None
        if request.append_to_table and self.table_store is not None:
            table_rows = self.table_store.append_row(
                aggregator.csv_header(), aggregator.to_csv_row(name, duration)
            )

        total = video_metadata.total_frames
        logger.info(
            f"✅ 움직임 분석 완료: {analysis_id} "
            f"(detected={detected}/{total}, skipped={skipped}, duration={duration:.2f}s)"
        )

        return AnalyzeMovementResponse(
            analysis_id=analysis_id,
            video_file_name=name,
            total_frames=total,
            detected_frames=detected,
            detection_rate=round(detected / total, 4) if total else 0.0,
            summary=summary,
            keypoints_csv_path=str(keypoints_csv),
            keypoints_json_path=str(keypoints_json),
            stats_csv_path=str(stats_csv),
            overlay_path=str(overlay_path) if overlay_path else None,
            table_rows=table_rows,
        )

    def _generate_analysis_id(self) -> str:
        """분석 ID 생성 (UUID + timestamp)"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        unique_id = str(uuid.uuid4())[:8]
        return f"analysis_{timestamp}_{unique_id}"
