"""
비디오 입력 Domain Logic
파일 → 프레임 리스트 + 메타데이터(FPS, 실제 길이)
"""
import logging

import cv2
import numpy as np

from app.domain.constants import DEFAULT_VIDEO_FPS
from app.schemas.video_dto import VideoPreprocessRequest, VideoPreprocessResult

logger = logging.getLogger(__name__)


class VideoPreprocessor:
    """비디오 리더 (선택적 FPS 다운샘플링 / 좌우 반전)"""

    def __init__(self, default_fps: float = DEFAULT_VIDEO_FPS):
        # 컨테이너에 FPS 정보가 없을 때 사용
        self.default_fps = default_fps

    def process(self, request: VideoPreprocessRequest) -> tuple[list[np.ndarray], VideoPreprocessResult]:
        """
        비디오를 프레임 리스트로 반환 (BGR, OpenCV 기본)

        Args:
            request: 읽기 요청 (경로, 목표 FPS, 반전 여부)

        Returns:
            (frames, metadata)
            - frames: list[np.ndarray]
            - metadata: VideoPreprocessResult (duration = 실제 경과 시간)
        """
        cap = cv2.VideoCapture(request.file_path)

        if not cap.isOpened():
            raise ValueError(f"Cannot open video: {request.file_path}")

        original_fps = cap.get(cv2.CAP_PROP_FPS) or 0.0
        if original_fps <= 0:
            logger.warning(f"⚠️ FPS 정보 없음, 기본값 사용: {self.default_fps}")
            original_fps = float(self.default_fps)

        # 리샘플링 비율 계산
        frame_interval = 1
        if request.target_fps:
            frame_interval = max(1, int(original_fps / request.target_fps))
        fps = original_fps / frame_interval

        frames = []
        frame_idx = 0
        width = height = 0

        while True:
            ret, frame = cap.read()
            if not ret:
                break

            # N 프레임마다 1개 추출
            if frame_idx % frame_interval == 0:
                if request.mirror:
                    frame = cv2.flip(frame, 1)
                height, width = frame.shape[:2]
                frames.append(frame)

            frame_idx += 1

        cap.release()

        metadata = VideoPreprocessResult(
            total_frames=len(frames),
            fps=fps,
            duration=len(frames) / fps,
            width=width,
            height=height,
        )
        logger.info(
            f"🎞️ 비디오 로드: {request.file_path} "
            f"(frames={metadata.total_frames}, fps={fps:.2f}, duration={metadata.duration:.2f}s)"
        )
        return frames, metadata
