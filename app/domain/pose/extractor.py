"""
포즈 추출 Domain Logic
MediaPipe Pose 사용, 프레임 1장 → 이름 붙은 keypoint 리스트(픽셀 좌표)
"""
import numpy as np
import mediapipe as mp

from app.domain.constants import LANDMARK_NAMES
from app.schemas.keypoint_dto import Keypoint, Pose


class PoseExtractor:
    """MediaPipe 기반 포즈 추출기"""

    def __init__(
        self,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
    ):
        self.mp_pose = mp.solutions.pose
        # 동영상 모드(추적 포함): 프레임 간 일관성↑
        self.pose = self.mp_pose.Pose(
            static_image_mode=False,
            model_complexity=model_complexity,  # 0, 1, 2 (높을수록 정확하지만 느림)
            smooth_landmarks=True,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )

    def detect(self, frame: np.ndarray) -> list[Pose]:
        """
        RGB 프레임 1장에서 포즈 검출

        Args:
            frame: RGB 이미지 (H, W, 3)

        Returns:
            검출된 포즈 리스트 (MediaPipe Pose는 최대 1명, 못 찾으면 빈 리스트)
        """
        results = self.pose.process(frame)
        if not results.pose_landmarks:
            return []

        height, width = frame.shape[:2]
        keypoints = [
            self._to_keypoint(LANDMARK_NAMES[idx], lm, width, height)
            for idx, lm in enumerate(results.pose_landmarks.landmark)
            if idx < len(LANDMARK_NAMES)
        ]
        return [Pose(keypoints=keypoints)]

    def close(self) -> None:
        self.pose.close()

    def _to_keypoint(self, name: str, landmark, width: int, height: int) -> Keypoint:
        """MediaPipe Landmark(정규화 좌표) → Keypoint DTO(픽셀 좌표)"""
        return Keypoint(
            name=name,
            x=landmark.x * width,
            y=landmark.y * height,
            score=min(max(float(landmark.visibility), 0.0), 1.0),
        )
