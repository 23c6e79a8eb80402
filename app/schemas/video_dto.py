"""
비디오 입력 관련 DTO
VideoPreprocessor 입출력용
"""
from typing import Optional

from pydantic import BaseModel, Field


class VideoPreprocessRequest(BaseModel):
    """비디오 읽기 요청"""
    file_path: str
    target_fps: Optional[int] = Field(default=None, ge=1, description="목표 FPS (없으면 원본 유지)")
    mirror: bool = Field(default=False, description="좌우 반전 여부")


class VideoPreprocessResult(BaseModel):
    """비디오 읽기 결과 메타데이터"""
    total_frames: int
    fps: float
    duration: float  # 초 (frequency 계산의 기준 시간)
    width: int
    height: int
    # frames는 실제로는 list[np.ndarray]지만 DTO에는 메타데이터만
