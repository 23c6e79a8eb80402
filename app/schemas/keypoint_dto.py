"""
Keypoint 관련 DTO
포즈 검출기 출력 ↔ MovementAggregator / PoseRenderer 입력용
"""
from typing import Optional

from pydantic import BaseModel, Field


class Keypoint(BaseModel):
    """포즈 검출기가 내보내는 단일 keypoint (이름 + 좌표 + 신뢰도)"""
    name: str = Field(..., description="landmark 이름 (예: left_knee)")
    x: float = Field(..., description="X 좌표 (검출기 단위, 보통 픽셀)")
    y: float = Field(..., description="Y 좌표")
    score: Optional[float] = Field(
        None, ge=0.0, le=1.0, description="신뢰도 점수 (없으면 1로 간주)"
    )


class Pose(BaseModel):
    """한 사람의 포즈 (keypoint 리스트)"""
    keypoints: Optional[list[Keypoint]] = Field(
        default=None, description="keypoint 리스트 (없으면 렌더링 생략)"
    )
    score: Optional[float] = Field(None, description="포즈 전체 신뢰도")


class KeypointPosition(BaseModel):
    """Snapshot 한 칸: 필터링/반올림된 landmark 위치 (score 제거)"""
    name: str
    x: float
    y: float


class KeypointMovement(BaseModel):
    """연속된 두 snapshot 사이 동일 landmark의 유클리드 이동량"""
    name: str
    movement: float = Field(..., ge=0.0)


class FrameIngestRequest(BaseModel):
    """세션에 프레임 1개(포즈 1개)를 넣는 요청"""
    keypoints: list[Keypoint] = Field(..., description="해당 프레임의 keypoint 리스트")

    class Config:
        json_schema_extra = {
            "example": {
                "keypoints": [
                    {"name": "left_knee", "x": 312.5, "y": 410.25, "score": 0.92},
                    {"name": "right_knee", "x": 350.0, "y": 411.0, "score": 0.88},
                ]
            }
        }
