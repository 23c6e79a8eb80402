"""
움직임 통계 DTO
MovementAggregator → Service / API 응답용
"""
from typing import Optional

from pydantic import BaseModel, Field

from app.domain.constants import LABEL_COLUMN, STAT_SUFFIXES


class LandmarkStats(BaseModel):
    """landmark 1개의 요약 통계"""
    name: str
    standard_deviation: float = Field(..., ge=0.0, description="이동량의 모표준편차")
    magnitude_of_movement: float = Field(..., ge=0.0, description="이동량 합 (총 이동 경로 길이)")
    frequency: float = Field(..., ge=0.0, description="초당 움직임 횟수")


class MovementSummary(BaseModel):
    """세션 전체 요약"""
    label: str = Field(..., description="식별 라벨 (보통 비디오 파일명)")
    frame_count: int = Field(..., ge=0, description="누적된 snapshot 수")
    transition_count: int = Field(..., ge=0, description="movement log 길이")
    duration_seconds: float = Field(..., gt=0.0, description="frequency 계산에 쓴 실제 경과 시간")
    landmarks: list[LandmarkStats]

    def get_landmark(self, name: str) -> Optional[LandmarkStats]:
        """landmark 이름으로 접근"""
        for stats in self.landmarks:
            if stats.name == name:
                return stats
        return None

    def csv_header(self, label_column: str = LABEL_COLUMN) -> list[str]:
        """라벨 컬럼 + landmark당 (표준편차, 총 이동량, 빈도) 컬럼"""
        header = [label_column]
        for stats in self.landmarks:
            header.extend(f"{stats.name}_{suffix}" for suffix in STAT_SUFFIXES)
        return header

    def csv_row(self) -> list:
        row: list = [self.label]
        for stats in self.landmarks:
            row.extend([stats.standard_deviation, stats.magnitude_of_movement, stats.frequency])
        return row


class SessionCreateRequest(BaseModel):
    """세션 생성 요청"""
    video_file_name: str = Field(..., min_length=1, description="CSV 파일명/라벨의 기준 이름")
    tracked_landmarks: Optional[list[str]] = Field(
        default=None, description="통계 대상 landmark (없으면 서버 기본 8개)"
    )


class SessionInfo(BaseModel):
    """세션 상태"""
    session_id: str
    video_file_name: str
    landmarks: list[str] = Field(default_factory=list, description="baseline landmark 순서")
    frame_count: int = 0
    transition_count: int = 0
