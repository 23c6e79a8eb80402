"""
움직임 분석 API의 Request/Response DTO
Router ↔ Service 간 데이터 전달용
"""
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.movement_dto import MovementSummary


# ============ API Request DTO ============
class AnalyzeMovementRequest(BaseModel):
    """영상 1개 움직임 분석 요청 (FastAPI Router → Service)"""
    file_path: str = Field(..., description="분석할 비디오 파일 경로")
    video_file_name: str = Field(..., min_length=1, description="라벨/출력 파일명 기준 이름")
    mirror: bool = Field(default=False, description="좌우 반전 여부")
    render_overlay: bool = Field(default=False, description="keypoint 오버레이 영상 저장 여부")
    append_to_table: bool = Field(default=False, description="멀티 세션 통계 테이블에 행 추가 여부")

    class Config:
        json_schema_extra = {
            "example": {
                "file_path": "/tmp/subject_01.mp4",
                "video_file_name": "subject_01.mp4",
                "mirror": False,
                "render_overlay": True,
                "append_to_table": True,
            }
        }


# ============ API Response DTO ============
class AnalyzeMovementResponse(BaseModel):
    """움직임 분석 응답 (Service → FastAPI Router)"""
    analysis_id: str = Field(..., description="분석 결과 고유 ID")
    video_file_name: str

    total_frames: int = Field(..., ge=0, description="읽은 프레임 수")
    detected_frames: int = Field(..., ge=0, description="포즈가 검출되어 누적된 프레임 수")
    detection_rate: float = Field(..., ge=0.0, le=1.0)

    summary: MovementSummary

    # 저장 경로
    keypoints_csv_path: Optional[str] = None
    keypoints_json_path: Optional[str] = None
    stats_csv_path: Optional[str] = None
    overlay_path: Optional[str] = None
    table_rows: Optional[int] = Field(None, description="테이블에 추가한 뒤의 전체 행 수")
