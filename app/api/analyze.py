from fastapi import APIRouter, UploadFile, File, Form, Depends, HTTPException
from typing import Optional
import os
import logging
import uuid

from app.schemas.analyze_dto import AnalyzeMovementRequest, AnalyzeMovementResponse
from app.config.settings import settings
from app.common.dependencies import verify_api_key, get_analysis_service
from app.domain.movement.exceptions import TableHeaderMismatchError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/analyze", tags=["Movement Analysis"])


# ========== API Endpoint ==========
@router.post("", response_model=AnalyzeMovementResponse)
async def analyze_movement(
        file: UploadFile = File(..., description="분석할 비디오 파일"),
        video_file_name: Optional[str] = Form(default=None, description="라벨/출력 파일명 (없으면 업로드 파일명)"),
        mirror: bool = Form(default=False, description="좌우 반전 여부"),
        render_overlay: bool = Form(default=False, description="오버레이 영상 저장 여부"),
        append_to_table: bool = Form(default=False, description="통계 테이블에 행 추가 여부"),
        _: bool = Depends(verify_api_key),
        service=Depends(get_analysis_service),
) -> AnalyzeMovementResponse:
    """
    영상 움직임 분석 API

    keypoint 이동량의 표준편차/총 이동량/초당 빈도를 계산하고
    CSV(raw/summary)와 JSON을 출력 폴더에 저장한다.
    """
    name = video_file_name or file.filename or "upload.mp4"
    logger.info(f"📥 분석 요청: video={name}, overlay={render_overlay}, table={append_to_table}")

    # 1. 파일 저장
    upload_dir = settings.UPLOADS_DIR
    os.makedirs(upload_dir, exist_ok=True)
    file_path = os.path.join(upload_dir, f"{uuid.uuid4().hex[:8]}_{os.path.basename(file.filename or name)}")

    try:
        with open(file_path, "wb") as f:
            content = await file.read()
            f.write(content)
        logger.info(f"✅ 파일 저장: {file_path}")
    except OSError as e:
        logger.error(f"❌ 파일 저장 실패: {e}")
        raise HTTPException(status_code=500, detail=f"파일 저장 실패: {e}")

    request = AnalyzeMovementRequest(
        file_path=file_path,
        video_file_name=name,
        mirror=mirror,
        render_overlay=render_overlay,
        append_to_table=append_to_table,
    )

    # 2. 분석 실행
    try:
        logger.info("🔄 움직임 분석 시작...")
        result = await service.analyze(request)
        logger.info(f"✅ 움직임 분석 완료: {result.analysis_id}")
        return result

    except ValueError as e:
        # 열 수 없는 영상 / 포즈 미검출 / 테이블 헤더 불일치
        status = 409 if isinstance(e, TableHeaderMismatchError) else 422
        logger.warning(f"⚠️ 분석 불가: {e}")
        raise HTTPException(status_code=status, detail=str(e))

    except Exception as e:
        logger.error(f"❌ 분석 실패: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"분석 실패: {e}")

    finally:
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.info(f"🗑️ 임시 파일 삭제: {file_path}")
