from fastapi import Header, HTTPException
from typing import Optional
from app.config.settings import settings
from app.services.service_factory import create_session_registry, create_table_store
from app.services.session_registry import SessionRegistry
from app.storage.table_store import TableStore
import logging

logger = logging.getLogger(__name__)

# 프로세스 당 1개 (세션은 메모리에만 존재)
_registry = create_session_registry()
_table_store = create_table_store()


# API Key 인증
async def verify_api_key(
        x_internal_api_key: Optional[str] = Header(None, alias="X-Internal-Api-Key")
):
    if x_internal_api_key is None:
        logger.warning("⚠️ Missing X-Internal-Api-Key header")
        raise HTTPException(
            status_code=401,
            detail="Missing X-Internal-Api-Key header"
        )

    if x_internal_api_key != settings.INTERNAL_API_KEY:
        logger.warning(f"❌ Invalid API Key: {x_internal_api_key[:10]}...")
        raise HTTPException(
            status_code=401,
            detail="Invalid Internal API Key"
        )

    return True


def get_session_registry() -> SessionRegistry:
    return _registry


def get_table_store() -> TableStore:
    return _table_store


def get_analysis_service():
    """요청마다 새 서비스 (MediaPipe 모델은 분석이 끝나면 닫힘)"""
    from app.services.service_factory import create_movement_analysis_service
    return create_movement_analysis_service()
