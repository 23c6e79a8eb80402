from fastapi import APIRouter

from app.common.dependencies import get_session_registry

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check():
    return {"status": "ok", "sessions": len(get_session_registry())}
