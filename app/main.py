import logging

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi

from app.api import include_all_routers
from app.config.settings import settings

# ---------- 로거 ----------
if not logging.getLogger().handlers:
    logging.basicConfig(
        level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

# 앱 생성
app = FastAPI(debug=settings.DEBUG_MODE)

# 자동으로 app/api/* 모듈을 스캔해 라우터 전부 등록
include_all_routers(app)

app.openapi = lambda: get_openapi(
    title="Pose Movement Analysis API",
    version="1.0.0",
    description="포즈 keypoint 움직임 통계(표준편차/총 이동량/빈도) API",
    routes=app.routes,
)

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.FASTAPI_PORT, reload=True)
