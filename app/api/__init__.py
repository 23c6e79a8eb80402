from fastapi import APIRouter, FastAPI
import importlib, logging, pkgutil

logger = logging.getLogger(__name__)

# 이 패키지(root)
PACKAGE_NAME = __name__


def _module_routers(module) -> list[APIRouter]:
    """ROUTERS 리스트가 있으면 그것만, 없으면 모듈 안의 APIRouter 전부"""
    routers = getattr(module, "ROUTERS", None)
    if isinstance(routers, (list, tuple)):
        return [r for r in routers if isinstance(r, APIRouter)]
    return [obj for obj in vars(module).values() if isinstance(obj, APIRouter)]


def include_all_routers(app: FastAPI) -> int:
    """
    app/api 패키지의 모듈(sessions, analyze, health ...)을 스캔해서
    라우터를 app에 include 한다. _ 로 시작하는 모듈은 건너뛴다.

    Returns:
        등록한 라우터 수
    """
    package = importlib.import_module(PACKAGE_NAME)
    count = 0

    for modinfo in pkgutil.iter_modules(package.__path__):
        if modinfo.name.startswith("_"):
            continue

        module = importlib.import_module(f"{PACKAGE_NAME}.{modinfo.name}")
        for router in _module_routers(module):
            app.include_router(router)
            count += 1
            logger.debug(f"🔌 router 등록: {modinfo.name} ({len(router.routes)} routes)")

    return count
