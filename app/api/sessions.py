from contextlib import contextmanager

from fastapi import APIRouter, Depends, HTTPException, Query, Response
import logging

from app.common.dependencies import get_session_registry, get_table_store, verify_api_key
from app.domain.export.csv_export import (
    TABLE_DOWNLOAD_NAME,
    keypoints_csv_name,
    keypoints_json_name,
    keypoints_to_csv,
    stats_csv_name,
    summary_to_csv,
    summary_to_long_csv,
)
from app.domain.movement.exceptions import (
    EmptyHistoryError,
    EmptyTableError,
    LandmarkMismatchError,
    TableHeaderMismatchError,
)
from app.schemas.keypoint_dto import FrameIngestRequest, KeypointMovement
from app.schemas.movement_dto import MovementSummary, SessionCreateRequest, SessionInfo
from app.services.session_registry import MovementSession, SessionRegistry
from app.storage.table_store import TableStore
from app.utils.keypoint_converter import KeypointConverter

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Movement Sessions"], dependencies=[Depends(verify_api_key)])

DURATION_QUERY = Query(..., gt=0, allow_inf_nan=False, description="실제 녹화 경과 시간(초)")


# ========== Helpers ==========
def _get_session(session_id: str, registry: SessionRegistry) -> MovementSession:
    try:
        return registry.get(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")


def _csv_response(text: str, filename: str) -> Response:
    return Response(
        content=text,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=409, detail=str(e))


@contextmanager
def _stats_errors():
    """빈 세션 / 테이블 헤더 불일치 → 409, 그 밖의 잘못된 입력(duration 등) → 422"""
    try:
        yield
    except (EmptyHistoryError, TableHeaderMismatchError) as e:
        raise _conflict(e)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


# ========== Session lifecycle ==========
@router.post("/sessions", response_model=SessionInfo, status_code=201)
def create_session(
        req: SessionCreateRequest,
        registry: SessionRegistry = Depends(get_session_registry),
) -> SessionInfo:
    try:
        session = registry.create(req.video_file_name, req.tracked_landmarks)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    logger.info(f"📥 세션 생성: {session.session_id} ({req.video_file_name})")
    return session.info()


@router.get("/sessions/{session_id}", response_model=SessionInfo)
def get_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> SessionInfo:
    return _get_session(session_id, registry).info()


@router.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> Response:
    try:
        registry.remove(session_id)
    except KeyError:
        raise HTTPException(status_code=404, detail=f"Session not found: {session_id}")
    logger.info(f"🗑️ 세션 삭제: {session_id}")
    return Response(status_code=204)


# ========== Frame ingest ==========
@router.post("/sessions/{session_id}/frames", response_model=list[KeypointMovement])
def ingest_frame(
        session_id: str,
        req: FrameIngestRequest,
        registry: SessionRegistry = Depends(get_session_registry),
) -> list[KeypointMovement]:
    """프레임 1개 누적. 첫 프레임이면 빈 리스트, 이후에는 이번 프레임의 이동량."""
    session = _get_session(session_id, registry)
    with session.lock:
        try:
            record = session.aggregator.ingest(req.keypoints)
        except LandmarkMismatchError as e:
            logger.warning(f"⚠️ landmark 불일치: session={session_id}, {e}")
            raise _conflict(e)
    return record or []


# ========== Summary / export ==========
@router.get("/sessions/{session_id}/summary", response_model=MovementSummary)
def get_summary(
        session_id: str,
        duration_seconds: float = DURATION_QUERY,
        registry: SessionRegistry = Depends(get_session_registry),
) -> MovementSummary:
    session = _get_session(session_id, registry)
    with session.lock, _stats_errors():
        return session.aggregator.summarize(session.video_file_name, duration_seconds)


@router.get("/sessions/{session_id}/keypoints.csv")
def download_keypoints_csv(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> Response:
    session = _get_session(session_id, registry)
    with session.lock:
        history = session.aggregator.history
    return _csv_response(keypoints_to_csv(history), keypoints_csv_name(session.video_file_name))


@router.get("/sessions/{session_id}/keypoints.json")
def download_keypoints_json(session_id: str, registry: SessionRegistry = Depends(get_session_registry)) -> Response:
    session = _get_session(session_id, registry)
    with session.lock:
        history = session.aggregator.history
    return Response(
        content=KeypointConverter(history).to_json_string(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{keypoints_json_name(session.video_file_name)}"'},
    )


@router.get("/sessions/{session_id}/stats.csv")
def download_stats_csv(
        session_id: str,
        duration_seconds: float = DURATION_QUERY,
        registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    session = _get_session(session_id, registry)
    with session.lock, _stats_errors():
        text = summary_to_csv(session.aggregator, session.video_file_name, duration_seconds)
    return _csv_response(text, stats_csv_name(session.video_file_name))


@router.get("/sessions/{session_id}/stats-by-landmark.csv")
def download_stats_by_landmark_csv(
        session_id: str,
        duration_seconds: float = DURATION_QUERY,
        registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    session = _get_session(session_id, registry)
    with session.lock, _stats_errors():
        summary = session.aggregator.summarize(session.video_file_name, duration_seconds)
    return _csv_response(summary_to_long_csv(summary), stats_csv_name(session.video_file_name))


# ========== Multi-session table ==========
@router.post("/sessions/{session_id}/stats/append")
def append_stats_row(
        session_id: str,
        duration_seconds: float = DURATION_QUERY,
        registry: SessionRegistry = Depends(get_session_registry),
        table: TableStore = Depends(get_table_store),
):
    session = _get_session(session_id, registry)
    aggregator = session.aggregator
    with session.lock, _stats_errors():
        header = aggregator.csv_header()
        row = aggregator.to_csv_row(session.video_file_name, duration_seconds)
    with _stats_errors():
        rows = table.append_row(header, row)
    return {"key": table.key, "rows": rows}


@router.get("/stats/table.csv")
def flush_stats_table(table: TableStore = Depends(get_table_store)) -> Response:
    """누적된 통계 테이블을 내려주고 저장소를 비운다"""
    try:
        text = table.flush()
    except EmptyTableError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _csv_response(text, TABLE_DOWNLOAD_NAME)
