"""
Pytest Configuration & Shared Fixtures

이 파일은 모든 테스트에서 재사용 가능한 fixture를 정의합니다.
"""
import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock
import numpy as np
from typing import List, Dict

from app.domain.movement.aggregator import MovementAggregator
from app.schemas.keypoint_dto import Keypoint, Pose
from app.schemas.video_dto import VideoPreprocessResult
from app.storage.local_fs import LocalFS
from app.storage.table_store import TableStore
from tests.test_helpers import create_keypoint_frame, create_full_body_frame


# ========================================
# Application Fixtures
# ========================================

@pytest.fixture(scope="session")
def app():
    """FastAPI 애플리케이션 인스턴스"""
    from app.main import app as fastapi_app
    return fastapi_app


@pytest.fixture(scope="session")
def client(app):
    """FastAPI TestClient (API 테스트용)"""
    return TestClient(app)


@pytest.fixture
def auth_headers():
    """인증 헤더 (X-Internal-Api-Key)"""
    return {"X-Internal-Api-Key": "test-api-key"}


@pytest.fixture
def table_store(tmp_path) -> TableStore:
    """임시 폴더에 만드는 통계 테이블 저장소"""
    return TableStore(table_dir=tmp_path / "tables", key="csvData")


@pytest.fixture
def override_table_store(app, table_store):
    """API가 임시 테이블 저장소를 쓰도록 교체"""
    from app.common.dependencies import get_table_store

    app.dependency_overrides[get_table_store] = lambda: table_store
    yield table_store
    app.dependency_overrides.pop(get_table_store, None)


# ========================================
# Domain Object Fixtures
# ========================================

@pytest.fixture
def aggregator() -> MovementAggregator:
    """기본 8개 landmark 누적기"""
    return MovementAggregator()


@pytest.fixture
def sample_keypoint_frame() -> List[Dict[str, float]]:
    """추적 대상 8개 landmark 프레임 (모두 원점)"""
    return create_keypoint_frame()


@pytest.fixture
def sample_detected_pose() -> Pose:
    """검출기 출력 형태의 포즈 (33개 landmark)"""
    return Pose(keypoints=[Keypoint(**kp) for kp in create_full_body_frame()])


# ========================================
# Mock Service Fixtures
# ========================================

@pytest.fixture
def mock_video_preprocessor():
    """Mock VideoPreprocessor (10프레임, 10fps → 1초)"""
    mock = Mock()
    mock.process.return_value = (
        [np.zeros((48, 64, 3), dtype=np.uint8) for _ in range(10)],
        VideoPreprocessResult(total_frames=10, fps=10.0, duration=1.0, width=64, height=48),
    )
    return mock


@pytest.fixture
def mock_pose_extractor():
    """Mock PoseExtractor (프레임마다 x가 3, y가 4씩 증가 → 이동량 5.0)"""
    mock = Mock()
    calls = {"n": 0}

    def _detect(_frame):
        i = calls["n"]
        calls["n"] += 1
        keypoints = [
            Keypoint(name=kp["name"], x=kp["x"] + 3.0 * i, y=kp["y"] + 4.0 * i, score=kp["score"])
            for kp in create_full_body_frame()
        ]
        return [Pose(keypoints=keypoints)]

    mock.detect.side_effect = _detect
    return mock


@pytest.fixture
def output_fs(tmp_path) -> LocalFS:
    return LocalFS(tmp_path / "output")


@pytest.fixture
def sample_video_file(tmp_path):
    """임시 비디오 파일 (빈 파일)"""
    video_path = tmp_path / "sample_clip.mp4"
    video_path.write_bytes(b"fake video content")
    return video_path
