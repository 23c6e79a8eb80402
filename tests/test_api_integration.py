"""
API Integration Tests

FastAPI 엔드포인트 통합 테스트
"""
import pytest
from fastapi import status
import io
import threading

from app.domain.movement import MovementAggregator
from app.services.movement_analysis_service import MovementAnalysisService
from tests.test_helpers import create_keypoint_frame, create_linear_motion_frames

TWO = ["left_knee", "right_knee"]


class TestHealthEndpoints:
    """Health Check 엔드포인트 테스트"""

    def test_basic_health_check(self, client):
        """기본 health check 응답 검증"""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ok"
        assert data["sessions"] >= 0


class TestAuthentication:
    """X-Internal-Api-Key 인증"""

    def test_missing_api_key(self, client):
        response = client.post("/sessions", json={"video_file_name": "clip.mp4"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_api_key(self, client):
        response = client.post(
            "/sessions",
            json={"video_file_name": "clip.mp4"},
            headers={"X-Internal-Api-Key": "wrong-key"},
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestSessionEndpoints:
    """세션 단위 프레임 ingest / 통계 / CSV"""

    @pytest.fixture
    def session_id(self, client, auth_headers):
        response = client.post(
            "/sessions",
            json={"video_file_name": "clip.mp4", "tracked_landmarks": TWO},
            headers=auth_headers,
        )
        assert response.status_code == status.HTTP_201_CREATED
        sid = response.json()["session_id"]
        yield sid
        client.delete(f"/sessions/{sid}", headers=auth_headers)

    def _ingest(self, client, auth_headers, sid, frame):
        return client.post(f"/sessions/{sid}/frames", json={"keypoints": frame}, headers=auth_headers)

    def _ingest_two_frames(self, client, auth_headers, sid):
        self._ingest(client, auth_headers, sid, create_keypoint_frame(names=TWO))
        return self._ingest(client, auth_headers, sid, create_keypoint_frame({"left_knee": (3.0, 4.0)}, names=TWO))

    def test_ingest_returns_movements(self, client, auth_headers, session_id):
        first = self._ingest(client, auth_headers, session_id, create_keypoint_frame(names=TWO))
        assert first.status_code == status.HTTP_200_OK
        assert first.json() == []

        second = self._ingest(
            client, auth_headers, session_id, create_keypoint_frame({"left_knee": (3.0, 4.0)}, names=TWO)
        )
        assert second.json() == [
            {"name": "left_knee", "movement": 5.0},
            {"name": "right_knee", "movement": 0.0},
        ]

        info = client.get(f"/sessions/{session_id}", headers=auth_headers).json()
        assert info["landmarks"] == TWO
        assert info["frame_count"] == 2
        assert info["transition_count"] == 1

    def test_ingest_mismatch_conflict(self, client, auth_headers, session_id):
        self._ingest(client, auth_headers, session_id, create_keypoint_frame(names=TWO))
        response = self._ingest(client, auth_headers, session_id, create_keypoint_frame(names=["left_knee"]))

        assert response.status_code == status.HTTP_409_CONFLICT
        info = client.get(f"/sessions/{session_id}", headers=auth_headers).json()
        assert info["frame_count"] == 1

    def test_summary(self, client, auth_headers, session_id):
        self._ingest_two_frames(client, auth_headers, session_id)

        response = client.get(
            f"/sessions/{session_id}/summary", params={"duration_seconds": 2.0}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["label"] == "clip.mp4"
        assert data["landmarks"][0] == {
            "name": "left_knee",
            "standard_deviation": 0.0,
            "magnitude_of_movement": 5.0,
            "frequency": 0.5,
        }

    def test_summary_requires_positive_duration(self, client, auth_headers, session_id):
        self._ingest_two_frames(client, auth_headers, session_id)

        response = client.get(
            f"/sessions/{session_id}/summary", params={"duration_seconds": 0}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        response = client.get(f"/sessions/{session_id}/summary", headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_summary_on_empty_session_conflict(self, client, auth_headers, session_id):
        response = client.get(
            f"/sessions/{session_id}/summary", params={"duration_seconds": 1.0}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_409_CONFLICT

    def test_csv_downloads(self, client, auth_headers, session_id):
        self._ingest_two_frames(client, auth_headers, session_id)

        keypoints = client.get(f"/sessions/{session_id}/keypoints.csv", headers=auth_headers)
        assert keypoints.status_code == status.HTTP_200_OK
        assert "clip_keypoints.csv" in keypoints.headers["content-disposition"]
        assert keypoints.text.split("\n")[0] == "name,x,y"

        stats = client.get(
            f"/sessions/{session_id}/stats.csv", params={"duration_seconds": 2.0}, headers=auth_headers
        )
        assert "clip_stats.csv" in stats.headers["content-disposition"]
        assert stats.text.split("\n")[1] == "clip.mp4,0.0,5.0,0.5,0.0,0.0,0.0"

        long_form = client.get(
            f"/sessions/{session_id}/stats-by-landmark.csv", params={"duration_seconds": 2.0}, headers=auth_headers
        )
        assert long_form.text.split("\n")[1] == "left_knee,0.0,5.0,0.5"

        as_json = client.get(f"/sessions/{session_id}/keypoints.json", headers=auth_headers)
        assert as_json.json()[1][0] == {"name": "left_knee", "x": 3.0, "y": 4.0}

    def test_unknown_session(self, client, auth_headers):
        response = client.get("/sessions/does-not-exist", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

        response = client.delete("/sessions/does-not-exist", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize("duration", ["inf", "-inf", "nan"])
    @pytest.mark.parametrize(
        "method, path",
        [
            ("get", "summary"),
            ("get", "stats.csv"),
            ("get", "stats-by-landmark.csv"),
            ("post", "stats/append"),
        ],
    )
    def test_non_finite_duration_rejected(
        self, client, auth_headers, session_id, override_table_store, method, path, duration
    ):
        self._ingest_two_frames(client, auth_headers, session_id)

        response = getattr(client, method)(
            f"/sessions/{session_id}/{path}", params={"duration_seconds": duration}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert not override_table_store.exists()

    def test_summary_waits_for_session_lock(self, client, auth_headers, session_id):
        """ingest 중인 세션의 summary는 lock이 풀릴 때까지 기다린다"""
        from app.common.dependencies import get_session_registry

        self._ingest_two_frames(client, auth_headers, session_id)
        session = get_session_registry().get(session_id)
        responses = []

        def _summary():
            responses.append(
                client.get(
                    f"/sessions/{session_id}/summary", params={"duration_seconds": 1.0}, headers=auth_headers
                )
            )

        with session.lock:
            worker = threading.Thread(target=_summary)
            worker.start()
            worker.join(timeout=0.5)
            assert worker.is_alive()
            assert responses == []

        worker.join(timeout=10)
        assert responses[0].status_code == status.HTTP_200_OK
        assert responses[0].json()["transition_count"] == 1


class TestStatsTable:
    """멀티 세션 통계 테이블 append / flush"""

    def _session_with_frames(self, client, auth_headers, name, landmarks=TWO):
        sid = client.post(
            "/sessions",
            json={"video_file_name": name, "tracked_landmarks": landmarks},
            headers=auth_headers,
        ).json()["session_id"]
        for frame in create_linear_motion_frames(3, names=landmarks):
            client.post(f"/sessions/{sid}/frames", json={"keypoints": frame}, headers=auth_headers)
        return sid

    def test_append_and_flush(self, client, auth_headers, override_table_store):
        a = self._session_with_frames(client, auth_headers, "a.mp4")
        b = self._session_with_frames(client, auth_headers, "b.mp4")

        for sid, expected_rows in ((a, 1), (b, 2)):
            response = client.post(
                f"/sessions/{sid}/stats/append", params={"duration_seconds": 1.0}, headers=auth_headers
            )
            assert response.status_code == status.HTTP_200_OK
            assert response.json() == {"key": "csvData", "rows": expected_rows}

        response = client.get("/stats/table.csv", headers=auth_headers)
        assert response.status_code == status.HTTP_200_OK
        assert "_stats.csv" in response.headers["content-disposition"]
        lines = response.text.split("\n")
        assert lines[0].startswith("videoFileName,left_knee_standard_deviation")
        assert [line.split(",")[0] for line in lines[1:]] == ["a.mp4", "b.mp4"]

        # flush 후에는 비어 있음
        response = client.get("/stats/table.csv", headers=auth_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_append_header_mismatch_conflict(self, client, auth_headers, override_table_store):
        a = self._session_with_frames(client, auth_headers, "a.mp4")
        c = self._session_with_frames(client, auth_headers, "c.mp4", landmarks=["nose"])

        client.post(f"/sessions/{a}/stats/append", params={"duration_seconds": 1.0}, headers=auth_headers)
        response = client.post(
            f"/sessions/{c}/stats/append", params={"duration_seconds": 1.0}, headers=auth_headers
        )
        assert response.status_code == status.HTTP_409_CONFLICT
        assert override_table_store.read().count("\n") == 1


class TestAnalyzeEndpoint:
    """POST /analyze (비디오 업로드)"""

    @pytest.fixture
    def override_service(self, app, mock_video_preprocessor, mock_pose_extractor, output_fs, table_store):
        from app.common.dependencies import get_analysis_service

        service = MovementAnalysisService(
            video_preprocessor=mock_video_preprocessor,
            pose_extractor=mock_pose_extractor,
            aggregator_factory=MovementAggregator,
            output_fs=output_fs,
            table_store=table_store,
        )
        app.dependency_overrides[get_analysis_service] = lambda: service
        yield service
        app.dependency_overrides.pop(get_analysis_service, None)

    def test_analyze_success(self, client, auth_headers, override_service, table_store):
        files = {"file": ("subject_01.mp4", io.BytesIO(b"fake video"), "video/mp4")}
        data = {"append_to_table": "true"}

        response = client.post("/analyze", files=files, data=data, headers=auth_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["video_file_name"] == "subject_01.mp4"
        assert body["summary"]["frame_count"] == 10
        assert body["stats_csv_path"].endswith("subject_01_stats.csv")
        assert body["table_rows"] == 1
        assert table_store.exists()

    def test_analyze_no_pose_unprocessable(self, client, auth_headers, override_service):
        override_service.pose_extractor.detect.side_effect = None
        override_service.pose_extractor.detect.return_value = []
        files = {"file": ("empty.mp4", io.BytesIO(b"fake video"), "video/mp4")}

        response = client.post("/analyze", files=files, headers=auth_headers)
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_analyze_requires_api_key(self, client, override_service):
        files = {"file": ("subject_01.mp4", io.BytesIO(b"fake video"), "video/mp4")}
        response = client.post("/analyze", files=files)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
