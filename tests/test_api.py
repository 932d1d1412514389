"""
Integration tests for API routes.

Tests for Flask endpoints against the in-memory backend.
"""

import pytest
import sys
import os
import base64
import time
import datetime as dt

import cv2
import numpy as np

# Add parent directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from plank_tracker.backend import InMemoryBackend

TODAY = dt.date(2026, 10, 19)
AUTH = {"Authorization": "Bearer token-alice"}


def _messages(data):
    return [n["message"] for n in data["notifications"]]


class TestAPIRoutes:
    """Test suite for API routes."""

    @pytest.fixture
    def backend(self):
        backend = InMemoryBackend(today=lambda: TODAY)
        backend.add_user("token-alice", "alice")
        backend.add_profile("alice", "Alice", "alice.png")
        backend.add_profile("bob", "Bob", "bob.png")
        return backend

    @pytest.fixture
    def app(self, backend):
        """Create the Flask app with manual session ticking."""
        from run import create_app
        app = create_app(backend=backend, today=lambda: TODAY, auto_tick=False)
        app.config['TESTING'] = True
        return app

    @pytest.fixture
    def client(self, app):
        """Create a test client for the Flask app."""
        with app.test_client() as client:
            yield client

    @pytest.fixture
    def registry(self, app):
        return app.extensions["plank_sessions"]

    def _new_session(self, client, **body):
        response = client.post('/sessions', json=body, headers=AUTH)
        assert response.status_code == 201
        return response.get_json()["session_id"]

    def test_index_route(self, client):
        """Test that index page loads correctly."""
        response = client.get('/')
        assert response.status_code == 200
        assert b"Plank" in response.data

    def test_health_check(self, client):
        """Test health check endpoint."""
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_leaderboard(self, client, backend):
        """Test leaderboard rankings and profile merge."""
        backend.add_session("alice", 60, TODAY)
        backend.add_session("bob", 90, TODAY - dt.timedelta(days=2))
        backend.add_session("alice", 50, TODAY)
        response = client.get('/leaderboard')
        assert response.status_code == 200
        data = response.get_json()
        assert [(e["full_name"], e["rank"]) for e in data["best"]] == [("Bob", 1), ("Alice", 2)]
        assert [(e["full_name"], e["time"]) for e in data["total"]] == [("Alice", "1:50"), ("Bob", "1:30")]
        assert data["notifications"] == []

    def test_leaderboard_failure(self, client, backend):
        """Test that a backend failure becomes a notification."""
        backend.fail("fetch_sessions_since")
        data = client.get('/leaderboard').get_json()
        assert data["total"] == []
        assert _messages(data) == ["Could not load leaderboard."]

    def test_leaderboard_is_built_per_request(self, client, backend):
        """Test that one request's rankings never leak into another's."""
        backend.add_session("alice", 60, TODAY)
        assert len(client.get('/leaderboard').get_json()["total"]) == 1
        backend.fail("fetch_sessions_since", times=1)
        data = client.get('/leaderboard').get_json()
        assert data["best"] == [] and data["total"] == []
        assert _messages(data) == ["Could not load leaderboard."]

    def test_my_stats_requires_login(self, client):
        """Test /me/stats without a token."""
        response = client.get('/me/stats')
        assert response.status_code == 401

    def test_my_stats(self, client, backend):
        """Test /me/stats for the logged-in user."""
        backend.add_session("alice", 60, TODAY)
        data = client.get('/me/stats', headers=AUTH).get_json()
        assert data["user_id"] == "alice"
        assert data["monthly_rank"] == 1
        assert data["monthly_percentile_text"] == "Within top 100%"

    def test_badges(self, client):
        """Test badges endpoint for a user without badges."""
        data = client.get('/users/alice/badges').get_json()
        assert data["badges"] == []

    def test_unknown_plank(self, client):
        """Test plank detail for a missing plank."""
        response = client.get('/planks/404')
        assert response.status_code == 404
        assert _messages(response.get_json()) == ["Could not load plank details."]

    def test_unknown_session(self, client):
        """Test that session routes 404 for unknown ids."""
        assert client.get('/sessions/nope').status_code == 404
        assert client.post('/sessions/nope/start').status_code == 404
        assert client.delete('/sessions/nope').status_code == 404

    def test_invalid_mode(self, client):
        """Test that an unknown mode is rejected."""
        response = client.post('/sessions', json={"mode": "sprint"})
        assert response.status_code == 400

    def test_start_without_vow(self, client):
        """Test that starting without acknowledgement is a conflict."""
        session_id = self._new_session(client)
        response = client.post(f'/sessions/{session_id}/start')
        assert response.status_code == 409
        data = response.get_json()
        assert data["state"] == "idle"
        assert _messages(data) == ["You must swear you won't cheat before you start!"]

    def test_acknowledge_requires_boolean(self, client):
        """Test that a non-boolean vow is rejected and not recorded."""
        session_id = self._new_session(client)
        response = client.post(f'/sessions/{session_id}/acknowledge', json={"acknowledged": "false"})
        assert response.status_code == 400
        assert client.get(f'/sessions/{session_id}').get_json()["acknowledged"] is False
        assert client.post(f'/sessions/{session_id}/start').status_code == 409

    def test_countdown_without_target(self, client):
        """Test that a countdown with no target is rejected."""
        session_id = self._new_session(client, mode="countdown")
        client.post(f'/sessions/{session_id}/acknowledge', json={"acknowledged": True})
        response = client.post(f'/sessions/{session_id}/start')
        assert response.status_code == 409
        assert _messages(response.get_json()) == ["Please set a positive timer."]

    def test_countdown_flow(self, client, backend, registry):
        """Test a full countdown session saved with a snapshot."""
        session_id = self._new_session(client, mode="countdown")
        assert client.post(f'/sessions/{session_id}/target',
                           json={"minutes": 0, "seconds": 3}).status_code == 200
        assert client.post(f'/sessions/{session_id}/camera',
                           json={"enabled": True}).status_code == 200

        _, buffer = cv2.imencode('.jpg', np.zeros((100, 100, 3), dtype=np.uint8))
        image = base64.b64encode(buffer).decode('utf-8')
        response = client.post(f'/sessions/{session_id}/frame', json={"image": image})
        assert response.status_code == 200

        client.post(f'/sessions/{session_id}/acknowledge', json={"acknowledged": True})
        response = client.post(f'/sessions/{session_id}/start', headers=AUTH)
        assert response.get_json()["state"] == "active"
        assert response.get_json()["snapshots"] == 1

        controller = registry.get(session_id)
        for _ in range(3):
            controller.tick()

        data = client.get(f'/sessions/{session_id}', headers=AUTH).get_json()
        assert data["state"] == "completed"
        assert data["seconds"] == 3
        assert data["result"]["saved"] is True
        assert len(data["result"]["photos"]) == 1
        assert _messages(data) == ["Plank saved!"]

        plank_id = data["result"]["plank_id"]
        assert backend.sessions[plank_id].duration == 3
        detail = client.get(f'/planks/{plank_id}').get_json()
        assert detail["author"]["full_name"] == "Alice"
        assert len(detail["photos"]) == 1

    def test_stopwatch_flow(self, client, backend, registry):
        """Test pause, finish and reset of a stopwatch session."""
        session_id = self._new_session(client)
        client.post(f'/sessions/{session_id}/acknowledge', json={})
        client.post(f'/sessions/{session_id}/start')
        controller = registry.get(session_id)
        for _ in range(20):
            controller.tick()

        assert client.post(f'/sessions/{session_id}/pause').get_json()["state"] == "paused"
        data = client.post(f'/sessions/{session_id}/finish').get_json()
        assert data["state"] == "completed"
        assert data["result"]["saved"] is True
        assert [s.duration for s in backend.sessions.values()] == [20]

        data = client.post(f'/sessions/{session_id}/reset').get_json()
        assert data["state"] == "idle"
        assert data["seconds"] == 0
        assert data["result"] is None

    def test_frame_requires_camera(self, client):
        """Test that frames are refused while the camera is off."""
        session_id = self._new_session(client)
        _, buffer = cv2.imencode('.jpg', np.zeros((100, 100, 3), dtype=np.uint8))
        image = base64.b64encode(buffer).decode('utf-8')
        response = client.post(f'/sessions/{session_id}/frame', json={"image": image})
        assert response.status_code == 409

    def test_frame_invalid_payload(self, client):
        """Test frame upload with missing or invalid image data."""
        session_id = self._new_session(client)
        client.post(f'/sessions/{session_id}/camera', json={"enabled": True})
        assert client.post(f'/sessions/{session_id}/frame', json={}).status_code == 400
        response = client.post(f'/sessions/{session_id}/frame', json={"image": "x" * 200})
        assert response.status_code == 400

    def test_local_camera_not_configured(self, backend):
        """Test that the server camera is refused when no index is set."""
        from config import CameraConfig
        from run import create_app
        app = create_app(backend=backend, camera_config=CameraConfig(index=None), auto_tick=False)
        with app.test_client() as client:
            session_id = self._new_session(client)
            response = client.post(f'/sessions/{session_id}/camera',
                                   json={"enabled": True, "source": "local"})
            assert response.status_code == 409
            data = response.get_json()
            assert data["camera_enabled"] is False
            assert _messages(data) == ["Local camera is not configured."]

    def test_delete_session(self, client, registry):
        """Test session teardown."""
        session_id = self._new_session(client)
        assert client.delete(f'/sessions/{session_id}').status_code == 200
        assert registry.get(session_id) is None

    def test_idle_sessions_are_evicted(self, backend):
        """Test that finished sessions are dropped once their TTL passes."""
        from config import TimerConfig
        from run import create_app
        app = create_app(backend=backend, timer_config=TimerConfig(session_ttl_seconds=0),
                         auto_tick=False)
        registry = app.extensions["plank_sessions"]
        with app.test_client() as client:
            session_id = self._new_session(client)
            client.post(f'/sessions/{session_id}/acknowledge', json={"acknowledged": True})
            client.post(f'/sessions/{session_id}/start', headers=AUTH)
            registry.get(session_id).tick()
            assert client.post(f'/sessions/{session_id}/finish').get_json()["result"]["saved"]

            time.sleep(0.01)
            self._new_session(client)
            assert registry.get(session_id) is None
            assert client.get('/health').get_json()["active_sessions"] == 1


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
