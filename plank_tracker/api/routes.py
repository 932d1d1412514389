"""
API Routes Module
=================

Flask API routes for the plank tracker server.
"""

import datetime as dt
from typing import Callable, Optional

from flask import jsonify, render_template_string, request

from config import CameraConfig, LeaderboardConfig, TimerConfig
from ..backend import Backend, BackendError
from ..core import CameraError, TimerError, TimerMode
from ..services import (
    AchievementView,
    LeaderboardView,
    Notifier,
    SessionController,
    SessionDetailView,
    SessionRecorder,
    SessionRegistry,
    UserStatsView,
)
from ..utils import FrameDecodeError, VideoCaptureSource, decode_frame


def _access_token() -> Optional[str]:
    """Bearer token from the Authorization header."""
    header = request.headers.get("Authorization", "")
    if header.lower().startswith("bearer "):
        return header[7:].strip() or None
    return None


def _reply(payload: dict, notifications, status: int = 200):
    payload = dict(payload)
    payload["notifications"] = [n.to_dict() for n in notifications]
    return jsonify(payload), status


def register_routes(app, html_template: str, backend: Backend,
                    timer_config: Optional[TimerConfig] = None,
                    leaderboard_config: Optional[LeaderboardConfig] = None,
                    camera_config: Optional[CameraConfig] = None,
                    today: Callable[[], dt.date] = dt.date.today,
                    auto_tick: bool = True) -> SessionRegistry:
    """
    Register all API routes with the Flask app.

    Args:
        app: Flask application instance
        html_template: HTML template string for the index page
        backend: Hosted backend adapter
        timer_config: Tick and snapshot settings
        leaderboard_config: Ranking window settings
        camera_config: Local camera settings
        today: Clock used for the ranking window
        auto_tick: Whether sessions run their own background ticker

    Returns:
        The session registry backing the ``/sessions`` routes
    """
    timer_config = timer_config or TimerConfig()
    leaderboard_config = leaderboard_config or LeaderboardConfig()
    camera_config = camera_config or CameraConfig()
    recorder = SessionRecorder(backend, ext=timer_config.snapshot_format)

    def new_session(session_id: str, access_token: Optional[str]) -> SessionController:
        return SessionController(
            session_id,
            recorder,
            access_token=access_token,
            tick_seconds=timer_config.tick_seconds,
            snapshot_interval=timer_config.snapshot_interval_seconds,
            snapshot_retention=timer_config.snapshot_retention,
            snapshot_format=timer_config.snapshot_format,
            auto_tick=auto_tick,
        )

    registry = SessionRegistry(new_session, ttl=timer_config.session_ttl_seconds)

    def open_local_camera() -> VideoCaptureSource:
        if camera_config.index is None:
            raise CameraError("Local camera is not configured.")
        return VideoCaptureSource(camera_config.index, camera_config.width, camera_config.height)

    def session_or_404(session_id: str):
        controller = registry.get(session_id)
        if controller is None:
            return None, (jsonify({"error": "Unknown session"}), 404)
        controller.set_access_token(_access_token())
        return controller, None

    def session_reply(controller: SessionController, status: int = 200):
        return _reply(controller.to_dict(), controller.notifier.drain(), status)

    def run_action(session_id: str, action: Callable[[SessionController], None]):
        controller, error = session_or_404(session_id)
        if error:
            return error
        try:
            action(controller)
        except (TimerError, CameraError):
            return session_reply(controller, 409)
        return session_reply(controller)

    @app.route("/")
    def index():
        """Serve the main web interface."""
        return render_template_string(html_template)

    @app.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({
            "status": "healthy",
            "active_sessions": len(registry),
        })

    # -- read side ---------------------------------------------------------

    @app.route("/leaderboard")
    def get_leaderboard():
        """Best single plank and total plank time over the rolling window."""
        notifier = Notifier()
        leaderboard = LeaderboardView(backend, leaderboard_config.window_days, today)
        leaderboard.refresh(notifier)
        return _reply(leaderboard.to_dict(), notifier.drain())

    def stats_for(user_id: str):
        notifier = Notifier()
        view = UserStatsView(backend, leaderboard_config.window_days, today)
        view.refresh(user_id, notifier)
        payload = view.to_dict()
        payload["user_id"] = user_id
        return _reply(payload, notifier.drain())

    @app.route("/users/<user_id>/stats")
    def get_user_stats(user_id):
        return stats_for(user_id)

    @app.route("/me/stats")
    def get_my_stats():
        notifier = Notifier()
        try:
            user = backend.get_user(_access_token())
        except BackendError:
            app.logger.exception("Failed to resolve user")
            user = None
        if user is None:
            notifier.error("Could not load statistics.")
            return _reply({}, notifier.drain(), 401)
        return stats_for(user.id)

    @app.route("/users/<user_id>/badges")
    def get_badges(user_id):
        notifier = Notifier()
        view = AchievementView(backend)
        view.refresh(user_id, notifier)
        return _reply(view.to_dict(), notifier.drain())

    @app.route("/planks/<int:plank_id>")
    def get_plank(plank_id):
        notifier = Notifier()
        detail = SessionDetailView(backend).load(plank_id, notifier)
        if detail is None:
            return _reply({}, notifier.drain(), 404)
        return _reply(detail.to_dict(), notifier.drain())

    # -- sessions ----------------------------------------------------------

    @app.route("/sessions", methods=["POST"])
    def create_session():
        """
        Create a plank session.

        Request JSON (optional):
            {
                "mode": "stopwatch" | "countdown"
            }
        """
        data = request.get_json(silent=True) or {}
        controller = registry.create(_access_token())
        mode = data.get("mode")
        if mode:
            try:
                controller.set_mode(TimerMode(mode))
            except ValueError:
                registry.remove(controller.session_id)
                return jsonify({"error": f"Unknown mode: {mode}"}), 400
        return session_reply(controller, 201)

    @app.route("/sessions/<session_id>")
    def get_session(session_id):
        controller, error = session_or_404(session_id)
        if error:
            return error
        return session_reply(controller)

    @app.route("/sessions/<session_id>", methods=["DELETE"])
    def delete_session(session_id):
        if not registry.remove(session_id):
            return jsonify({"error": "Unknown session"}), 404
        return jsonify({"status": "ok"})

    @app.route("/sessions/<session_id>/mode", methods=["POST"])
    def set_mode(session_id):
        data = request.get_json(silent=True) or {}
        try:
            mode = TimerMode(data.get("mode", ""))
        except ValueError:
            return jsonify({"error": "mode must be 'stopwatch' or 'countdown'"}), 400
        return run_action(session_id, lambda c: c.set_mode(mode))

    @app.route("/sessions/<session_id>/target", methods=["POST"])
    def set_target(session_id):
        """
        Configure the countdown.

        Request JSON:
            {
                "minutes": <int>,
                "seconds": <int 0-59>
            }
        """
        data = request.get_json(silent=True) or {}
        try:
            minutes = int(data.get("minutes", 0))
            seconds = int(data.get("seconds", 0))
        except (TypeError, ValueError):
            return jsonify({"error": "minutes and seconds must be integers"}), 400
        return run_action(session_id, lambda c: c.configure_countdown(minutes, seconds))

    @app.route("/sessions/<session_id>/acknowledge", methods=["POST"])
    def acknowledge(session_id):
        data = request.get_json(silent=True) or {}
        value = data.get("acknowledged", True)
        if not isinstance(value, bool):
            return jsonify({"error": "acknowledged must be true or false"}), 400
        return run_action(session_id, lambda c: c.acknowledge(value))

    @app.route("/sessions/<session_id>/camera", methods=["POST"])
    def set_camera(session_id):
        """
        Grant or revoke the camera.

        Request JSON:
            {
                "enabled": true | false,
                "source": "client" | "local"
            }

        ``client`` frames are posted to ``/frame``; ``local`` reads the
        server's own camera (CAMERA_INDEX).
        """
        data = request.get_json(silent=True) or {}
        if not data.get("enabled", True):
            return run_action(session_id, lambda c: c.disable_camera())
        source = data.get("source", "client")
        if source == "client":
            return run_action(session_id, lambda c: c.enable_camera())
        if source == "local":
            return run_action(session_id, lambda c: c.enable_camera(open_local_camera))
        return jsonify({"error": "source must be 'client' or 'local'"}), 400

    @app.route("/sessions/<session_id>/frame", methods=["POST"])
    def push_frame(session_id):
        """
        Receive a camera frame from the client.

        Request JSON:
            {
                "image": "<base64-encoded-jpeg>"
            }
        """
        controller, error = session_or_404(session_id)
        if error:
            return error
        data = request.get_json(silent=True)
        if not data or "image" not in data:
            return jsonify({"error": "No image data"}), 400
        try:
            frame = decode_frame(data["image"])
        except FrameDecodeError as e:
            return jsonify({"error": str(e)}), 400
        try:
            controller.push_frame(frame)
        except CameraError as e:
            return jsonify({"error": str(e)}), 409
        return jsonify({"status": "ok"})

    @app.route("/sessions/<session_id>/start", methods=["POST"])
    def start(session_id):
        return run_action(session_id, lambda c: c.start())

    @app.route("/sessions/<session_id>/pause", methods=["POST"])
    def pause(session_id):
        return run_action(session_id, lambda c: c.pause())

    @app.route("/sessions/<session_id>/finish", methods=["POST"])
    def finish(session_id):
        return run_action(session_id, lambda c: c.finish())

    @app.route("/sessions/<session_id>/reset", methods=["POST"])
    def reset(session_id):
        return run_action(session_id, lambda c: c.reset())

    return registry
