"""
Plank Tracker Server
====================

Main entry point for the Flask server.

Usage:
    python run.py

Or with gunicorn (sessions live in process memory, keep one worker):
    gunicorn -w 1 --threads 8 -b 0.0.0.0:5000 "run:create_app()"
"""

import logging
from typing import Optional

from flask import Flask

from config import (
    get_backend_config,
    get_camera_config,
    get_leaderboard_config,
    get_server_config,
    get_timer_config,
)
from plank_tracker.api import register_routes
from plank_tracker.backend import Backend, create_backend
from templates.index import HTML_TEMPLATE

logger = logging.getLogger(__name__)


def create_app(backend: Optional[Backend] = None, **route_options) -> Flask:
    """
    Build the Flask application.

    Args:
        backend: Backend adapter; built from the environment when omitted
        **route_options: Extra keyword arguments for ``register_routes``

    Returns:
        Configured Flask app
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    if backend is None:
        backend = create_backend(get_backend_config())

    route_options.setdefault("timer_config", get_timer_config())
    route_options.setdefault("leaderboard_config", get_leaderboard_config())
    route_options.setdefault("camera_config", get_camera_config())
    registry = register_routes(app, HTML_TEMPLATE, backend, **route_options)
    app.extensions["plank_sessions"] = registry
    return app


def main():
    """Main entry point."""
    config = get_server_config()
    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = create_app()
    logger.info("Plank tracker running at http://%s:%s (debug=%s)",
                config.host, config.port, config.debug)
    logger.info("Endpoints: / /health /leaderboard /users/<id>/stats /me/stats "
                "/users/<id>/badges /planks/<id> /sessions")
    app.run(host=config.host, port=config.port, debug=config.debug, threaded=config.threaded)


if __name__ == "__main__":
    main()
