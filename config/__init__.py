"""
Configuration Module
====================
"""

from .settings import (
    ServerConfig,
    CameraConfig,
    TimerConfig,
    LeaderboardConfig,
    BackendConfig,
    get_server_config,
    get_camera_config,
    get_timer_config,
    get_leaderboard_config,
    get_backend_config,
)

__all__ = [
    "ServerConfig",
    "CameraConfig",
    "TimerConfig",
    "LeaderboardConfig",
    "BackendConfig",
    "get_server_config",
    "get_camera_config",
    "get_timer_config",
    "get_leaderboard_config",
    "get_backend_config",
]
