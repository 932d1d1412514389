"""
Server Configuration
====================

Configuration settings for the plank tracker server.
"""

import os
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class ServerConfig:
    """Server configuration settings."""
    host: str = "0.0.0.0"
    port: int = 5000
    debug: bool = False
    threaded: bool = True


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: Optional[int] = None  # None disables the local camera
    width: int = 640
    height: int = 480
    fps: int = 30


@dataclass
class TimerConfig:
    """Session timer and snapshot capture settings."""
    tick_seconds: float = 1.0
    snapshot_interval_seconds: int = 10
    snapshot_retention: int = 3
    snapshot_format: str = ".png"
    session_ttl_seconds: float = 900.0  # idle sessions older than this are closed


@dataclass
class LeaderboardConfig:
    """Leaderboard window settings."""
    window_days: int = 30


@dataclass
class BackendConfig:
    """Hosted backend settings."""
    kind: str = "supabase"  # "supabase" or "memory"
    url: str = ""
    key: str = ""
    sessions_table: str = "planks"
    profiles_table: str = "profiles"
    stats_table: str = "user_stats"
    badges_table: str = "badges"
    photo_bucket: str = "plank-photos"


def get_server_config() -> ServerConfig:
    """Get server configuration from environment."""
    return ServerConfig(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "5000")),
        debug=os.getenv("DEBUG", "false").lower() == "true",
        threaded=True
    )


def get_camera_config() -> CameraConfig:
    """Get camera configuration from environment."""
    index = os.getenv("CAMERA_INDEX")
    return CameraConfig(
        index=int(index) if index else None,
        width=int(os.getenv("CAMERA_WIDTH", "640")),
        height=int(os.getenv("CAMERA_HEIGHT", "480")),
        fps=int(os.getenv("CAMERA_FPS", "30"))
    )


def get_timer_config() -> TimerConfig:
    """Get timer configuration from environment."""
    return TimerConfig(
        tick_seconds=float(os.getenv("TICK_SECONDS", "1.0")),
        snapshot_interval_seconds=int(os.getenv("SNAPSHOT_INTERVAL_SECONDS", "10")),
        snapshot_retention=int(os.getenv("SNAPSHOT_RETENTION", "3")),
        snapshot_format=os.getenv("SNAPSHOT_FORMAT", ".png"),
        session_ttl_seconds=float(os.getenv("SESSION_TTL_SECONDS", "900"))
    )


def get_leaderboard_config() -> LeaderboardConfig:
    """Get leaderboard configuration from environment."""
    return LeaderboardConfig(
        window_days=int(os.getenv("LEADERBOARD_WINDOW_DAYS", "30"))
    )


def get_backend_config() -> BackendConfig:
    """Get backend configuration from environment."""
    return BackendConfig(
        kind=os.getenv("BACKEND", "supabase").lower(),
        url=os.getenv("SUPABASE_URL", ""),
        key=os.getenv("SUPABASE_KEY", ""),
        sessions_table=os.getenv("SESSIONS_TABLE", "planks"),
        profiles_table=os.getenv("PROFILES_TABLE", "profiles"),
        stats_table=os.getenv("STATS_TABLE", "user_stats"),
        badges_table=os.getenv("BADGES_TABLE", "badges"),
        photo_bucket=os.getenv("PHOTO_BUCKET", "plank-photos")
    )
