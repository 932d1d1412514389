"""
Plank Tracker Server
====================

A Flask-based server for timing plank holds, recording them to a hosted
backend and ranking users on a rolling leaderboard.

Modules:
    - core: Session timer, snapshot capture, ranking and formatting
    - backend: Hosted backend adapters (Supabase, in-memory)
    - services: Session lifecycle, recorder and read-side views
    - api: Flask API routes and endpoints
    - utils: Frame sources and frame decoding
"""

__version__ = "1.0.0"
__author__ = "Plank Tracker Team"
