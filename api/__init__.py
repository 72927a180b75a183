"""
Digest API package.

Provides the FastAPI application for user profiles, digest preferences
and read history.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
