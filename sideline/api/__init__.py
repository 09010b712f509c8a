"""Sideline API package - FastAPI backend for the week/game flow."""

from sideline.api.main import app, create_app

__all__ = ["app", "create_app"]
