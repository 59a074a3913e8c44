"""Expose API endpoint routers."""

from app.api.endpoints import reviews, toilets, users

__all__ = ["reviews", "toilets", "users"]
