"""API routers for different resource types."""

from sideline.api.routers.flow import router as flow_router

__all__ = [
    "flow_router",
]
