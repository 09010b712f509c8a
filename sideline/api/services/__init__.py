"""API services."""

from sideline.api.services.flow_service import FlowSession, FlowSessionManager

__all__ = ["FlowSession", "FlowSessionManager"]
