"""Pydantic schemas for API request/response models."""

from sideline.api.schemas.flow import (
    AdvanceResponse,
    CanAdvanceSchema,
    CreateSessionRequest,
    FlowStateSchema,
    PredictionRequest,
    SessionResponse,
    SpeedRequest,
    WeekSummaryResponse,
    WeekSummarySchema,
)

__all__ = [
    "AdvanceResponse",
    "CanAdvanceSchema",
    "CreateSessionRequest",
    "FlowStateSchema",
    "PredictionRequest",
    "SessionResponse",
    "SpeedRequest",
    "WeekSummaryResponse",
    "WeekSummarySchema",
]
