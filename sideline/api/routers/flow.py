"""Flow API router - REST endpoints driving a franchise week by week."""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Request, status

from sideline.api.schemas.flow import (
    AdvanceResponse,
    AdvancementSchema,
    CanAdvanceSchema,
    CreateSessionRequest,
    FlowStateSchema,
    PredictionRequest,
    SessionResponse,
    SpeedRequest,
    WeekSummaryResponse,
    WeekSummarySchema,
)
from sideline.api.services.flow_service import FlowSession, FlowSessionManager

router = APIRouter(prefix="/flow/sessions", tags=["flow"])


def _sessions(request: Request) -> FlowSessionManager:
    return request.app.state.flow_sessions


def get_session(request: Request, session_id: UUID) -> FlowSession:
    """
    Get a flow session by ID.

    Raises HTTPException 404 if not found.
    """
    session = _sessions(request).get_session(session_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return session


def _state(session: FlowSession) -> FlowStateSchema:
    return FlowStateSchema.from_model(session.manager.get_state())


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(request: Request, body: CreateSessionRequest) -> SessionResponse:
    """Generate a league and start a franchise session at the requested week."""
    try:
        session = _sessions(request).create_session(
            team=body.team,
            seed=body.seed,
            season=body.season,
            week=body.week,
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return SessionResponse(
        session_id=session.session_id,
        user_team_id=session.user_team_id,
        state=_state(session),
    )


@router.get("/{session_id}/state", response_model=FlowStateSchema)
async def get_state(request: Request, session_id: UUID) -> FlowStateSchema:
    return _state(get_session(request, session_id))


@router.get("/{session_id}/can-advance", response_model=CanAdvanceSchema)
async def can_advance(request: Request, session_id: UUID) -> CanAdvanceSchema:
    session = get_session(request, session_id)
    return CanAdvanceSchema.from_model(session.manager.can_advance_week())


@router.post("/{session_id}/pre-game", response_model=FlowStateSchema)
async def view_pre_game(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.view_pre_game()
    return _state(session)


@router.post("/{session_id}/prediction", response_model=FlowStateSchema)
async def set_prediction(request: Request, session_id: UUID, body: PredictionRequest) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.set_prediction(body.prediction)
    return _state(session)


@router.post("/{session_id}/start-game", response_model=FlowStateSchema)
async def start_game(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.start_game_simulation()
    return _state(session)


@router.post("/{session_id}/speed", response_model=FlowStateSchema)
async def set_speed(request: Request, session_id: UUID, body: SpeedRequest) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.set_simulation_speed(body.speed)
    return _state(session)


@router.post("/{session_id}/next-play", response_model=FlowStateSchema)
async def next_play(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    await session.manager.run_next_play()
    return _state(session)


@router.post("/{session_id}/skip-to-end", response_model=FlowStateSchema)
async def skip_to_end(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    await session.manager.skip_to_end()
    return _state(session)


@router.post("/{session_id}/result-viewed", response_model=FlowStateSchema)
async def mark_result_viewed(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.mark_game_result_viewed()
    return _state(session)


@router.post("/{session_id}/other-games", response_model=FlowStateSchema)
async def simulate_other_games(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.simulate_other_games()
    return _state(session)


@router.post("/{session_id}/week-summary", response_model=WeekSummaryResponse)
async def view_week_summary(request: Request, session_id: UUID) -> WeekSummaryResponse:
    session = get_session(request, session_id)
    summary = session.manager.view_week_summary()
    return WeekSummaryResponse(
        summary=WeekSummarySchema.from_model(summary) if summary else None,
        state=_state(session),
    )


@router.post("/{session_id}/summary-viewed", response_model=FlowStateSchema)
async def mark_summary_viewed(request: Request, session_id: UUID) -> FlowStateSchema:
    session = get_session(request, session_id)
    session.manager.mark_week_summary_viewed()
    return _state(session)


@router.post("/{session_id}/advance", response_model=AdvanceResponse)
async def advance_week(request: Request, session_id: UUID) -> AdvanceResponse:
    """Advance to the next week. A blocked advance reports its reason in ``state.error``."""
    session = get_session(request, session_id)
    result = session.manager.advance_week()
    return AdvanceResponse(
        result=AdvancementSchema.from_model(result) if result else None,
        state=_state(session),
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(request: Request, session_id: UUID) -> None:
    if not _sessions(request).remove_session(session_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
