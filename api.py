"""FastAPI REST endpoints for calculator sessions and one-shot arithmetic.

Routes
------
POST   /sessions                 Create a session
GET    /sessions                 List sessions
GET    /sessions/{id}            Retrieve a session
POST   /sessions/{id}/press      Press one button
POST   /sessions/{id}/sequence   Press several buttons in order
DELETE /sessions/{id}            Delete a session
POST   /arithmetic/{operation}   Apply add/subtract/multiply/divide to a, b
"""
from __future__ import annotations

import structlog
from fastapi import APIRouter, HTTPException, Query

from config import DEFAULT_CONFIG, CalculatorConfig
from decimal_math import (
    DivisionByZero,
    InvalidOperandError,
    UnknownOperatorError,
    apply,
)
from models import (
    ArithmeticRequest,
    ArithmeticResult,
    PressRequest,
    SequenceRequest,
    SessionListResponse,
    SessionView,
)
from session import UnknownActionError, format_result
from store import SessionNotFoundError, SessionRecord, SessionStore

logger = structlog.get_logger()

sessions_router = APIRouter(prefix="/sessions", tags=["sessions"])
arithmetic_router = APIRouter(prefix="/arithmetic", tags=["arithmetic"])

# The store and config are injected by the app factory (see app.py).
_store: SessionStore | None = None
_config: CalculatorConfig = DEFAULT_CONFIG


def set_store(store: SessionStore) -> None:
    """Inject the store instance. Called once at app startup."""
    global _store
    _store = store


def set_config(config: CalculatorConfig) -> None:
    global _config
    _config = config


def get_store() -> SessionStore:
    assert _store is not None, "Store not initialized"
    return _store


# ---------------------------------------------------------------------------
# Response helpers
# ---------------------------------------------------------------------------

def _view(record: SessionRecord) -> SessionView:
    state = record.state
    return SessionView(
        id=record.id,
        display=state.display,
        phase=state.phase,
        first_operand=state.first_operand,
        operator=state.operator,
        waiting_for_second_operand=state.waiting_for_second_operand,
        error=state.error,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


def _not_found(session_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Session not found: {session_id}")


def _unprocessable(e: Exception) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

@sessions_router.post("", response_model=SessionView, status_code=201)
def create_session() -> SessionView:
    """Create a session showing "0"."""
    return _view(get_store().create())


@sessions_router.get("", response_model=SessionListResponse)
def list_sessions(
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    limit: int = Query(default=50, ge=1, le=200, description="Pagination limit"),
) -> SessionListResponse:
    store = get_store()
    items = store.list(offset=offset, limit=limit)
    return SessionListResponse(items=[_view(r) for r in items], total=store.count())


@sessions_router.get("/{session_id}", response_model=SessionView)
def get_session(session_id: str) -> SessionView:
    try:
        return _view(get_store().get(session_id))
    except SessionNotFoundError:
        raise _not_found(session_id)


@sessions_router.post("/{session_id}/press", response_model=SessionView)
def press_button(session_id: str, payload: PressRequest) -> SessionView:
    """Apply one button press and return the refreshed display."""
    try:
        return _view(get_store().press(session_id, payload.action))
    except SessionNotFoundError:
        raise _not_found(session_id)
    except (UnknownActionError, InvalidOperandError) as e:
        raise _unprocessable(e) from e


@sessions_router.post("/{session_id}/sequence", response_model=SessionView)
def press_sequence(session_id: str, payload: SequenceRequest) -> SessionView:
    """Apply several presses in order and return the final display."""
    try:
        return _view(get_store().press_many(session_id, payload.actions))
    except SessionNotFoundError:
        raise _not_found(session_id)
    except (UnknownActionError, InvalidOperandError) as e:
        raise _unprocessable(e) from e


@sessions_router.delete("/{session_id}", response_model=SessionView)
def delete_session(session_id: str) -> SessionView:
    try:
        return _view(get_store().delete(session_id))
    except SessionNotFoundError:
        raise _not_found(session_id)


# ---------------------------------------------------------------------------
# Arithmetic
# ---------------------------------------------------------------------------

@arithmetic_router.post("/{operation}", response_model=ArithmeticResult)
def calculate(operation: str, payload: ArithmeticRequest) -> ArithmeticResult:
    """Apply one decimal operation to ``a`` and ``b``."""
    try:
        result = apply(operation, payload.a, payload.b, _config.division_mode)
    except UnknownOperatorError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except DivisionByZero as e:
        logger.info("division_by_zero", dividend=payload.a)
        raise HTTPException(status_code=422, detail=_config.error_text) from e
    except OverflowError as e:
        raise _unprocessable(e) from e

    return ArithmeticResult(
        operation=operation,
        a=payload.a,
        b=payload.b,
        result=result,
        display=format_result(result),
    )
