"""Request and response models for the calculator HTTP API.

Sessions are driven by the same action strings the state machine takes
("7", "decimal", "add", "calculate", ...).  One-shot arithmetic requests
carry two finite numbers.
"""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator

from session import ACTIONS, Phase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _check_action(action: str) -> str:
    if action not in ACTIONS:
        raise ValueError(
            f"Unknown action {action!r}; expected a digit, 'decimal', "
            "an operator, 'calculate' or 'clear'"
        )
    return action


# ---------------------------------------------------------------------------
# Session requests
# ---------------------------------------------------------------------------

class PressRequest(BaseModel):
    """A single button press."""

    action: str = Field(..., min_length=1, max_length=16)

    @field_validator("action")
    @classmethod
    def action_is_known(cls, v: str) -> str:
        return _check_action(v)


class SequenceRequest(BaseModel):
    """Several presses applied in order."""

    actions: list[str] = Field(..., min_length=1, max_length=256)

    @field_validator("actions")
    @classmethod
    def actions_are_known(cls, actions: list[str]) -> list[str]:
        for action in actions:
            _check_action(action)
        return actions


# ---------------------------------------------------------------------------
# Session responses
# ---------------------------------------------------------------------------

class SessionView(BaseModel):
    """A session as returned by the API."""

    id: str
    display: str
    phase: Phase
    first_operand: float | None = None
    operator: str | None = None
    waiting_for_second_operand: bool = False
    error: bool = False
    created_at: datetime
    updated_at: datetime


class SessionListResponse(BaseModel):
    items: list[SessionView]
    total: int


# ---------------------------------------------------------------------------
# One-shot arithmetic
# ---------------------------------------------------------------------------

class ArithmeticRequest(BaseModel):
    a: float = Field(..., allow_inf_nan=False)
    b: float = Field(..., allow_inf_nan=False)


class ArithmeticResult(BaseModel):
    operation: str
    a: float
    b: float
    result: float
    display: str = Field(..., description="Canonical text of the result")
