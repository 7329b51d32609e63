"""Calculator session state machine.

A session is an immutable :class:`SessionState`.  Every button press is
one call to :func:`press`, which returns the next state; nothing is kept
between calls except what the caller holds on to.

Actions
-------
"0" .. "9"                      digit entry
"decimal"                       decimal point
"add" "subtract" "multiply"
"divide"                        operators
"calculate"                     evaluate the pending operation
"clear"                         reset
"""
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable

import structlog

from config import DEFAULT_CONFIG, CalculatorConfig
from decimal_math import InvalidOperandError, Operator, apply, canonical_text

logger = structlog.get_logger()

DIGITS = frozenset("0123456789")
DECIMAL = "decimal"
CLEAR = "clear"
CALCULATE = "calculate"
OPERATORS = frozenset(op.value for op in Operator)
ACTIONS = DIGITS | OPERATORS | {DECIMAL, CLEAR, CALCULATE}

_OPERAND_RE = re.compile(r"^-?\d+(\.\d*)?$")


class Phase(str, Enum):
    IDLE = "idle"
    ACCUMULATING_FIRST_OPERAND = "accumulating_first_operand"
    OPERATOR_PENDING = "operator_pending"
    ACCUMULATING_SECOND_OPERAND = "accumulating_second_operand"
    RESULT = "result"


class UnknownActionError(ValueError):
    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"Unknown action: {action!r}")


@dataclass(frozen=True)
class SessionState:
    """Everything a calculator session remembers between presses."""

    display: str = "0"
    first_operand: float | None = None
    operator: str | None = None
    waiting_for_second_operand: bool = False
    error: bool = False

    @property
    def phase(self) -> Phase:
        if self.error:
            return Phase.RESULT
        if self.operator is not None:
            if self.waiting_for_second_operand:
                return Phase.OPERATOR_PENDING
            return Phase.ACCUMULATING_SECOND_OPERAND
        if self.first_operand is not None:
            return Phase.RESULT
        if self.display == "0":
            return Phase.IDLE
        return Phase.ACCUMULATING_FIRST_OPERAND


# ---------------------------------------------------------------------------
# Display text <-> numbers
# ---------------------------------------------------------------------------

def parse_operand(text: str) -> float:
    """Parse display text such as ``"12"``, ``"0.5"`` or ``"3."``."""
    if not isinstance(text, str) or not _OPERAND_RE.match(text):
        raise InvalidOperandError(f"not a decimal number: {text!r}")
    return float(text)


def format_result(value: float) -> str:
    """Display text for a computed value.

    Uses the same canonical form the arithmetic scales by, so parsing the
    text back yields a value with the same decimal-place count.
    """
    return canonical_text(value)


def _digit_count(text: str) -> int:
    return sum(1 for c in text if c.isdigit())


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _start_entry(state: SessionState, display: str) -> SessionState:
    # A fresh entry after a result (no operator pending) discards the result.
    first = state.first_operand if state.operator is not None else None
    return replace(
        state,
        display=display,
        first_operand=first,
        waiting_for_second_operand=False,
        error=False,
    )


def _input_digit(
    state: SessionState, digit: str, config: CalculatorConfig
) -> SessionState:
    if state.waiting_for_second_operand or state.error:
        return _start_entry(state, digit)
    if _digit_count(state.display) >= config.max_display_digits:
        logger.debug("digit_ignored", display=state.display, digit=digit)
        return state
    display = digit if state.display == "0" else state.display + digit
    return replace(state, display=display)


def _input_decimal(state: SessionState) -> SessionState:
    if state.waiting_for_second_operand or state.error:
        return _start_entry(state, "0.")
    if "." in state.display:
        return state
    return replace(state, display=state.display + ".")


def _error_state(config: CalculatorConfig) -> SessionState:
    return SessionState(
        display=config.error_text,
        waiting_for_second_operand=True,
        error=True,
    )


def _evaluate(state: SessionState, config: CalculatorConfig) -> SessionState:
    """Apply the pending operator to the first operand and the display."""
    second = parse_operand(state.display)

    if state.operator == Operator.DIVIDE.value and second == 0:
        logger.info("division_by_zero", dividend=state.first_operand)
        return _error_state(config)

    try:
        result = apply(
            state.operator, state.first_operand, second, config.division_mode
        )
    except OverflowError:
        logger.warning(
            "result_out_of_range",
            operator=state.operator,
            first_operand=state.first_operand,
            second_operand=second,
        )
        return _error_state(config)

    logger.debug(
        "calculated",
        operator=state.operator,
        first_operand=state.first_operand,
        second_operand=second,
        result=result,
    )
    return replace(
        state,
        display=format_result(result),
        first_operand=result,
        operator=None,
        waiting_for_second_operand=True,
        error=False,
    )


def _handle_operator(
    state: SessionState, operator: str, config: CalculatorConfig
) -> SessionState:
    if state.error:
        logger.debug("operator_ignored", operator=operator, reason="error")
        return state

    if state.operator is not None and state.waiting_for_second_operand:
        logger.debug("operator_replaced", old=state.operator, new=operator)
        return replace(state, operator=operator)

    if state.operator is not None and state.first_operand is not None:
        state = _evaluate(state, config)
        if state.error:
            return state
    else:
        state = replace(state, first_operand=parse_operand(state.display))

    return replace(state, operator=operator, waiting_for_second_operand=True)


def _calculate(state: SessionState, config: CalculatorConfig) -> SessionState:
    if state.first_operand is None or state.operator is None:
        return state
    return _evaluate(state, config)


def press(
    state: SessionState,
    action: str,
    config: CalculatorConfig = DEFAULT_CONFIG,
) -> SessionState:
    """Return the state that follows *state* after pressing *action*."""
    if action in DIGITS:
        return _input_digit(state, action, config)
    if action == DECIMAL:
        return _input_decimal(state)
    if action in OPERATORS:
        return _handle_operator(state, action, config)
    if action == CALCULATE:
        return _calculate(state, config)
    if action == CLEAR:
        logger.debug("cleared")
        return SessionState()
    raise UnknownActionError(action)


def run(
    actions: Iterable[str],
    state: SessionState | None = None,
    config: CalculatorConfig = DEFAULT_CONFIG,
) -> SessionState:
    """Press every action in order, starting from *state* (or a fresh one)."""
    if state is None:
        state = SessionState()
    for action in actions:
        state = press(state, action, config)
    return state
