"""Decimal-accurate arithmetic on binary floats.

Each operand is read through its canonical text form, the decimal point is
removed to obtain an exact Python ``int``, and the integer results are
rescaled by a single power-of-ten division.  Because ``int / int`` is
correctly rounded, add, subtract and multiply return the double nearest to
the exact decimal result: ``add(0.1, 0.2) == 0.3``.

Canonical text
--------------
``repr`` gives the shortest string that round-trips a double.  That string
is normalised with :class:`decimal.Decimal` (trailing zeros dropped) and
formatted positionally, so ``1.50`` reads ``1.5``, ``3.0`` reads ``3`` and
``1e-07`` reads ``0.0000001``.  The decimal-place count used for scaling is
always taken from this form.

Division
--------
``DivisionMode.FLOAT`` divides the two raw integers as floats and then
shifts the decimal point of the quotient exactly; the float quotient
can carry binary rounding error.  ``DivisionMode.EXACT`` forms the quotient
as a :class:`fractions.Fraction` and rounds once.
"""
from __future__ import annotations

import math
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from typing import Callable, Union

Number = Union[int, float]


class DivisionMode(str, Enum):
    FLOAT = "float"
    EXACT = "exact"


class Operator(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class InvalidOperandError(ValueError):
    """Raised when an operand is not a finite int or float."""


class ScaleError(ValueError):
    """Raised when an operand cannot be aligned to the requested scale."""

    def __init__(self, value: Number, target_scale: int, places: int) -> None:
        self.value = value
        self.target_scale = target_scale
        self.places = places
        super().__init__(
            f"cannot scale {value!r} ({places} decimal places) "
            f"down to {target_scale} places"
        )


class DivisionByZero(ZeroDivisionError):
    """Raised when the divisor is zero."""

    def __init__(self, dividend: Number) -> None:
        self.dividend = dividend
        super().__init__(f"division by zero: {dividend!r} / 0")


class UnknownOperatorError(ValueError):
    def __init__(self, operator: str) -> None:
        self.operator = operator
        super().__init__(f"Unknown operator: {operator!r}")


# ---------------------------------------------------------------------------
# Text form and scaling
# ---------------------------------------------------------------------------

def canonical_text(x: Number) -> str:
    """Deterministic positional text for *x*, without trailing zeros."""
    if isinstance(x, bool) or not isinstance(x, (int, float)):
        raise InvalidOperandError(f"operand must be int or float, got {x!r}")
    if isinstance(x, int):
        return str(x)
    if not math.isfinite(x):
        raise InvalidOperandError(f"operand must be finite, got {x!r}")
    return format(Decimal(repr(x)).normalize(), "f")


def decimal_places(x: Number) -> int:
    """Number of digits after the decimal point in ``canonical_text(x)``."""
    _, dot, fraction = canonical_text(x).partition(".")
    return len(fraction) if dot else 0


def _raw_digits(x: Number) -> int:
    return int(canonical_text(x).replace(".", "", 1))


def to_scaled_integer(x: Number, target_scale: int) -> int:
    """Return *x* as an integer count of ``10 ** -target_scale`` units.

    ``target_scale`` must be at least ``decimal_places(x)``; a smaller
    scale would discard digits and raises :class:`ScaleError`.
    """
    places = decimal_places(x)
    if target_scale < places:
        raise ScaleError(x, target_scale, places)
    return _raw_digits(x) * 10 ** (target_scale - places)


def _aligned(a: Number, b: Number) -> tuple[int, int, int]:
    scale = max(decimal_places(a), decimal_places(b))
    return to_scaled_integer(a, scale), to_scaled_integer(b, scale), scale


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

def add(a: Number, b: Number) -> float:
    int_a, int_b, scale = _aligned(a, b)
    return (int_a + int_b) / 10 ** scale


def subtract(a: Number, b: Number) -> float:
    int_a, int_b, scale = _aligned(a, b)
    return (int_a - int_b) / 10 ** scale


def multiply(a: Number, b: Number) -> float:
    scale = decimal_places(a) + decimal_places(b)
    return (_raw_digits(a) * _raw_digits(b)) / 10 ** scale


def _shift(x: Number, exponent: int) -> float:
    """``x * 10 ** exponent`` with the power of ten kept as an int."""
    scale = decimal_places(x) - exponent
    if scale >= 0:
        return _raw_digits(x) / 10 ** scale
    return float(_raw_digits(x) * 10 ** -scale)


def divide(a: Number, b: Number, mode: DivisionMode = DivisionMode.FLOAT) -> float:
    """Quotient of *a* by *b*.

    Raises :class:`DivisionByZero` when ``b == 0``.  Callers that can
    show an error indicator instead should check the divisor first.
    """
    if b == 0:
        raise DivisionByZero(a)

    places_a = decimal_places(a)
    places_b = decimal_places(b)
    raw_a = _raw_digits(a)
    raw_b = _raw_digits(b)

    if DivisionMode(mode) == DivisionMode.EXACT:
        return float(Fraction(raw_a * 10 ** places_b, raw_b * 10 ** places_a))

    # rawA / rawB is off from a / b by 10 ** (places_b - places_a).
    quotient = raw_a / raw_b
    return _shift(quotient, places_b - places_a)


OPERATIONS: dict[Operator, Callable[[Number, Number], float]] = {
    Operator.ADD: add,
    Operator.SUBTRACT: subtract,
    Operator.MULTIPLY: multiply,
    Operator.DIVIDE: divide,
}


def apply(
    operator: str,
    a: Number,
    b: Number,
    mode: DivisionMode = DivisionMode.FLOAT,
) -> float:
    """Dispatch to the operation named *operator*."""
    try:
        op = Operator(operator)
    except ValueError:
        raise UnknownOperatorError(operator) from None
    if op == Operator.DIVIDE:
        return divide(a, b, mode)
    return OPERATIONS[op](a, b)
