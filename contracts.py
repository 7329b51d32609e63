"""Machine-readable contracts for the decimal arithmetic operations.

Each operation is described by:
- postconditions: what the output must satisfy given valid inputs
- error conditions: which inputs must raise which exceptions
- algebraic properties: relationships that must hold between calls

Conformance tests iterate over these objects instead of hand-writing a
test per predicate.

"Exact" below means the rational value of an operand's canonical text,
so ``exact(0.1)`` is 1/10 and not the binary value of the double.
Postconditions hold for every finite operand.  The ``inverse`` property
additionally needs operands whose sum has at most 15 significant digits,
the range in which a double keeps every decimal digit.

Layers
------
OperationContract    per-operation contract (post/error/properties)
ArithmeticContract   the four contracts for one division mode
build_contracts()    constructs an ArithmeticContract
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal
from fractions import Fraction
from typing import Callable

import decimal_math
from decimal_math import DivisionByZero, DivisionMode, Number, canonical_text

# Relative tolerance for results that go through a float quotient.
FLOAT_DIVISION_REL_TOL = 1e-12


# ---------------------------------------------------------------------------
# Contract building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Postcondition:
    name: str
    description: str
    check: Callable[..., bool]


@dataclass(frozen=True)
class ErrorCondition:
    name: str
    description: str
    trigger: Callable[..., bool]
    exception: type


@dataclass(frozen=True)
class AlgebraicProperty:
    name: str
    description: str
    arity: int          # how many free operand values the check needs
    check: Callable[..., bool]


@dataclass(frozen=True)
class OperationContract:
    name: str
    operation: Callable[[Number, Number], float]
    postconditions: list[Postcondition]
    error_conditions: list[ErrorCondition]
    properties: list[AlgebraicProperty]


@dataclass(frozen=True)
class ArithmeticContract:
    division_mode: DivisionMode
    operations: dict[str, OperationContract]

    @property
    def all_properties(self) -> list[tuple[str, AlgebraicProperty]]:
        return [
            (name, prop)
            for name, op in self.operations.items()
            for prop in op.properties
        ]

    @property
    def all_postconditions(self) -> list[tuple[str, Postcondition]]:
        return [
            (name, post)
            for name, op in self.operations.items()
            for post in op.postconditions
        ]


# ---------------------------------------------------------------------------
# Helpers used inside the predicates
# ---------------------------------------------------------------------------

def exact(x: Number) -> Fraction:
    """Rational value of the canonical text of *x*."""
    return Fraction(Decimal(canonical_text(x)))


def nearest(value: Fraction) -> float:
    """The double nearest to *value*."""
    return float(value)


def close(x: float, y: float) -> bool:
    return math.isclose(x, y, rel_tol=FLOAT_DIVISION_REL_TOL, abs_tol=1e-300)


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def build_contracts(
    division_mode: DivisionMode = DivisionMode.FLOAT,
) -> ArithmeticContract:
    """Construct the arithmetic contract for a division mode."""

    add = decimal_math.add
    sub = decimal_math.subtract
    mul = decimal_math.multiply

    def div(a: Number, b: Number) -> float:
        return decimal_math.divide(a, b, division_mode)

    exact_division = division_mode == DivisionMode.EXACT

    def _quotient_ok(a: Number, b: Number, result: float) -> bool:
        expected = nearest(exact(a) / exact(b))
        return result == expected if exact_division else close(result, expected)

    # ------------------------------------------------------------------ add
    add_contract = OperationContract(
        name="add",
        operation=add,
        postconditions=[
            Postcondition(
                "result_exact",
                "Result is the double nearest to the exact decimal sum",
                lambda a, b, result: result == nearest(exact(a) + exact(b)),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "add(a, b) == add(b, a)", 2,
                lambda a, b: add(a, b) == add(b, a),
            ),
            AlgebraicProperty(
                "identity", "add(a, 0) == a", 1,
                lambda a: add(a, 0) == a,
            ),
            AlgebraicProperty(
                "inverse",
                "sub(add(a, b), b) == a while the sum fits in 15 "
                "significant digits",
                2,
                lambda a, b: sub(add(a, b), b) == a,
            ),
        ],
    )

    # ------------------------------------------------------------------ sub
    sub_contract = OperationContract(
        name="subtract",
        operation=sub,
        postconditions=[
            Postcondition(
                "result_exact",
                "Result is the double nearest to the exact decimal difference",
                lambda a, b, result: result == nearest(exact(a) - exact(b)),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "identity", "sub(a, 0) == a", 1,
                lambda a: sub(a, 0) == a,
            ),
            AlgebraicProperty(
                "self_inverse", "sub(a, a) == 0", 1,
                lambda a: sub(a, a) == 0,
            ),
            AlgebraicProperty(
                "antisymmetry", "sub(a, b) == -sub(b, a)", 2,
                lambda a, b: sub(a, b) == -sub(b, a),
            ),
        ],
    )

    # ------------------------------------------------------------------ mul
    mul_contract = OperationContract(
        name="multiply",
        operation=mul,
        postconditions=[
            Postcondition(
                "result_exact",
                "Result is the double nearest to the exact decimal product",
                lambda a, b, result: result == nearest(exact(a) * exact(b)),
            ),
        ],
        error_conditions=[],
        properties=[
            AlgebraicProperty(
                "commutativity", "mul(a, b) == mul(b, a)", 2,
                lambda a, b: mul(a, b) == mul(b, a),
            ),
            AlgebraicProperty(
                "identity", "mul(a, 1) == a", 1,
                lambda a: mul(a, 1) == a,
            ),
            AlgebraicProperty(
                "zero", "mul(a, 0) == 0", 1,
                lambda a: mul(a, 0) == 0,
            ),
        ],
    )

    # ------------------------------------------------------------------ div
    div_contract = OperationContract(
        name="divide",
        operation=div,
        postconditions=[
            Postcondition(
                "result_quotient",
                "Result is the nearest double to the exact quotient "
                "(within tolerance in float mode)",
                _quotient_ok,
            ),
        ],
        error_conditions=[
            ErrorCondition(
                "division_by_zero",
                "DivisionByZero when the divisor is zero",
                lambda a, b: b == 0,
                DivisionByZero,
            ),
        ],
        properties=[
            AlgebraicProperty(
                "round_trip", "mul(div(a, b), b) ~= a for b != 0", 2,
                lambda a, b: b == 0 or close(mul(div(a, b), b), a),
            ),
            AlgebraicProperty(
                "self", "div(a, a) == 1 for a != 0", 1,
                lambda a: a == 0 or div(a, a) == 1,
            ),
            AlgebraicProperty(
                "zero_numerator", "div(0, b) == 0 for b != 0", 1,
                lambda b: b == 0 or div(0, b) == 0,
            ),
        ],
    )

    return ArithmeticContract(
        division_mode=division_mode,
        operations={
            "add": add_contract,
            "subtract": sub_contract,
            "multiply": mul_contract,
            "divide": div_contract,
        },
    )
