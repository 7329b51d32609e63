"""Calculator configuration and logging setup."""
from __future__ import annotations

import logging
from dataclasses import dataclass

import structlog

from decimal_math import DivisionMode


@dataclass(frozen=True)
class CalculatorConfig:
    """Settings shared by the session state machine and the HTTP app.

    Attributes:
        division_mode: FLOAT keeps the float quotient of the raw integers;
            EXACT rounds a rational quotient once.
        error_text: What the display shows after a division by zero.
        max_display_digits: Digits accepted per entry; further digits are
            ignored.
        log_level: Name of the minimum level passed to structlog.
    """

    division_mode: DivisionMode = DivisionMode.FLOAT
    error_text: str = "Error"
    max_display_digits: int = 15
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.max_display_digits < 1:
            raise ValueError(
                f"max_display_digits must be >= 1, got {self.max_display_digits}"
            )
        if not self.error_text:
            raise ValueError("error_text must not be empty")


DEFAULT_CONFIG = CalculatorConfig()


def configure_logging(level: str = DEFAULT_CONFIG.log_level) -> None:
    """Install the console renderer with a level filter."""
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
