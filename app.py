"""Application factory and entry point.

Run with:
    uvicorn app:app --reload
"""
from __future__ import annotations

from fastapi import FastAPI

from api import arithmetic_router, sessions_router, set_config, set_store
from config import DEFAULT_CONFIG, CalculatorConfig, configure_logging
from store import SessionStore


def create_app(
    store: SessionStore | None = None,
    config: CalculatorConfig | None = None,
) -> FastAPI:
    """Build and return the FastAPI application.

    Accepts an optional store and config for testing.  When both are given
    the store keeps its own config for session presses.
    """
    if config is None:
        config = store.config if store is not None else DEFAULT_CONFIG
    if store is None:
        store = SessionStore(config)

    configure_logging(config.log_level)
    set_store(store)
    set_config(config)

    app = FastAPI(
        title="Decimal Calculator API",
        description=(
            "Button-driven calculator sessions backed by decimal-accurate "
            "arithmetic. Press digits, operators and calculate; every "
            "response carries the refreshed display."
        ),
        version="0.1.0",
    )
    app.include_router(sessions_router)
    app.include_router(arithmetic_router)
    return app


# Default app instance for `uvicorn app:app`
app = create_app()
