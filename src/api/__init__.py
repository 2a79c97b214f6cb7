"""API module - route handlers and common dependencies."""

from fastapi import FastAPI

from src.api.blockchain import (
    get_adapter_factory,
    get_balance_aggregator,
    get_network_id,
)

__all__ = [
    "get_adapter_factory",
    "get_balance_aggregator",
    "get_network_id",
    "register_routers",
]


def register_routers(app: FastAPI) -> None:
    """Register all API routers to the application.

    Args:
        app: FastAPI application instance
    """
    # Multi-chain blockchain operations
    from src.api.blockchain import router as blockchain_router

    app.include_router(blockchain_router)
