"""Multi-Chain Gateway - FastAPI Application."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import register_routers
from src.blockchain.aggregator import BalanceAggregator
from src.blockchain.factory import AdapterFactory, create_adapter_factory
from src.core.config import Settings, get_settings
from src.core.exceptions import GatewayError
from src.core.logging import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler.

    Startup: Warm up adapters for every enabled network
    Shutdown: Close cached adapters
    """
    factory: AdapterFactory = app.state.adapter_factory

    # Startup
    adapters = await factory.get_all()
    logger.info(f"{len(adapters)} of {len(factory.list_network_ids())} networks available")
    yield
    # Shutdown
    await factory.close()


async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    """Render a GatewayError as a JSON error body."""
    content: dict[str, Any] = {
        "error": exc.message,
        "code": exc.__class__.__name__,
        "network": getattr(exc, "network", None),
        "operation": getattr(exc, "operation", None),
        "details": exc.details,
        "path": request.url.path,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


def create_app(
    settings: Settings | None = None,
    factory: AdapterFactory | None = None,
) -> FastAPI:
    """Application factory.

    Args:
        settings: Settings override, defaults to environment settings
        factory: Adapter factory override, defaults to one built from settings

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    factory = factory or create_adapter_factory(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Multi-Chain Blockchain Gateway API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.adapter_factory = factory
    app.state.balance_aggregator = BalanceAggregator(
        factory, call_timeout=settings.adapter_call_timeout
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)

    register_routers(app)

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api")
    async def api_index() -> dict[str, Any]:
        """List the service's endpoints."""
        return {
            "name": settings.app_name,
            "version": "0.1.0",
            "endpoints": {
                "networks": "GET /api/blockchain/networks",
                "multi_balance": "GET /api/blockchain/balance/{address}",
                "balance": "GET /api/blockchain/{network}/balance/{address}",
                "send_transaction": "POST /api/blockchain/{network}/transaction",
                "transaction_status": "GET /api/blockchain/{network}/transaction/{tx_hash}",
                "estimate_gas": "POST /api/blockchain/{network}/estimate-gas",
                "wallet_info": "GET /api/blockchain/{network}/wallet/{address}",
                "create_wallet": "POST /api/blockchain/{network}/wallet/create",
                "latest_block": "GET /api/blockchain/{network}/block/latest",
                "validate_address": "GET /api/blockchain/{network}/validate/{address}",
                "network_health": "GET /api/blockchain/{network}/health",
            },
        }

    return app


# Application instance
app = create_app()
