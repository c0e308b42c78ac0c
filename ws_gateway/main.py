"""
WebSocket Gateway main application.

One endpoint serves both tenant dashboards (token in the query string)
and guest devices (no token). Rooms are joined with client frames after
the socket is open.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from shared.config.logging import setup_logging, ws_gateway_logger as logger
from shared.config.settings import settings
from ws_gateway.components.data.tenant_lookup import TenantLookup
from ws_gateway.components.endpoints.gateway import GatewayEndpoint
from ws_gateway.connection_manager import ConnectionManager

# Origins allowed when ALLOWED_ORIGINS is not set (local development)
DEFAULT_ALLOWED_ORIGINS: tuple[str, ...] = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)


def create_app(manager: ConnectionManager | None = None) -> FastAPI:
    """
    Build the gateway application around a connection manager.

    Tests pass their own manager (with an in-memory tenant lookup); the
    module-level app uses one backed by the configured database.
    """
    if manager is None:
        manager = ConnectionManager(tenant_exists=TenantLookup())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging()
        for issue in settings.validate_production_secrets():
            logger.warning("Configuration issue", issue=issue)
        logger.info(
            "Starting WebSocket Gateway",
            port=settings.ws_gateway_port,
            env=settings.environment,
        )

        yield

        logger.info("Shutting down WebSocket Gateway")
        closed = manager.shutdown()
        logger.info("WebSocket Gateway stopped", closed_connections=closed)

    app = FastAPI(
        title="QR Ordering WebSocket Gateway",
        description="Real-time order and table events for dashboards and guests",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.manager = manager

    allowed_origins = (
        [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
        if settings.allowed_origins
        else list(DEFAULT_ALLOWED_ORIGINS)
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
    )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health")
    def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "ws-gateway",
            "version": app.version,
            "environment": settings.environment,
            **manager.get_stats(),
        }

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/ws")
    async def gateway_websocket(
        websocket: WebSocket,
        token: str | None = Query(default=None, description="Dashboard JWT; omit for guests"),
    ):
        endpoint = GatewayEndpoint(websocket, manager, token)
        await endpoint.run()

    return app


app = create_app()


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ws_gateway.main:app",
        host="0.0.0.0",
        port=settings.ws_gateway_port,
        reload=True,
    )
