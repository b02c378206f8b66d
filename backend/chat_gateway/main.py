"""
Chat Gateway main application.

Serves the chat WebSocket endpoint and, optionally, the browser client
from the same listener.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, WebSocket
from fastapi.staticfiles import StaticFiles

from shared.config.settings import Settings, settings
from shared.config.logging import setup_logging, chat_gateway_logger as logger
from chat_gateway.connection_manager import ConnectionManager
from chat_gateway.components.endpoints.handlers import ChatEndpoint


# =============================================================================
# Application factory
# =============================================================================


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Build the FastAPI application.

    Each application owns its ConnectionManager, reachable as
    app.state.manager.

    Args:
        app_settings: Settings to use (default: the cached global settings).
    """
    app_settings = app_settings or settings
    manager = ConnectionManager(app_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        setup_logging()
        for problem in app_settings.validate_production_settings():
            logger.error("Unsafe production configuration", problem=problem)

        logger.info(
            "Starting Chat Gateway",
            port=app_settings.chat_port,
            env=app_settings.environment,
            path=app_settings.ws_path,
            allowed_hosts=app_settings.allowed_host_list,
        )

        yield

        logger.info(
            "Shutting down Chat Gateway",
            open_connections=manager.total_connections,
        )

    app = FastAPI(
        title="Chat Gateway",
        description="WebSocket chat relay for the beej-chat-protocol",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.manager = manager

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/ws/health")
    def health_check():
        """Basic health check endpoint."""
        return {
            "status": "healthy",
            "service": "chat-gateway",
            "version": app.version,
            "environment": app_settings.environment,
            **manager.get_stats(),
        }

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket(app_settings.ws_path)
    async def chat_websocket(websocket: WebSocket):
        """WebSocket endpoint for chat clients."""
        endpoint = ChatEndpoint(websocket, manager, app_settings.ws_path)
        await endpoint.run()

    # =========================================================================
    # Browser client
    # =========================================================================

    # Mounted last so the routes above take precedence
    if app_settings.static_dir:
        static_path = Path(app_settings.static_dir)
        if static_path.is_dir():
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("Static directory not found", static_dir=app_settings.static_dir)

    return app


app = create_app()


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(
        "chat_gateway.main:app",
        host=settings.chat_host,
        port=settings.chat_port,
        reload=settings.debug,
    )


# =============================================================================
# Development entry point
# =============================================================================

if __name__ == "__main__":
    run()
