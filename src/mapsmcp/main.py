import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .dispatcher import JSONRPC_VERSION, RequestDispatcher
from .errors import Failure, FailureKind
from .services.maps_client import get_maps_client
from .services.session_store import RedisSessionStore, get_session_store_async
from .settings import get_settings

SESSION_HEADER = "mcp-session-id"

BANNER = """
==============================================
GOOGLE MAPS MCP SERVER

Available tools:
1. geocode
   - Convert addresses to coordinates
   - Parameters: address (string)

2. places-search
   - Search for places using Google Places API
   - Parameters:
     - query (string)
     - location (optional): { lat: number, lng: number }
     - radius (optional): number (meters)
==============================================
"""


def setup_server_logging() -> logging.Logger:
    """Configure and return the server logger."""
    settings = get_settings()
    logs_dir = Path(settings.log_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("mapsmcp")
    if logger.handlers:
        return logger

    logger.setLevel(settings.log_level)
    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    logger.addHandler(ch)

    fh = RotatingFileHandler(logs_dir / "server.log", maxBytes=5_000_000, backupCount=3)
    fh.setFormatter(fmt)
    logger.addHandler(fh)

    return logger


def _cors_origins_list(origins: str) -> list[str]:
    """Parse CORS_ORIGINS into a list."""
    if not origins or origins.strip() == "*":
        return ["*"]
    return [o.strip() for o in origins.split(",") if o.strip()]


LOGGER = setup_server_logging()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the dispatcher unless one was injected; close its resources on shutdown."""
    owned = app.state.dispatcher is None
    if owned:
        sessions = await get_session_store_async()
        app.state.dispatcher = RequestDispatcher(sessions=sessions, maps=get_maps_client())
        LOGGER.info("Session store: %s", type(sessions).__name__)

    LOGGER.info("Google Maps MCP server listening on port %s", settings.port)
    LOGGER.info(BANNER)

    yield

    LOGGER.info("Shutting down server...")
    if owned:
        dispatcher: RequestDispatcher = app.state.dispatcher
        await dispatcher.maps.close()
        if isinstance(dispatcher.sessions, RedisSessionStore):
            await dispatcher.sessions.close()


def create_app(dispatcher: RequestDispatcher | None = None) -> FastAPI:
    """Create the FastAPI application, optionally around a prebuilt dispatcher."""
    app = FastAPI(
        title="Google Maps MCP",
        version="1.0.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.dispatcher = dispatcher

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_origins_list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_HEADER],
    )

    @app.get("/health")
    async def health() -> dict[str, Any]:
        """Health check for load balancers and monitoring."""
        return {"status": "ok"}

    @app.post("/mcp")
    async def mcp_endpoint(request: Request) -> JSONResponse:
        """JSON-RPC style endpoint: { method, params, id } in, envelope out.

        The session token travels in the ``mcp-session-id`` header; the
        resolved token is echoed back in the same header.
        """
        try:
            body = await request.json()
        except (ValueError, RecursionError) as e:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            LOGGER.error("Invalid MCP payload (not JSON): %s", e)
            body = None

        outcome = await request.app.state.dispatcher.dispatch(
            body, request.headers.get(SESSION_HEADER)
        )
        headers = {SESSION_HEADER: outcome.session_id} if outcome.session_id else None
        try:
            return JSONResponse(status_code=outcome.status_code, content=outcome.envelope, headers=headers)
        except (ValueError, TypeError, RecursionError) as e:
            LOGGER.exception("MCP response could not be serialized: %s", e)
            envelope = {
                "jsonrpc": JSONRPC_VERSION,
                "error": Failure(FailureKind.INTERNAL, "Response could not be serialized").to_error(),
                "id": None,
            }
            return JSONResponse(status_code=500, content=envelope, headers=headers)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn. Ctrl+C exits without draining."""
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=settings.shutdown_grace_seconds,
    )


if __name__ == "__main__":
    run()
