import logging
import math
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .errors import Failure, FailureKind
from .models import (
    CallToolRequest,
    InitializeRequest,
    RpcRequest,
    SessionState,
    TerminateRequest,
    ToolResult,
)
from .services.maps_client import GoogleMapsClient
from .services.session_store import SessionStore
from .tools import TOOL_DESCRIPTORS, TOOL_HANDLERS

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"
SERVER_NAME = "google-maps-mcp"
SERVER_VERSION = "1.0.0"


@dataclass(frozen=True)
class DispatchOutcome:
    """Envelope plus the HTTP status and session token that go with it."""

    status_code: int
    envelope: Dict[str, Any]
    session_id: Optional[str]


def _echoable_id(request_id: Any) -> Any:
    """NaN and Infinity parse from JSON but cannot be written back; echo them as null."""
    if isinstance(request_id, float) and not math.isfinite(request_id):
        return None
    return request_id


def parse_request(body: Any) -> RpcRequest | Failure:
    """Turn a decoded JSON body into one of the request variants."""
    if not isinstance(body, dict):
        return Failure(FailureKind.VALIDATION, "Invalid request: body must be a JSON object")

    request_id = body.get("id")
    method = body.get("method")

    if method == "initialize":
        return InitializeRequest(id=request_id)
    if method == "callTool":
        params = body.get("params")
        if not isinstance(params, dict):
            return Failure(FailureKind.VALIDATION, "Invalid callTool params: expected an object")
        return CallToolRequest(
            id=request_id,
            name=params.get("name"),
            parameters=params.get("parameters"),
        )
    if method == "terminate":
        return TerminateRequest(id=request_id)
    return Failure(FailureKind.UNKNOWN_METHOD, f"Unknown method: {method}")


class RequestDispatcher:
    """Resolves the session and routes one request to its handler.

    The session store is shared by all in-flight requests without locking,
    so a terminate may land while a callTool for the same session is still
    waiting on the provider. Neither request notices.
    """

    def __init__(self, sessions: SessionStore, maps: GoogleMapsClient) -> None:
        self._sessions = sessions
        self._maps = maps

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def maps(self) -> GoogleMapsClient:
        return self._maps

    async def resolve_session(self, session_header: Optional[str]) -> SessionState:
        """Reuse the session named by the header if known, else start a new one.

        An unknown header value is not adopted as the new session's id; the
        caller gets a server-generated UUID4 back. Servers that instead keep
        the caller's token would answer the same request with that token,
        so clients must read the id from the initialize result.
        """
        if session_header:
            state = await self._sessions.get(session_header)
            if state is not None:
                return state
        state = SessionState(session_id=str(uuid.uuid4()))
        await self._sessions.save(state)
        logger.debug("Created session %s", state.session_id)
        return state

    async def dispatch(self, body: Any, session_header: Optional[str] = None) -> DispatchOutcome:
        """Handle one decoded request body. Never raises."""
        request_id = _echoable_id(body.get("id") if isinstance(body, dict) else None)
        session: Optional[SessionState] = None
        try:
            session = await self.resolve_session(session_header)
            request = parse_request(body)
            if isinstance(request, Failure):
                outcome = request
            else:
                outcome = await self._route(request, session)
        except Exception as e:
            logger.exception("Unexpected error handling MCP request: %s", e)
            outcome = Failure(FailureKind.INTERNAL, str(e))

        session_id = session.session_id if session else None
        if isinstance(outcome, Failure):
            logger.error(
                "MCP request failed (%s) session=%s: %s",
                outcome.kind.value,
                session_id,
                outcome.message,
            )
            envelope = {"jsonrpc": JSONRPC_VERSION, "error": outcome.to_error(), "id": request_id}
            return DispatchOutcome(500, envelope, session_id)

        envelope = {"jsonrpc": JSONRPC_VERSION, "result": outcome, "id": request_id}
        return DispatchOutcome(200, envelope, session_id)

    async def _route(self, request: RpcRequest, session: SessionState) -> Any:
        if isinstance(request, InitializeRequest):
            return await self._initialize(session)
        if isinstance(request, CallToolRequest):
            result = await self._call_tool(request)
            return result if isinstance(result, Failure) else result.to_dict()
        await self._sessions.delete(session.session_id)
        logger.info("Terminated session %s", session.session_id)
        return None

    async def _initialize(self, session: SessionState) -> Dict[str, Any]:
        session.initialized = True
        await self._sessions.save(session)
        logger.info("Initialized session %s", session.session_id)
        return {
            "server": {"name": SERVER_NAME, "version": SERVER_VERSION},
            "session": {"id": session.session_id},
            "tools": [tool.to_dict() for tool in TOOL_DESCRIPTORS],
        }

    async def _call_tool(self, request: CallToolRequest) -> ToolResult | Failure:
        handler = TOOL_HANDLERS.get(request.name) if isinstance(request.name, str) else None
        if handler is None:
            return Failure(FailureKind.UNKNOWN_TOOL, f"Unknown tool: {request.name}")
        logger.info("Calling tool %s", request.name)
        return await handler(request.parameters, self._maps)
