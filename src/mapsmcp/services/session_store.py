import json
import logging
from typing import Any, Dict, Protocol

from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..models import SessionState
from ..settings import get_settings

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = "session:"


class SessionStore(Protocol):
    """Mapping from session token to SessionState.

    Callers get no locking: two requests for the same token may interleave
    around any await.
    """

    async def get(self, session_id: str) -> SessionState | None: ...

    async def save(self, state: SessionState) -> None: ...

    async def delete(self, session_id: str) -> None: ...


class InMemorySessionStore:
    """Process-local session store. Lives as long as the process."""

    def __init__(self) -> None:
        self._sessions: Dict[str, SessionState] = {}

    async def get(self, session_id: str) -> SessionState | None:
        return self._sessions.get(session_id)

    async def save(self, state: SessionState) -> None:
        self._sessions[state.session_id] = state

    async def delete(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions


def _session_to_dict(state: SessionState) -> Dict[str, Any]:
    return {"session_id": state.session_id, "initialized": state.initialized}


def _dict_to_session(data: Dict[str, Any]) -> SessionState:
    return SessionState(
        session_id=data.get("session_id", ""),
        initialized=bool(data.get("initialized", False)),
    )


class RedisSessionStore:
    """Session store backed by Redis, shared between worker processes.

    Redis errors propagate to the caller so a request fails instead of
    silently losing its session.
    """

    def __init__(self, url: str, ttl_seconds: int = 0) -> None:
        self._url = url
        self._ttl = ttl_seconds
        self._client: Redis | None = None

    def _key(self, session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def connect(self) -> None:
        """Establish connection to Redis. Idempotent."""
        if self._client is not None:
            return
        self._client = Redis.from_url(self._url, decode_responses=True)
        try:
            await self._client.ping()
            logger.info("Redis session store connected: %s", self._url.split("@")[-1])
        except (RedisConnectionError, RedisTimeoutError) as e:
            logger.warning("Redis ping failed: %s", e)
            await self._client.aclose()
            self._client = None
            raise

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            logger.debug("Redis session store closed")

    def _require_client(self) -> Redis:
        if self._client is None:
            raise RuntimeError("Redis session store is not connected")
        return self._client

    async def get(self, session_id: str) -> SessionState | None:
        raw = await self._require_client().get(self._key(session_id))
        if raw is None:
            return None
        try:
            return _dict_to_session(json.loads(raw))
        except (json.JSONDecodeError, TypeError, AttributeError) as e:
            logger.warning("Invalid session data for %s: %s", session_id, e)
            return None

    async def save(self, state: SessionState) -> None:
        client = self._require_client()
        payload = json.dumps(_session_to_dict(state))
        key = self._key(state.session_id)
        if self._ttl > 0:
            await client.setex(key, self._ttl, payload)
        else:
            await client.set(key, payload)

    async def delete(self, session_id: str) -> None:
        await self._require_client().delete(self._key(session_id))


async def get_session_store_async() -> SessionStore:
    """Return a Redis-backed store when REDIS_URL is set and reachable, else memory."""
    settings = get_settings()
    if not settings.redis_url or not settings.redis_url.strip():
        return InMemorySessionStore()
    store = RedisSessionStore(settings.redis_url.strip(), ttl_seconds=settings.session_ttl_seconds)
    try:
        await store.connect()
    except (RedisConnectionError, RedisTimeoutError, ConnectionError, TimeoutError) as e:
        logger.warning("Redis session store unavailable, using memory: %s", e)
        return InMemorySessionStore()
    return store
