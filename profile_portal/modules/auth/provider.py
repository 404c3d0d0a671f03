import asyncio
import logging
import time
from collections import OrderedDict
from supabase import AsyncClient
from profile_portal.modules.auth.context import AuthContext
from profile_portal.modules.auth.state import AuthSnapshot
from typing import Awaitable, Callable, Dict

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Awaitable[AsyncClient]]

DEFAULT_IDLE_TIMEOUT_SEC = 1800
DEFAULT_MAX_CONTEXTS = 1000


class AuthProvider:
    """Application-scoped registry of auth contexts, one per browser session.

    Contexts idle for longer than idle_timeout are released, and the least
    recently used one is released when max_contexts would be exceeded.
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        idle_timeout: float = DEFAULT_IDLE_TIMEOUT_SEC,
        max_contexts: int = DEFAULT_MAX_CONTEXTS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._client_factory = client_factory
        self._idle_timeout = idle_timeout
        self._max_contexts = max(1, max_contexts)
        self._clock = clock
        # Ordered oldest-seen first
        self._contexts: "OrderedDict[str, AuthContext]" = OrderedDict()
        self._last_seen: Dict[str, float] = {}
        self._unsubscribers: Dict[str, Callable[[], None]] = {}
        self._starting: Dict[str, asyncio.Task] = {}

    def __len__(self) -> int:
        return len(self._contexts)

    def __contains__(self, session_key: str) -> bool:
        return session_key in self._contexts

    async def get_context(self, session_key: str) -> AuthContext:
        """Return the context of a browser session, starting it on first use"""
        self._evict_idle()
        context = self._contexts.get(session_key)
        if context is not None:
            self._touch(session_key)
            return context

        # Concurrent first requests of one browser share a single start
        task = self._starting.get(session_key)
        if task is None:
            task = asyncio.ensure_future(self._start(session_key))
            self._starting[session_key] = task
            task.add_done_callback(lambda done: self._forget_start(session_key, done))
        return await asyncio.shield(task)

    async def discard(self, session_key: str) -> None:
        self._release(session_key)

    async def close(self) -> None:
        """Tear down every context; called on application shutdown"""
        for task in list(self._starting.values()):
            task.cancel()
        for session_key in list(self._contexts):
            self._release(session_key)
        logger.info("Auth provider closed")

    async def _start(self, session_key: str) -> AuthContext:
        client = await self._client_factory()
        context = AuthContext(client)
        unsubscribe = context.state.subscribe(self._log_transition(session_key))
        try:
            await context.start()
        except BaseException:
            unsubscribe()
            context.close()
            raise

        while len(self._contexts) >= self._max_contexts:
            oldest = next(iter(self._contexts))
            logger.info(f"Auth context limit reached, releasing session {oldest[:8]}")
            self._release(oldest)

        self._contexts[session_key] = context
        self._unsubscribers[session_key] = unsubscribe
        self._touch(session_key)
        logger.info(f"Started auth context ({len(self._contexts)} active)")
        return context

    def _forget_start(self, session_key: str, task: asyncio.Task) -> None:
        if self._starting.get(session_key) is task:
            del self._starting[session_key]

    def _touch(self, session_key: str) -> None:
        self._last_seen[session_key] = self._clock()
        self._contexts.move_to_end(session_key)

    def _evict_idle(self) -> None:
        cutoff = self._clock() - self._idle_timeout
        for session_key in list(self._contexts):
            if self._last_seen[session_key] > cutoff:
                break
            logger.info(f"Releasing idle auth context of session {session_key[:8]}")
            self._release(session_key)

    def _release(self, session_key: str) -> None:
        context = self._contexts.pop(session_key, None)
        self._last_seen.pop(session_key, None)
        unsubscribe = self._unsubscribers.pop(session_key, None)
        if unsubscribe is not None:
            unsubscribe()
        if context is not None:
            context.close()

    @staticmethod
    def _log_transition(session_key: str) -> Callable[[AuthSnapshot], None]:
        tag = session_key[:8]

        def listener(snapshot: AuthSnapshot) -> None:
            if snapshot.role_pending:
                return
            logger.info(
                f"Session {tag}: user={snapshot.user_id or '-'} admin={snapshot.is_admin}"
            )

        return listener
