"""
Per-browser-session auth context.

Wraps the auth surface of one Supabase client: tracks the signed-in user,
derives the admin flag from user_roles and owns the auth-state subscription.
"""

import asyncio
import logging
from supabase import AsyncClient
from profile_portal.modules.auth.state import AuthSnapshot, AuthState
from profile_portal.modules.roles.service import RoleService
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuthContext:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase
        self.state = AuthState()
        self.roles = RoleService(supabase)
        self._generation = 0
        self._role_task: Optional[asyncio.Task] = None
        self._subscription = None
        self._closed = False

    @property
    def user(self) -> Optional[Any]:
        return self.state.value.user

    @property
    def is_admin(self) -> bool:
        return self.state.value.is_admin

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Subscribe to auth changes and load the current session"""
        self._subscription = self.supabase.auth.on_auth_state_change(self._on_auth_state_change)
        try:
            session = await self.supabase.auth.get_session()
        except Exception as e:
            logger.error(f"Error reading current session: {e}")
            session = None
        self._set_user(session.user if session else None)
        await self.settled()

    async def settled(self) -> None:
        """Wait until the admin flag reflects the current user"""
        while self._role_task is not None and not self._role_task.done():
            await asyncio.wait({self._role_task})

    async def sign_in(self, email: str, password: str) -> Any:
        response = await self.supabase.auth.sign_in_with_password({
            "email": email,
            "password": password
        })
        # SIGNED_IN may not have been delivered yet when the call returns
        if response is not None and getattr(response, "user", None) is not None:
            if getattr(self.user, "id", None) != response.user.id:
                self._set_user(response.user)
        await self.settled()
        return self.user

    async def sign_out(self) -> None:
        await self.supabase.auth.sign_out()
        if self.user is not None:
            self._set_user(None)

    def close(self) -> None:
        """Release the auth-state subscription. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        self._generation += 1
        if self._role_task is not None and not self._role_task.done():
            self._role_task.cancel()
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def _on_auth_state_change(self, event: Any, session: Any) -> None:
        if self._closed:
            return
        logger.info(f"Auth state change: {event}")
        self._set_user(session.user if session else None)

    def _set_user(self, user: Optional[Any]) -> None:
        self._generation += 1
        generation = self._generation
        previous = self.state.value
        user_id = getattr(user, "id", None)

        if user_id is None:
            self.state.set(AuthSnapshot())
            return

        # Same identity keeps its flag while the lookup refreshes it
        is_admin = previous.is_admin if previous.user_id == user_id else False
        self.state.set(AuthSnapshot(user=user, is_admin=is_admin, role_pending=True))
        self._role_task = asyncio.get_running_loop().create_task(
            self._refresh_role(user_id, generation)
        )

    async def _refresh_role(self, user_id: str, generation: int) -> None:
        is_admin = await self.roles.is_admin(user_id)
        if generation != self._generation:
            logger.debug(f"Discarding stale role lookup for user {user_id}")
            return
        self.state.set(AuthSnapshot(user=self.user, is_admin=is_admin, role_pending=False))
