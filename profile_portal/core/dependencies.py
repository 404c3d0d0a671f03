"""
Core dependencies for auth context lookup and route protection
"""

import secrets
import logging
from fastapi import Depends, Request
from profile_portal.modules.auth.context import AuthContext
from profile_portal.modules.auth.provider import AuthProvider
from typing import Optional

logger = logging.getLogger(__name__)

SESSION_KEY = "sid"
LOGIN_PATH = "/login"


class LoginRequired(Exception):
    """Raised by the route guard; translated into a redirect to the login page"""

    def __init__(self, reason: str = "authentication required"):
        super().__init__(reason)
        self.reason = reason


def get_auth_provider(request: Request) -> AuthProvider:
    provider = getattr(request.app.state, "auth_provider", None)
    if provider is None:
        raise RuntimeError("Auth context requested outside of an AuthProvider")
    return provider


def get_session_key(request: Request) -> str:
    """Return the browser session key, minting one on first visit"""
    session_key = request.session.get(SESSION_KEY)
    if not session_key:
        session_key = secrets.token_urlsafe(32)
        request.session[SESSION_KEY] = session_key
    return session_key


async def get_auth_context(
    request: Request,
    provider: AuthProvider = Depends(get_auth_provider)
) -> AuthContext:
    """Context of this browser, created if needed. Only sign-in needs this."""
    return await provider.get_context(get_session_key(request))


async def get_optional_auth_context(
    request: Request,
    provider: AuthProvider = Depends(get_auth_provider)
) -> Optional[AuthContext]:
    """Context of this browser, or None for a browser that never signed in"""
    session_key = request.session.get(SESSION_KEY)
    if not session_key:
        return None
    return await provider.get_context(session_key)


def protected_route(admin_only: bool = False):
    """Factory function to create a route guard dependency"""
    async def guard(
        auth: Optional[AuthContext] = Depends(get_optional_auth_context)
    ) -> AuthContext:
        if auth is None:
            raise LoginRequired("no session")
        # No decision until the session and role lookups have resolved
        await auth.settled()
        if auth.user is None:
            raise LoginRequired("not signed in")
        if admin_only and not auth.is_admin:
            logger.info(f"Denied admin route to user {auth.user.id}")
            raise LoginRequired("admin role required")
        return auth
    return guard


require_user = protected_route()
require_admin = protected_route(admin_only=True)
