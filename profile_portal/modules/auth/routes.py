import logging
from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from profile_portal.config.settings import settings
from profile_portal.core.dependencies import (
    get_auth_context, get_auth_provider, get_optional_auth_context, get_session_key, LOGIN_PATH
)
from profile_portal.core.notices import flash, ERROR
from profile_portal.core.rate_limit import limiter
from profile_portal.core.templates import render
from profile_portal.modules.auth.context import AuthContext
from profile_portal.modules.auth.provider import AuthProvider
from profile_portal.modules.auth.schemas import LoginRequest
from typing import Optional

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _login_page(request: Request, auth: Optional[AuthContext], email: str = "", error: str = None,
                status_code: int = 200):
    return render(
        request,
        "login.html",
        {"user": auth.user if auth else None, "email": email, "error": error},
        status_code=status_code,
    )


@router.get(LOGIN_PATH)
async def login_form(
    request: Request,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context)
):
    """Sign-in page"""
    if auth is not None:
        await auth.settled()
    return _login_page(request, auth)


@router.post(LOGIN_PATH)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    provider: AuthProvider = Depends(get_auth_provider)
):
    """Sign in with email and password"""
    try:
        credentials = LoginRequest(email=email, password=password)
    except ValidationError:
        return _login_page(
            request, await get_optional_auth_context(request, provider), email=email,
            error="Enter a valid email address and password.",
            status_code=422,
        )

    auth = await get_auth_context(request, provider)
    try:
        user = await auth.sign_in(credentials.email, credentials.password)
    except Exception as e:
        logger.warning(f"Sign-in failed for {credentials.email}: {e}")
        error_message = str(e)
        if "invalid" in error_message.lower() or "credentials" in error_message.lower():
            error_message = "Invalid email or password"
        else:
            error_message = f"Sign-in failed: {error_message}"
        return _login_page(
            request, auth, email=email, error=error_message,
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    logger.info(f"User {user.id if user else '-'} signed in")
    return RedirectResponse("/profile", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/logout")
async def logout(
    request: Request,
    auth: Optional[AuthContext] = Depends(get_optional_auth_context),
    provider: AuthProvider = Depends(get_auth_provider)
):
    """Sign out and drop this browser's auth context"""
    if auth is None:
        request.session.clear()
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)

    try:
        await auth.sign_out()
    except Exception as e:
        logger.error(f"Error signing out: {e}")
        flash(request, f"Sign-out failed: {e}", ERROR)
        return RedirectResponse("/profile", status_code=status.HTTP_303_SEE_OTHER)

    await provider.discard(get_session_key(request))
    request.session.clear()
    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
