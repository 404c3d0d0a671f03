import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.sessions import SessionMiddleware

from profile_portal.config.settings import settings
from profile_portal.core.dependencies import LoginRequired, LOGIN_PATH
from profile_portal.core.rate_limit import limiter
from profile_portal.database.supabase_client import SupabaseClient
from profile_portal.modules.auth.provider import AuthProvider
from profile_portal.modules.auth import routes as auth_routes
from profile_portal.modules.profiles import routes as profiles_routes
from profile_portal.modules.admin import routes as admin_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    app.state.auth_provider = AuthProvider(
        SupabaseClient.create_session_client,
        idle_timeout=settings.auth_context_idle_timeout_sec,
        max_contexts=settings.max_auth_contexts,
    )
    try:
        yield
    finally:
        await app.state.auth_provider.close()
        app.state.auth_provider = None
        logger.info("Application shutdown")


app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    lifespan=lifespan,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    logger.debug(f"Redirecting {request.url.path} to login: {exc.reason}")
    return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"same-origin"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.session_secret_key,
    session_cookie=settings.session_cookie,
    https_only=settings.session_https_only,
    same_site="lax",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

# Route table: /login public, /profile and / signed-in, /admin admin-only
app.include_router(auth_routes.router)
app.include_router(profiles_routes.router)
app.include_router(admin_routes.router)


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check: the auth provider is installed once startup has run"""
    provider = getattr(app.state, "auth_provider", None)
    if provider is None:
        return JSONResponse(status_code=503, content={"status": "starting"})
    return {"status": "ready", "sessions": len(provider)}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("profile_portal.main:app", host="127.0.0.1", port=8000, reload=settings.debug)
