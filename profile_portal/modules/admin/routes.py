import logging
from fastapi import APIRouter, Depends, Request
from profile_portal.config.settings import settings
from profile_portal.core.dependencies import require_admin
from profile_portal.core.results import Loaded
from profile_portal.core.templates import render
from profile_portal.modules.auth.context import AuthContext
from profile_portal.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"])


@router.get("/admin")
async def admin_panel(request: Request, auth: AuthContext = Depends(require_admin)):
    """Admin view: stored profiles"""
    service = ProfileService(auth.supabase)
    outcome = await service.list_profiles(limit=settings.admin_page_size)
    profiles = []
    if isinstance(outcome, Loaded):
        profiles = outcome.value
    else:
        logger.error(f"Error listing profiles: {outcome.reason}")
    return render(
        request,
        "admin.html",
        {"user": auth.user, "is_admin": True, "profiles": profiles},
    )
