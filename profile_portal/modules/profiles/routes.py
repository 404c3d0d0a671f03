import logging
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from profile_portal.core.dependencies import require_user
from profile_portal.core.notices import flash, ERROR
from profile_portal.core.results import Loaded, LoadFailed
from profile_portal.core.templates import render
from profile_portal.modules.auth.context import AuthContext
from profile_portal.modules.profiles.form import FORM_FIELDS, input_values, profile_from_form, validate_profile
from profile_portal.modules.profiles.schemas import Profile
from profile_portal.modules.profiles.service import ProfileSaveError, ProfileService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profiles"])

SAVED_MESSAGE = "Profile updated successfully!"
SAVE_FAILED_MESSAGE = "Error updating profile. Please try again."
INVALID_LINKS_MESSAGE = "Image and social links must be http:// or https:// URLs."


def get_profile_service(auth: AuthContext = Depends(require_user)) -> ProfileService:
    # The session's own client, so row level security sees the signed-in user
    return ProfileService(auth.supabase)


def _profile_page(request: Request, auth: AuthContext, profile: Profile, status_code: int = 200):
    return render(
        request,
        "profile.html",
        {
            "user": auth.user,
            "is_admin": auth.is_admin,
            "fields": FORM_FIELDS,
            "values": input_values(profile),
        },
        status_code=status_code,
    )


@router.get("/")
@router.get("/profile")
async def profile_page(
    request: Request,
    auth: AuthContext = Depends(require_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Profile form, pre-filled with the stored row"""
    profile = Profile()
    outcome = await service.load_profile(auth.user.id)
    if isinstance(outcome, Loaded):
        profile = outcome.value
    elif isinstance(outcome, LoadFailed):
        logger.error(f"Error fetching profile: {outcome.reason}")
    else:
        logger.info(f"No profile row yet for user {auth.user.id}")
    return _profile_page(request, auth, profile)


@router.post("/profile")
async def update_profile(
    request: Request,
    auth: AuthContext = Depends(require_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Write the whole form back as the user's profile row"""
    form = await request.form()
    profile = profile_from_form(form)
    try:
        validate_profile(profile)
    except ValidationError as e:
        logger.info(f"Rejected profile of user {auth.user.id}: {e.error_count()} invalid fields")
        flash(request, INVALID_LINKS_MESSAGE, ERROR)
        return _profile_page(request, auth, profile, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)

    try:
        await service.save_profile(auth.user.id, profile)
    except ProfileSaveError as e:
        logger.error(f"Error updating profile: {e}")
        flash(request, SAVE_FAILED_MESSAGE, ERROR)
        return _profile_page(request, auth, profile)

    flash(request, SAVED_MESSAGE)
    return RedirectResponse("/profile", status_code=status.HTTP_303_SEE_OTHER)
