from supabase import AsyncClient
from postgrest.exceptions import APIError
from pydantic import ValidationError
from profile_portal.core.results import Loaded, LoadFailed, LoadResult, Missing
from profile_portal.modules.profiles.schemas import Profile
from profile_portal.modules.roles.service import NO_ROWS_CODE
from typing import Any, Dict, List
import logging

logger = logging.getLogger(__name__)


class ProfileSaveError(Exception):
    """The profile upsert was rejected or did not reach the backend"""


class ProfileService:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def load_profile(self, user_id: str) -> LoadResult[Profile]:
        """Fetch the profile row owned by user_id"""
        try:
            result = await self.supabase.table("profiles")\
                .select("*")\
                .eq("id", user_id)\
                .single()\
                .execute()
        except APIError as e:
            if e.code == NO_ROWS_CODE:
                return Missing()
            return LoadFailed(reason=e.message or str(e), error=e)
        except Exception as e:
            return LoadFailed(reason=str(e), error=e)

        if not result.data:
            return Missing()
        try:
            return Loaded(Profile.model_validate(result.data))
        except Exception as e:
            return LoadFailed(reason=f"Malformed profile row: {e}", error=e)

    @staticmethod
    def build_payload(user_id: str, profile: Profile) -> Dict[str, Any]:
        """Full row written on save; the upsert key is the owning user id"""
        return {"id": user_id, **profile.model_dump()}

    async def save_profile(self, user_id: str, profile: Profile) -> Dict[str, Any]:
        """Insert or replace the whole profile row of user_id"""
        payload = self.build_payload(user_id, profile)
        try:
            result = await self.supabase.table("profiles")\
                .upsert(payload)\
                .execute()
        except Exception as e:
            raise ProfileSaveError(str(e)) from e
        return result.data[0] if result.data else payload

    async def list_profiles(self, limit: int = 50) -> LoadResult[List[Dict[str, Any]]]:
        """Profile rows visible to the current session, for the admin view"""
        try:
            result = await self.supabase.table("profiles")\
                .select("*")\
                .limit(limit)\
                .execute()
        except Exception as e:
            return LoadFailed(reason=str(e), error=e)
        rows = []
        for row in result.data or []:
            try:
                profile = Profile.model_validate(row)
            except ValidationError as e:
                logger.warning(f"Skipping malformed profile row {row.get('id')}: {e.error_count()} errors")
                continue
            rows.append({"id": row.get("id"), **profile.model_dump()})
        return Loaded(rows)
