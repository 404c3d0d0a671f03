from supabase import AsyncClient
from profile_portal.core.results import Loaded, LoadFailed, LoadResult, Missing
from postgrest.exceptions import APIError
from typing import Optional
import logging

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"

# PostgREST error code for .single() matching zero (or several) rows
NO_ROWS_CODE = "PGRST116"


class RoleService:
    def __init__(self, supabase: AsyncClient):
        self.supabase = supabase

    async def get_role(self, user_id: str) -> LoadResult[str]:
        """Fetch the role string of a user from user_roles"""
        try:
            result = await self.supabase.table("user_roles")\
                .select("role")\
                .eq("user_id", user_id)\
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
        return Loaded(result.data.get("role"))

    async def is_admin(self, user_id: Optional[str]) -> bool:
        """True only when the user's role record says admin. Fails closed."""
        if not user_id:
            return False
        outcome = await self.get_role(user_id)
        if isinstance(outcome, Loaded):
            return outcome.value == ADMIN_ROLE
        if isinstance(outcome, LoadFailed):
            logger.error(f"Error fetching user role for {user_id}: {outcome.reason}")
        else:
            logger.info(f"No role record for user {user_id}")
        return False
