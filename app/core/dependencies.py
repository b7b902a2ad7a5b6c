"""
Core dependencies for route protection and role checking
"""

from fastapi import Depends, HTTPException, Request, status
from app.database.supabase_client import get_session_supabase
from app.core.exceptions import LoginRequired
from app.modules.auth.context import AuthContext
from app.modules.auth.service import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, tokens_rotated
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


def get_auth_context(
    request: Request,
    supabase: Client = Depends(get_session_supabase)
):
    """Build the request's auth context from the session cookies; closed after the response."""
    access_token = request.cookies.get(ACCESS_TOKEN_COOKIE)
    refresh_token = request.cookies.get(REFRESH_TOKEN_COOKIE)
    context = AuthContext(supabase, path=request.url.path)
    context.start(access_token=access_token, refresh_token=refresh_token)
    if tokens_rotated(context.session, access_token, refresh_token):
        # written back to the cookies by SessionCookieMiddleware
        request.state.rotated_session = context.session
    try:
        yield context
    finally:
        context.close()


def get_user_supabase(context: AuthContext = Depends(get_auth_context)) -> Client:
    """Client carrying the signed-in user's session; row level security applies."""
    return context.supabase


def get_current_user_id(context: AuthContext = Depends(get_auth_context)) -> dict:
    """Current user info; anonymous requests are sent to the login page"""
    if not context.is_authenticated:
        raise LoginRequired()
    return context.user_data


def get_user_role_id(user_id: str, supabase: Client) -> Optional[int]:
    try:
        result = supabase.table("user_profiles")\
            .select("role_id")\
            .eq("id", user_id)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data.get("role_id")
    except Exception as e:
        logger.error(f"Error getting user role: {e}")
        return None


def require_role(*role_ids: int):
    """Factory function to create role check dependency"""
    def check_role(
        user_data: Dict = Depends(get_current_user_id),
        supabase: Client = Depends(get_user_supabase)
    ) -> dict:
        role_id = get_user_role_id(user_data["id"], supabase)
        if role_id not in role_ids:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role for this action"
            )
        return user_data
    return check_role
