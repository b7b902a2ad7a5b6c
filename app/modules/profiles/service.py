from supabase import Client
from app.config.roles_config import DEFAULT_ROLE_ID
from app.modules.profiles.schemas import ProfileSetupRequest, ProfileUpdate, ProfileResponse, ProfilePrefill
from typing import Optional, Dict, Any
from fastapi import HTTPException
from datetime import datetime, timezone
import json
import logging

logger = logging.getLogger(__name__)

PROFILE_WITH_COURSE = "*, course:courses(course_name)"


def split_full_name(user_metadata: Optional[Dict[str, Any]]) -> ProfilePrefill:
    """First/last name guess from OAuth metadata: first word, then the rest"""
    metadata = user_metadata or {}
    full_name = metadata.get("full_name") or metadata.get("name")
    if not full_name:
        return ProfilePrefill(
            first_name=metadata.get("first_name") or "",
            last_name=metadata.get("last_name") or "",
        )
    parts = full_name.split(" ")
    return ProfilePrefill(first_name=parts[0], last_name=" ".join(parts[1:]))


class ProfileService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_profile(self, user_id: str) -> Optional[ProfileResponse]:
        """Get profile with course name; None when missing or on error"""
        try:
            result = self.supabase.table("user_profiles")\
                .select(PROFILE_WITH_COURSE)\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return ProfileResponse(**result.data)
        except Exception as e:
            logger.error(f"Error fetching profile: {e}")
            return None

    def create_profile(self, user_id: str, profile_data: ProfileSetupRequest, avatar: Optional[str] = None) -> ProfileResponse:
        """Insert the user's one profile row"""
        try:
            insert_data = {
                "id": user_id,
                "first_name": profile_data.first_name,
                "last_name": profile_data.last_name,
                "student_id": profile_data.student_id,
                "course_id": profile_data.course_id,
                "year_level": int(profile_data.year_level),
                "role_id": DEFAULT_ROLE_ID,
                "created_at": datetime.now(timezone.utc).isoformat(),
            }
            if avatar:
                insert_data["avatar"] = avatar

            result = self.supabase.table("user_profiles").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to create profile")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error creating profile: {e}")
            raise HTTPException(status_code=400, detail=str(e) or "Failed to create profile")

    def update_profile(self, user_id: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update editable profile fields"""
        try:
            update_data = {"updated_at": datetime.now(timezone.utc).isoformat()}
            if profile_data.first_name is not None:
                update_data["first_name"] = profile_data.first_name
            if profile_data.middle_name is not None:
                update_data["middle_name"] = profile_data.middle_name or None
            if profile_data.last_name is not None:
                update_data["last_name"] = profile_data.last_name
            if profile_data.year_level is not None:
                update_data["year_level"] = profile_data.year_level

            result = self.supabase.table("user_profiles")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")

            return ProfileResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating profile: {e}")
            raise HTTPException(status_code=400, detail=str(e) or "Failed to update profile")

    def update_avatar(self, user_id: str, avatar_url: str) -> str:
        try:
            result = self.supabase.table("user_profiles")\
                .update({"avatar": avatar_url})\
                .eq("id", user_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Profile not found")
            return avatar_url
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error updating avatar: {e}")
            raise HTTPException(status_code=400, detail=str(e) or "Failed to update avatar")

    @staticmethod
    def build_qr_fields(profile: ProfileResponse, user_data: Dict[str, Any]) -> Dict[str, Any]:
        """Fields a scanner reads from the student's QR code"""
        metadata = user_data.get("user_metadata") or {}
        return {
            "id": profile.id,
            "student_id": profile.student_id,
            "first_name": profile.first_name,
            "last_name": profile.last_name,
            "course_id": profile.course_id,
            "year_level": profile.year_level,
            "avatar_url": profile.avatar or metadata.get("avatar_url"),
        }

    @classmethod
    def build_qr_data(cls, profile: ProfileResponse, user_data: Dict[str, Any]) -> str:
        return json.dumps(cls.build_qr_fields(profile, user_data))
