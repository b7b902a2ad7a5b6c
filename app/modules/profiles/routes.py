from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from app.config.roles_config import YEAR_LEVELS
from app.core.dependencies import get_current_user_id, get_user_supabase
from app.modules.courses.routes import get_course_service
from app.modules.courses.service import CourseService
from app.modules.media.service import CloudinaryService, MediaUploadError, extract_google_avatar, get_media_service
from app.modules.profiles.schemas import (
    ProfileSetupRequest, ProfileUpdate, ProfileResponse, SetupProfilePageResponse,
    SetupProfileResponse, AvatarResponse, MyQrResponse
)
from app.modules.profiles.service import ProfileService, split_full_name
from supabase import Client
from typing import Dict
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["profiles"])


def get_profile_service(supabase: Client = Depends(get_user_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.get("/setup-profile", response_model=SetupProfilePageResponse)
async def setup_profile_page(
    user_data: Dict = Depends(get_current_user_id),
    course_service: CourseService = Depends(get_course_service)
):
    """Course list and name prefill for the profile setup form"""
    prefill = split_full_name(user_data["user_metadata"])
    prefill.avatar_url = extract_google_avatar(user_data["user_metadata"])
    return SetupProfilePageResponse(
        courses=course_service.list_courses(),
        year_levels=list(YEAR_LEVELS),
        prefill=prefill,
    )


@router.post("/setup-profile", response_model=SetupProfileResponse, status_code=201)
async def setup_profile(
    profile_data: ProfileSetupRequest,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    media: CloudinaryService = Depends(get_media_service)
):
    """Create the signed-in user's profile"""
    avatar = extract_google_avatar(user_data["user_metadata"])
    if avatar and media.is_configured:
        try:
            avatar = media.upload_image_from_url(avatar)
        except MediaUploadError as e:
            logger.warning(f"Keeping OAuth avatar URL, Cloudinary mirror failed: {e}")
    profile = service.create_profile(user_data["id"], profile_data, avatar=avatar)
    return SetupProfileResponse(profile=profile)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Get the signed-in user's profile"""
    profile = service.get_profile(user_data["id"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.put("/profile", response_model=ProfileResponse)
async def update_profile(
    profile_data: ProfileUpdate,
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Update names and year level"""
    service.update_profile(user_data["id"], profile_data)
    return service.get_profile(user_data["id"])


@router.post("/profile/avatar", response_model=AvatarResponse)
async def upload_avatar(
    file: UploadFile = File(...),
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service),
    media: CloudinaryService = Depends(get_media_service)
):
    """Upload a new avatar to Cloudinary and store its URL"""
    content = await file.read()
    try:
        avatar_url = media.upload_image(
            content,
            filename=file.filename or "avatar.jpg",
            content_type=file.content_type or "image/jpeg",
        )
    except MediaUploadError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return AvatarResponse(avatar=service.update_avatar(user_data["id"], avatar_url))


@router.get("/my-qr", response_model=MyQrResponse)
async def my_qr(
    user_data: Dict = Depends(get_current_user_id),
    service: ProfileService = Depends(get_profile_service)
):
    """Profile plus the payload encoded in the student's attendance QR code"""
    profile = service.get_profile(user_data["id"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Unable to load your profile information")
    return MyQrResponse(
        profile=profile,
        qr_data=service.build_qr_data(profile, user_data),
        qr_fields=service.build_qr_fields(profile, user_data),
    )
