from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.responses import JSONResponse, RedirectResponse
from app.config.roles_config import get_role_name
from app.config.settings import settings
from app.core.dependencies import get_auth_context, get_current_user_id
from app.core.rate_limit import limiter
from app.database.supabase_client import get_session_supabase
from app.modules.auth.context import AuthContext
from app.modules.auth.schemas import (
    LoginRequest, LoginResponse, RegisterRequest, RegisterResponse,
    ForgotPasswordRequest, AuthPageResponse
)
from app.modules.auth.service import (
    AuthService, DEFAULT_NEXT_PATH, auth_error_url, clear_session_cookies,
    code_verifier_cookie_name, safe_next_path, set_session_cookies
)
from app.modules.profiles.service import ProfileService
from supabase import Client
from typing import Dict, Optional
from urllib.parse import urlencode
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

CODE_VERIFIER_MAX_AGE = 600


def get_auth_service(supabase: Client = Depends(get_session_supabase)) -> AuthService:
    return AuthService(supabase)


def _origin(request: Request) -> str:
    return str(request.base_url).rstrip("/")


def _google_sign_in_url(next_path: Optional[str]) -> str:
    url = "/auth/google"
    next_path = safe_next_path(next_path)
    if next_path:
        url += "?" + urlencode({"next": next_path})
    return url


@router.get("/login", response_model=AuthPageResponse)
async def login_page(
    next_path: Optional[str] = Query(None, alias="next"),
    context: AuthContext = Depends(get_auth_context)
):
    """Login form state"""
    return AuthPageResponse(
        page="login",
        authenticated=context.is_authenticated,
        next=safe_next_path(next_path),
        google_sign_in_url=_google_sign_in_url(next_path),
    )


@router.get("/register", response_model=AuthPageResponse)
async def register_page(context: AuthContext = Depends(get_auth_context)):
    """Registration form state"""
    return AuthPageResponse(
        page="register",
        authenticated=context.is_authenticated,
        google_sign_in_url=_google_sign_in_url("/setup-profile"),
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.auth_rate_limit)
async def login(
    request: Request,
    response: Response,
    login_data: LoginRequest,
    context: AuthContext = Depends(get_auth_context)
):
    """Sign in with email and password; sets the session cookies"""
    result = context.sign_in(login_data.email, login_data.password)
    if not result.ok or context.session is None:
        raise HTTPException(status_code=401, detail=result.error or "Invalid email or password")

    set_session_cookies(response, context.session)
    has_profile = context.validate_user_profile(context.user.id)
    return LoginResponse(
        user_id=context.user.id,
        email=context.user.email or login_data.email,
        redirect_to="/dashboard" if has_profile else "/setup-profile",
    )


@router.post("/register", response_model=RegisterResponse, status_code=201)
@limiter.limit(settings.auth_rate_limit)
async def register(
    request: Request,
    response: Response,
    register_data: RegisterRequest,
    context: AuthContext = Depends(get_auth_context)
):
    """Register a new user"""
    user_metadata = {}
    if register_data.first_name:
        user_metadata["first_name"] = register_data.first_name
    if register_data.last_name:
        user_metadata["last_name"] = register_data.last_name
    full_name = " ".join(n for n in (register_data.first_name, register_data.last_name) if n)
    if full_name:
        user_metadata["full_name"] = full_name

    result = context.sign_up(register_data.email, register_data.password, user_metadata)
    if not result.ok:
        error_message = result.error or ""
        if "already registered" in error_message.lower() or "already exists" in error_message.lower():
            raise HTTPException(status_code=400, detail="User already exists")
        raise HTTPException(status_code=400, detail=error_message or "Registration failed")

    auth_response = result.data
    if not auth_response or not auth_response.user:
        raise HTTPException(status_code=400, detail="Failed to register user")

    if auth_response.session:
        set_session_cookies(response, auth_response.session)

    return RegisterResponse(
        user_id=auth_response.user.id,
        email=auth_response.user.email or register_data.email,
        message="User registered successfully",
        requires_confirmation=auth_response.session is None,
    )


@router.get("/auth/google")
async def google_sign_in(
    request: Request,
    next_path: Optional[str] = Query(None, alias="next"),
    context: AuthContext = Depends(get_auth_context)
):
    """Redirect the browser to Google; the provider sends it back to /auth/callback"""
    origin = _origin(request)
    result = context.sign_in_with_google(origin, safe_next_path(next_path))
    if not result.ok or not result.data:
        return RedirectResponse(auth_error_url(origin, result.error or "oauth_unavailable"), status_code=302)

    response = RedirectResponse(result.data, status_code=302)
    code_verifier = context.get_code_verifier()
    if code_verifier:
        response.set_cookie(
            key=code_verifier_cookie_name(),
            value=code_verifier,
            max_age=CODE_VERIFIER_MAX_AGE,
            path="/",
            samesite="lax",
            httponly=True,
            secure=not settings.is_local_env,
        )
    return response


@router.get("/auth/callback")
async def auth_callback(
    request: Request,
    code: Optional[str] = None,
    next_path: str = Query(DEFAULT_NEXT_PATH, alias="next"),
    service: AuthService = Depends(get_auth_service)
):
    """Complete the OAuth code exchange and set the session cookies"""
    return service.handle_callback(
        origin=_origin(request),
        code=code,
        next_path=next_path,
        forwarded_host=request.headers.get("x-forwarded-host"),
        code_verifier=request.cookies.get(code_verifier_cookie_name()),
    )


@router.get("/auth/auth-code-error")
async def auth_code_error(error: Optional[str] = None):
    """Authentication error page"""
    return {
        "message": "There was an error during the authentication process.",
        "error": error,
    }


@router.post("/logout")
async def logout(context: AuthContext = Depends(get_auth_context)):
    """Sign out and clear the session cookies"""
    context.sign_out()
    response = JSONResponse({"message": "Logged out successfully", "redirect_to": "/login"})
    clear_session_cookies(response)
    return response


@router.post("/auth/refresh")
async def refresh_session(
    response: Response,
    context: AuthContext = Depends(get_auth_context)
):
    """Rotate the session tokens"""
    refreshed = context.refresh_session()
    if refreshed:
        set_session_cookies(response, context.session)
    return {"refreshed": refreshed}


@router.get("/auth/me")
async def get_current_user(
    current_user: Dict = Depends(get_current_user_id),
    context: AuthContext = Depends(get_auth_context)
):
    """Current user plus profile summary"""
    profile = ProfileService(context.supabase).get_profile(current_user["id"])
    return {
        **current_user,
        "has_profile": profile is not None,
        "role": get_role_name(profile.role_id) if profile else None,
    }


@router.post("/forgot-password")
@limiter.limit(settings.auth_rate_limit)
async def forgot_password(
    request: Request,
    forgot_data: ForgotPasswordRequest,
    context: AuthContext = Depends(get_auth_context)
):
    """Send a password reset e-mail"""
    site_url = (settings.site_url or _origin(request)).rstrip("/")
    result = context.reset_password_for_email(forgot_data.email, redirect_to=f"{site_url}/reset-password")
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.error)
    return {"message": "Password reset e-mail sent"}
