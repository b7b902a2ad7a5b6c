from pydantic import BaseModel, EmailStr
from typing import Optional


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    user_id: str
    email: str
    redirect_to: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str
    requires_confirmation: bool = False
    redirect_to: str = "/setup-profile"


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class AuthPageResponse(BaseModel):
    page: str
    authenticated: bool
    next: Optional[str] = None
    google_sign_in_url: str
