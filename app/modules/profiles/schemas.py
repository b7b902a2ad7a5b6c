from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from app.config.roles_config import YEAR_LEVELS
from app.modules.courses.schemas import CourseResponse


def require_text(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("This field is required")
    return value


class ProfileSetupRequest(BaseModel):
    first_name: str
    last_name: str
    student_id: str
    program: Optional[str] = Field(default=None, validate_default=True)  # course id from the select
    year_level: str = "1"

    @field_validator("first_name", "last_name", "student_id")
    @classmethod
    def check_required_text(cls, value: str) -> str:
        return require_text(value)

    @field_validator("program", mode="before")
    @classmethod
    def require_numeric_program(cls, value):
        if value is None or not str(value).strip().isdigit():
            raise ValueError("Please select a program")
        return str(value).strip()

    @field_validator("year_level", mode="before")
    @classmethod
    def require_year_level(cls, value):
        value = str(value).strip()
        if not value.isdigit() or int(value) not in YEAR_LEVELS:
            raise ValueError("Year level must be between 1 and 5")
        return value

    @property
    def course_id(self) -> int:
        return int(self.program)


class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    year_level: Optional[int] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, value: Optional[str]) -> Optional[str]:
        # omitted means unchanged; a blank name is rejected
        return require_text(value) if value is not None else None

    @field_validator("year_level")
    @classmethod
    def check_year_level(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value not in YEAR_LEVELS:
            raise ValueError("Year level must be between 1 and 5")
        return value


class CourseName(BaseModel):
    course_name: str


class ProfileResponse(BaseModel):
    id: str
    first_name: str
    middle_name: Optional[str] = None
    last_name: str
    student_id: Optional[str] = None
    course_id: Optional[int] = None
    year_level: Optional[int] = None
    role_id: Optional[int] = None
    avatar: Optional[str] = None
    created_at: Optional[datetime] = None
    course: Optional[CourseName] = None

    class Config:
        from_attributes = True


class ProfilePrefill(BaseModel):
    first_name: str = ""
    last_name: str = ""
    avatar_url: Optional[str] = None


class SetupProfilePageResponse(BaseModel):
    courses: List[CourseResponse]
    year_levels: List[int]
    prefill: ProfilePrefill


class SetupProfileResponse(BaseModel):
    profile: ProfileResponse
    redirect_to: str = "/dashboard"


class AvatarResponse(BaseModel):
    avatar: str


class MyQrResponse(BaseModel):
    profile: ProfileResponse
    qr_data: str
    qr_fields: Dict[str, Any]
