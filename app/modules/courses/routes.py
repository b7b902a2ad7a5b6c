from fastapi import APIRouter, Depends
from app.database.supabase_client import get_supabase
from app.modules.courses.schemas import CourseResponse
from app.modules.courses.service import CourseService
from supabase import Client
from typing import List

router = APIRouter(prefix="/courses", tags=["courses"])


def get_course_service(supabase: Client = Depends(get_supabase)) -> CourseService:
    return CourseService(supabase)


@router.get("", response_model=List[CourseResponse])
async def list_courses(service: CourseService = Depends(get_course_service)):
    """List courses for the program picker"""
    return service.list_courses()
