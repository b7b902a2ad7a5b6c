from supabase import Client
from app.modules.courses.schemas import CourseResponse
from typing import List
import logging

logger = logging.getLogger(__name__)


class CourseService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_courses(self) -> List[CourseResponse]:
        """All courses ordered by name; empty on error"""
        try:
            result = self.supabase.table("courses")\
                .select("id, course_name")\
                .order("course_name")\
                .execute()
            return [CourseResponse(**course) for course in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching courses: {e}")
            return []
