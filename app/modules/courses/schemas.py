from pydantic import BaseModel
from typing import Optional


class CourseResponse(BaseModel):
    id: int
    course_name: str
    short: Optional[str] = None

    class Config:
        from_attributes = True
