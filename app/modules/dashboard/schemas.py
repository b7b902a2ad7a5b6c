from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from app.modules.events.schemas import EventResponse


class AttendanceStats(BaseModel):
    total_attendance: int = 0
    today_attendance: int = 0
    week_attendance: int = 0
    month_attendance: int = 0
    total_events: int = 0
    missed_events: int = 0
    last_check_in: Optional[datetime] = None


class DashboardResponse(BaseModel):
    stats: AttendanceStats
    upcoming_events: List[EventResponse]
