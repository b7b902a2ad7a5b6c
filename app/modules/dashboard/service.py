from app.modules.attendance.schemas import AttendanceRecord
from app.modules.attendance.service import (
    AttendanceService, count_since, day_start, last_check_in, local_now, month_start, week_start
)
from app.modules.dashboard.schemas import AttendanceStats, DashboardResponse
from app.modules.events.service import EventService
from typing import List, Optional
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def compute_stats(records: List[AttendanceRecord], total_events: int, now: datetime) -> AttendanceStats:
    total_attendance = len(records)
    return AttendanceStats(
        total_attendance=total_attendance,
        today_attendance=count_since(records, day_start(now)),
        week_attendance=count_since(records, week_start(now)),
        month_attendance=count_since(records, month_start(now)),
        total_events=total_events,
        missed_events=total_events - total_attendance,
        last_check_in=last_check_in(records),
    )


class DashboardService:
    def __init__(self, attendance_service: AttendanceService, event_service: EventService):
        self.attendance_service = attendance_service
        self.event_service = event_service

    def get_stats(self, student_id: str, now: Optional[datetime] = None) -> AttendanceStats:
        """Attendance counters for the dashboard cards; zeroed on error"""
        now = now or local_now()
        try:
            records = self.attendance_service.list_for_student(student_id)
            total_events = self.event_service.count_events()
        except Exception as e:
            logger.error(f"Error fetching attendance stats: {e}")
            return AttendanceStats()
        return compute_stats(records, total_events, now)

    def get_dashboard(self, student_id: str, now: Optional[datetime] = None) -> DashboardResponse:
        now = now or local_now()
        return DashboardResponse(
            stats=self.get_stats(student_id, now),
            upcoming_events=self.event_service.list_upcoming_events(now),
        )
