from supabase import Client
from app.config.settings import settings
from app.modules.attendance.schemas import AttendanceRecord, AttendanceSummary, EventAttendanceStats
from app.modules.events.service import filter_by_name_or_location
from typing import List, Optional
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo
import logging

logger = logging.getLogger(__name__)

HISTORY_SELECT = "*, event:events(id, name, description, location, banner, start_datetime, end_datetime)"


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.timezone))


def as_local(value: datetime, tz) -> datetime:
    """Naive timestamps from the database are UTC"""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(tz)


def day_start(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def week_start(now: datetime) -> datetime:
    """Midnight of the most recent Sunday"""
    days_since_sunday = (now.weekday() + 1) % 7
    return day_start(now) - timedelta(days=days_since_sunday)


def month_start(now: datetime) -> datetime:
    return day_start(now).replace(day=1)


def count_since(records: List[AttendanceRecord], start: datetime) -> int:
    return sum(
        1 for record in records
        if record.time_in and as_local(record.time_in, start.tzinfo) >= start
    )


def newest_first(records: List[AttendanceRecord]) -> List[AttendanceRecord]:
    """Latest time_in first; rows with only a time_out go last (Postgres sorts NULLs first on DESC)"""
    checked_in = [record for record in records if record.time_in]
    checked_in.sort(key=lambda record: as_local(record.time_in, timezone.utc), reverse=True)
    return checked_in + [record for record in records if not record.time_in]


def last_check_in(records: List[AttendanceRecord]) -> Optional[datetime]:
    checked_in = [record.time_in for record in records if record.time_in]
    return max(checked_in, key=lambda value: as_local(value, timezone.utc), default=None)


def summarize_history(records: List[AttendanceRecord], now: Optional[datetime] = None) -> AttendanceSummary:
    now = now or local_now()
    this_month = 0
    for record in records:
        if not record.time_in:
            continue
        local = as_local(record.time_in, now.tzinfo)
        if local.month == now.month and local.year == now.year:
            this_month += 1
    return AttendanceSummary(
        total=len(records),
        this_month=this_month,
        this_week=count_since(records, week_start(now)),
    )


def search_history(records: List[AttendanceRecord], query: Optional[str]) -> List[AttendanceRecord]:
    return filter_by_name_or_location(records, query, lambda record: record.event)


class AttendanceService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_history(self, student_id: str) -> List[AttendanceRecord]:
        """Attendance joined with its event, newest check-in first; empty on error"""
        try:
            result = self.supabase.table("attendance")\
                .select(HISTORY_SELECT)\
                .eq("student_id", student_id)\
                .order("time_in", desc=True)\
                .execute()
            return newest_first([AttendanceRecord(**record) for record in (result.data or [])])
        except Exception as e:
            logger.error(f"Error fetching attendance history: {e}")
            return []

    def list_for_student(self, student_id: str) -> List[AttendanceRecord]:
        """Plain attendance rows, newest first; errors propagate"""
        result = self.supabase.table("attendance")\
            .select("*")\
            .eq("student_id", student_id)\
            .order("time_in", desc=True)\
            .execute()
        return newest_first([AttendanceRecord(**record) for record in (result.data or [])])

    def get_attendance(self, event_id: int, student_id: str) -> Optional[AttendanceRecord]:
        try:
            result = self.supabase.table("attendance")\
                .select("*")\
                .eq("event_id", event_id)\
                .eq("student_id", student_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return AttendanceRecord(**result.data)
        except Exception as e:
            logger.error(f"Error checking attendance: {e}")
            return None

    def record_scan(self, event_id: int, student_id: str, scan_type: str, now: Optional[datetime] = None) -> AttendanceRecord:
        """Set time_in or time_out for a student at an event; each can only be recorded once"""
        timestamp = (now or local_now()).isoformat()
        try:
            existing = self.supabase.table("attendance")\
                .select("*")\
                .eq("event_id", event_id)\
                .eq("student_id", student_id)\
                .maybe_single()\
                .execute()

            if existing and existing.data:
                if existing.data.get(scan_type):
                    raise HTTPException(
                        status_code=409,
                        detail=f"{scan_type.replace('_', ' ')} already recorded for this student"
                    )
                result = self.supabase.table("attendance")\
                    .update({scan_type: timestamp})\
                    .eq("id", existing.data["id"])\
                    .execute()
            else:
                result = self.supabase.table("attendance").insert({
                    "event_id": event_id,
                    "student_id": student_id,
                    "time_in": timestamp if scan_type == "time_in" else None,
                    "time_out": timestamp if scan_type == "time_out" else None,
                }).execute()

            if not result.data:
                raise HTTPException(status_code=400, detail="Failed to record attendance")

            return AttendanceRecord(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error recording attendance: {e}")
            raise HTTPException(status_code=400, detail="Failed to record attendance")

    def get_event_stats(self, event_id: int) -> EventAttendanceStats:
        try:
            result = self.supabase.table("attendance")\
                .select("time_in, time_out")\
                .eq("event_id", event_id)\
                .execute()
            rows = result.data or []
        except Exception as e:
            logger.error(f"Error fetching attendance stats: {e}")
            rows = []
        return EventAttendanceStats(
            event_id=event_id,
            time_in_count=sum(1 for row in rows if row.get("time_in")),
            time_out_count=sum(1 for row in rows if row.get("time_out")),
        )
