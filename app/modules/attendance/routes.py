from fastapi import APIRouter, Depends, HTTPException
from app.config.roles_config import CHECK_IN_ROLES
from app.core.dependencies import get_current_user_id, get_user_supabase, require_role
from app.modules.attendance.schemas import (
    AttendanceHistoryResponse, AttendanceScanRequest, AttendanceScanResponse, EventAttendanceStats
)
from app.modules.attendance.service import AttendanceService, search_history, summarize_history
from app.modules.events.routes import get_event_service
from app.modules.events.service import EventService
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(tags=["attendance"])


def get_attendance_service(supabase: Client = Depends(get_user_supabase)) -> AttendanceService:
    return AttendanceService(supabase)


@router.get("/attendance-history", response_model=AttendanceHistoryResponse)
async def attendance_history(
    search: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: AttendanceService = Depends(get_attendance_service)
):
    """The user's attendance with event details; search filters by event name or location"""
    records = service.list_history(user_data["id"])
    return AttendanceHistoryResponse(
        records=search_history(records, search),
        summary=summarize_history(records),
        search=search,
    )


@router.post("/events/{event_id}/attendance", response_model=AttendanceScanResponse, status_code=201)
async def record_attendance(
    event_id: int,
    scan: AttendanceScanRequest,
    user_data: Dict = Depends(require_role(*CHECK_IN_ROLES)),
    service: AttendanceService = Depends(get_attendance_service),
    event_service: EventService = Depends(get_event_service)
):
    """Record a scanned student's time in or time out"""
    if event_service.get_event(event_id) is None:
        raise HTTPException(status_code=404, detail="Event not found")
    record = service.record_scan(event_id, scan.student_id, scan.scan_type)
    logger.info(f"{scan.scan_type} recorded for student {scan.student_id} at event {event_id} by {user_data['id']}")
    return AttendanceScanResponse(
        record=record,
        message=f"{scan.scan_type.replace('_', ' ')} recorded successfully",
    )


@router.get("/events/{event_id}/attendance/stats", response_model=EventAttendanceStats)
async def event_attendance_stats(
    event_id: int,
    user_data: Dict = Depends(require_role(*CHECK_IN_ROLES)),
    service: AttendanceService = Depends(get_attendance_service)
):
    """Number of recorded time ins and time outs for an event"""
    return service.get_event_stats(event_id)
