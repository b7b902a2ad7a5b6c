from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_user_id
from app.modules.attendance.routes import get_attendance_service
from app.modules.attendance.service import AttendanceService
from app.modules.dashboard.schemas import DashboardResponse
from app.modules.dashboard.service import DashboardService
from app.modules.events.routes import get_event_service
from app.modules.events.service import EventService
from typing import Dict

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def get_dashboard_service(
    attendance_service: AttendanceService = Depends(get_attendance_service),
    event_service: EventService = Depends(get_event_service)
) -> DashboardService:
    return DashboardService(attendance_service, event_service)


@router.get("", response_model=DashboardResponse)
async def dashboard(
    user_data: Dict = Depends(get_current_user_id),
    service: DashboardService = Depends(get_dashboard_service)
):
    """Attendance stats and the next upcoming events"""
    return service.get_dashboard(user_data["id"])
