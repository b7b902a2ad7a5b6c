from fastapi import APIRouter, Depends, HTTPException
from app.core.dependencies import get_current_user_id, get_user_supabase
from app.database.supabase_client import get_supabase
from app.modules.attendance.service import AttendanceService
from app.modules.events.schemas import EventResponse, EventDetailResponse
from app.modules.events.service import EventService
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@router.get("", response_model=List[EventResponse])
async def list_events(
    search: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service)
):
    """Active events; search filters by name or location"""
    return service.search_events(service.list_events(), search)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: int,
    user_data: Dict = Depends(get_current_user_id),
    service: EventService = Depends(get_event_service),
    supabase: Client = Depends(get_user_supabase)
):
    """Event details and whether the user attended it"""
    event = service.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    attendance = AttendanceService(supabase).get_attendance(event_id, user_data["id"])
    return EventDetailResponse(
        event=event,
        attended=attendance is not None,
        time_in=attendance.time_in if attendance else None,
        time_out=attendance.time_out if attendance else None,
    )
