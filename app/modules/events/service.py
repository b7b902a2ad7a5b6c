from supabase import Client
from app.modules.events.schemas import EventResponse
from typing import Callable, Iterable, List, Optional, TypeVar
from datetime import datetime
import logging

logger = logging.getLogger(__name__)

EVENT_STATUS_ACTIVE = 1

T = TypeVar("T")


def matches_search(query: str, *fields: Optional[str]) -> bool:
    """Case-insensitive substring match of query against any field"""
    needle = query.lower()
    return any(field and needle in field.lower() for field in fields)


def filter_by_name_or_location(items: Iterable[T], query: Optional[str], get_event: Callable[[T], object]) -> List[T]:
    """Keep items whose event name or location contains query; blank query keeps everything"""
    items = list(items)
    if not query or not query.strip():
        return items
    filtered = []
    for item in items:
        event = get_event(item)
        if event is not None and matches_search(query, event.name, event.location):
            filtered.append(item)
    return filtered


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_events(self) -> List[EventResponse]:
        """Active events, soonest first; empty on error"""
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("status", EVENT_STATUS_ACTIVE)\
                .order("start_datetime")\
                .execute()
            return [EventResponse(**event) for event in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching events: {e}")
            return []

    def list_upcoming_events(self, now: datetime, limit: int = 3) -> List[EventResponse]:
        """Active events that have not ended yet"""
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("status", EVENT_STATUS_ACTIVE)\
                .gte("end_datetime", now.isoformat())\
                .order("start_datetime")\
                .limit(limit)\
                .execute()
            return [EventResponse(**event) for event in (result.data or [])]
        except Exception as e:
            logger.error(f"Error fetching upcoming events: {e}")
            return []

    def get_event(self, event_id: int) -> Optional[EventResponse]:
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("id", event_id)\
                .maybe_single()\
                .execute()
            if not result or not result.data:
                return None
            return EventResponse(**result.data)
        except Exception as e:
            logger.error(f"Error fetching event {event_id}: {e}")
            return None

    def count_events(self) -> int:
        """Total number of events, counted server side without fetching rows"""
        result = self.supabase.table("events")\
            .select("*", count="exact", head=True)\
            .execute()
        return result.count or 0

    @staticmethod
    def search_events(events: List[EventResponse], query: Optional[str]) -> List[EventResponse]:
        return filter_by_name_or_location(events, query, lambda event: event)
