from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class EventResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    location: str
    banner: Optional[str] = None
    status: Optional[int] = None
    start_datetime: datetime
    end_datetime: datetime

    class Config:
        from_attributes = True


class EventDetailResponse(BaseModel):
    event: EventResponse
    attended: bool
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
