from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime


class AttendanceEvent(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    location: str
    banner: Optional[str] = None
    start_datetime: Optional[datetime] = None
    end_datetime: Optional[datetime] = None


class AttendanceRecord(BaseModel):
    id: int
    event_id: int
    student_id: str
    time_in: Optional[datetime] = None
    time_out: Optional[datetime] = None
    event: Optional[AttendanceEvent] = None

    class Config:
        from_attributes = True


class AttendanceSummary(BaseModel):
    total: int = 0
    this_month: int = 0
    this_week: int = 0


class AttendanceHistoryResponse(BaseModel):
    records: List[AttendanceRecord]
    summary: AttendanceSummary
    search: Optional[str] = None


class AttendanceScanRequest(BaseModel):
    student_id: str
    scan_type: Literal["time_in", "time_out"] = "time_in"


class AttendanceScanResponse(BaseModel):
    record: AttendanceRecord
    message: str


class EventAttendanceStats(BaseModel):
    event_id: int
    time_in_count: int
    time_out_count: int
