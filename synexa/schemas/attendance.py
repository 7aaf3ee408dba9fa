from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date, datetime

from synexa.schemas.common import StudentBrief, SubjectBrief


class AttendanceRecord(BaseModel):
    student_id: str
    present: bool
    justified: bool = False
    note: Optional[str] = Field(None, max_length=500)


class MarkAttendanceRequest(BaseModel):
    date: date
    class_id: str
    subject_id: str
    attendances: List[AttendanceRecord] = Field(..., min_length=1)


class MarkAttendanceResponse(BaseModel):
    message: str
    created: int
    updated: int


class AttendanceUpdate(BaseModel):
    present: Optional[bool] = None
    justified: Optional[bool] = None
    note: Optional[str] = Field(None, max_length=500)


class AttendanceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    date: date
    student_id: str
    subject_id: str
    class_id: Optional[str] = None
    teacher_id: Optional[str] = None
    present: bool
    justified: bool
    note: Optional[str] = None
    student: Optional[StudentBrief] = None
    subject: Optional[SubjectBrief] = None
    created_at: datetime
