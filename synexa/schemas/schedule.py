from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.models.schedule import Weekday
from synexa.schemas.common import SubjectBrief, TeacherBrief
from synexa.schemas.transport import TIME_PATTERN


class ScheduleCreate(BaseModel):
    teacher_id: str
    subject_id: str
    weekday: Weekday
    start_time: str = Field(..., pattern=TIME_PATTERN)
    end_time: str = Field(..., pattern=TIME_PATTERN)


class ScheduleUpdate(BaseModel):
    teacher_id: Optional[str] = None
    subject_id: Optional[str] = None
    weekday: Optional[Weekday] = None
    start_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    end_time: Optional[str] = Field(None, pattern=TIME_PATTERN)


class ScheduleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    subject_id: str
    weekday: Weekday
    start_time: str
    end_time: str
    teacher: Optional[TeacherBrief] = None
    subject: Optional[SubjectBrief] = None
    created_at: datetime


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: List[ScheduleResponse] = []
