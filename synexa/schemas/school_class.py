from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.models.school_class import Shift
from synexa.schemas.common import TeacherBrief


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=2020)
    shift: Shift
    capacity: int = Field(..., ge=1)
    student_ids: List[str] = []
    teacher_ids: List[str] = []


class ClassUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = Field(None, ge=2020)
    shift: Optional[Shift] = None
    capacity: Optional[int] = Field(None, ge=1)
    student_ids: Optional[List[str]] = None
    teacher_ids: Optional[List[str]] = None


class ClassResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    year: int
    shift: Shift
    capacity: int
    teachers: List[TeacherBrief] = []
    student_count: int = 0
    active_enrollments: int = 0
    created_at: datetime
