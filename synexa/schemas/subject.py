from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.schemas.common import TeacherBrief


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: Optional[str] = None
    teacher_ids: List[str] = []


class SubjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = None
    teacher_ids: Optional[List[str]] = None


class SubjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    teachers: List[TeacherBrief] = []
    created_at: datetime
