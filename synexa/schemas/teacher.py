from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.schemas.common import ClassBrief, SubjectBrief


class TeacherCreate(BaseModel):
    user_id: str
    bio: Optional[str] = None


class TeacherUpdate(BaseModel):
    bio: Optional[str] = None


class AssignIdsRequest(BaseModel):
    """Replace the teacher's subjects or classes with this set"""
    ids: List[str] = Field(..., min_length=1)


class TeacherResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    name: str
    email: str
    bio: Optional[str] = None
    subjects: List[SubjectBrief] = []
    classes: List[ClassBrief] = []
    created_at: datetime
