"""
Shared response pieces - pagination envelope and the short "brief" views
embedded in other responses
"""

from pydantic import BaseModel, ConfigDict
from typing import Generic, List, Optional, TypeVar
from datetime import date

from synexa.models.user import UserRole
from synexa.models.school_class import Shift

T = TypeVar("T")


class Page(BaseModel, Generic[T]):
    """Standard paginated response"""
    items: List[T]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class UserBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: UserRole


class ClassBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    year: int
    shift: Shift


class SubjectBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class TeacherBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class StudentBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    student_number: str
    birth_date: Optional[date] = None
