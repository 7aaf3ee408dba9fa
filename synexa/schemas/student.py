from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Any, Dict, Optional, List
from datetime import date, datetime

from synexa.models.enrollment import EnrollmentStatus
from synexa.models.student import Gender
from synexa.models.student_record import NoteType, TimelineEventType
from synexa.schemas.common import ClassBrief, UserBrief

PHONE_PATTERN = r'^[+]?[0-9]{9,15}$'


class StudentBase(BaseModel):
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    gender: Gender
    birth_date: date
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    blood_type: Optional[str] = Field(None, pattern=r'^(A|B|AB|O)[+-]$')
    profile_photo_url: Optional[str] = None
    bi_number: Optional[str] = Field(None, max_length=20)
    guardian_name: str = Field(..., min_length=5, max_length=100)
    guardian_phone: str = Field(..., pattern=PHONE_PATTERN)
    municipality: str = Field(..., min_length=3, max_length=50)
    province: str = Field(..., min_length=3, max_length=50)
    country: str = Field("Angola", min_length=3, max_length=50)
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)

    @field_validator('birth_date')
    @classmethod
    def birth_date_in_past(cls, v: date) -> date:
        if v >= date.today():
            raise ValueError("Data de nascimento deve estar no passado")
        return v


class StudentCreate(StudentBase):
    student_number: str = Field(..., pattern=r'^[A-Z0-9]{8,15}$')
    academic_year: str = Field(..., pattern=r'^20[0-9]{2}$')
    class_id: str


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=50)
    last_name: Optional[str] = Field(None, min_length=2, max_length=50)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    blood_type: Optional[str] = Field(None, pattern=r'^(A|B|AB|O)[+-]$')
    profile_photo_url: Optional[str] = None
    bi_number: Optional[str] = Field(None, max_length=20)
    student_number: Optional[str] = Field(None, pattern=r'^[A-Z0-9]{8,15}$')
    academic_year: Optional[str] = Field(None, pattern=r'^20[0-9]{2}$')
    class_id: Optional[str] = None
    guardian_name: Optional[str] = Field(None, min_length=5, max_length=100)
    guardian_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    municipality: Optional[str] = Field(None, min_length=3, max_length=50)
    province: Optional[str] = Field(None, min_length=3, max_length=50)
    country: Optional[str] = Field(None, min_length=3, max_length=50)
    parent_email: Optional[EmailStr] = None
    parent_phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)


class StudentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    gender: Gender
    birth_date: date
    phone: Optional[str] = None
    blood_type: Optional[str] = None
    student_number: str
    bi_number: Optional[str] = None
    academic_year: Optional[str] = None
    class_id: Optional[str] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    municipality: Optional[str] = None
    province: Optional[str] = None
    country: str
    parent_email: Optional[str] = None
    parent_phone: Optional[str] = None
    tags: List[str] = []
    school_class: Optional[ClassBrief] = None
    created_at: datetime

    @field_validator('tags', mode='before')
    @classmethod
    def none_tags(cls, v):
        return v or []


class EnrollmentSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    class_id: str
    year: int
    status: EnrollmentStatus


class StudentDetail(StudentResponse):
    parents: List[UserBrief] = []
    latest_enrollment: Optional[EnrollmentSummary] = None


class ParentLinkRequest(BaseModel):
    parent_id: str


class StudentStatistics(BaseModel):
    total: int
    by_gender: Dict[str, int]
    by_province: Dict[str, int]
    by_academic_year: Dict[str, int]
    by_class: Dict[str, int]
    by_tag: Dict[str, int]
    average_age: Optional[float] = None


class NoteCreate(BaseModel):
    note_type: NoteType = NoteType.OBSERVACAO
    content: str = Field(..., min_length=10, max_length=2000)


class NoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    note_type: NoteType
    content: str
    author: Optional[UserBrief] = None
    created_at: datetime


class TimelineEventCreate(BaseModel):
    event_type: TimelineEventType
    title: str = Field(..., min_length=3, max_length=150)
    description: Optional[str] = Field(None, max_length=2000)
    metadata: Optional[Dict[str, Any]] = None


class TimelineEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    event_type: TimelineEventType
    title: str
    description: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="event_metadata")
    created_by: Optional[str] = None
    created_at: datetime
