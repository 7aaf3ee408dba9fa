from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date, datetime

from synexa.models.enrollment import EnrollmentStatus
from synexa.models.student import Gender
from synexa.schemas.common import ClassBrief, StudentBrief
from synexa.schemas.student import PHONE_PATTERN


class EnrollmentCreate(BaseModel):
    student_id: str
    class_id: str
    year: int = Field(..., ge=2020, le=2100)
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE


class EnrollmentWithStudentCreate(BaseModel):
    """Matrícula de um aluno novo (ou reencontrado pelo BI) numa única operação"""
    first_name: str = Field(..., min_length=2, max_length=50)
    last_name: str = Field(..., min_length=2, max_length=50)
    gender: Gender
    birth_date: date
    bi_number: Optional[str] = Field(None, max_length=30)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    guardian_name: str = Field(..., min_length=3, max_length=100)
    guardian_phone: str = Field(..., pattern=PHONE_PATTERN)
    parent_email: Optional[str] = None
    municipality: Optional[str] = Field(None, max_length=50)
    province: Optional[str] = Field(None, max_length=50)
    observation: Optional[str] = Field(None, max_length=200)

    class_id: str
    year: int = Field(..., ge=2020, le=2100)

    @field_validator('first_name', 'last_name', 'guardian_name')
    @classmethod
    def strip_names(cls, v: str) -> str:
        return v.strip()


class EnrollmentUpdate(BaseModel):
    status: Optional[EnrollmentStatus] = None
    class_id: Optional[str] = None


class EnrollmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    class_id: str
    year: int
    status: EnrollmentStatus
    student: Optional[StudentBrief] = None
    school_class: Optional[ClassBrief] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
