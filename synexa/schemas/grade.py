from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import datetime

from synexa.models.grade import GradeType
from synexa.schemas.common import StudentBrief, SubjectBrief, TeacherBrief, ClassBrief

MAX_GRADE = 20.0


class GradeCreate(BaseModel):
    student_id: str
    subject_id: str
    teacher_id: str
    class_id: str
    type: GradeType
    term: int = Field(..., ge=1, le=3)
    year: int = Field(..., ge=2020)
    value: float = Field(..., ge=0, le=MAX_GRADE)


class GradeUpdate(BaseModel):
    value: Optional[float] = Field(None, ge=0, le=MAX_GRADE)
    type: Optional[GradeType] = None


class GradeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    subject_id: str
    teacher_id: str
    class_id: str
    type: GradeType
    term: int
    year: int
    value: float
    student: Optional[StudentBrief] = None
    subject: Optional[SubjectBrief] = None
    teacher: Optional[TeacherBrief] = None
    school_class: Optional[ClassBrief] = None
    created_at: datetime
