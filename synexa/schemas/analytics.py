from pydantic import BaseModel
from typing import List

from synexa.models.school_class import Shift


class ShiftCount(BaseModel):
    shift: Shift
    label: str
    value: int


class OverviewResponse(BaseModel):
    year: int
    total_students: int
    total_teachers: int
    total_classes: int
    total_subjects: int
    enrollments_by_shift: List[ShiftCount]
    attendance_rate: float
    payment_rate: float
