from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime

from synexa.schemas.common import StudentBrief

TIME_PATTERN = r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$'


class Stop(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    order: int = Field(..., ge=1, le=50)


class RouteCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    driver_name: str = Field(..., min_length=2, max_length=100)
    vehicle: str = Field(..., min_length=2, max_length=100)
    departure_time: str = Field(..., pattern=TIME_PATTERN)
    return_time: str = Field(..., pattern=TIME_PATTERN)
    stops: List[Stop] = Field(..., min_length=1)


class RouteUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    driver_name: Optional[str] = Field(None, min_length=2, max_length=100)
    vehicle: Optional[str] = Field(None, min_length=2, max_length=100)
    departure_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    return_time: Optional[str] = Field(None, pattern=TIME_PATTERN)
    stops: Optional[List[Stop]] = Field(None, min_length=1)


class RouteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    driver_name: str
    vehicle: str
    departure_time: str
    return_time: str
    stops: List[Stop]
    student_count: int = 0
    created_at: datetime


class RouteBrief(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str


class AssignStudentItem(BaseModel):
    student_id: str
    stop_name: str = Field(..., min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class AssignStudentsRequest(BaseModel):
    students: List[AssignStudentItem] = Field(..., min_length=1)


class StudentTransportUpdate(BaseModel):
    route_id: Optional[str] = None
    stop_name: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class StudentTransportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    route_id: str
    stop_name: str
    notes: Optional[str] = None
    student: Optional[StudentBrief] = None
    route: Optional[RouteBrief] = None
    created_at: datetime
