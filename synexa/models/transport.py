from sqlalchemy import Column, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class TransportRoute(Base):
    """
    School bus route.

    ``stops`` is a list of ``{"name": str, "order": int}`` kept sorted by order.
    Stop names and orders are unique within a route.
    """
    __tablename__ = "transport_routes"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(100), unique=True, nullable=False)
    driver_name = Column(String(100), nullable=False)
    vehicle = Column(String(100), nullable=False)
    departure_time = Column(String(5), nullable=False)  # HH:MM
    return_time = Column(String(5), nullable=False)  # HH:MM
    stops = Column(JSON, default=list, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    assignments = relationship("StudentTransport", back_populates="route")

    @property
    def stop_names(self) -> set:
        return {stop["name"] for stop in (self.stops or [])}

    def __repr__(self):
        return f"<TransportRoute {self.name}>"


class StudentTransport(Base):
    """A student's seat on a route, boarding at one of its stops"""
    __tablename__ = "student_transports"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), unique=True, nullable=False)
    route_id = Column(GUID, ForeignKey("transport_routes.id", ondelete="CASCADE"), nullable=False, index=True)
    stop_name = Column(String(100), nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", back_populates="transport")
    route = relationship("TransportRoute", back_populates="assignments")

    def __repr__(self):
        return f"<StudentTransport {self.student_id} -> {self.route_id}@{self.stop_name}>"
