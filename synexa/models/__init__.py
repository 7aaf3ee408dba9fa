# Re-export all models for convenient imports
from synexa.models.user import User, UserRole, STAFF_ROLES
from synexa.models.student import Student, Gender, parent_students
from synexa.models.school_class import SchoolClass, Shift, class_teachers
from synexa.models.subject import Subject, subject_teachers
from synexa.models.teacher import Teacher
from synexa.models.enrollment import Enrollment, EnrollmentStatus
from synexa.models.attendance import Attendance
from synexa.models.grade import Grade, GradeType
from synexa.models.transport import TransportRoute, StudentTransport
from synexa.models.schedule import Schedule, Weekday
from synexa.models.student_record import StudentNote, NoteType, StudentTimelineEvent, TimelineEventType
from synexa.models.upload import UploadedFile, UploadEntity, FileType
from synexa.models.document import IssuedDocument, DocumentType
from synexa.models.finance import Invoice, InvoiceStatus, Payment, PaymentMethod
from synexa.models.communication import (
    CommunicationMessage,
    MessageRecipient,
    MessagePriority,
    MessageAudience,
    MessageThread,
    ThreadMessage,
    thread_participants,
    SchoolNotice,
)

__all__ = [
    # Users
    "User",
    "UserRole",
    "STAFF_ROLES",
    # School structure
    "Student",
    "Gender",
    "parent_students",
    "SchoolClass",
    "Shift",
    "class_teachers",
    "Subject",
    "subject_teachers",
    "Teacher",
    # Academic
    "Enrollment",
    "EnrollmentStatus",
    "Attendance",
    "Grade",
    "GradeType",
    # Transport
    "TransportRoute",
    "StudentTransport",
    # Timetable
    "Schedule",
    "Weekday",
    # Student record
    "StudentNote",
    "NoteType",
    "StudentTimelineEvent",
    "TimelineEventType",
    # Files & documents
    "UploadedFile",
    "UploadEntity",
    "FileType",
    "IssuedDocument",
    "DocumentType",
    # Finance
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
    # Communication
    "CommunicationMessage",
    "MessageRecipient",
    "MessagePriority",
    "MessageAudience",
    "MessageThread",
    "ThreadMessage",
    "thread_participants",
    "SchoolNotice",
]
