from synexa.services.storage_service import StorageService, storage_service
from synexa.services.pdf_service import PdfService, pdf_service
from synexa.services.document_service import DocumentService, document_service

# School records
from synexa.services.user_service import UserService, user_service
from synexa.services.student_service import StudentService, student_service
from synexa.services.class_service import ClassService, class_service
from synexa.services.subject_service import SubjectService, subject_service
from synexa.services.teacher_service import TeacherService, teacher_service
from synexa.services.enrollment_service import EnrollmentService, enrollment_service
from synexa.services.schedule_service import ScheduleService, schedule_service

# Academic
from synexa.services.attendance_service import AttendanceService, attendance_service
from synexa.services.grade_service import GradeService, grade_service
from synexa.services.report_card_service import ReportCardService, report_card_service

# Operations
from synexa.services.upload_service import UploadService, upload_service
from synexa.services.transport_service import TransportService, transport_service
from synexa.services.finance_service import FinanceService, finance_service
from synexa.services.communication_service import CommunicationService, communication_service
from synexa.services.parent_portal_service import ParentPortalService, parent_portal_service
from synexa.services.analytics_service import AnalyticsService, analytics_service

__all__ = [
    # Infrastructure services
    "StorageService",
    "storage_service",
    "PdfService",
    "pdf_service",
    "DocumentService",
    "document_service",
    # School records
    "UserService",
    "user_service",
    "StudentService",
    "student_service",
    "ClassService",
    "class_service",
    "SubjectService",
    "subject_service",
    "TeacherService",
    "teacher_service",
    "EnrollmentService",
    "enrollment_service",
    "ScheduleService",
    "schedule_service",
    # Academic
    "AttendanceService",
    "attendance_service",
    "GradeService",
    "grade_service",
    "ReportCardService",
    "report_card_service",
    # Operations
    "UploadService",
    "upload_service",
    "TransportService",
    "transport_service",
    "FinanceService",
    "finance_service",
    "CommunicationService",
    "communication_service",
    "ParentPortalService",
    "parent_portal_service",
    "AnalyticsService",
    "analytics_service",
]
