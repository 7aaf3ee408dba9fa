from fastapi import APIRouter

from synexa.api.v1.endpoints import (
    auth,
    users,
    students,
    classes,
    subjects,
    teachers,
    enrollments,
    attendance,
    grades,
    report_cards,
    documents,
    uploads,
    parents_portal,
    finance,
    communication,
    transport,
    schedules,
    analytics,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(students.router, prefix="/students", tags=["Students"])
api_router.include_router(classes.router, prefix="/classes", tags=["Classes"])
api_router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
api_router.include_router(teachers.router, prefix="/teachers", tags=["Teachers"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["Enrollments"])
api_router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
api_router.include_router(grades.router, prefix="/grades", tags=["Grades"])
api_router.include_router(report_cards.router, prefix="/report-cards", tags=["Report Cards"])
api_router.include_router(documents.router, prefix="/documents", tags=["Documents"])
api_router.include_router(uploads.router, prefix="/uploads", tags=["Uploads"])
api_router.include_router(parents_portal.router, prefix="/parents-portal", tags=["Parents Portal"])
api_router.include_router(finance.router, prefix="/finance", tags=["Finance"])
api_router.include_router(communication.router, prefix="/communication", tags=["Communication"])
api_router.include_router(transport.router, prefix="/transport", tags=["Transport"])
api_router.include_router(schedules.router, prefix="/schedules", tags=["Schedules"])
api_router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])
