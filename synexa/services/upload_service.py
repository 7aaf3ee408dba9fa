"""
Upload Service - documents attached to student and teacher records

Accepted: PDF, JPEG, PNG and DOCX up to MAX_UPLOAD_SIZE. Both the MIME type
and the extension are checked. Files are stored as {uuid}{ext} under the
entity's folder; the original name is kept on the record.
"""

from fastapi import UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from datetime import date, datetime, time
from pathlib import Path
from typing import Optional
import uuid

from synexa.core.config import settings
from synexa.core.exceptions import (
    InvalidFileTypeError, FileTooLargeError, ResourceNotFoundError, ValidationError,
)
from synexa.core.logging_config import get_logger
from synexa.models.student import Student
from synexa.models.teacher import Teacher
from synexa.models.upload import UploadedFile, UploadEntity, FileType
from synexa.services.storage_service import storage_service
from synexa.utils.pagination import paginate

logger = get_logger(__name__)

ALLOWED_MIME_TYPES = [
    "application/pdf",
    "image/jpeg",
    "image/png",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
]
ALLOWED_EXTENSIONS = [".pdf", ".jpg", ".jpeg", ".png", ".docx"]

ENTITY_FOLDERS = {
    UploadEntity.STUDENT: "students",
    UploadEntity.TEACHER: "teachers",
}


def validate_file(filename: str, content_type: str, size: int) -> str:
    """Check size, MIME type and extension; returns the lower-cased extension"""
    if size > settings.MAX_UPLOAD_SIZE:
        raise FileTooLargeError(size, settings.MAX_UPLOAD_SIZE)
    if size == 0:
        raise ValidationError("Arquivo vazio", field="file")
    if content_type not in ALLOWED_MIME_TYPES:
        raise InvalidFileTypeError(content_type or "desconhecido", ALLOWED_MIME_TYPES)
    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_EXTENSIONS:
        raise InvalidFileTypeError(extension or "sem extensão", ALLOWED_EXTENSIONS)
    return extension


def download_url(upload: UploadedFile) -> str:
    return f"/api/{settings.API_VERSION}/uploads/{upload.id}/download"


class UploadService:

    async def _store(
        self,
        db: AsyncSession,
        entity_type: UploadEntity,
        entity_id: str,
        file: UploadFile,
        file_type: FileType,
        description: Optional[str],
        uploaded_by: Optional[str],
    ) -> UploadedFile:
        content = await file.read()
        extension = validate_file(file.filename, file.content_type, len(content))

        stored_name = f"{uuid.uuid4()}{extension}"
        path = await storage_service.save(ENTITY_FOLDERS[entity_type], stored_name, content)

        upload = UploadedFile(
            entity_type=entity_type,
            entity_id=entity_id,
            file_type=file_type,
            original_name=file.filename,
            stored_name=stored_name,
            path=str(path),
            mime_type=file.content_type,
            size=len(content),
            description=description,
            uploaded_by=uploaded_by,
        )
        db.add(upload)
        await db.commit()
        await db.refresh(upload)

        logger.log_audit_event(
            "upload", "file", str(upload.id),
            actor_id=uploaded_by, entity_type=entity_type.value, owner_id=entity_id, size=len(content),
        )
        return upload

    async def upload_student_file(
        self, db: AsyncSession, student_id: str, file: UploadFile,
        file_type: FileType = FileType.OUTRO, description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> UploadedFile:
        if not await db.get(Student, student_id):
            raise ResourceNotFoundError("Student", student_id)
        return await self._store(db, UploadEntity.STUDENT, student_id, file, file_type, description, uploaded_by)

    async def upload_teacher_file(
        self, db: AsyncSession, teacher_id: str, file: UploadFile,
        file_type: FileType = FileType.OUTRO, description: Optional[str] = None,
        uploaded_by: Optional[str] = None,
    ) -> UploadedFile:
        if not await db.get(Teacher, teacher_id):
            raise ResourceNotFoundError("Teacher", teacher_id)
        return await self._store(db, UploadEntity.TEACHER, teacher_id, file, file_type, description, uploaded_by)

    async def list_by_entity(
        self,
        db: AsyncSession,
        entity_type: UploadEntity,
        entity_id: str,
        page: int = 1,
        page_size: int = 10,
        file_type: Optional[FileType] = None,
        search: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        query = select(UploadedFile).where(
            UploadedFile.entity_type == entity_type,
            UploadedFile.entity_id == entity_id,
        )
        if file_type:
            query = query.where(UploadedFile.file_type == file_type)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                UploadedFile.original_name.ilike(pattern) | UploadedFile.description.ilike(pattern)
            )
        if start_date:
            query = query.where(UploadedFile.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.where(UploadedFile.created_at <= datetime.combine(end_date, time.max))

        return await paginate(db, query.order_by(UploadedFile.created_at.desc()), page, page_size)

    async def get_upload(self, db: AsyncSession, upload_id: str) -> UploadedFile:
        upload = await db.get(UploadedFile, upload_id)
        if not upload:
            raise ResourceNotFoundError("File", upload_id)
        return upload

    async def download(self, db: AsyncSession, upload_id: str) -> UploadedFile:
        """Record whose file is present on disk"""
        upload = await self.get_upload(db, upload_id)
        if not await storage_service.exists(upload.path):
            logger.warning(f"[Uploads] File {upload.path} missing on disk for record {upload_id}")
            raise ResourceNotFoundError("File", upload_id)
        return upload

    async def delete_upload(self, db: AsyncSession, upload_id: str, deleted_by: Optional[str] = None) -> None:
        upload = await self.get_upload(db, upload_id)
        await storage_service.delete(upload.path)
        await db.delete(upload)
        await db.commit()
        logger.log_audit_event("delete", "file", upload_id, actor_id=deleted_by)


upload_service = UploadService()
