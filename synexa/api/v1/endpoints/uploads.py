"""
Uploads API

- POST   /uploads/students/{id}     attach a file to a student (ADMIN, SECRETARIA)
- POST   /uploads/teachers/{id}     attach a file to a teacher (ADMIN)
- GET    /uploads/students/{id}     list a student's files
- GET    /uploads/teachers/{id}     list a teacher's files
- GET    /uploads/{id}              file metadata
- GET    /uploads/{id}/download     file contents
- DELETE /uploads/{id}              remove file and record (ADMIN)
"""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from synexa.core.database import get_db
from synexa.models.upload import FileType, UploadEntity, UploadedFile
from synexa.models.user import User
from synexa.modules.auth.dependencies import (
    require_roles,
    get_current_admin,
    SCHOOL_ADMIN,
    OFFICE_READ,
)
from synexa.schemas.common import Page, MessageResponse
from synexa.schemas.upload import UploadResponse
from synexa.services.upload_service import upload_service, download_url

router = APIRouter()


def _response(upload: UploadedFile) -> UploadResponse:
    response = UploadResponse.model_validate(upload)
    response.download_url = download_url(upload)
    return response


async def _list(db, entity_type, entity_id, page, page_size, file_type, search, start_date, end_date) -> dict:
    result = await upload_service.list_by_entity(
        db, entity_type, entity_id, page, page_size,
        file_type=file_type, search=search, start_date=start_date, end_date=end_date,
    )
    result["items"] = [_response(u) for u in result["items"]]
    return result


@router.post("/students/{student_id}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_student_file(
    student_id: str,
    file: UploadFile = File(...),
    file_type: FileType = Form(FileType.OUTRO),
    description: Optional[str] = Form(None, max_length=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*SCHOOL_ADMIN)),
):
    upload = await upload_service.upload_student_file(
        db, student_id, file, file_type, description, uploaded_by=current_user.id
    )
    return _response(upload)


@router.post("/teachers/{teacher_id}", response_model=UploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_teacher_file(
    teacher_id: str,
    file: UploadFile = File(...),
    file_type: FileType = Form(FileType.OUTRO),
    description: Optional[str] = Form(None, max_length=500),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    upload = await upload_service.upload_teacher_file(
        db, teacher_id, file, file_type, description, uploaded_by=current_user.id
    )
    return _response(upload)


@router.get("/students/{student_id}", response_model=Page[UploadResponse])
async def list_student_files(
    student_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    file_type: Optional[FileType] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await _list(
        db, UploadEntity.STUDENT, student_id, page, page_size, file_type, search, start_date, end_date
    )


@router.get("/teachers/{teacher_id}", response_model=Page[UploadResponse])
async def list_teacher_files(
    teacher_id: str,
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    file_type: Optional[FileType] = None,
    search: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return await _list(
        db, UploadEntity.TEACHER, teacher_id, page, page_size, file_type, search, start_date, end_date
    )


@router.get("/{upload_id}", response_model=UploadResponse)
async def get_upload(
    upload_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    return _response(await upload_service.get_upload(db, upload_id))


@router.get("/{upload_id}/download")
async def download_upload(
    upload_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(require_roles(*OFFICE_READ)),
):
    upload = await upload_service.download(db, upload_id)
    return FileResponse(
        path=upload.path,
        filename=upload.original_name,
        media_type=upload.mime_type,
    )


@router.delete("/{upload_id}", response_model=MessageResponse)
async def delete_upload(
    upload_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
):
    await upload_service.delete_upload(db, upload_id, deleted_by=current_user.id)
    return {"message": "Ficheiro removido com sucesso"}
