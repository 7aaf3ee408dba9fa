from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from synexa.models.upload import UploadEntity, FileType


class UploadResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    entity_type: UploadEntity
    entity_id: str
    file_type: FileType
    original_name: str
    mime_type: str
    size: int
    description: Optional[str] = None
    uploaded_by: Optional[str] = None
    created_at: datetime
    download_url: Optional[str] = None
