"""Response helpers for binary downloads"""
from io import BytesIO

from fastapi.responses import StreamingResponse


def pdf_response(pdf: bytes, filename: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(pdf),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"'
        }
    )
