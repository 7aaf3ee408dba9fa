# Pydantic schemas
from synexa.schemas.common import Page, MessageResponse

__all__ = ["Page", "MessageResponse"]
