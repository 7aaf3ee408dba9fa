from pydantic import BaseModel, Field, model_validator
from typing import Optional


class CertificateRequest(BaseModel):
    student_id: str
    year: int = Field(..., ge=2020, le=2100)


class DeclarationRequest(BaseModel):
    student_id: str
    year: int = Field(..., ge=2020, le=2100)
    purpose: Optional[str] = Field(None, max_length=200)


class TranscriptRequest(BaseModel):
    student_id: str
    start_year: Optional[int] = Field(None, ge=2020, le=2100)
    end_year: Optional[int] = Field(None, ge=2020, le=2100)

    @model_validator(mode='after')
    def check_range(self):
        if self.start_year and self.end_year and self.start_year > self.end_year:
            raise ValueError("Ano inicial não pode ser maior que o ano final")
        return self
