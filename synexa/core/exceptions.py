"""
Domain errors raised by the Synexa services.

Services raise these instead of HTTPException; ``synexa.main`` renders
every SynexaError as

    {"success": false, "error": {"code": ..., "message": ..., "details": {...}}}

with the class ``status_code``.

    if not student:
        raise ResourceNotFoundError("Student", student_id)
"""

from typing import Any, Dict, List, Optional


class SynexaError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class AuthenticationError(SynexaError):
    status_code = 401
    code = "AUTH_FAILED"

    def __init__(self, message: str = "Credenciais inválidas"):
        super().__init__(message)


class AuthorizationError(SynexaError):
    """The user's role or relationship does not give access to the record"""
    status_code = 403
    code = "NOT_AUTHORIZED"

    def __init__(self, message: str = "Acesso negado"):
        super().__init__(message)


# Labels used in user-facing not-found messages
_ENTITY_LABELS = {
    "Student": "Aluno",
    "Class": "Turma",
    "Subject": "Disciplina",
    "Teacher": "Professor",
    "User": "Utilizador",
    "Enrollment": "Matrícula",
    "Attendance": "Registo de presença",
    "Grade": "Nota",
    "Invoice": "Fatura",
    "Document": "Documento",
    "Document file": "Ficheiro do documento",
    "File": "Ficheiro",
    "Message": "Mensagem",
    "Message recipient": "Destinatário da mensagem",
    "Thread": "Conversa",
    "Transport route": "Rota de transporte",
    "Student transport": "Transporte do aluno",
    "Schedule": "Horário",
}


class ResourceNotFoundError(SynexaError):
    """404 whose code is derived from the entity, e.g. ``STUDENT_NOT_FOUND``"""
    status_code = 404

    def __init__(self, resource_type: str, resource_id: str = ""):
        label = _ENTITY_LABELS.get(resource_type, resource_type)
        message = f"{label} '{resource_id}' inexistente" if resource_id else f"{label} inexistente"
        super().__init__(
            message,
            code=resource_type.upper().replace(" ", "_") + "_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(SynexaError):
    """Clashes with existing state; ``conflicts`` lists the offending records"""
    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str, conflicts: Optional[List[Any]] = None):
        super().__init__(message, details={"conflicts": conflicts} if conflicts else None)


class ValidationError(SynexaError):
    """Business rule violation on otherwise well-formed input"""
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else None)


class InvalidFileTypeError(ValidationError):
    code = "INVALID_FILE_TYPE"

    def __init__(self, file_type: str, allowed_types: list):
        super().__init__(f"Tipo de ficheiro '{file_type}' não permitido. Permitidos: {', '.join(allowed_types)}")
        self.details = {"file_type": file_type, "allowed_types": allowed_types}


class FileTooLargeError(ValidationError):
    code = "FILE_TOO_LARGE"

    def __init__(self, size: int, max_size: int):
        super().__init__(f"Ficheiro demasiado grande. Tamanho máximo: {max_size // (1024 * 1024)}MB")
        self.details = {"size": size, "max_size": max_size}


class PaymentError(SynexaError):
    status_code = 400
    code = "PAYMENT_ERROR"


class DocumentGenerationError(SynexaError):
    code = "DOCUMENT_GENERATION_FAILED"

    def __init__(self, message: str, doc_type: Optional[str] = None):
        super().__init__(message, details={"doc_type": doc_type} if doc_type else None)


class StorageError(SynexaError):
    code = "STORAGE_ERROR"


def error_response(error: SynexaError) -> Dict[str, Any]:
    return {"success": False, "error": error.to_dict()}
