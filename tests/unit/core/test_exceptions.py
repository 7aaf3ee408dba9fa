"""
Unit Tests for the error hierarchy and its JSON envelope
"""
from synexa.core.exceptions import (
    SynexaError,
    AuthorizationError,
    ResourceNotFoundError,
    ConflictError,
    ValidationError,
    InvalidFileTypeError,
    FileTooLargeError,
    PaymentError,
    DocumentGenerationError,
    error_response,
)


class TestStatusCodes:

    def test_status_code_per_error(self):
        assert AuthorizationError().status_code == 403
        assert ResourceNotFoundError("Student", "1").status_code == 404
        assert ConflictError("x").status_code == 409
        assert ValidationError("x").status_code == 400
        assert PaymentError("x").status_code == 400
        assert DocumentGenerationError("x").status_code == 500

    def test_file_errors_are_validation_errors(self):
        assert isinstance(InvalidFileTypeError("text/plain", ["application/pdf"]), ValidationError)
        assert FileTooLargeError(20, 10).status_code == 400


class TestErrorPayloads:

    def test_not_found_message_and_code(self):
        error = ResourceNotFoundError("Transport route", "r-1")

        assert error.message == "Rota de transporte 'r-1' inexistente"
        assert error.code == "TRANSPORT_ROUTE_NOT_FOUND"
        assert error.details == {"resource_type": "Transport route", "resource_id": "r-1"}

    def test_conflict_carries_conflicts(self):
        conflicts = [{"student_id": "s-1", "route_name": "Rota Norte"}]
        error = ConflictError("Alunos já atribuídos", conflicts=conflicts)

        assert error.details == {"conflicts": conflicts}

    def test_validation_field_detail(self):
        assert ValidationError("Inválido", field="stops").details == {"field": "stops"}
        assert ValidationError("Inválido").details == {}

    def test_subclass_default_codes(self):
        assert PaymentError("Fatura cancelada").code == "PAYMENT_ERROR"
        assert InvalidFileTypeError("text/plain", ["application/pdf"]).code == "INVALID_FILE_TYPE"
        assert SynexaError("x").code == "INTERNAL_ERROR"

    def test_error_response_envelope(self):
        body = error_response(SynexaError("Falhou", code="BOOM"))

        assert body == {
            "success": False,
            "error": {"code": "BOOM", "message": "Falhou", "details": {}},
        }
