"""
Unit Tests for PDF rendering
"""
from synexa.services.pdf_service import pdf_service, _kz, _fmt


class TestFormatting:

    def test_kwanza_format(self):
        assert _kz(1234.5) == "1.234,50 Kz"
        assert _kz(0) == "0,00 Kz"

    def test_grade_format(self):
        assert _fmt(None) == "-"
        assert _fmt(12.5) == "12.5"
        assert _fmt(13, 2) == "13.00"


class TestInvoicePdf:

    def _data(self, **overrides):
        data = {
            "is_paid": False,
            "document_number": "FT 2025/0001",
            "student_name": "Ana Silva",
            "student_number": "AL20250001",
            "period": "Março/2025",
            "due_date": "10/03/2025",
            "status": "PENDENTE",
            "description": "Propina de Março",
            "amount": 15000.0,
            "payments": [],
            "total_paid": 0.0,
            "remaining_balance": 15000.0,
        }
        data.update(overrides)
        return data

    def test_renders_pdf_bytes(self):
        pdf = pdf_service.invoice(self._data())

        assert pdf.startswith(b"%PDF")

    def test_renders_receipt_with_payments(self):
        pdf = pdf_service.invoice(self._data(
            is_paid=True,
            document_number="FR 2025/0001",
            status="PAGA",
            payments=[{"paid_at": "05/03/2025", "method": "MULTIBANCO", "reference": None, "amount": 15000.0}],
            total_paid=15000.0,
            remaining_balance=0.0,
        ))

        assert pdf.startswith(b"%PDF")
