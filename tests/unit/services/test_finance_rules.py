"""
Unit Tests for invoice totals and portal grade status
"""
from datetime import date
from decimal import Decimal

from synexa.models.finance import Invoice, InvoiceStatus, Payment, PaymentMethod
from synexa.services.finance_service import invoice_summary
from synexa.services.parent_portal_service import grade_status


def make_invoice(amount: str, status: InvoiceStatus, paid: str = None) -> Invoice:
    invoice = Invoice(
        number=1, student_id="s-1", amount=Decimal(amount), due_date=date(2025, 3, 10),
        description="Propina", month=3, year=2025, status=status,
    )
    if paid:
        invoice.payments.append(Payment(amount=Decimal(paid), method=PaymentMethod.DINHEIRO))
    return invoice


class TestInvoiceSummary:

    def test_totals_exclude_cancelled_amounts(self):
        invoices = [
            make_invoice("15000.00", InvoiceStatus.PAGA, paid="15000.00"),
            make_invoice("15000.00", InvoiceStatus.PENDENTE, paid="5000.00"),
            make_invoice("15000.00", InvoiceStatus.VENCIDA),
            make_invoice("15000.00", InvoiceStatus.CANCELADA),
        ]

        summary = invoice_summary(invoices)

        assert summary == {
            "total_invoices": 4,
            "total_amount": 45000.0,
            "total_paid": 20000.0,
            "total_pending": 25000.0,
            "overdue_count": 1,
        }

    def test_empty(self):
        assert invoice_summary([])["total_amount"] == 0.0


class TestDocumentNumber:

    def test_open_invoice_is_ft(self):
        invoice = make_invoice("100.00", InvoiceStatus.PENDENTE)
        invoice.number = 7

        assert invoice.document_number == "FT 2025/0007"

    def test_paid_invoice_is_fr(self):
        invoice = make_invoice("100.00", InvoiceStatus.PAGA, paid="100.00")
        invoice.number = 12

        assert invoice.document_number == "FR 2025/0012"
        assert invoice.remaining_balance == Decimal("0.00")


class TestGradeStatus:

    def test_bands(self):
        assert grade_status(10) == "APROVADO"
        assert grade_status(8.5) == "EM_RECUPERACAO"
        assert grade_status(6.9) == "REPROVADO"
