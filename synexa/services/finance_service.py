"""
Finance Service - propinas (invoices) and payments

- An invoice per student, month and year (cancelled ones don't count)
- Payments may be partial; the invoice is PAGA once fully covered
- PENDENTE invoices past their due date are flagged VENCIDA on every read
- Invoices with payments can be neither cancelled nor deleted
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, func
from sqlalchemy.orm import selectinload
from datetime import date, datetime, time
from decimal import Decimal
from typing import Optional, List, Tuple

from synexa.core.exceptions import PaymentError, ResourceNotFoundError, ValidationError
from synexa.core.logging_config import get_logger
from synexa.models.document import DocumentType, IssuedDocument
from synexa.models.finance import Invoice, InvoiceStatus, Payment, PaymentMethod
from synexa.models.student import Student
from synexa.schemas.finance import InvoiceCreate, PayInvoiceRequest
from synexa.services.document_service import document_service
from synexa.services.pdf_service import pdf_service
from synexa.utils.pagination import paginate

logger = get_logger(__name__)

MONTHS_PT = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro",
]


def invoice_summary(invoices: List[Invoice]) -> dict:
    total_amount = sum((Decimal(i.amount) for i in invoices if i.status != InvoiceStatus.CANCELADA), Decimal("0"))
    total_paid = sum((i.total_paid for i in invoices), Decimal("0"))
    return {
        "total_invoices": len(invoices),
        "total_amount": float(total_amount),
        "total_paid": float(total_paid),
        "total_pending": float(total_amount - total_paid),
        "overdue_count": sum(1 for i in invoices if i.status == InvoiceStatus.VENCIDA),
    }


class FinanceService:

    def _with_relations(self):
        return select(Invoice).options(selectinload(Invoice.payments), selectinload(Invoice.student))

    async def mark_overdue(self, db: AsyncSession) -> int:
        """Flag PENDENTE invoices whose due date has passed"""
        result = await db.execute(
            update(Invoice)
            .where(Invoice.status == InvoiceStatus.PENDENTE, Invoice.due_date < date.today())
            .values(status=InvoiceStatus.VENCIDA)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            await db.commit()
            logger.info(f"[Finance] {result.rowcount} invoice(s) marked VENCIDA")
        return result.rowcount or 0

    async def _load(self, db: AsyncSession, invoice_id: str) -> Invoice:
        result = await db.execute(
            self._with_relations()
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        invoice = result.scalar_one_or_none()
        if not invoice:
            raise ResourceNotFoundError("Invoice", invoice_id)
        return invoice

    async def _next_number(self, db: AsyncSession, year: int) -> int:
        result = await db.execute(select(func.max(Invoice.number)).where(Invoice.year == year))
        return (result.scalar() or 0) + 1

    async def create_invoice(self, db: AsyncSession, data: InvoiceCreate, created_by: Optional[str] = None) -> Invoice:
        if not await db.get(Student, data.student_id):
            raise ResourceNotFoundError("Student", data.student_id)

        existing = await db.execute(
            select(Invoice.id).where(
                Invoice.student_id == data.student_id,
                Invoice.month == data.month,
                Invoice.year == data.year,
                Invoice.status != InvoiceStatus.CANCELADA,
            )
        )
        if existing.first():
            raise ValidationError(
                f"Já existe uma fatura para este aluno referente a {MONTHS_PT[data.month - 1]}/{data.year}"
            )

        invoice = Invoice(
            number=await self._next_number(db, data.year),
            student_id=data.student_id,
            amount=data.amount,
            due_date=data.due_date,
            description=data.description,
            month=data.month,
            year=data.year,
            status=InvoiceStatus.PENDENTE,
            created_by=created_by,
        )
        db.add(invoice)
        await db.commit()

        logger.log_audit_event(
            "create", "invoice", str(invoice.id),
            actor_id=created_by, student_id=data.student_id, amount=str(data.amount),
        )
        return await self._load(db, invoice.id)

    async def list_invoices(
        self,
        db: AsyncSession,
        page: int = 1,
        page_size: int = 10,
        student_id: Optional[str] = None,
        status: Optional[InvoiceStatus] = None,
        month: Optional[int] = None,
        year: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> dict:
        await self.mark_overdue(db)

        query = self._with_relations().execution_options(populate_existing=True)
        if student_id:
            query = query.where(Invoice.student_id == student_id)
        if status:
            query = query.where(Invoice.status == status)
        if month:
            query = query.where(Invoice.month == month)
        if year:
            query = query.where(Invoice.year == year)
        if start_date:
            query = query.where(Invoice.due_date >= start_date)
        if end_date:
            query = query.where(Invoice.due_date <= end_date)

        query = query.order_by(Invoice.due_date.desc(), Invoice.created_at.desc())
        return await paginate(db, query, page, page_size)

    async def get_invoice(self, db: AsyncSession, invoice_id: str) -> Invoice:
        await self.mark_overdue(db)
        return await self._load(db, invoice_id)

    async def pay_invoice(
        self, db: AsyncSession, invoice_id: str, data: PayInvoiceRequest, received_by: Optional[str] = None
    ) -> Invoice:
        invoice = await self.get_invoice(db, invoice_id)

        if invoice.status == InvoiceStatus.PAGA:
            raise PaymentError("Esta fatura já está totalmente paga")
        if invoice.status == InvoiceStatus.CANCELADA:
            raise PaymentError("Não é possível pagar uma fatura cancelada")

        remaining = invoice.remaining_balance
        if data.amount > remaining:
            raise PaymentError(
                f"Valor do pagamento ({data.amount}) excede o saldo em dívida ({remaining})"
            )

        invoice.payments.append(Payment(
            amount=data.amount,
            method=data.method,
            reference=data.reference,
            paid_at=datetime.utcnow(),
            received_by=received_by,
        ))
        if invoice.remaining_balance <= 0:
            invoice.status = InvoiceStatus.PAGA

        await db.commit()

        logger.log_audit_event(
            "pay", "invoice", invoice_id,
            actor_id=received_by, amount=str(data.amount), method=data.method.value,
            status=invoice.status.value,
        )
        return await self._load(db, invoice_id)

    async def student_history(self, db: AsyncSession, student_id: str) -> dict:
        student = await db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)

        await self.mark_overdue(db)
        result = await db.execute(
            self._with_relations()
            .where(Invoice.student_id == student_id)
            .order_by(Invoice.year.desc(), Invoice.month.desc())
            .execution_options(populate_existing=True)
        )
        invoices = list(result.scalars().all())
        return {
            "student": student,
            "invoices": invoices,
            "summary": invoice_summary(invoices),
        }

    async def cancel_invoice(self, db: AsyncSession, invoice_id: str) -> Invoice:
        invoice = await self._load(db, invoice_id)
        if invoice.payments:
            raise ValidationError("Não é possível cancelar uma fatura que já tem pagamentos")
        invoice.status = InvoiceStatus.CANCELADA
        await db.commit()
        logger.log_audit_event("cancel", "invoice", invoice_id)
        return await self._load(db, invoice_id)

    async def delete_invoice(self, db: AsyncSession, invoice_id: str) -> None:
        invoice = await self._load(db, invoice_id)
        if invoice.payments:
            raise ValidationError("Não é possível apagar uma fatura que já tem pagamentos")
        await db.delete(invoice)
        await db.commit()
        logger.log_audit_event("delete", "invoice", invoice_id)

    def invoice_document(self, invoice: Invoice) -> dict:
        """Data rendered on the invoice PDF"""
        return {
            "document_number": invoice.document_number,
            "is_paid": invoice.status == InvoiceStatus.PAGA,
            "status": invoice.status.value,
            "student_name": invoice.student.full_name,
            "student_number": invoice.student.student_number,
            "description": invoice.description,
            "period": f"{MONTHS_PT[invoice.month - 1]}/{invoice.year}",
            "due_date": invoice.due_date.strftime("%d/%m/%Y"),
            "amount": invoice.amount,
            "total_paid": invoice.total_paid,
            "remaining_balance": invoice.remaining_balance,
            "payments": [
                {
                    "paid_at": p.paid_at.strftime("%d/%m/%Y"),
                    "method": p.method.value,
                    "reference": p.reference,
                    "amount": p.amount,
                }
                for p in invoice.payments
            ],
        }

    async def invoice_pdf(
        self, db: AsyncSession, invoice_id: str, issued_by: Optional[str] = None
    ) -> Tuple[Invoice, bytes, IssuedDocument]:
        invoice = await self.get_invoice(db, invoice_id)
        pdf = pdf_service.invoice(self.invoice_document(invoice))
        document = await document_service.issue(
            db, invoice.student, DocumentType.INVOICE, pdf, issued_by,
            f"{invoice.document_number} - {invoice.description}",
        )
        return invoice, pdf, document

    async def summary_report(
        self, db: AsyncSession, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> dict:
        await self.mark_overdue(db)

        query = self._with_relations().execution_options(populate_existing=True)
        if start_date:
            query = query.where(Invoice.due_date >= start_date)
        if end_date:
            query = query.where(Invoice.due_date <= end_date)
        invoices = list((await db.execute(query)).scalars().all())

        by_status = {
            status.value: {"count": 0, "amount": Decimal("0")} for status in InvoiceStatus
        }
        for invoice in invoices:
            bucket = by_status[invoice.status.value]
            bucket["count"] += 1
            bucket["amount"] += Decimal(invoice.amount)

        payment_query = select(Payment)
        if start_date:
            payment_query = payment_query.where(Payment.paid_at >= datetime.combine(start_date, time.min))
        if end_date:
            payment_query = payment_query.where(Payment.paid_at <= datetime.combine(end_date, time.max))
        payments = list((await db.execute(payment_query)).scalars().all())

        by_method = {method.value: Decimal("0") for method in PaymentMethod}
        for payment in payments:
            by_method[payment.method.value] += Decimal(payment.amount)

        overdue_amount = sum(
            (i.remaining_balance for i in invoices if i.status == InvoiceStatus.VENCIDA), Decimal("0")
        )
        summary = invoice_summary(invoices)

        return {
            "period": {
                "start_date": start_date.isoformat() if start_date else None,
                "end_date": end_date.isoformat() if end_date else None,
            },
            **summary,
            "overdue_amount": float(overdue_amount),
            "by_status": {k: {"count": v["count"], "amount": float(v["amount"])} for k, v in by_status.items()},
            "payments_received": float(sum(by_method.values(), Decimal("0"))),
            "by_payment_method": {k: float(v) for k, v in by_method.items()},
        }


finance_service = FinanceService()
