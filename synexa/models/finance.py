"""
Finance Models - Propinas (monthly fees) and the payments made against them

An invoice moves PENDENTE -> PAGA once payments cover its amount, and
PENDENTE -> VENCIDA when its due date passes unpaid. CANCELADA is terminal.
Amounts are stored as Numeric(12, 2) and handled as Decimal.
"""

from sqlalchemy import (
    Column, String, Integer, Numeric, Date, DateTime, ForeignKey, Enum as SQLEnum, Index,
)
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
import enum

from synexa.core.database import Base
from synexa.core.types import GUID, generate_uuid


class InvoiceStatus(str, enum.Enum):
    PENDENTE = "PENDENTE"
    PAGA = "PAGA"
    VENCIDA = "VENCIDA"
    CANCELADA = "CANCELADA"


class PaymentMethod(str, enum.Enum):
    DINHEIRO = "DINHEIRO"
    TRANSFERENCIA = "TRANSFERENCIA"
    MULTIBANCO = "MULTIBANCO"
    MBWAY = "MBWAY"
    CARTAO = "CARTAO"
    CHEQUE = "CHEQUE"


class Invoice(Base):
    """Fatura"""
    __tablename__ = "invoices"

    __table_args__ = (
        Index("ix_invoices_student_period", "student_id", "year", "month"),
        Index("ix_invoices_status_due", "status", "due_date"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    number = Column(Integer, nullable=False)  # sequential within the invoice year
    student_id = Column(GUID, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    description = Column(String(200), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    status = Column(SQLEnum(InvoiceStatus), default=InvoiceStatus.PENDENTE, nullable=False)

    created_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    student = relationship("Student", back_populates="invoices")
    payments = relationship(
        "Payment", back_populates="invoice", cascade="all, delete-orphan", order_by="Payment.paid_at"
    )

    @property
    def total_paid(self) -> Decimal:
        return sum((Decimal(p.amount) for p in self.payments), Decimal("0.00"))

    @property
    def remaining_balance(self) -> Decimal:
        return Decimal(self.amount) - self.total_paid

    @property
    def document_number(self) -> str:
        """FT for an open invoice, FR (fatura-recibo) once settled"""
        prefix = "FR" if self.status == InvoiceStatus.PAGA else "FT"
        return f"{prefix} {self.year}/{self.number:04d}"

    def __repr__(self):
        return f"<Invoice {self.document_number} {self.status}>"


class Payment(Base):
    """Pagamento registered against an invoice"""
    __tablename__ = "payments"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    invoice_id = Column(GUID, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(SQLEnum(PaymentMethod), nullable=False)
    reference = Column(String(100), nullable=True)
    paid_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    received_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    invoice = relationship("Invoice", back_populates="payments")

    def __repr__(self):
        return f"<Payment {self.amount} via {self.method}>"
