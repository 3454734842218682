# models/rent_payment.py
import enum
from decimal import Decimal
from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Enum, func
from sqlalchemy.orm import relationship
from .base import Base, generate_uuid


class RentPaymentStatus(str, enum.Enum):
     """Enumeration for rent payment status."""
     PENDING = "pending"
     PAID = "paid"
     OVERDUE = "overdue"
     PARTIAL = "partial"
     CANCELLED = "cancelled"


# Statuses that still accept money
OPEN_PAYMENT_STATUSES = (
     RentPaymentStatus.PENDING,
     RentPaymentStatus.OVERDUE,
     RentPaymentStatus.PARTIAL,
)


class RentPayment(Base):
     """
     RentPayment model - one row per rent cycle of a lease.

     Rows are created in bulk when the lease is created, mutated by
     payment submission and by the overdue sweep, and cancelled (never
     deleted) when the lease terminates before the due date.
     """
     __tablename__ = "rent_payments"

     id = Column(String(36), primary_key=True, default=generate_uuid)

     # Foreign keys
     lease_id = Column(
          String(36),
          ForeignKey("lease_agreements.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     tenant_id = Column(String(36), nullable=False, index=True)

     # Payment details
     amount = Column(Numeric(12, 2), nullable=False)
     amount_paid = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
     late_fee = Column(Numeric(12, 2), nullable=True)
     due_date = Column(Date, nullable=False, index=True)
     paid_date = Column(DateTime, nullable=True)
     status = Column(
          Enum(RentPaymentStatus, name="rent_payment_status", values_callable=lambda e: [m.value for m in e]),
          default=RentPaymentStatus.PENDING,
          nullable=False,
          index=True
     )
     payment_method = Column(String(50), nullable=True)
     transaction_id = Column(String(255), nullable=True)

     version = Column(Integer, nullable=False)

     # Timestamps
     created_at = Column(DateTime, server_default=func.now(), nullable=False)

     # Relationships
     lease = relationship("LeaseAgreement", back_populates="payments")
     transactions = relationship(
          "RentPaymentTransaction",
          back_populates="payment",
          order_by="RentPaymentTransaction.received_at",
          cascade="all, delete-orphan"
     )

     __mapper_args__ = {"version_id_col": version}

     def __repr__(self):
          return f"<RentPayment(id={self.id}, amount={self.amount}, status='{self.status.value}', due_date={self.due_date})>"

     @property
     def amount_due(self) -> Decimal:
          """Rent plus any late fee applied by the overdue sweep."""
          return Decimal(self.amount) + Decimal(self.late_fee or 0)

     @property
     def balance(self) -> Decimal:
          remaining = self.amount_due - Decimal(self.amount_paid or 0)
          return remaining if remaining > 0 else Decimal("0.00")

     def mark_as_overdue(self, late_fee: Decimal) -> None:
          """Mark the payment as overdue and attach the late fee."""
          self.status = RentPaymentStatus.OVERDUE
          self.late_fee = late_fee

     def cancel(self) -> None:
          self.status = RentPaymentStatus.CANCELLED


class RentPaymentTransaction(Base):
     """
     One applied payment against a RentPayment.

     The unique transaction_id makes a resubmitted payment a no-op.
     """
     __tablename__ = "rent_payment_transactions"

     id = Column(String(36), primary_key=True, default=generate_uuid)
     payment_id = Column(
          String(36),
          ForeignKey("rent_payments.id", ondelete="CASCADE"),
          nullable=False,
          index=True
     )
     transaction_id = Column(String(255), nullable=False, unique=True, index=True)
     amount = Column(Numeric(12, 2), nullable=False)
     payment_method = Column(String(50), nullable=True)
     received_at = Column(DateTime, server_default=func.now(), nullable=False)

     payment = relationship("RentPayment", back_populates="transactions")

     def __repr__(self):
          return f"<RentPaymentTransaction(transaction_id={self.transaction_id}, amount={self.amount})>"
