# reliefledger/models/payment_event.py
"""
PaymentEvent model - persistent, hash-chained record of one payment attempt.

Each row stores a SHA-256 hash of the entry's canonical fields and a
reference to the previous row's hash, forming a chain.
Rows are append-only; modification is prevented at the application layer.
"""
from datetime import timezone

from sqlalchemy import Column, DateTime, Enum, Index, Integer, Numeric, String, Text

from ..errors import RejectionReason
from ..schemas.payment import LedgerEntry, Payment, PaymentOutcome
from .base import Base


class PaymentEvent(Base):
     """
     Immutable event log row. `sequence` is the entry's position in the log,
     `timestamp` is stored as naive UTC.
     """
     __table_args__ = (
          # Unique columns get a uq_ constraint plus a plain lookup index
          Index("ix_payment_events_sequence", "sequence"),
          Index("ix_payment_events_payment_id", "payment_id"),
          Index("ix_payment_events_transaction_hash", "transaction_hash"),
     )

     id = Column(Integer, primary_key=True, autoincrement=True)
     sequence = Column(Integer, nullable=False, unique=True)
     payment_id = Column(String(64), nullable=False, unique=True)
     beneficiary_id = Column(String(128), nullable=False, index=True)
     vendor_id = Column(String(128), nullable=False, index=True)
     amount = Column(Numeric(14, 2), nullable=False)
     timestamp = Column(DateTime, nullable=False, index=True)
     outcome = Column(
          Enum(PaymentOutcome, name="payment_outcome", create_constraint=True),
          nullable=False,
          index=True
     )
     reason = Column(Enum(RejectionReason, name="rejection_reason", create_constraint=True), nullable=True)
     message = Column(Text, nullable=True)
     disaster_id = Column(String(128), nullable=True, index=True)
     category = Column(String(64), nullable=True)
     transaction_hash = Column(String(64), nullable=False, unique=True)  # SHA-256 hex length
     previous_hash = Column(String(64), nullable=False, index=True)  # "0" for genesis

     def __repr__(self):
          return f"<PaymentEvent(sequence={self.sequence}, payment_id={self.payment_id}, hash={self.transaction_hash[:16]}...)>"

     @classmethod
     def from_entry(cls, entry: LedgerEntry) -> "PaymentEvent":
          payment = entry.payment
          return cls(
               sequence=entry.sequence,
               payment_id=payment.payment_id,
               beneficiary_id=payment.beneficiary_id,
               vendor_id=payment.vendor_id,
               amount=payment.amount,
               timestamp=payment.timestamp.astimezone(timezone.utc).replace(tzinfo=None),
               outcome=payment.outcome,
               reason=payment.reason,
               message=payment.message,
               disaster_id=payment.disaster_id,
               category=payment.category,
               transaction_hash=entry.transaction_hash,
               previous_hash=entry.previous_hash,
          )

     def to_entry(self) -> LedgerEntry:
          payment = Payment(
               payment_id=self.payment_id,
               beneficiary_id=self.beneficiary_id,
               vendor_id=self.vendor_id,
               amount=self.amount,
               timestamp=self.timestamp.replace(tzinfo=timezone.utc),
               outcome=self.outcome,
               reason=self.reason,
               message=self.message,
               disaster_id=self.disaster_id,
               category=self.category,
          )
          return LedgerEntry(
               sequence=self.sequence,
               payment=payment,
               transaction_hash=self.transaction_hash,
               previous_hash=self.previous_hash,
          )
