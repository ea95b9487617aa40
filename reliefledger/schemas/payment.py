# reliefledger/schemas/payment.py
"""
Pydantic schemas for payments and ledger entries.

Payments and ledger entries are frozen: once created they are append-only facts.
"""
import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..errors import PaymentRejectedError, RejectionReason, rejection_error


class PaymentOutcome(str, enum.Enum):
     """Outcome recorded for every payment attempt."""
     COMMITTED = "COMMITTED"
     REJECTED = "REJECTED"


class PaymentRequest(BaseModel):
     """A proposed payment from a vendor-facing surface."""

     beneficiary_id: str = Field(..., min_length=1, description="Beneficiary the relief claim belongs to")
     vendor_id: str = Field(..., min_length=1, description="Vendor receiving the payment")
     amount: Decimal = Field(..., description="Requested amount (sign is checked by the rule chain)")
     disaster_id: Optional[str] = Field(None, description="Disaster this payment is drawn against")
     category: Optional[str] = Field(None, description="Spending category, e.g. FOOD or MEDICAL")

     model_config = ConfigDict(
          json_schema_extra={
               "example": {
                    "beneficiary_id": "BEN-0001",
                    "vendor_id": "VEN-FOODCORP",
                    "amount": "400.00",
                    "disaster_id": "DISASTER-2024-FLOOD001",
                    "category": "FOOD",
               }
          }
     )


class Payment(BaseModel):
     """An immutable record of one payment attempt, committed or rejected."""

     payment_id: str
     beneficiary_id: str
     vendor_id: str
     amount: Decimal
     timestamp: datetime
     outcome: PaymentOutcome
     reason: Optional[RejectionReason] = None
     message: Optional[str] = None
     disaster_id: Optional[str] = None
     category: Optional[str] = None

     model_config = ConfigDict(frozen=True)

     @property
     def committed(self) -> bool:
          return self.outcome == PaymentOutcome.COMMITTED

     @property
     def rejection(self) -> Optional[PaymentRejectedError]:
          """The specific rejection error, or None for committed payments."""
          if self.reason is None:
               return None
          return rejection_error(self.reason, self.message or "", payment_id=self.payment_id)

     def raise_for_rejection(self) -> None:
          """Raise the matching PaymentRejectedError if this payment was rejected."""
          error = self.rejection
          if error is not None:
               raise error


class LedgerEntry(BaseModel):
     """A payment as stored in the event log, with its position in the hash chain."""

     sequence: int = Field(..., gt=0)
     payment: Payment
     transaction_hash: str = Field(..., min_length=64, max_length=64)
     previous_hash: str

     model_config = ConfigDict(frozen=True)


class PaymentFilter(BaseModel):
     """
     Criteria for Event Log queries. Unset fields match everything.

     Time bounds are inclusive on `since` and exclusive on `until`. Naive
     bounds are taken to be UTC.
     """

     beneficiary_id: Optional[str] = None
     vendor_id: Optional[str] = None
     outcome: Optional[PaymentOutcome] = None
     reason: Optional[RejectionReason] = None
     disaster_id: Optional[str] = None
     category: Optional[str] = None
     since: Optional[datetime] = None
     until: Optional[datetime] = None

     model_config = ConfigDict(frozen=True)

     @field_validator("since", "until")
     @classmethod
     def _bound_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
          if value is not None and value.tzinfo is None:
               return value.replace(tzinfo=timezone.utc)
          return value

     def matches(self, payment: Payment) -> bool:
          if self.beneficiary_id is not None and payment.beneficiary_id != self.beneficiary_id:
               return False
          if self.vendor_id is not None and payment.vendor_id != self.vendor_id:
               return False
          if self.outcome is not None and payment.outcome != self.outcome:
               return False
          if self.reason is not None and payment.reason != self.reason:
               return False
          if self.disaster_id is not None and payment.disaster_id != self.disaster_id:
               return False
          if self.category is not None and payment.category != self.category:
               return False
          if self.since is not None and payment.timestamp < self.since:
               return False
          if self.until is not None and payment.timestamp >= self.until:
               return False
          return True


PaymentPredicate = Union[PaymentFilter, Callable[[Payment], bool]]
