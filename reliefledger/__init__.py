"""
ReliefLedger: disaster-relief fund ledger with rule-based payment validation.

Verified vendors and beneficiaries, per-beneficiary allocations, an ordered
rule chain deciding every payment, and a hash-chained event log recording
every attempt, committed or rejected.
"""

__version__ = "1.0.0"

from .config import LedgerConfig, load_config
from .context import ReliefContext
from .errors import (
     RejectionReason,
     ReliefLedgerError,
     NotFoundError,
     InvalidArgumentError,
     PaymentRejectedError,
     VendorNotApprovedError,
     BeneficiaryNotVerifiedError,
     InvalidAmountError,
     PaymentTooLargeError,
     DuplicatePaymentError,
     InsufficientFundsError,
)
from .schemas import Payment, PaymentFilter, PaymentOutcome, PaymentRequest

__all__ = [
     "LedgerConfig",
     "load_config",
     "ReliefContext",
     "RejectionReason",
     "ReliefLedgerError",
     "NotFoundError",
     "InvalidArgumentError",
     "PaymentRejectedError",
     "VendorNotApprovedError",
     "BeneficiaryNotVerifiedError",
     "InvalidAmountError",
     "PaymentTooLargeError",
     "DuplicatePaymentError",
     "InsufficientFundsError",
     "Payment",
     "PaymentFilter",
     "PaymentOutcome",
     "PaymentRequest",
]
