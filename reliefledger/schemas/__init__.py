from .payment import (
     PaymentOutcome,
     PaymentRequest,
     Payment,
     LedgerEntry,
     PaymentFilter,
     PaymentPredicate,
)
from .report import AggregateRow, DashboardSummary

__all__ = [
     "PaymentOutcome",
     "PaymentRequest",
     "Payment",
     "LedgerEntry",
     "PaymentFilter",
     "PaymentPredicate",
     "AggregateRow",
     "DashboardSummary",
]
