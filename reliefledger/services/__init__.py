from .registry import Registry, Vendor, Beneficiary
from .allocation_ledger import AllocationLedger, ReservationResult
from .event_log import (
     EventLog,
     EventStore,
     InMemoryEventStore,
     PaymentQuery,
     compute_transaction_hash,
     GENESIS_HASH,
)
from .sql_event_store import SqlAlchemyEventStore
from .rules import DEFAULT_RULES, Rule, RuleContext
from .payment_validator import PaymentValidator
from .audit import verify_ledger_entry, verify_full_chain, verify_spent_totals
from .reporting import dashboard_summary, export_audit_rows

__all__ = [
     "Registry",
     "Vendor",
     "Beneficiary",
     "AllocationLedger",
     "ReservationResult",
     "EventLog",
     "EventStore",
     "InMemoryEventStore",
     "PaymentQuery",
     "compute_transaction_hash",
     "GENESIS_HASH",
     "SqlAlchemyEventStore",
     "DEFAULT_RULES",
     "Rule",
     "RuleContext",
     "PaymentValidator",
     "verify_ledger_entry",
     "verify_full_chain",
     "verify_spent_totals",
     "dashboard_summary",
     "export_audit_rows",
]
