# reliefledger/services/reporting.py
"""
Reporting - live dashboard figures and audit exports.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from ..schemas.payment import PaymentOutcome, PaymentPredicate
from ..schemas.report import DashboardSummary
from ..utils.amounts import CENT, format_amount
from .event_log import EventLog, as_predicate
from .registry import Registry


def dashboard_summary(registry: Registry, event_log: EventLog) -> DashboardSummary:
     """
     Public accountability figures: what was allocated, what was spent, who
     was helped. Computed from the registry plus one pass over the log.
     """
     total_allocated = sum((b.allocation for b in registry.beneficiaries()), Decimal("0"))

     total_spent = Decimal("0")
     vendor_payments = 0
     rejected = 0
     helped = set()
     by_reason: dict[str, int] = {}
     for payment in event_log.query():
          if payment.outcome == PaymentOutcome.COMMITTED:
               total_spent += payment.amount
               vendor_payments += 1
               helped.add(payment.beneficiary_id)
          else:
               rejected += 1
               key = payment.reason.value if payment.reason else "UNKNOWN"
               by_reason[key] = by_reason.get(key, 0) + 1

     average = (total_spent / vendor_payments) if vendor_payments else Decimal("0")
     efficiency = (
          float((total_spent / total_allocated * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
          if total_allocated else 0.0
     )

     return DashboardSummary(
          total_allocated=total_allocated,
          total_spent=total_spent,
          funds_remaining=total_allocated - total_spent,
          beneficiaries_helped=len(helped),
          vendor_payments=vendor_payments,
          average_payment=average.quantize(CENT, rounding=ROUND_HALF_UP),
          spending_efficiency=efficiency,
          rejected_attempts=rejected,
          rejections_by_reason=by_reason,
     )


def export_audit_rows(event_log: EventLog, criteria: Optional[PaymentPredicate] = None) -> List[dict]:
     """JSON-ready rows for audit exports, including hash chain fields."""
     predicate = as_predicate(criteria)
     rows = []
     for entry in event_log.entries():
          payment = entry.payment
          if not predicate(payment):
               continue
          row = payment.model_dump(mode="json")
          row["amount"] = format_amount(payment.amount)
          row["sequence"] = entry.sequence
          row["transaction_hash"] = entry.transaction_hash
          row["previous_hash"] = entry.previous_hash
          rows.append(row)
     return rows
