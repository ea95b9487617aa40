# reliefledger/services/audit.py
"""
Audit verification - tamper evidence for the event log.

Verification recomputes each entry's hash and compares it with the stored
one, then checks that previous_hash links to the entry before it. Spent
reconciliation checks the redundant per-beneficiary `spent` against the sum
of committed payments in the log.
"""
from decimal import Decimal
from typing import Tuple

from .event_log import GENESIS_HASH, EventLog, compute_transaction_hash
from .registry import Registry


def verify_ledger_entry(event_log: EventLog, payment_id: str) -> Tuple[bool, str]:
     """
     Verify a single entry by payment id.

     Returns:
          (success: bool, message: str)
          - (True, "Verification passed") if hash matches and the link holds
          - (False, reason) if hash mismatch, missing record, or chain broken
     """
     previous = None
     for entry in event_log.entries():
          if entry.payment.payment_id == payment_id:
               computed = compute_transaction_hash(entry.sequence, entry.payment, entry.previous_hash)
               if computed != entry.transaction_hash:
                    return False, (
                         f"Hash mismatch: stored={entry.transaction_hash[:16]}..., "
                         f"computed={computed[:16]}..."
                    )
               expected_previous = previous.transaction_hash if previous else GENESIS_HASH
               if entry.previous_hash != expected_previous:
                    return False, "Chain broken: previous_hash does not match previous record"
               return True, "Verification passed"
          previous = entry
     return False, "Ledger entry not found"


def verify_full_chain(event_log: EventLog) -> Tuple[bool, str, int]:
     """
     Verify the entire chain from first to last entry.

     Returns:
          (all_valid: bool, message: str, entries_checked: int)
     """
     prev_hash = GENESIS_HASH
     expected_sequence = 1
     checked = 0

     for entry in event_log.entries():
          if entry.sequence != expected_sequence:
               return False, f"Sequence gap at {entry.sequence}: expected {expected_sequence}", checked
          if entry.previous_hash != prev_hash:
               return False, f"Chain broken at sequence={entry.sequence}: previous_hash mismatch", checked
          computed = compute_transaction_hash(entry.sequence, entry.payment, entry.previous_hash)
          if computed != entry.transaction_hash:
               return False, f"Hash mismatch at sequence={entry.sequence}", checked
          prev_hash = entry.transaction_hash
          expected_sequence += 1
          checked += 1

     if checked == 0:
          return True, "Chain is empty (no entries)", 0
     return True, "Full chain verification passed", checked


def verify_spent_totals(registry: Registry, event_log: EventLog) -> Tuple[bool, str, int]:
     """
     Check that every beneficiary's spent equals its committed payments.

     Returns:
          (all_match: bool, message: str, beneficiaries_checked: int)
     """
     totals = {}
     for entry in event_log.entries():
          payment = entry.payment
          if payment.committed:
               totals[payment.beneficiary_id] = totals.get(payment.beneficiary_id, Decimal("0")) + payment.amount

     checked = 0
     for beneficiary in registry.beneficiaries():
          expected = totals.get(beneficiary.beneficiary_id, Decimal("0"))
          if beneficiary.spent != expected:
               return False, (
                    f"Spent mismatch for {beneficiary.beneficiary_id}: "
                    f"ledger={beneficiary.spent}, log={expected}"
               ), checked
          if beneficiary.spent > beneficiary.allocation:
               return False, f"Beneficiary {beneficiary.beneficiary_id} spent above allocation", checked
          checked += 1
     return True, "Spent totals match the event log", checked
