# reliefledger/services/rules.py
"""
Payment rules - an ordered chain of named checks.

Each rule returns None when the payment passes, or a message when it fails.
The validator stops at the first failure, so order decides which reason is
reported when several rules are violated at once:

1. vendor_approved            -> VENDOR_NOT_APPROVED
2. beneficiary_verified       -> BENEFICIARY_NOT_VERIFIED
3. positive_amount            -> INVALID_AMOUNT
4. within_single_payment_cap  -> PAYMENT_TOO_LARGE
5. not_duplicate              -> DUPLICATE_PAYMENT
6. funds_reserved             -> INSUFFICIENT_FUNDS (reserves funds on success)

A rule that mutates state (`mutates=True`) must be the last in its chain.
Its `undo` is called if the committed payment cannot be recorded.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..config import LedgerConfig
from ..errors import InvalidArgumentError, RejectionReason
from .allocation_ledger import AllocationLedger
from .event_log import EventLog
from .registry import Registry


@dataclass(frozen=True)
class RuleContext:
     """Everything a rule may look at for one payment attempt."""
     beneficiary_id: str
     vendor_id: str
     amount: Decimal
     now: datetime
     registry: Registry
     ledger: AllocationLedger
     event_log: EventLog
     config: LedgerConfig


@dataclass(frozen=True)
class Rule:
     name: str
     reason: RejectionReason
     check: Callable[[RuleContext], Optional[str]]
     mutates: bool = False
     undo: Optional[Callable[[RuleContext], None]] = None

     def __call__(self, ctx: RuleContext) -> Optional[str]:
          return self.check(ctx)


def check_vendor_approved(ctx: RuleContext) -> Optional[str]:
     if not ctx.registry.is_vendor_approved(ctx.vendor_id):
          return f"Vendor {ctx.vendor_id} not approved"
     return None


def check_beneficiary_verified(ctx: RuleContext) -> Optional[str]:
     if not ctx.registry.is_beneficiary_verified(ctx.beneficiary_id):
          return f"Beneficiary {ctx.beneficiary_id} not verified"
     return None


def check_positive_amount(ctx: RuleContext) -> Optional[str]:
     if ctx.amount <= 0:
          return f"Amount must be positive, got {ctx.amount}"
     return None


def check_single_payment_cap(ctx: RuleContext) -> Optional[str]:
     ceiling = ctx.config.max_single_payment
     if ceiling is not None and ctx.amount > ceiling:
          return f"Amount {ctx.amount} exceeds single payment ceiling {ceiling}"
     return None


def check_not_duplicate(ctx: RuleContext) -> Optional[str]:
     last = ctx.event_log.last_committed_at(ctx.beneficiary_id, ctx.vendor_id)
     if last is None:
          return None
     window = ctx.config.duplicate_window
     if window is None or ctx.now - last < window:
          return (
               f"Duplicate payment: vendor {ctx.vendor_id} already paid for "
               f"beneficiary {ctx.beneficiary_id} at {last.isoformat()}"
          )
     return None


def reserve_funds(ctx: RuleContext) -> Optional[str]:
     result = ctx.ledger.reserve(ctx.beneficiary_id, ctx.amount)
     return None if result.ok else result.reason


def release_funds(ctx: RuleContext) -> None:
     ctx.ledger.release(ctx.beneficiary_id, ctx.amount)


DEFAULT_RULES: Sequence[Rule] = (
     Rule("vendor_approved", RejectionReason.VENDOR_NOT_APPROVED, check_vendor_approved),
     Rule("beneficiary_verified", RejectionReason.BENEFICIARY_NOT_VERIFIED, check_beneficiary_verified),
     Rule("positive_amount", RejectionReason.INVALID_AMOUNT, check_positive_amount),
     Rule("within_single_payment_cap", RejectionReason.PAYMENT_TOO_LARGE, check_single_payment_cap),
     Rule("not_duplicate", RejectionReason.DUPLICATE_PAYMENT, check_not_duplicate),
     Rule("funds_reserved", RejectionReason.INSUFFICIENT_FUNDS, reserve_funds,
          mutates=True, undo=release_funds),
)


def check_rule_order(rules: Sequence[Rule]) -> None:
     """
     Raises:
          InvalidArgumentError: If a mutating rule is followed by another rule, or the
               chain is empty, or rule names repeat.
     """
     if not rules:
          raise InvalidArgumentError("Rule chain must not be empty")
     names = [rule.name for rule in rules]
     if len(set(names)) != len(names):
          raise InvalidArgumentError(f"Duplicate rule names in chain: {names}")
     for rule in rules[:-1]:
          if rule.mutates:
               raise InvalidArgumentError(f"Mutating rule {rule.name} must be last in the chain")
