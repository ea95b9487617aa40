# reliefledger/services/payment_validator.py
"""
Payment Validator - the policy engine.

For a proposed payment (beneficiary_id, vendor_id, amount):
1. Run the rule chain in order, stopping at the first failure
2. Build an immutable Payment record: COMMITTED, or REJECTED with the reason
3. Append it to the Event Log before returning

Rejections are returned as data, never raised. Even rejected attempts are
logged for audit. Attempts on the same beneficiary are serialized so the
duplicate check, the reservation and the append happen as one step.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from ..config import LedgerConfig
from ..errors import InvalidArgumentError
from ..schemas.payment import Payment, PaymentOutcome, PaymentRequest
from ..utils.amounts import AmountLike, to_amount
from .allocation_ledger import AllocationLedger
from .event_log import EventLog
from .locks import KeyedLock
from .registry import Registry
from .rules import DEFAULT_RULES, Rule, RuleContext, check_rule_order

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
     return datetime.now(timezone.utc)


def _as_utc(ts: datetime) -> datetime:
     """Naive timestamps are taken to be UTC."""
     if ts.tzinfo is None:
          return ts.replace(tzinfo=timezone.utc)
     return ts.astimezone(timezone.utc)


def new_payment_id() -> str:
     return f"PAY-{uuid.uuid4().hex}"


class PaymentValidator:
     """Applies the rule chain and commits every outcome to the Event Log."""

     def __init__(
          self,
          registry: Registry,
          ledger: AllocationLedger,
          event_log: EventLog,
          config: Optional[LedgerConfig] = None,
          rules: Sequence[Rule] = DEFAULT_RULES,
          clock: Clock = utc_now,
     ):
          check_rule_order(rules)
          self.registry = registry
          self.ledger = ledger
          self.event_log = event_log
          self.config = config or LedgerConfig()
          self.rules = tuple(rules)
          self.clock = clock
          self._beneficiary_locks = KeyedLock()

     def validate_and_commit(
          self,
          beneficiary_id: str,
          vendor_id: str,
          amount: AmountLike,
          disaster_id: Optional[str] = None,
          category: Optional[str] = None
     ) -> Payment:
          """
          Validate a proposed payment and record the outcome.

          Returns:
               The Payment record. `payment.committed` tells whether it went
               through; for rejections `payment.reason` names the first rule
               that failed and `payment.rejection` is the matching error.

          Raises:
               InvalidArgumentError: If ids are empty or amount is not a finite
                    number with at most 2 decimal places.
          """
          if not beneficiary_id or not vendor_id:
               raise InvalidArgumentError("beneficiary_id and vendor_id must not be empty")
          value = to_amount(amount)

          with self._beneficiary_locks(beneficiary_id):
               now = _as_utc(self.clock())
               ctx = RuleContext(
                    beneficiary_id=beneficiary_id,
                    vendor_id=vendor_id,
                    amount=value,
                    now=now,
                    registry=self.registry,
                    ledger=self.ledger,
                    event_log=self.event_log,
                    config=self.config,
               )

               failed_rule = None
               message = None
               for rule in self.rules:
                    message = rule(ctx)
                    if message is not None:
                         failed_rule = rule
                         break

               payment = Payment(
                    payment_id=new_payment_id(),
                    beneficiary_id=beneficiary_id,
                    vendor_id=vendor_id,
                    amount=value,
                    timestamp=now,
                    outcome=PaymentOutcome.REJECTED if failed_rule else PaymentOutcome.COMMITTED,
                    reason=failed_rule.reason if failed_rule else None,
                    message=message,
                    disaster_id=disaster_id,
                    category=category,
               )

               try:
                    self.event_log.append(payment)
               except Exception:
                    logger.exception("Could not record payment %s", payment.payment_id)
                    if payment.committed:
                         for rule in self.rules:
                              if rule.undo is not None:
                                   rule.undo(ctx)
                    raise

          if payment.committed:
               logger.info(
                    "Payment %s committed: %s -> vendor %s for beneficiary %s",
                    payment.payment_id, value, vendor_id, beneficiary_id,
               )
          else:
               logger.warning(
                    "Payment %s rejected by %s: %s",
                    payment.payment_id, failed_rule.name, message,
               )
          return payment

     def submit(self, request: PaymentRequest) -> Payment:
          """validate_and_commit for a PaymentRequest schema."""
          return self.validate_and_commit(
               beneficiary_id=request.beneficiary_id,
               vendor_id=request.vendor_id,
               amount=request.amount,
               disaster_id=request.disaster_id,
               category=request.category,
          )
