# reliefledger/services/allocation_ledger.py
"""
Allocation Ledger - per-beneficiary allocation and spent tracking.

`reserve` is the only operation that needs coordination: it runs as a
critical section on the beneficiary's own lock, so two concurrent
reservations can never together exceed the allocation. The critical
section does no I/O.
"""
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, NamedTuple

from ..errors import InvalidArgumentError
from ..utils.amounts import AmountLike, to_amount
from .registry import Registry

if TYPE_CHECKING:
     from .event_log import EventLog

logger = logging.getLogger(__name__)


class ReservationResult(NamedTuple):
     ok: bool
     reason: str = ""


class AllocationLedger:
     """Tracks allocation and spent for each beneficiary held by the Registry."""

     def __init__(self, registry: Registry):
          self.registry = registry

     def remaining_balance(self, beneficiary_id: str) -> Decimal:
          """
          Return allocation - spent.

          Raises:
               NotFoundError: If the beneficiary is unknown.
          """
          beneficiary = self.registry.get_beneficiary(beneficiary_id)
          with beneficiary.lock:
               return beneficiary.remaining

     def spent(self, beneficiary_id: str) -> Decimal:
          return self.registry.get_beneficiary(beneficiary_id).spent

     def reserve(self, beneficiary_id: str, amount: AmountLike) -> ReservationResult:
          """
          Atomically commit part of a beneficiary's allocation.

          Returns:
               ReservationResult(ok=True) when spent was incremented,
               ReservationResult(ok=False, reason) when funds are insufficient.

          Raises:
               NotFoundError: If the beneficiary is unknown.
               InvalidArgumentError: If amount is malformed or negative.
          """
          value = to_amount(amount)
          if value < 0:
               raise InvalidArgumentError(f"reservation amount must not be negative, got {value}")

          beneficiary = self.registry.get_beneficiary(beneficiary_id)
          with beneficiary.lock:
               remaining = beneficiary.remaining
               if value > remaining:
                    return ReservationResult(
                         False,
                         f"Insufficient funds: requested {value}, remaining {remaining}",
                    )
               beneficiary.spent += value
          return ReservationResult(True)

     def release(self, beneficiary_id: str, amount: AmountLike) -> None:
          """
          Undo a reservation whose payment could not be recorded.

          Called by the funds_reserved rule's undo when the committed payment
          could not be appended to the event log.
          """
          value = to_amount(amount)
          beneficiary = self.registry.get_beneficiary(beneficiary_id)
          with beneficiary.lock:
               if value > beneficiary.spent:
                    raise InvalidArgumentError(
                         f"cannot release {value}, only {beneficiary.spent} spent"
                    )
               beneficiary.spent -= value
          logger.warning("Released reservation of %s for beneficiary %s", value, beneficiary_id)

     def top_up(self, beneficiary_id: str, extra_allocation: AmountLike) -> Decimal:
          """
          Increase a beneficiary's allocation. Returns the new allocation.

          Raises:
               NotFoundError: If the beneficiary is unknown.
               InvalidArgumentError: If extra_allocation is malformed or negative.
          """
          extra = to_amount(extra_allocation, field="extra_allocation")
          if extra < 0:
               raise InvalidArgumentError(f"extra_allocation must not be negative, got {extra}")

          beneficiary = self.registry.get_beneficiary(beneficiary_id)
          with beneficiary.lock:
               beneficiary.allocation += extra
               allocation = beneficiary.allocation
          logger.info("Beneficiary %s topped up by %s to %s", beneficiary_id, extra, allocation)
          return allocation

     def restore_from(self, event_log: "EventLog") -> int:
          """
          Recompute spent for every registered beneficiary from committed
          payments in the log. Used after re-registering beneficiaries over a
          persisted event log.

          Returns:
               Number of beneficiaries restored.

          Raises:
               InvalidArgumentError: If the log shows more spent than a
                    beneficiary's allocation.
          """
          totals = event_log.committed_totals()
          restored = 0
          for beneficiary in self.registry.beneficiaries():
               total = totals.get(beneficiary.beneficiary_id, Decimal("0"))
               with beneficiary.lock:
                    if total > beneficiary.allocation:
                         raise InvalidArgumentError(
                              f"Beneficiary {beneficiary.beneficiary_id} has {total} committed, "
                              f"above allocation {beneficiary.allocation}"
                         )
                    beneficiary.spent = total
               restored += 1
          return restored
