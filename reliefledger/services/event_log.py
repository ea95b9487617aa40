# reliefledger/services/event_log.py
"""
Event Log - append-only, hash-chained record of every payment attempt.

Each entry stores:
1. transaction_hash: SHA-256 over the entry's canonical fields + previous_hash
2. previous_hash: transaction_hash of the previous entry (GENESIS_HASH for the first)

Storage is pluggable behind EventStore (append / entries / last_entry / len).
The log keeps a small in-memory index (last committed time per
beneficiary/vendor pair, committed totals) rebuilt from the store on start.
"""
import hashlib
import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, Iterator, List, Optional, Protocol, Tuple, Union

from ..errors import InvalidArgumentError
from ..schemas.payment import LedgerEntry, Payment, PaymentFilter, PaymentOutcome, PaymentPredicate
from ..schemas.report import AggregateRow
from ..utils.amounts import format_amount

logger = logging.getLogger(__name__)

# Genesis: no previous entry
GENESIS_HASH = "0"

GroupKey = Union[str, Callable[[Payment], Any]]


def compute_transaction_hash(sequence: int, payment: Payment, previous_hash: str) -> str:
     """
     Compute SHA-256 hash for a ledger entry.

     Input string: sequence|payment_id|beneficiary_id|vendor_id|amount|timestamp|
     outcome|reason|disaster_id|category|previous_hash. Returns 64-char hex.
     """
     payload = "|".join([
          str(sequence),
          payment.payment_id,
          payment.beneficiary_id,
          payment.vendor_id,
          format_amount(payment.amount),
          payment.timestamp.isoformat(),
          payment.outcome.value,
          payment.reason.value if payment.reason else "",
          payment.disaster_id or "",
          payment.category or "",
          previous_hash,
     ])
     return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class EventStore(Protocol):
     """Narrow persistence interface for ledger entries."""

     def append(self, entry: LedgerEntry) -> None: ...

     def entries(self, upto: Optional[int] = None) -> Iterator[LedgerEntry]:
          """Entries in sequence order, optionally only those with sequence <= upto."""
          ...

     def last_entry(self) -> Optional[LedgerEntry]: ...

     def __len__(self) -> int: ...


class InMemoryEventStore:
     """Default store: a Python list. Entries are never mutated or removed."""

     def __init__(self):
          self._entries: List[LedgerEntry] = []

     def append(self, entry: LedgerEntry) -> None:
          self._entries.append(entry)

     def entries(self, upto: Optional[int] = None) -> Iterator[LedgerEntry]:
          end = len(self._entries) if upto is None else min(upto, len(self._entries))
          for i in range(end):
               yield self._entries[i]

     def last_entry(self) -> Optional[LedgerEntry]:
          return self._entries[-1] if self._entries else None

     def __len__(self) -> int:
          return len(self._entries)


class PaymentQuery:
     """
     Lazy, restartable view over the log.

     The log length is captured when the query is created; every iteration
     replays that same prefix, so repeated iterations yield the same payments.
     """

     def __init__(self, store: EventStore, predicate: Callable[[Payment], bool], upto: int):
          self._store = store
          self._predicate = predicate
          self.upto = upto

     def __iter__(self) -> Iterator[Payment]:
          for entry in self._store.entries(upto=self.upto):
               if self._predicate(entry.payment):
                    yield entry.payment

     def count(self) -> int:
          return sum(1 for _ in self)

     def total(self) -> Decimal:
          return sum((p.amount for p in self), Decimal("0"))


def as_predicate(criteria: Optional[PaymentPredicate]) -> Callable[[Payment], bool]:
     if criteria is None:
          return lambda payment: True
     if isinstance(criteria, PaymentFilter):
          return criteria.matches
     return criteria


def _key_selector(group_key: GroupKey) -> Callable[[Payment], Any]:
     if callable(group_key):
          return group_key
     if group_key not in Payment.model_fields:
          raise InvalidArgumentError(f"Unknown group key: {group_key}")
     return lambda payment: getattr(payment, group_key)


class EventLog:
     """Append-only payment log with queries and aggregates."""

     def __init__(self, store: Optional[EventStore] = None):
          self.store = store if store is not None else InMemoryEventStore()
          self._lock = threading.Lock()
          self._last_committed: Dict[Tuple[str, str], datetime] = {}
          self._committed_totals: Dict[str, Decimal] = {}
          for entry in self.store.entries():
               self._index(entry.payment)

     def _index(self, payment: Payment) -> None:
          if not payment.committed:
               return
          pair = (payment.beneficiary_id, payment.vendor_id)
          previous = self._last_committed.get(pair)
          if previous is None or payment.timestamp > previous:
               self._last_committed[pair] = payment.timestamp
          self._committed_totals[payment.beneficiary_id] = (
               self._committed_totals.get(payment.beneficiary_id, Decimal("0")) + payment.amount
          )

     def append(self, payment: Payment) -> LedgerEntry:
          """
          Append a payment to the end of the log and return its ledger entry.

          Does NOT update or remove existing entries. The entry is visible to
          queries as soon as this returns.
          """
          with self._lock:
               last = self.store.last_entry()
               sequence = last.sequence + 1 if last else 1
               previous_hash = last.transaction_hash if last else GENESIS_HASH
               entry = LedgerEntry(
                    sequence=sequence,
                    payment=payment,
                    transaction_hash=compute_transaction_hash(sequence, payment, previous_hash),
                    previous_hash=previous_hash,
               )
               self.store.append(entry)
               self._index(payment)
          logger.debug("Appended payment %s as entry %d", payment.payment_id, sequence)
          return entry

     def query(self, criteria: Optional[PaymentPredicate] = None, **fields) -> PaymentQuery:
          """
          Payments matching a PaymentFilter, a predicate callable, or keyword
          filter fields (beneficiary_id=..., outcome=..., since=..., ...).
          """
          if criteria is None and fields:
               criteria = PaymentFilter(**fields)
          elif fields:
               raise TypeError("Pass either a filter or keyword fields, not both")
          return PaymentQuery(self.store, as_predicate(criteria), upto=len(self))

     def aggregate(
          self,
          group_key: GroupKey,
          criteria: Optional[PaymentPredicate] = None
     ) -> Dict[Any, AggregateRow]:
          """
          Counts and sums grouped by a payment field name (e.g. "vendor_id")
          or a key selector callable. Computed in a single pass over the log.
          """
          select = _key_selector(group_key)
          rows: Dict[Any, AggregateRow] = {}
          for payment in self.query(criteria):
               key = select(payment)
               row = rows.get(key)
               if row is None:
                    row = rows[key] = AggregateRow(key=key)
               row.count += 1
               row.total_amount += payment.amount
               if payment.outcome == PaymentOutcome.COMMITTED:
                    row.committed_count += 1
                    row.committed_amount += payment.amount
               else:
                    row.rejected_count += 1
          return rows

     def last_committed_at(self, beneficiary_id: str, vendor_id: str) -> Optional[datetime]:
          """Timestamp of the latest committed payment for a pair, or None."""
          return self._last_committed.get((beneficiary_id, vendor_id))

     def committed_total(self, beneficiary_id: str) -> Decimal:
          return self._committed_totals.get(beneficiary_id, Decimal("0"))

     def committed_totals(self) -> Dict[str, Decimal]:
          return dict(self._committed_totals)

     def entries(self) -> Iterator[LedgerEntry]:
          return self.store.entries()

     def find(self, payment_id: str) -> Optional[LedgerEntry]:
          for entry in self.store.entries():
               if entry.payment.payment_id == payment_id:
                    return entry
          return None

     def __len__(self) -> int:
          return len(self.store)
