# reliefledger/services/sql_event_store.py
"""
SQL-backed EventStore: one PaymentEvent row per ledger entry.

Uniqueness of sequence, payment_id and transaction_hash is enforced by the
table, so a second writer racing on the same sequence fails instead of
forking the chain.
"""
import logging
from typing import Iterator, Optional

from sqlalchemy import desc, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..database import session_scope
from ..models import PaymentEvent
from ..schemas.payment import LedgerEntry

logger = logging.getLogger(__name__)


class SqlAlchemyEventStore:
     """EventStore persisting entries through a SQLAlchemy session factory."""

     def __init__(self, session_factory: sessionmaker, batch_size: int = 500):
          self.session_factory = session_factory
          self.batch_size = batch_size

     def append(self, entry: LedgerEntry) -> None:
          try:
               with session_scope(self.session_factory) as db:
                    db.add(PaymentEvent.from_entry(entry))
          except SQLAlchemyError:
               logger.exception("Failed to persist ledger entry %d", entry.sequence)
               raise

     def entries(self, upto: Optional[int] = None) -> Iterator[LedgerEntry]:
          """Read entries in sequence order, batch by batch."""
          after = 0
          while True:
               with session_scope(self.session_factory) as db:
                    query = db.query(PaymentEvent).filter(PaymentEvent.sequence > after)
                    if upto is not None:
                         query = query.filter(PaymentEvent.sequence <= upto)
                    rows = query.order_by(PaymentEvent.sequence).limit(self.batch_size).all()
                    batch = [row.to_entry() for row in rows]
               if not batch:
                    return
               yield from batch
               after = batch[-1].sequence

     def last_entry(self) -> Optional[LedgerEntry]:
          with session_scope(self.session_factory) as db:
               last = db.query(PaymentEvent).order_by(desc(PaymentEvent.sequence)).limit(1).first()
               return last.to_entry() if last is not None else None

     def __len__(self) -> int:
          with session_scope(self.session_factory) as db:
               return db.query(func.count(PaymentEvent.id)).scalar() or 0
