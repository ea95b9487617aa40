# reliefledger/context.py
"""
ReliefContext - the explicitly constructed object holding every component.

Usage:
     with ReliefContext.from_env() as ctx:
          ctx.registry.approve_vendor("VEN-FOODCORP")
          ctx.registry.verify_beneficiary("BEN-0001", "1000")
          payment = ctx.validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "400")
"""
import logging
from typing import Optional

from sqlalchemy.engine import Engine

from .config import LedgerConfig, load_config
from .database import create_db_engine, create_session_factory, init_db
from .schemas.report import DashboardSummary
from .services.allocation_ledger import AllocationLedger
from .services.audit import verify_full_chain, verify_spent_totals
from .services.event_log import EventLog, EventStore
from .services.payment_validator import Clock, PaymentValidator, utc_now
from .services.registry import Registry
from .services.reporting import dashboard_summary
from .services.sql_event_store import SqlAlchemyEventStore

logger = logging.getLogger(__name__)


class ReliefContext:
     """
     Builds registry, allocation ledger, event log and validator.

     If no store is passed and the config names a database, a SQL event store
     is created (tables included) and its engine is disposed on close().
     """

     def __init__(
          self,
          config: Optional[LedgerConfig] = None,
          store: Optional[EventStore] = None,
          clock: Clock = utc_now
     ):
          self.config = config or LedgerConfig()
          self.engine: Optional[Engine] = None

          if store is None and self.config.database_url:
               self.engine = create_db_engine(self.config.database_url, echo=self.config.sql_echo)
               init_db(self.engine)
               store = SqlAlchemyEventStore(create_session_factory(self.engine))
               logger.info("Event log persisted to %s", self.engine.url.render_as_string(hide_password=True))

          self.event_log = EventLog(store)
          self.registry = Registry(committed_total=self.event_log.committed_total)
          self.ledger = AllocationLedger(self.registry)
          self.validator = PaymentValidator(
               self.registry,
               self.ledger,
               self.event_log,
               config=self.config,
               clock=clock,
          )
          self.closed = False

     @classmethod
     def from_env(cls, **kwargs) -> "ReliefContext":
          return cls(config=load_config(), **kwargs)

     def restore(self) -> int:
          """Recompute spent for every registered beneficiary from the log."""
          return self.ledger.restore_from(self.event_log)

     def summary(self) -> DashboardSummary:
          return dashboard_summary(self.registry, self.event_log)

     def verify(self) -> bool:
          """True when the hash chain is intact and spent totals match the log."""
          chain_ok, chain_msg, _ = verify_full_chain(self.event_log)
          spent_ok, spent_msg, _ = verify_spent_totals(self.registry, self.event_log)
          if not chain_ok:
               logger.error("Chain verification failed: %s", chain_msg)
          if not spent_ok:
               logger.error("Spent verification failed: %s", spent_msg)
          return chain_ok and spent_ok

     def close(self) -> None:
          if self.closed:
               return
          if self.engine is not None:
               self.engine.dispose()
          self.closed = True

     def __enter__(self) -> "ReliefContext":
          return self

     def __exit__(self, exc_type, exc, tb) -> None:
          self.close()
