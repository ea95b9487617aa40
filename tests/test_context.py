"""
Tests for ReliefContext wiring.
"""

import pytest
from decimal import Decimal

from reliefledger import InvalidArgumentError, RejectionReason, ReliefContext
from reliefledger.config import LedgerConfig
from reliefledger.services import InMemoryEventStore, SqlAlchemyEventStore


def _pay(ctx):
    ctx.registry.approve_vendor("VEN-FOODCORP")
    ctx.registry.verify_beneficiary("BEN-0001", "1000")
    return ctx.validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "400")


class TestReliefContext:
    """Tests for the in-memory and SQL-backed contexts."""

    def test_in_memory_by_default(self, clock):
        with ReliefContext(clock=clock) as ctx:
            assert isinstance(ctx.event_log.store, InMemoryEventStore)
            assert ctx.engine is None
            assert _pay(ctx).committed
            assert ctx.verify()
        assert ctx.closed

    def test_sql_store_from_config(self, clock):
        ctx = ReliefContext(config=LedgerConfig(database_url="sqlite://"), clock=clock)
        try:
            assert isinstance(ctx.event_log.store, SqlAlchemyEventStore)
            assert _pay(ctx).committed
            assert len(ctx.event_log) == 1
            assert ctx.verify()
        finally:
            ctx.close()
        assert ctx.closed
        ctx.close()

    def test_explicit_store_wins(self, clock):
        store = InMemoryEventStore()
        with ReliefContext(config=LedgerConfig(database_url="sqlite://"), store=store, clock=clock) as ctx:
            assert ctx.event_log.store is store
            assert ctx.engine is None

    def test_summary(self, clock):
        with ReliefContext(clock=clock) as ctx:
            _pay(ctx)
            summary = ctx.summary()
            assert summary.total_spent == Decimal("400")
            assert summary.funds_remaining == Decimal("600")

    def test_registration_over_existing_log(self, clock):
        """A fresh registry over an old log starts from the committed spend."""
        store = InMemoryEventStore()
        with ReliefContext(store=store, clock=clock) as ctx:
            _pay(ctx)

        with ReliefContext(store=store, clock=clock) as ctx:
            ctx.registry.verify_beneficiary("BEN-0001", "1000")
            assert ctx.ledger.remaining_balance("BEN-0001") == Decimal("600")
            assert ctx.verify()
            assert ctx.restore() == 1
            assert ctx.ledger.remaining_balance("BEN-0001") == Decimal("600")

    def test_restart_over_sqlite_file_cannot_overdraw(self, tmp_path, clock):
        """After a restart the allocation still bounds new payments without restore()."""
        config = LedgerConfig(database_url=f"sqlite:///{tmp_path / 'relief.db'}")
        with ReliefContext(config=config, clock=clock) as ctx:
            ctx.registry.approve_vendor("VEN-FOODCORP")
            ctx.registry.verify_beneficiary("BEN-0001", "1000")
            assert ctx.validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "900").committed

        with ReliefContext(config=config, clock=clock) as ctx:
            ctx.registry.approve_vendor("VEN-MEDSUPPLY")
            ctx.registry.verify_beneficiary("BEN-0001", "1000")
            assert ctx.ledger.spent("BEN-0001") == Decimal("900")

            payment = ctx.validator.validate_and_commit("BEN-0001", "VEN-MEDSUPPLY", "900")
            assert payment.reason == RejectionReason.INSUFFICIENT_FUNDS
            assert ctx.validator.validate_and_commit("BEN-0001", "VEN-MEDSUPPLY", "100").committed
            assert ctx.event_log.committed_total("BEN-0001") == Decimal("1000")
            assert ctx.verify()

    def test_allocation_below_logged_spend(self, clock):
        store = InMemoryEventStore()
        with ReliefContext(store=store, clock=clock) as ctx:
            _pay(ctx)

        with ReliefContext(store=store, clock=clock) as ctx:
            with pytest.raises(InvalidArgumentError):
                ctx.registry.verify_beneficiary("BEN-0001", "300")
            assert not ctx.registry.is_beneficiary_verified("BEN-0001")

    def test_from_env(self, monkeypatch):
        monkeypatch.delenv("DATABASE_URL", raising=False)
        monkeypatch.delenv("DB_SERVER", raising=False)
        monkeypatch.delenv("RELIEF_DUPLICATE_WINDOW_SECONDS", raising=False)
        monkeypatch.setenv("RELIEF_MAX_SINGLE_PAYMENT", "750")
        monkeypatch.setattr("reliefledger.config.load_dotenv", lambda: None)
        with ReliefContext.from_env() as ctx:
            assert ctx.config.max_single_payment == Decimal("750")
            assert ctx.validator.config is ctx.config
