"""
Tests for the event log: append, queries, aggregates.
"""

import pytest
from datetime import timedelta
from decimal import Decimal

from reliefledger.errors import InvalidArgumentError, RejectionReason
from reliefledger.schemas import PaymentFilter, PaymentOutcome
from reliefledger.services import GENESIS_HASH, compute_transaction_hash


@pytest.fixture
def busy_log(registry, validator, clock, sample_vendors, event_log):
    """A log with commits and rejections across several vendors and days."""
    for vendor in sample_vendors:
        registry.approve_vendor(vendor["vendor_id"], name=vendor["name"])
    for i in range(3):
        registry.verify_beneficiary(f"BEN-{i}", "5000")

    for day in range(3):
        for i in range(3):
            for vendor in sample_vendors:
                validator.validate_and_commit(
                    f"BEN-{i}",
                    vendor["vendor_id"],
                    str(100 * (i + 1) + day),
                    disaster_id="DISASTER-2024-FLOOD001",
                    category=vendor["category"],
                )
        clock.advance(days=1)
    validator.validate_and_commit("BEN-0", "VEN-ROGUE", "50")
    return event_log


class TestAppend:
    """Tests for append and the hash chain."""

    def test_sequence_and_chain(self, funded, validator, event_log):
        funded.approve_vendor("VEN-2")
        validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "10")
        validator.validate_and_commit("BEN-0001", "VEN-2", "10")
        first, second = list(event_log.entries())
        assert (first.sequence, second.sequence) == (1, 2)
        assert first.previous_hash == GENESIS_HASH
        assert second.previous_hash == first.transaction_hash
        assert first.transaction_hash == compute_transaction_hash(1, first.payment, GENESIS_HASH)

    def test_hash_depends_on_content(self, funded, validator, event_log):
        validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "10")
        entry = next(iter(event_log.entries()))
        tampered = entry.payment.model_copy(update={"amount": Decimal("10000")})
        assert compute_transaction_hash(1, tampered, GENESIS_HASH) != entry.transaction_hash

    def test_find(self, funded, validator, event_log):
        payment = validator.validate_and_commit("BEN-0001", "VEN-FOODCORP", "10")
        assert event_log.find(payment.payment_id).payment == payment
        assert event_log.find("PAY-missing") is None

    def test_committed_totals(self, busy_log):
        assert busy_log.committed_total("BEN-0") == Decimal("100") * 4 + Decimal("101") * 4 + Decimal("102") * 4
        assert busy_log.committed_total("BEN-unknown") == Decimal("0")


class TestQuery:
    """Tests for query."""

    def test_query_all(self, busy_log):
        assert busy_log.query().count() == 37

    def test_query_restartable(self, busy_log):
        """A query can be iterated more than once with the same result."""
        query = busy_log.query(vendor_id="VEN-FOODCORP")
        assert list(query) == list(query)
        assert query.count() == 9

    def test_query_snapshot(self, busy_log, validator, registry):
        """Entries appended after query() was called are not included."""
        query = busy_log.query()
        before = query.count()
        registry.approve_vendor("VEN-LATE")
        validator.validate_and_commit("BEN-1", "VEN-LATE", "1")
        assert query.count() == before
        assert busy_log.query().count() == before + 1

    def test_query_by_outcome(self, busy_log):
        rejected = list(busy_log.query(outcome=PaymentOutcome.REJECTED))
        assert len(rejected) == 1
        assert rejected[0].reason == RejectionReason.VENDOR_NOT_APPROVED

    def test_query_time_range(self, busy_log, clock):
        """since is inclusive, until is exclusive."""
        start = clock.now - timedelta(days=3)
        day_two = list(busy_log.query(since=start + timedelta(days=1), until=start + timedelta(days=2)))
        assert len(day_two) == 12
        assert all(p.amount % 100 == 1 for p in day_two)

    def test_query_naive_bounds(self, busy_log, clock):
        """Naive bounds are read as UTC."""
        start = (clock.now - timedelta(days=3)).replace(tzinfo=None)
        day_two = list(busy_log.query(since=start + timedelta(days=1), until=start + timedelta(days=2)))
        assert len(day_two) == 12
        assert len(list(busy_log.query(since=start))) == 37
        assert PaymentFilter(until=start).until.tzinfo is not None

    def test_query_with_filter_object(self, busy_log):
        criteria = PaymentFilter(beneficiary_id="BEN-2", category="MEDICAL")
        payments = list(busy_log.query(criteria))
        assert len(payments) == 6
        assert {p.vendor_id for p in payments} == {"VEN-MEDSUPPLY", "VEN-EQUIPMED"}

    def test_query_with_predicate(self, busy_log):
        large = busy_log.query(lambda p: p.amount >= Decimal("300"))
        assert large.count() == 12

    def test_query_total(self, busy_log):
        assert busy_log.query(beneficiary_id="BEN-1", outcome=PaymentOutcome.COMMITTED).total() == \
            Decimal("200") * 4 + Decimal("201") * 4 + Decimal("202") * 4

    def test_filter_and_fields_conflict(self, busy_log):
        with pytest.raises(TypeError):
            busy_log.query(PaymentFilter(), vendor_id="VEN-NUTRI")


class TestAggregate:
    """Tests for aggregate."""

    def test_aggregate_matches_query(self, busy_log):
        """Committed sum per vendor equals the filtered query sum."""
        rows = busy_log.aggregate("vendor_id")
        for vendor_id, row in rows.items():
            manual = sum(
                (p.amount for p in busy_log.query(vendor_id=vendor_id, outcome=PaymentOutcome.COMMITTED)),
                Decimal("0"),
            )
            assert row.committed_amount == manual

    def test_aggregate_counts(self, busy_log):
        rows = busy_log.aggregate("vendor_id")
        assert rows["VEN-ROGUE"].rejected_count == 1
        assert rows["VEN-ROGUE"].committed_count == 0
        assert rows["VEN-NUTRI"].count == 9
        assert sum(row.count for row in rows.values()) == len(busy_log)

    def test_aggregate_by_callable(self, busy_log):
        rows = busy_log.aggregate(lambda p: p.timestamp.date())
        assert len(rows) == 4  # three payment days plus the rejected attempt

    def test_aggregate_with_filter(self, busy_log):
        rows = busy_log.aggregate("category", PaymentFilter(outcome=PaymentOutcome.COMMITTED))
        assert set(rows) == {"FOOD", "MEDICAL"}
        assert rows["FOOD"].committed_count == 18

    def test_aggregate_unknown_key(self, busy_log):
        with pytest.raises(InvalidArgumentError):
            busy_log.aggregate("colour")

    def test_aggregate_empty_log(self, event_log):
        assert event_log.aggregate("vendor_id") == {}
