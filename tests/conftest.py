"""
Pytest configuration and fixtures for ReliefLedger tests.
"""

import pytest
import sys
import os
from datetime import datetime, timedelta, timezone
from decimal import Decimal

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from reliefledger.config import LedgerConfig
from reliefledger.services import AllocationLedger, EventLog, PaymentValidator, Registry


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    """Ceiling 5000, duplicate window of one day."""
    return LedgerConfig(max_single_payment=Decimal("5000"), duplicate_window=timedelta(days=1))


@pytest.fixture
def event_log():
    return EventLog()


@pytest.fixture
def registry(event_log):
    return Registry(committed_total=event_log.committed_total)


@pytest.fixture
def ledger(registry):
    return AllocationLedger(registry)


@pytest.fixture
def validator(registry, ledger, event_log, config, clock):
    return PaymentValidator(registry, ledger, event_log, config=config, clock=clock)


@pytest.fixture
def funded(registry):
    """One approved vendor and one verified beneficiary with allocation 1000."""
    registry.approve_vendor("VEN-FOODCORP", name="FoodCorp Ltd")
    registry.verify_beneficiary("BEN-0001", "1000")
    return registry


@pytest.fixture
def sample_vendors():
    """Relief vendors from the flood response."""
    return [
        {"vendor_id": "VEN-FOODCORP", "name": "FoodCorp Ltd", "category": "FOOD"},
        {"vendor_id": "VEN-NUTRI", "name": "NutriSupply", "category": "FOOD"},
        {"vendor_id": "VEN-MEDSUPPLY", "name": "MedSupply Inc", "category": "MEDICAL"},
        {"vendor_id": "VEN-EQUIPMED", "name": "EquipMed", "category": "MEDICAL"},
    ]
