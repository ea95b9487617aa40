"""
Tests for per-key locks.
"""

from reliefledger.services.locks import KeyedLock


class TestKeyedLock:
    """Tests for KeyedLock."""

    def test_same_key_same_lock(self):
        locks = KeyedLock()
        lock = locks("BEN-1")
        assert locks("BEN-1") is lock
        assert locks("BEN-2") is not lock

    def test_released_keys_are_dropped(self):
        """Keys seen once do not pile up after their lock is released."""
        locks = KeyedLock()
        for i in range(100):
            with locks(f"BEN-UNKNOWN-{i}"):
                pass
        assert len(locks) == 0

    def test_held_lock_is_kept(self):
        locks = KeyedLock()
        with locks("BEN-1"):
            assert len(locks) == 1
            assert locks("BEN-1").acquire(blocking=False)
            locks("BEN-1").release()

    def test_validator_does_not_keep_unknown_ids(self, validator):
        for i in range(50):
            validator.validate_and_commit(f"BEN-GHOST-{i}", "VEN-NONE", "10")
        assert len(validator._beneficiary_locks) == 0
