# reliefledger/services/registry.py
"""
Registry - verified vendors and beneficiaries.

Identity checks (KYC, tax registration, bank verification) happen outside
this module; the registry trusts the administrative calls it receives.
Vendors and beneficiaries are never deleted, only deactivated.
"""
import logging
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Dict, List, Optional

from ..errors import InvalidArgumentError, NotFoundError
from ..utils.amounts import AmountLike, to_amount

logger = logging.getLogger(__name__)


@dataclass
class Vendor:
     vendor_id: str
     approved: bool = False
     name: Optional[str] = None


@dataclass
class Beneficiary:
     """
     A party eligible for relief funds.

     `spent` is owned by the AllocationLedger; invariant spent <= allocation.
     `lock` guards allocation and spent.
     """
     beneficiary_id: str
     allocation: Decimal
     verified: bool = True
     spent: Decimal = Decimal("0")
     lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

     @property
     def remaining(self) -> Decimal:
          return self.allocation - self.spent


class Registry:
     """
     Holds vendors and beneficiaries and their approval status.

     `committed_total` looks up what the event log already holds for a
     beneficiary id. A newly registered beneficiary starts with that as its
     spent, so registering over a persisted log keeps spent == sum(committed).
     """

     def __init__(self, committed_total: Optional[Callable[[str], Decimal]] = None):
          self._committed_total = committed_total
          self._lock = threading.RLock()
          self._vendors: Dict[str, Vendor] = {}
          self._beneficiaries: Dict[str, Beneficiary] = {}

     # ------------------------------------------------------------------
     # Vendors
     # ------------------------------------------------------------------

     def approve_vendor(self, vendor_id: str, name: Optional[str] = None) -> Vendor:
          """Mark a vendor approved, creating it if unknown. Approving twice is a no-op."""
          if not vendor_id:
               raise InvalidArgumentError("vendor_id must not be empty")
          with self._lock:
               vendor = self._vendors.get(vendor_id)
               if vendor is None:
                    vendor = self._vendors[vendor_id] = Vendor(vendor_id=vendor_id, name=name)
               elif name is not None and vendor.name is None:
                    vendor.name = name
               if not vendor.approved:
                    vendor.approved = True
                    logger.info("Vendor %s approved", vendor_id)
               return vendor

     def revoke_vendor(self, vendor_id: str) -> Vendor:
          """
          Mark a vendor unapproved.

          Raises:
               NotFoundError: If the vendor was never registered.
          """
          with self._lock:
               vendor = self._vendors.get(vendor_id)
               if vendor is None:
                    raise NotFoundError(f"Vendor {vendor_id} not found")
               if vendor.approved:
                    vendor.approved = False
                    logger.info("Vendor %s revoked", vendor_id)
               return vendor

     def is_vendor_approved(self, vendor_id: str) -> bool:
          vendor = self._vendors.get(vendor_id)
          return vendor is not None and vendor.approved

     def get_vendor(self, vendor_id: str) -> Vendor:
          vendor = self._vendors.get(vendor_id)
          if vendor is None:
               raise NotFoundError(f"Vendor {vendor_id} not found")
          return vendor

     def vendors(self) -> List[Vendor]:
          with self._lock:
               return list(self._vendors.values())

     # ------------------------------------------------------------------
     # Beneficiaries
     # ------------------------------------------------------------------

     def verify_beneficiary(self, beneficiary_id: str, allocation: AmountLike) -> Beneficiary:
          """
          Register (or re-verify) a beneficiary with an allocation.

          A new beneficiary starts with the amount the event log already
          holds for it. Re-verifying a known beneficiary replaces its
          allocation and keeps what it has already spent.

          Raises:
               InvalidArgumentError: If allocation is negative, malformed, or
                    below what the beneficiary has already spent.
          """
          if not beneficiary_id:
               raise InvalidArgumentError("beneficiary_id must not be empty")
          amount = to_amount(allocation, field="allocation")
          if amount < 0:
               raise InvalidArgumentError(f"allocation must not be negative, got {amount}")

          with self._lock:
               beneficiary = self._beneficiaries.get(beneficiary_id)
               if beneficiary is None:
                    spent = self._committed_total(beneficiary_id) if self._committed_total else Decimal("0")
                    if amount < spent:
                         raise InvalidArgumentError(
                              f"allocation {amount} is below amount already committed in the log {spent}"
                         )
                    beneficiary = Beneficiary(beneficiary_id=beneficiary_id, allocation=amount, spent=spent)
                    self._beneficiaries[beneficiary_id] = beneficiary
               else:
                    with beneficiary.lock:
                         if amount < beneficiary.spent:
                              raise InvalidArgumentError(
                                   f"allocation {amount} is below amount already spent {beneficiary.spent}"
                              )
                         beneficiary.allocation = amount
                         beneficiary.verified = True
               logger.info("Beneficiary %s verified with allocation %s", beneficiary_id, amount)
               return beneficiary

     def revoke_beneficiary(self, beneficiary_id: str) -> Beneficiary:
          """
          Clear a beneficiary's verification flag. Allocation and spent are kept.

          Raises:
               NotFoundError: If the beneficiary was never registered.
          """
          with self._lock:
               beneficiary = self.get_beneficiary(beneficiary_id)
               if beneficiary.verified:
                    beneficiary.verified = False
                    logger.info("Beneficiary %s revoked", beneficiary_id)
               return beneficiary

     def is_beneficiary_verified(self, beneficiary_id: str) -> bool:
          beneficiary = self._beneficiaries.get(beneficiary_id)
          return beneficiary is not None and beneficiary.verified

     def get_beneficiary(self, beneficiary_id: str) -> Beneficiary:
          beneficiary = self._beneficiaries.get(beneficiary_id)
          if beneficiary is None:
               raise NotFoundError(f"Beneficiary {beneficiary_id} not found")
          return beneficiary

     def beneficiaries(self) -> List[Beneficiary]:
          with self._lock:
               return list(self._beneficiaries.values())
