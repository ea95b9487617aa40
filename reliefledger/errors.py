# reliefledger/errors.py
"""
Error taxonomy for the relief fund ledger.

Two families:
- Caller misuse (NotFoundError, InvalidArgumentError): raised immediately.
- Policy rejections (PaymentRejectedError subclasses): never raised by the
  validator itself. They are recorded on the rejected Payment and can be
  rebuilt from it via Payment.rejection / Payment.raise_for_rejection().
"""
import enum
from typing import Optional


class RejectionReason(str, enum.Enum):
     """Why a proposed payment was refused."""
     VENDOR_NOT_APPROVED = "VENDOR_NOT_APPROVED"
     BENEFICIARY_NOT_VERIFIED = "BENEFICIARY_NOT_VERIFIED"
     INVALID_AMOUNT = "INVALID_AMOUNT"
     PAYMENT_TOO_LARGE = "PAYMENT_TOO_LARGE"
     DUPLICATE_PAYMENT = "DUPLICATE_PAYMENT"
     INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"


class ReliefLedgerError(Exception):
     """Base class for all ledger errors."""


class NotFoundError(ReliefLedgerError, LookupError):
     """Referenced vendor or beneficiary does not exist."""


class InvalidArgumentError(ReliefLedgerError, ValueError):
     """Malformed input, e.g. a negative allocation or a non-numeric amount."""


class PaymentRejectedError(ReliefLedgerError):
     """A payment was refused by policy. Subclasses pin the reason."""
     reason: RejectionReason

     def __init__(self, message: str = "", payment_id: Optional[str] = None):
          self.message = message or self.reason.value
          self.payment_id = payment_id
          super().__init__(self.message)


class VendorNotApprovedError(PaymentRejectedError):
     reason = RejectionReason.VENDOR_NOT_APPROVED


class BeneficiaryNotVerifiedError(PaymentRejectedError):
     reason = RejectionReason.BENEFICIARY_NOT_VERIFIED


class InvalidAmountError(PaymentRejectedError):
     reason = RejectionReason.INVALID_AMOUNT


class PaymentTooLargeError(PaymentRejectedError):
     reason = RejectionReason.PAYMENT_TOO_LARGE


class DuplicatePaymentError(PaymentRejectedError):
     reason = RejectionReason.DUPLICATE_PAYMENT


class InsufficientFundsError(PaymentRejectedError):
     reason = RejectionReason.INSUFFICIENT_FUNDS


REJECTION_ERRORS: dict[RejectionReason, type[PaymentRejectedError]] = {
     cls.reason: cls
     for cls in (
          VendorNotApprovedError,
          BeneficiaryNotVerifiedError,
          InvalidAmountError,
          PaymentTooLargeError,
          DuplicatePaymentError,
          InsufficientFundsError,
     )
}


def rejection_error(
     reason: RejectionReason,
     message: str = "",
     payment_id: Optional[str] = None
) -> PaymentRejectedError:
     """Build the exception instance matching a rejection reason."""
     return REJECTION_ERRORS[RejectionReason(reason)](message, payment_id=payment_id)
