# reliefledger/utils/amounts.py
"""Monetary amount parsing. All amounts are Decimals with at most 2 decimal places."""
from decimal import Decimal, InvalidOperation
from typing import Union

from ..errors import InvalidArgumentError

CENT = Decimal("0.01")

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike, field: str = "amount") -> Decimal:
     """
     Convert value to a Decimal amount.

     Floats go through str() so 0.1 stays 0.1. Sign is not checked here;
     callers decide whether zero or negative values are allowed.

     Raises:
          InvalidArgumentError: If value is not a finite number with at most
               2 decimal places.
     """
     if isinstance(value, bool):
          raise InvalidArgumentError(f"{field} must be a number, got {value!r}")
     try:
          amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
     except (InvalidOperation, ValueError, TypeError):
          raise InvalidArgumentError(f"{field} must be a number, got {value!r}")

     if not amount.is_finite():
          raise InvalidArgumentError(f"{field} must be finite, got {value!r}")
     try:
          exact = amount == amount.quantize(CENT)
     except InvalidOperation:
          raise InvalidArgumentError(f"{field} is out of range: {value!r}")
     if not exact:
          raise InvalidArgumentError(f"{field} has more than 2 decimal places: {value!r}")
     return amount


def format_amount(amount: Decimal) -> str:
     """Canonical 2-decimal string used for hashing and exports."""
     return f"{amount.quantize(CENT):.2f}"
