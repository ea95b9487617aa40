from .base import Base
from .payment_event import PaymentEvent

__all__ = [
     "Base",
     "PaymentEvent",
]
