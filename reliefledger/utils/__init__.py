from .amounts import CENT, to_amount, format_amount

__all__ = [
     "CENT",
     "to_amount",
     "format_amount",
]
