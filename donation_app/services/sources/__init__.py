from .base import CategorySource, CourierChargeSource
from .providers import make_reference_sources

__all__ = ["CategorySource", "CourierChargeSource", "make_reference_sources"]
