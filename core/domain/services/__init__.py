"""Pure domain services."""
from .pricing import PriceLine, PriceBreakdown, compute_subtotal, compute_breakdown

__all__ = ["PriceLine", "PriceBreakdown", "compute_subtotal", "compute_breakdown"]
