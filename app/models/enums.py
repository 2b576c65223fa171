"""
Garage Status Codes and Enums

Standardized constants for estimate records and report options.
"""

from enum import Enum


# Mechanic filter value meaning "no mechanic filter"
ALL_MECHANICS = "ALL"


class EstimateStatus(str, Enum):
    """Estimate (repair order) lifecycle status"""
    DRAFT = "DRAFT"
    AWAITING_PAYMENT = "AWAITING_PAYMENT"
    COMPLETED = "COMPLETED"


class DashboardRange(str, Enum):
    """Quick dashboard periods"""
    TODAY = "today"
    WEEK = "week"    # Monday to now
    MONTH = "month"  # 1st of month to now


class CostFallback(str, Enum):
    """What a part without a resolvable purchase price costs"""
    ZERO_COST = "zero_cost"     # Unpriced part costs nothing
    EXCLUDE = "exclude"         # Unpriced part is left out entirely
    SALE_PRICE = "sale_price"   # Unpriced part is sold at cost (zero margin)
