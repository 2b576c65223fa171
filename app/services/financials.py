"""
Financial Calculator Service

Per-estimate revenue and profit decomposition:
- Gross and discount-adjusted net amounts for parts and labor
- Parts cost of goods from stock purchase prices
- Labor carries no cost basis (100% margin)

Unpriced parts (no stockId, or a stockId missing from stock) are costed
according to a CostFallback policy; see DESIGN.md for which KPI uses which.
"""

from typing import Dict, Iterable, Optional
from dataclasses import dataclass

from app.models.enums import CostFallback
from app.models.garage import Estimate, Part, StockItem


# ============== Dataclasses ==============

@dataclass(frozen=True)
class EstimateFinancials:
    """Estimate-level revenue and cost breakdown"""
    estimate_id: str
    gross_parts: float
    net_parts: float
    gross_labor: float
    net_labor: float
    parts_cost_of_goods: float
    discount_amount: float
    total_hours: float

    @property
    def total_revenue(self) -> float:
        return self.net_parts + self.net_labor

    @property
    def total_profit(self) -> float:
        return (self.net_parts - self.parts_cost_of_goods) + self.net_labor


# ============== Calculation Functions ==============

def apply_discount(gross: float, discount_percent: Optional[float]) -> float:
    """Net amount after a percentage discount (None means no discount)."""
    return gross * (1 - (discount_percent or 0) / 100)


def build_stock_cost_map(stock_items: Iterable[StockItem]) -> Dict[str, float]:
    """Map stock id -> purchase price."""
    return {item.id: item.purchase_price for item in stock_items}


def resolve_unit_cost(part: Part, stock_costs: Dict[str, float]) -> Optional[float]:
    """Purchase price for a part, or None when it has no cost basis."""
    if not part.stock_id:
        return None
    return stock_costs.get(part.stock_id)


def resolve_fallback_cost(
    part: Part,
    stock_costs: Dict[str, float],
    cost_fallback: CostFallback,
    discount_percent: Optional[float] = None
) -> Optional[float]:
    """
    Unit cost for a part under a cost fallback policy.

    Resolved purchase prices always win. For unpriced parts:
    - ZERO_COST: 0.0
    - SALE_PRICE: the discounted unit sale price, so the line nets zero
    - EXCLUDE: None, the part is left out of the calculation
    """
    unit_cost = resolve_unit_cost(part, stock_costs)
    if unit_cost is not None:
        return unit_cost
    if cost_fallback == CostFallback.SALE_PRICE:
        return apply_discount(part.price, discount_percent)
    if cost_fallback == CostFallback.ZERO_COST:
        return 0.0
    return None


def calculate_parts_cost(
    parts: Iterable[Part],
    stock_costs: Dict[str, float],
    cost_fallback: CostFallback = CostFallback.ZERO_COST,
    discount_percent: Optional[float] = None
) -> float:
    """Cost of goods for a set of parts sold under one parts discount."""
    total = 0.0
    for part in parts:
        unit_cost = resolve_fallback_cost(part, stock_costs, cost_fallback, discount_percent)
        if unit_cost is None:
            continue
        total += part.quantity * unit_cost
    return total


def calculate_estimate_financials(
    estimate: Estimate,
    stock_costs: Optional[Dict[str, float]] = None,
    cost_fallback: CostFallback = CostFallback.ZERO_COST
) -> EstimateFinancials:
    """
    Calculate net revenue, discounts and cost of goods for one estimate.

    Status is not checked here; callers decide which estimates count.
    """
    stock_costs = stock_costs or {}

    gross_parts = sum(p.quantity * p.price for p in estimate.parts)
    gross_labor = sum(l.hours * l.rate for l in estimate.labor)

    net_parts = apply_discount(gross_parts, estimate.parts_discount)
    net_labor = apply_discount(gross_labor, estimate.labor_discount)

    return EstimateFinancials(
        estimate_id=estimate.id,
        gross_parts=gross_parts,
        net_parts=net_parts,
        gross_labor=gross_labor,
        net_labor=net_labor,
        parts_cost_of_goods=calculate_parts_cost(
            estimate.parts, stock_costs, cost_fallback, estimate.parts_discount
        ),
        discount_amount=(gross_parts - net_parts) + (gross_labor - net_labor),
        total_hours=sum(l.hours for l in estimate.labor)
    )
