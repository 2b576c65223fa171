"""
Ranking Engine

Top-N most profitable services (labor descriptions) and parts (part names).
"""

from typing import Dict, Iterable, List
from dataclasses import dataclass

from app.models.enums import CostFallback
from app.models.garage import Estimate
from app.services.financials import apply_discount, resolve_fallback_cost


DEFAULT_TOP_N = 5


@dataclass(frozen=True)
class RankedItem:
    """Ranked service or part"""
    label: str
    profit: float
    quantity: float = 0.0  # units sold (parts) or hours billed (services)


def _top(totals: Dict[str, Dict], n: int) -> List[RankedItem]:
    # dicts keep insertion order and sort is stable: ties stay first-seen first
    ranked = sorted(
        (RankedItem(label=label, profit=t['profit'], quantity=t['quantity']) for label, t in totals.items()),
        key=lambda item: item.profit,
        reverse=True
    )
    return ranked[:max(n, 0)]


def rank_services(estimates: Iterable[Estimate], n: int = DEFAULT_TOP_N) -> List[RankedItem]:
    """
    Most profitable services.

    Labor has no cost basis, so a line's profit is its net amount.
    """
    totals: Dict[str, Dict] = {}
    for e in estimates:
        for l in e.labor:
            item_net = apply_discount(l.hours * l.rate, e.labor_discount)
            t = totals.setdefault(l.description, {'profit': 0.0, 'quantity': 0.0})
            t['profit'] += item_net
            t['quantity'] += l.hours
    return _top(totals, n)


def rank_parts(
    estimates: Iterable[Estimate],
    stock_costs: Dict[str, float],
    n: int = DEFAULT_TOP_N,
    cost_fallback: CostFallback = CostFallback.EXCLUDE
) -> List[RankedItem]:
    """
    Most profitable parts.

    By default only parts with a resolvable purchase price are ranked; parts
    without one are skipped entirely (CostFallback.EXCLUDE). Names whose
    total profit is not positive are dropped.
    """
    totals: Dict[str, Dict] = {}
    for e in estimates:
        for p in e.parts:
            unit_cost = resolve_fallback_cost(p, stock_costs, cost_fallback, e.parts_discount)
            if unit_cost is None:
                continue
            item_net = apply_discount(p.price * p.quantity, e.parts_discount)
            t = totals.setdefault(p.name, {'profit': 0.0, 'quantity': 0.0})
            t['profit'] += item_net - unit_cost * p.quantity
            t['quantity'] += p.quantity

    profitable = {label: t for label, t in totals.items() if t['profit'] > 0}
    return _top(profitable, n)
