"""
Mechanic Attribution

Splits each estimate's net labor revenue and hours evenly across its
assigned mechanics and aggregates the shares per mechanic.
"""

from typing import Dict, Iterable, List
from dataclasses import dataclass

from app.models.garage import Estimate, Mechanic
from app.services.financials import apply_discount


@dataclass(frozen=True)
class MechanicPerformance:
    """Attributed labor metrics for one mechanic"""
    mechanic_id: str
    name: str
    total_labor_revenue: float  # net of labor discount
    total_hours: float
    completed_count: int
    avg_hourly_rate: float


def attribute_mechanics(
    estimates: Iterable[Estimate],
    mechanics: Iterable[Mechanic]
) -> List[MechanicPerformance]:
    """
    Aggregate labor revenue and hours per mechanic.

    Every mechanic is returned, idle ones zeroed. Assigned ids that are not
    in `mechanics` are ignored. Sorted by labor revenue descending; ties keep
    the order of `mechanics`.
    """
    mech_data: Dict[str, Dict] = {}
    for m in mechanics:
        if m.id not in mech_data:
            mech_data[m.id] = {
                'name': m.name or 'N/A',
                'total_labor_revenue': 0.0,
                'total_hours': 0.0,
                'estimates': set()
            }

    for e in estimates:
        assigned = e.mechanic_ids
        if not assigned:
            continue

        gross_labor = sum(l.hours * l.rate for l in e.labor)
        net_labor = apply_discount(gross_labor, e.labor_discount)
        total_hours = sum(l.hours for l in e.labor)

        revenue_share = net_labor / len(assigned)
        hours_share = total_hours / len(assigned)

        for mech_id in assigned:
            md = mech_data.get(mech_id)
            if md is None:
                continue
            md['total_labor_revenue'] += revenue_share
            md['total_hours'] += hours_share
            md['estimates'].add(e.id)

    results = []
    for mech_id, md in mech_data.items():
        avg_rate = md['total_labor_revenue'] / md['total_hours'] if md['total_hours'] > 0 else 0.0
        results.append(MechanicPerformance(
            mechanic_id=mech_id,
            name=md['name'],
            total_labor_revenue=md['total_labor_revenue'],
            total_hours=md['total_hours'],
            completed_count=len(md['estimates']),
            avg_hourly_rate=avg_rate
        ))

    results.sort(key=lambda x: x.total_labor_revenue, reverse=True)
    return results
