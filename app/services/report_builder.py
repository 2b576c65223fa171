"""
Report Orchestrator

Filters the estimate history down to a reporting window and composes the
calculator, segmentation, attribution, ranking and monthly revenue outputs
into one immutable report.

Cost of goods policy per KPI:
- Advanced report KPIs: unpriced parts cost nothing (CostFallback.ZERO_COST)
- Parts ranking: unpriced parts are excluded (CostFallback.EXCLUDE)
- Dashboard snapshot: unpriced parts sell at cost (CostFallback.SALE_PRICE)
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from app.models.enums import ALL_MECHANICS, CostFallback, DashboardRange
from app.models.garage import Estimate, Mechanic, StockItem, utc_now
from app.services.financials import build_stock_cost_map, calculate_estimate_financials
from app.services.client_segments import ClientInsights, segment_clients
from app.services.mechanic_attribution import MechanicPerformance, attribute_mechanics
from app.services.rankings import DEFAULT_TOP_N, RankedItem, rank_parts, rank_services
from app.services.revenue_series import DEFAULT_WINDOW_MONTHS, MonthlyRevenue, monthly_revenue


# ============== Dataclasses ==============

@dataclass(frozen=True)
class ReportWindow:
    """Reporting window: inclusive dates plus optional mechanic filter"""
    start: date
    end: date
    mechanic_id: Optional[str] = None

    @property
    def start_at(self) -> datetime:
        return datetime.combine(self.start, time.min)

    @property
    def end_at(self) -> datetime:
        # End date covers the whole day
        return datetime.combine(self.end, time.max)

    @property
    def filters_mechanic(self) -> bool:
        return bool(self.mechanic_id) and self.mechanic_id != ALL_MECHANICS

    def contains(self, moment: datetime) -> bool:
        return self.start_at <= moment <= self.end_at


@dataclass(frozen=True)
class ReportKPIs:
    """Financial KPIs over completed estimates in a window"""
    total_revenue: float
    total_parts_revenue: float
    total_labor_revenue: float
    total_cost_of_goods: float
    total_profit: float
    profit_margin: float  # percent
    completed_count: int
    average_revenue: float
    total_discounts_given: float
    parts_share_pct: float
    labor_share_pct: float


@dataclass(frozen=True)
class AdvancedReport:
    """Complete KPI bundle for the advanced reports view"""
    window: ReportWindow
    kpis: ReportKPIs
    client_insights: ClientInsights
    mechanic_performance: Tuple[MechanicPerformance, ...] = ()
    top_services: Tuple[RankedItem, ...] = ()
    top_parts: Tuple[RankedItem, ...] = ()
    monthly_revenue: Tuple[MonthlyRevenue, ...] = ()
    generated_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True)
class DashboardSnapshot:
    """Quick KPIs for today / this week / this month"""
    range: DashboardRange
    start_at: datetime
    end_at: datetime
    total_revenue: float
    estimated_profit: float
    completed_count: int
    average_value: float
    average_profit: float
    new_clients: int


# ============== Filtering ==============

def filter_estimates(estimates: Iterable[Estimate], window: ReportWindow) -> List[Estimate]:
    """Completed estimates inside the window, input order preserved."""
    return [
        e for e in estimates
        if e.is_completed
        and window.contains(e.date)
        and (not window.filters_mechanic or window.mechanic_id in e.mechanic_ids)
    ]


# ============== KPI Functions ==============

def calculate_report_kpis(
    estimates: Sequence[Estimate],
    stock_costs: Dict[str, float]
) -> ReportKPIs:
    """Sum per-estimate net figures into the report KPI bundle."""
    total_parts = 0.0
    total_labor = 0.0
    total_cogs = 0.0
    total_discounts = 0.0

    for e in estimates:
        fin = calculate_estimate_financials(e, stock_costs, CostFallback.ZERO_COST)
        total_parts += fin.net_parts
        total_labor += fin.net_labor
        total_cogs += fin.parts_cost_of_goods
        total_discounts += fin.discount_amount

    total_revenue = total_parts + total_labor
    total_profit = (total_parts - total_cogs) + total_labor
    completed_count = len(estimates)

    return ReportKPIs(
        total_revenue=total_revenue,
        total_parts_revenue=total_parts,
        total_labor_revenue=total_labor,
        total_cost_of_goods=total_cogs,
        total_profit=total_profit,
        profit_margin=(total_profit / total_revenue * 100) if total_revenue > 0 else 0.0,
        completed_count=completed_count,
        average_revenue=total_revenue / completed_count if completed_count > 0 else 0.0,
        total_discounts_given=total_discounts,
        parts_share_pct=(total_parts / total_revenue * 100) if total_revenue > 0 else 0.0,
        labor_share_pct=(total_labor / total_revenue * 100) if total_revenue > 0 else 0.0
    )


def build_advanced_report(
    estimates: Sequence[Estimate],
    mechanics: Sequence[Mechanic],
    stock_items: Sequence[StockItem],
    window: ReportWindow,
    top_n: int = DEFAULT_TOP_N,
    months: int = DEFAULT_WINDOW_MONTHS,
    as_of: Optional[date] = None
) -> AdvancedReport:
    """
    Build the advanced report for a window.

    Client first visits and the monthly series read the full history;
    everything else reads the filtered estimates.
    """
    stock_costs = build_stock_cost_map(stock_items)
    filtered = filter_estimates(estimates, window)

    return AdvancedReport(
        window=window,
        kpis=calculate_report_kpis(filtered, stock_costs),
        client_insights=segment_clients(estimates, filtered, window.start_at, window.end_at),
        mechanic_performance=tuple(attribute_mechanics(filtered, mechanics)),
        top_services=tuple(rank_services(filtered, top_n)),
        top_parts=tuple(rank_parts(filtered, stock_costs, top_n)),
        monthly_revenue=tuple(monthly_revenue(estimates, months, as_of))
    )


# ============== Dashboard Snapshot ==============

def resolve_dashboard_start(range_type: DashboardRange, now: datetime) -> datetime:
    """Start of the quick dashboard period containing `now`."""
    today = datetime.combine(now.date(), time.min)
    if range_type == DashboardRange.WEEK:
        return today - timedelta(days=today.weekday())
    if range_type == DashboardRange.MONTH:
        return today.replace(day=1)
    return today


def build_dashboard_snapshot(
    estimates: Sequence[Estimate],
    stock_items: Sequence[StockItem],
    range_type: DashboardRange = DashboardRange.TODAY,
    now: Optional[datetime] = None
) -> DashboardSnapshot:
    """Quick KPIs for completed estimates from the period start up to now."""
    now = now or utc_now()
    start_at = resolve_dashboard_start(range_type, now)
    stock_costs = build_stock_cost_map(stock_items)

    relevant = [e for e in estimates if e.is_completed and start_at <= e.date <= now]

    total_revenue = 0.0
    total_profit = 0.0
    for e in relevant:
        fin = calculate_estimate_financials(e, stock_costs, CostFallback.SALE_PRICE)
        total_revenue += fin.total_revenue
        total_profit += fin.total_profit

    completed_count = len(relevant)
    insights = segment_clients(estimates, relevant, start_at, now)

    return DashboardSnapshot(
        range=range_type,
        start_at=start_at,
        end_at=now,
        total_revenue=total_revenue,
        estimated_profit=total_profit,
        completed_count=completed_count,
        average_value=total_revenue / completed_count if completed_count > 0 else 0.0,
        average_profit=total_profit / completed_count if completed_count > 0 else 0.0,
        new_clients=insights.new_clients
    )


# ============== Serialization ==============

def to_dict(obj) -> Any:
    """Convert report dataclasses to plain JSON-ready structures."""
    if hasattr(obj, '__dataclass_fields__'):
        result = {}
        for field_name in obj.__dataclass_fields__:
            result[field_name] = to_dict(getattr(obj, field_name))
        return result
    if isinstance(obj, (list, tuple)):
        return [to_dict(item) for item in obj]
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, DashboardRange):
        return obj.value
    return obj
