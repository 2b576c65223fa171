"""
Reports & Analytics Endpoints

Financial analytics over the garage's estimate history:
- Advanced report (KPIs, clients, mechanics, rankings, monthly revenue)
- Quick dashboard KPIs (today / week / month)
- Monthly revenue series, mechanic performance, rankings
"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.models.enums import DashboardRange
from app.models.garage import utc_today
from app.models.schemas import AdvancedReportRequest
from app.services.garage_store import GarageDataStore, GarageSnapshot, get_garage_store
from app.services.financials import build_stock_cost_map
from app.services.mechanic_attribution import attribute_mechanics
from app.services.rankings import rank_parts, rank_services
from app.services.revenue_series import monthly_revenue
from app.services.report_builder import (
    ReportWindow,
    build_advanced_report,
    build_dashboard_snapshot,
    filter_estimates,
    to_dict
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Default advanced report window
DEFAULT_LOOKBACK_DAYS = 30


def get_store() -> GarageDataStore:
    """Data store dependency; 503 when Supabase is not configured."""
    try:
        return get_garage_store()
    except ValueError as e:
        raise HTTPException(status_code=503, detail=str(e))


def _load_snapshot(store: GarageDataStore) -> GarageSnapshot:
    try:
        return store.load_snapshot()
    except Exception as e:
        logger.error(f"[Reports] Garage data unavailable: {e}")
        raise HTTPException(status_code=503, detail=f"Garage data unavailable: {e}")


def _resolve_window(
    start: Optional[date],
    end: Optional[date],
    mechanic_id: Optional[str] = None
) -> ReportWindow:
    """Default to the last 30 days; reject inverted ranges."""
    end = end or utc_today()
    start = start or (end - timedelta(days=DEFAULT_LOOKBACK_DAYS))
    if start > end:
        raise HTTPException(status_code=400, detail="start must be on or before end")
    return ReportWindow(start=start, end=end, mechanic_id=mechanic_id)


def _window_dict(window: ReportWindow) -> dict:
    return {
        "start": window.start.isoformat(),
        "end": window.end.isoformat(),
        "mechanic_id": window.mechanic_id
    }


@router.post("/advanced")
async def compute_advanced_report(request: AdvancedReportRequest):
    """
    Compute the advanced report from records in the request body.

    Nothing is read from the data store.
    """
    window = _resolve_window(request.start, request.end, request.mechanic_id)

    try:
        report = build_advanced_report(
            request.estimates,
            request.mechanics,
            request.stock_items,
            window,
            top_n=request.top_n,
            months=request.months,
            as_of=request.as_of
        )
        return to_dict(report)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/advanced")
async def get_advanced_report(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD), default 30 days ago"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD), default today"),
    mechanic_id: Optional[str] = Query(None, description="Mechanic ID or ALL"),
    top_n: int = Query(5, ge=0, le=50, description="Ranking length"),
    months: int = Query(12, ge=1, le=60, description="Monthly revenue window"),
    store: GarageDataStore = Depends(get_store)
):
    """
    Advanced report over the stored estimate history.

    - **KPIs**: net revenue, profit, margin, discounts
    - **Clients**: new vs recurring in the window
    - **Mechanics**: attributed labor revenue and hours
    - **Rankings**: top services and parts by profit
    - **Monthly revenue**: trailing net revenue series
    """
    window = _resolve_window(start, end, mechanic_id)
    snapshot = _load_snapshot(store)

    try:
        report = build_advanced_report(
            snapshot.estimates,
            snapshot.mechanics,
            snapshot.stock_items,
            window,
            top_n=top_n,
            months=months
        )
        return to_dict(report)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/dashboard")
async def get_dashboard_kpis(
    range_type: DashboardRange = Query(DashboardRange.TODAY, alias="range", description="today, week or month"),
    store: GarageDataStore = Depends(get_store)
):
    """Quick KPIs for the current day, week or month."""
    snapshot = _load_snapshot(store)

    try:
        return to_dict(build_dashboard_snapshot(snapshot.estimates, snapshot.stock_items, range_type))
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/monthly-revenue")
async def get_monthly_revenue(
    months: int = Query(12, ge=1, le=60, description="Number of trailing months"),
    store: GarageDataStore = Depends(get_store)
):
    """Net revenue per calendar month, oldest first."""
    snapshot = _load_snapshot(store)

    series = monthly_revenue(snapshot.estimates, months)
    return {
        "months": months,
        "series": to_dict(series),
        "total": sum(m.net_revenue for m in series)
    }


@router.get("/mechanics")
async def get_mechanic_performance(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    store: GarageDataStore = Depends(get_store)
):
    """Attributed labor revenue, hours and rate per mechanic."""
    window = _resolve_window(start, end)
    snapshot = _load_snapshot(store)

    filtered = filter_estimates(snapshot.estimates, window)
    return {
        "date_range": _window_dict(window),
        "mechanics": to_dict(attribute_mechanics(filtered, snapshot.mechanics))
    }


@router.get("/rankings")
async def get_rankings(
    start: Optional[date] = Query(None, description="Start date (YYYY-MM-DD)"),
    end: Optional[date] = Query(None, description="End date (YYYY-MM-DD)"),
    mechanic_id: Optional[str] = Query(None, description="Mechanic ID or ALL"),
    top_n: int = Query(5, ge=0, le=50, description="Ranking length"),
    store: GarageDataStore = Depends(get_store)
):
    """Most profitable services and parts in the window."""
    window = _resolve_window(start, end, mechanic_id)
    snapshot = _load_snapshot(store)

    filtered = filter_estimates(snapshot.estimates, window)
    stock_costs = build_stock_cost_map(snapshot.stock_items)
    return {
        "date_range": _window_dict(window),
        "top_services": to_dict(rank_services(filtered, top_n)),
        "top_parts": to_dict(rank_parts(filtered, stock_costs, top_n))
    }
