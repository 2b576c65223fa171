"""
Garage Data Endpoints

Status and manual refresh of the cached garage records.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.routers.reports import get_store
from app.services.garage_store import GarageDataStore

router = APIRouter()


@router.get("/status")
async def get_data_status(store: GarageDataStore = Depends(get_store)):
    """Cached snapshot info (does not trigger a load)"""
    snapshot = store.cached_snapshot()
    if snapshot is None:
        return {"loaded": False}

    return {
        "loaded": True,
        "loaded_at": snapshot.loaded_at.isoformat(),
        "expired": snapshot.is_expired(store.ttl_seconds),
        "estimates": len(snapshot.estimates),
        "mechanics": len(snapshot.mechanics),
        "stock_items": len(snapshot.stock_items),
        "skipped_rows": snapshot.skipped_rows
    }


@router.post("/refresh")
async def refresh_data(store: GarageDataStore = Depends(get_store)):
    """Force a reload of all garage records"""
    try:
        snapshot = store.load_snapshot(force_refresh=True)
    except Exception as e:
        raise HTTPException(status_code=503, detail=f"Garage data unavailable: {e}")

    return {
        "status": "refreshed",
        "loaded_at": snapshot.loaded_at.isoformat(),
        "estimates": len(snapshot.estimates),
        "mechanics": len(snapshot.mechanics),
        "stock_items": len(snapshot.stock_items),
        "skipped_rows": snapshot.skipped_rows
    }
