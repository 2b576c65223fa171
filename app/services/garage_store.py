"""
Garage Data Store

Read-only loader for estimates, mechanics and stock items kept in Supabase
document tables (one JSON `data` column per row).
Loaded records are cached as a snapshot to reduce round trips.
"""

import os
import logging
from typing import List, Optional, Tuple, Type, TypeVar
from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel, ValidationError
from supabase import create_client, Client

from app.models.garage import Estimate, Mechanic, StockItem

logger = logging.getLogger(__name__)

ESTIMATES_TABLE = os.getenv("GARAGE_ESTIMATES_TABLE", "estimates")
MECHANICS_TABLE = os.getenv("GARAGE_MECHANICS_TABLE", "mechanics")
STOCK_TABLE = os.getenv("GARAGE_STOCK_TABLE", "stock_items")

# Cache TTL
CACHE_TTL_SECONDS = int(os.getenv("GARAGE_CACHE_TTL_SECONDS", "300"))

RecordT = TypeVar("RecordT", bound=BaseModel)


@dataclass
class GarageSnapshot:
    """Cached record collections"""
    estimates: List[Estimate] = field(default_factory=list)
    mechanics: List[Mechanic] = field(default_factory=list)
    stock_items: List[StockItem] = field(default_factory=list)
    skipped_rows: int = 0
    loaded_at: datetime = field(default_factory=datetime.now)

    def is_expired(self, ttl_seconds: int = CACHE_TTL_SECONDS) -> bool:
        return (datetime.now() - self.loaded_at).total_seconds() > ttl_seconds


class GarageDataStore:
    """Loads garage records from Supabase and caches them"""

    def __init__(self, client: Optional[Client] = None, ttl_seconds: int = CACHE_TTL_SECONDS):
        if client is None:
            supabase_url = os.getenv("SUPABASE_URL")
            supabase_key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_KEY")

            if not supabase_url or not supabase_key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY/SUPABASE_SERVICE_KEY must be set")

            client = create_client(supabase_url, supabase_key)

        self.supabase: Client = client
        self.ttl_seconds = ttl_seconds
        self._snapshot: Optional[GarageSnapshot] = None

    def _fetch_documents(self, table_name: str) -> List[dict]:
        """Fetch the JSON documents stored in a table."""
        result = self.supabase.table(table_name).select("data").execute()
        return [row["data"] for row in (result.data or []) if row.get("data")]

    def _parse(self, table_name: str, model: Type[RecordT], documents: List[dict]) -> Tuple[List[RecordT], int]:
        records = []
        skipped = 0
        for doc in documents:
            try:
                records.append(model.model_validate(doc))
            except ValidationError as e:
                skipped += 1
                logger.warning(f"[Garage Store] Skipping invalid {table_name} row {doc.get('id')}: "
                               f"{e.error_count()} error(s)")
        return records, skipped

    def load_snapshot(self, force_refresh: bool = False) -> GarageSnapshot:
        """Return the cached snapshot, reloading it when stale."""
        cached = self._snapshot
        if not force_refresh and cached is not None and not cached.is_expired(self.ttl_seconds):
            return cached

        estimates, bad_estimates = self._parse(
            ESTIMATES_TABLE, Estimate, self._fetch_documents(ESTIMATES_TABLE))
        mechanics, bad_mechanics = self._parse(
            MECHANICS_TABLE, Mechanic, self._fetch_documents(MECHANICS_TABLE))
        stock_items, bad_stock = self._parse(
            STOCK_TABLE, StockItem, self._fetch_documents(STOCK_TABLE))

        snapshot = GarageSnapshot(
            estimates=estimates,
            mechanics=mechanics,
            stock_items=stock_items,
            skipped_rows=bad_estimates + bad_mechanics + bad_stock,
            loaded_at=datetime.now()
        )
        self._snapshot = snapshot

        logger.info(f"[Garage Store] Loaded {len(estimates)} estimates, {len(mechanics)} mechanics, "
                    f"{len(stock_items)} stock items (skipped={snapshot.skipped_rows})")
        return snapshot

    def cached_snapshot(self) -> Optional[GarageSnapshot]:
        """Current snapshot without triggering a load."""
        return self._snapshot

    def clear_cache(self):
        self._snapshot = None


# Singleton instance
_garage_store: Optional[GarageDataStore] = None


def get_garage_store() -> GarageDataStore:
    """Get or create garage data store"""
    global _garage_store
    if _garage_store is None:
        _garage_store = GarageDataStore()
    return _garage_store
