"""
Pydantic Models for Request Validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import date

from app.models.garage import Estimate, Mechanic, StockItem


class AdvancedReportRequest(BaseModel):
    """Compute the advanced report from records supplied in the body"""
    estimates: List[Estimate] = []
    mechanics: List[Mechanic] = []
    stock_items: List[StockItem] = Field(default_factory=list, alias="stockItems")
    start: date = Field(..., description="Window start (YYYY-MM-DD)")
    end: date = Field(..., description="Window end, inclusive (YYYY-MM-DD)")
    mechanic_id: Optional[str] = Field(None, alias="mechanicId", description="Mechanic ID or ALL")
    top_n: int = Field(default=5, ge=0, le=50, alias="topN")
    months: int = Field(default=12, ge=1, le=60)
    as_of: Optional[date] = Field(None, alias="asOf", description="Month the revenue series ends at")

    model_config = {"populate_by_name": True}
