"""
Garage Record Models

Read-only views of the records owned by the CRUD layer:
estimates with their parts and labor lines, stock items and mechanics.

Field aliases follow the stored JSON documents (camelCase); snake_case
field names are accepted as well.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import date, datetime, timezone

from app.models.enums import EstimateStatus


def utc_now() -> datetime:
    """Current time as naive UTC, the timeline all record dates live on."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utc_now().date()


class GarageRecord(BaseModel):
    """Base for immutable garage records"""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")


class Part(GarageRecord):
    """Part line on an estimate"""
    id: Optional[str] = None
    name: str
    quantity: float = Field(..., description="Units sold")
    price: float = Field(..., description="Unit sale price")
    stock_id: Optional[str] = Field(None, alias="stockId", description="StockItem holding the cost basis")


class LaborLine(GarageRecord):
    """Labor line on an estimate"""
    id: Optional[str] = None
    description: str
    hours: float
    rate: float = Field(..., description="Hourly rate")


class StockItem(GarageRecord):
    """Stock item, consulted only for its purchase price"""
    id: str
    name: Optional[str] = None
    purchase_price: float = Field(
        ...,
        validation_alias=AliasChoices("purchasePrice", "purchase_price", "price"),
        description="Cost basis per unit"
    )


class Mechanic(GarageRecord):
    """Workshop mechanic"""
    id: str
    name: str
    specialization: Optional[str] = None


class Estimate(GarageRecord):
    """Repair order with parts, labor, discounts and assigned mechanics"""
    id: str
    estimate_number: Optional[str] = Field(None, alias="estimateNumber")
    date: datetime
    status: EstimateStatus
    customer_name: str = Field(default="", alias="customerName")
    customer_phone: Optional[str] = Field(None, alias="customerPhone")
    customer_email: Optional[str] = Field(None, alias="customerEmail")
    parts: List[Part] = []
    labor: List[LaborLine] = []
    parts_discount: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("partsDiscount", "partsDiscountPercent", "parts_discount"),
        description="Parts discount percentage (0-100)"
    )
    labor_discount: Optional[float] = Field(
        None,
        validation_alias=AliasChoices("laborDiscount", "laborDiscountPercent", "labor_discount"),
        description="Labor discount percentage (0-100)"
    )
    mechanic_ids: List[str] = Field(default_factory=list, alias="mechanicIds")

    @field_validator("date", mode="before")
    @classmethod
    def _date_only_to_midnight(cls, value):
        # "YYYY-MM-DD" documents mean the start of that day
        if isinstance(value, str) and len(value) == 10:
            return f"{value}T00:00:00"
        return value

    @field_validator("date")
    @classmethod
    def _to_naive_utc(cls, value: datetime) -> datetime:
        # All window comparisons run on naive datetimes
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    @field_validator("parts", "labor", "mechanic_ids", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return [] if value is None else value

    @property
    def is_completed(self) -> bool:
        return self.status == EstimateStatus.COMPLETED
