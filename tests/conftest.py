"""Shared record builders for the analytics tests."""

from typing import List, Optional

import pytest

from app.models.enums import EstimateStatus
from app.models.garage import Estimate, LaborLine, Mechanic, Part, StockItem


def make_estimate(
    estimate_id: str,
    date: str,
    status: EstimateStatus = EstimateStatus.COMPLETED,
    name: str = "Client",
    phone: Optional[str] = None,
    email: Optional[str] = None,
    parts: Optional[List[dict]] = None,
    labor: Optional[List[dict]] = None,
    parts_discount: Optional[float] = None,
    labor_discount: Optional[float] = None,
    mechanic_ids: Optional[List[str]] = None,
) -> Estimate:
    return Estimate(
        id=estimate_id,
        date=date,
        status=status,
        customer_name=name,
        customer_phone=phone,
        customer_email=email,
        parts=[Part(**p) for p in (parts or [])],
        labor=[LaborLine(**l) for l in (labor or [])],
        parts_discount=parts_discount,
        labor_discount=labor_discount,
        mechanic_ids=mechanic_ids or [],
    )


@pytest.fixture
def mechanics() -> List[Mechanic]:
    return [
        Mechanic(id="m1", name="Andrei"),
        Mechanic(id="m2", name="Bogdan"),
        Mechanic(id="m3", name="Cristi"),
    ]


@pytest.fixture
def stock_items() -> List[StockItem]:
    return [
        StockItem(id="s-oil", name="Oil 10W40", purchase_price=30),
        StockItem(id="s-chain", name="Chain kit", purchase_price=120),
    ]
