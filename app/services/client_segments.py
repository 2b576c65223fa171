"""
Client Identity & Segmentation

Client key: phone, else email, else name (first non-empty, case-sensitive).
First visits are always computed over the full estimate history so a
returning client is never mistaken for a new one inside a narrow window.
"""

from typing import Dict, Iterable, Optional
from dataclasses import dataclass
from datetime import datetime

from app.models.garage import Estimate


@dataclass(frozen=True)
class ClientInsights:
    """New vs recurring clients for a period"""
    total_clients: int
    new_clients: int
    recurring_clients: int
    clients_in_period: int


def resolve_client_key(estimate: Estimate) -> Optional[str]:
    """Stable client identity for an estimate, or None if it has none."""
    for candidate in (estimate.customer_phone, estimate.customer_email, estimate.customer_name):
        if candidate:
            return candidate
    return None


def first_visit_dates(estimates: Iterable[Estimate]) -> Dict[str, datetime]:
    """Earliest estimate date per client key, any status."""
    first_visits: Dict[str, datetime] = {}
    for e in estimates:
        client_key = resolve_client_key(e)
        if not client_key:
            continue
        seen = first_visits.get(client_key)
        if seen is None or e.date < seen:
            first_visits[client_key] = e.date
    return first_visits


def segment_clients(
    all_estimates: Iterable[Estimate],
    period_estimates: Iterable[Estimate],
    start_at: datetime,
    end_at: datetime
) -> ClientInsights:
    """
    Classify the clients seen in a period as new or recurring.

    A client is new when their first visit ever falls inside
    [start_at, end_at]; everyone else seen in the period is recurring.
    """
    first_visits = first_visit_dates(all_estimates)

    clients_in_period = set()
    for e in period_estimates:
        client_key = resolve_client_key(e)
        if client_key:
            clients_in_period.add(client_key)

    new_clients = 0
    for client_key in clients_in_period:
        first_visit = first_visits.get(client_key)
        if first_visit and start_at <= first_visit <= end_at:
            new_clients += 1

    return ClientInsights(
        total_clients=len(first_visits),
        new_clients=new_clients,
        recurring_clients=len(clients_in_period) - new_clients,
        clients_in_period=len(clients_in_period)
    )
