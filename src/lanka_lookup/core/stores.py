from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Generic, Iterator, List, Optional, Tuple, TypeVar

import logging

from lanka_lookup.core.normalize import is_blank, normalize_key, normalize_text, parse_float, parse_int
from lanka_lookup.core.query_engine import Criteria, QueryResult, run_query

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEVERITIES = ("low", "medium", "high")


class StoreValidationError(ValueError):
    """Raised when a form submission is incomplete; the message is user-facing."""


class AppendOnlyStore(Generic[T]):
    """
    Ordered, append-only collection owned by whoever created it.

    Insertion order is kept; there is no dedup and no eviction. Pass the
    store into handlers instead of sharing a module-level list.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._items: List[T] = []

    def append(self, item: T) -> T:
        self._items.append(item)
        logger.debug("Store %s: appended item #%d", self.name or "<anonymous>", len(self._items))
        return item

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def snapshot(self) -> Tuple[T, ...]:
        return tuple(self._items)

    def query(self, criteria: Optional[Criteria] = None) -> QueryResult:
        """Filter the current snapshot with the query engine (dataclass items)."""
        rows = [asdict(item) for item in self._items]
        return run_query(rows, criteria, name=self.name)


# ---------------------------------------------------------------------------
# Plantations
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Plantation:
    name: str
    region: str
    production: int  # kg


def add_plantation(store: AppendOnlyStore[Plantation], name: Any, region: Any, production: Any) -> Plantation:
    if is_blank(name) or is_blank(region) or is_blank(production):
        raise StoreValidationError("Please fill in all fields.")
    kg = parse_int(production)
    if kg is None:
        raise StoreValidationError("Production must be a number.")
    return store.append(Plantation(name=normalize_text(name), region=normalize_text(region), production=kg))


def format_plantation(p: Plantation) -> str:
    return f"{p.name} - {p.region}, Production: {p.production} kg"


# ---------------------------------------------------------------------------
# Inventory
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InventoryItem:
    item: str
    quantity: int
    unit_price: float = 0.0


def add_inventory_item(
    store: AppendOnlyStore[InventoryItem],
    item: Any,
    quantity: Any,
    unit_price: Any = 0,
) -> InventoryItem:
    if is_blank(item) or is_blank(quantity):
        raise StoreValidationError("Please fill in all fields.")
    qty = parse_int(quantity)
    if qty is None or qty < 0:
        raise StoreValidationError("Quantity must be a non-negative number.")
    price = parse_float(unit_price)
    if price is None or price < 0:
        price = 0.0
    return store.append(InventoryItem(item=normalize_text(item), quantity=qty, unit_price=price))


def format_inventory_item(i: InventoryItem) -> str:
    return f"{i.item}: {i.quantity} @ LKR {i.unit_price:.2f}"


# ---------------------------------------------------------------------------
# Incidents
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Incident:
    title: str
    location: str
    severity: str = "low"


def report_incident(
    store: AppendOnlyStore[Incident],
    title: Any,
    location: Any,
    severity: Any = "low",
) -> Incident:
    if is_blank(title) or is_blank(location):
        raise StoreValidationError("Please fill in all fields.")
    level = normalize_key(severity) or "low"
    if level not in SEVERITIES:
        raise StoreValidationError(f"Severity must be one of: {', '.join(SEVERITIES)}.")
    return store.append(Incident(title=normalize_text(title), location=normalize_text(location), severity=level))


def format_incident(i: Incident) -> str:
    return f"[{i.severity.upper()}] {i.title} - {i.location}"


# ---------------------------------------------------------------------------
# Alert subscriptions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Subscription:
    email: str
    monsoon_alerts: bool = False


def subscribe(store: AppendOnlyStore[Subscription], email: Any, monsoon_alerts: bool = False) -> str:
    """Record a subscription and return the confirmation text."""
    address = normalize_text(email)
    if not address:
        raise StoreValidationError("Please enter a valid email address.")
    store.append(Subscription(email=address, monsoon_alerts=bool(monsoon_alerts)))
    if monsoon_alerts:
        return f"Thank you! You have subscribed to Monsoon Alerts with email: {address}."
    return f"Thank you! Your email {address} has been recorded."
