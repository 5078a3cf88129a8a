from __future__ import annotations

from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple

import logging

from lanka_lookup.core.datasets import load_dataset, load_keyed_dataset
from lanka_lookup.core.normalize import is_blank, normalize_key, normalize_text, parse_float, parse_int
from lanka_lookup.core.query_engine import (
    AnyOf,
    Exact,
    LookupStatus,
    Range,
    Record,
    run_query,
    select_partition,
)
from lanka_lookup.core.summary import ResultSummary, build_result_summary, message_for

logger = logging.getLogger(__name__)

KeyedRecords = Mapping[str, Sequence[Record]]


@dataclass
class LookupOutcome:
    """
    What a form handler needs to render: the matched records, a status,
    the message to show and (for calculators) the computed value.
    """
    status: LookupStatus
    records: Tuple[Record, ...] = ()
    message: str = ""
    summary: Optional[ResultSummary] = None
    value: Any = None

    @property
    def found(self) -> bool:
        return self.status is LookupStatus.MATCHED


def _invalid(message: str) -> LookupOutcome:
    return LookupOutcome(status=LookupStatus.INVALID_INPUT, message=message)


def _no_dataset(key: str, message: Optional[str] = None) -> LookupOutcome:
    logger.info("No dataset for key %r", key)
    return LookupOutcome(
        status=LookupStatus.NO_DATASET,
        message=message or message_for(LookupStatus.NO_DATASET, key=key),
    )


def _keyed(records: Iterable[Record], key_field: str) -> dict:
    grouped: dict = {}
    for rec in records:
        grouped.setdefault(normalize_key(rec.get(key_field)), []).append(rec)
    return grouped


def _format_number(x: float) -> str:
    return str(int(x)) if float(x).is_integer() else str(x)


def route_key(origin: Any, destination: Any) -> str:
    """Composite route key, e.g. ('Colombo', 'Kandy') -> 'colombo-kandy'."""
    return f"{normalize_key(origin)}-{normalize_key(destination)}"


# ---------------------------------------------------------------------------
# Attractions
# ---------------------------------------------------------------------------

def search_attraction(name: Any, records: Optional[Sequence[Record]] = None) -> LookupOutcome:
    if is_blank(name):
        return _invalid("Please enter an attraction name.")

    rows = records if records is not None else load_dataset("attractions")
    found = select_partition(_keyed(rows, "name"), name)
    if not found:
        names = [str(r.get("name", "")) for r in rows]
        if len(names) > 1:
            suggestions = '", "'.join(names[:-1]) + f'", or "{names[-1]}'
        else:
            suggestions = names[0] if names else ""
        message = f'Sorry, no details available for "{normalize_key(name)}".'
        if suggestions:
            message += f' Try "{suggestions}".'
        return _no_dataset(normalize_key(name), message)

    attraction = found[0]
    return LookupOutcome(
        status=LookupStatus.MATCHED,
        records=found,
        message=(
            f"{attraction['name']}: {attraction.get('description', '')} "
            f"Location: {attraction.get('location', '')}. Hours: {attraction.get('hours', '')}."
        ),
    )


# ---------------------------------------------------------------------------
# Properties
# ---------------------------------------------------------------------------

def filter_properties(
    property_type: Any = None,
    min_price: Any = None,
    max_price: Any = None,
    location: Any = None,
    records: Optional[Sequence[Record]] = None,
) -> LookupOutcome:
    rows = records if records is not None else load_dataset("properties")
    result = run_query(
        rows,
        {
            "type": Exact(property_type),
            "price": Range(min_price, max_price),
            "location": Exact(location),
        },
        name="properties",
    )
    summary = build_result_summary(result)
    return LookupOutcome(
        status=result.status,
        records=result.records,
        message=summary.message,
        summary=summary,
    )


# ---------------------------------------------------------------------------
# Trains
# ---------------------------------------------------------------------------

def find_train_schedules(
    origin: Any,
    destination: Any,
    classes: Iterable[Any] = (),
    schedules: Optional[KeyedRecords] = None,
) -> LookupOutcome:
    """
    Schedules for one route, optionally narrowed to trains offering any of
    the selected classes. No classes selected means every train on the route.
    """
    if is_blank(origin) or is_blank(destination):
        return _invalid("Please select both departure and arrival stations.")

    route = route_key(origin, destination)
    keyed = schedules if schedules is not None else load_keyed_dataset("train_schedules", "route")
    partition = select_partition(keyed, route)
    if partition is None:
        return _no_dataset(route)

    result = run_query(partition, {"classes": AnyOf(tuple(classes or ()))}, name=f"train_schedules[{route}]")
    summary = build_result_summary(result, key=route)
    return LookupOutcome(
        status=result.status,
        records=result.records,
        message=summary.message,
        summary=summary,
    )


def calculate_fare(
    origin: Any,
    destination: Any,
    travel_class: Any,
    passengers: Any = 1,
    fares: Optional[KeyedRecords] = None,
) -> LookupOutcome:
    if is_blank(origin) or is_blank(destination):
        return _invalid("Please select both departure and arrival stations.")
    if is_blank(travel_class):
        return _invalid("Please select a travel class.")

    count = parse_int(passengers)
    if count is None or count < 1:
        logger.debug("Passenger count %r not usable; defaulting to 1.", passengers)
        count = 1

    route = route_key(origin, destination)
    keyed = fares if fares is not None else load_keyed_dataset("fares", "route")
    partition = select_partition(keyed, route)
    if partition is None:
        return _no_dataset(route)

    result = run_query(partition, {"class": Exact(travel_class)}, name=f"fares[{route}]")
    if not result.records:
        return _no_dataset(f"{normalize_text(travel_class)} on {route}")

    fare = result.records[0]
    unit = parse_float(fare.get("price"))
    if unit is None:
        logger.warning("Fare for %s on %s has no usable price: %r", fare.get("class"), route, fare.get("price"))
        return _no_dataset(f"{normalize_text(travel_class)} on {route}")
    total = unit * count
    return LookupOutcome(
        status=LookupStatus.MATCHED,
        records=result.records,
        message=(
            f"Total fare for {count} passenger(s) in {fare['class']}: "
            f"LKR {_format_number(total)}"
        ),
        value=total,
    )


# ---------------------------------------------------------------------------
# Rooms
# ---------------------------------------------------------------------------

def check_room_availability(
    room_type: Any = None,
    guests: Any = None,
    max_rate: Any = None,
    records: Optional[Sequence[Record]] = None,
) -> LookupOutcome:
    rows = records if records is not None else load_dataset("rooms")
    result = run_query(
        rows,
        {
            "available": Exact(True),
            "room_type": Exact(room_type),
            "capacity": Range(min=guests),
            "rate": Range(max=max_rate),
        },
        name="rooms",
    )
    summary = build_result_summary(result)
    return LookupOutcome(
        status=result.status,
        records=result.records,
        message=summary.message,
        summary=summary,
    )


# ---------------------------------------------------------------------------
# Festivals
# ---------------------------------------------------------------------------

def check_festival_date(
    festival: Any,
    selected_date: Any,
    records: Optional[Sequence[Record]] = None,
) -> LookupOutcome:
    if isinstance(selected_date, date_type):
        selected_date = selected_date.isoformat()
    if is_blank(festival) or is_blank(selected_date):
        return _invalid("Please select a date and a festival.")

    rows = records if records is not None else load_dataset("festival_dates")
    found = select_partition(_keyed(rows, "festival"), festival)
    if not found:
        return _no_dataset(normalize_text(festival))

    rec = found[0]
    correct = normalize_text(rec.get("date"))
    chosen = normalize_text(selected_date)
    if chosen == correct:
        return LookupOutcome(
            status=LookupStatus.MATCHED,
            records=found,
            message=f"Correct! {rec['festival']} is on {correct}.",
            value=correct,
        )
    return LookupOutcome(
        status=LookupStatus.NO_MATCH,
        records=found,
        message=f"Incorrect. {rec['festival']} is on {correct}, not {chosen}.",
        value=correct,
    )


# ---------------------------------------------------------------------------
# Currency
# ---------------------------------------------------------------------------

def convert_currency(
    amount: Any,
    direction: Any = "LKRtoUSD",
    records: Optional[Sequence[Record]] = None,
) -> LookupOutcome:
    """
    Convert between LKR and USD. Unlike the filters, a bad amount is
    rejected rather than widened to a default.
    """
    value = parse_float(amount)
    if value is None or value < 0:
        return _invalid("Please enter a valid amount.")

    rows = records if records is not None else load_dataset("exchange_rates")
    found = select_partition(_keyed(rows, "direction"), direction)
    if not found:
        return _no_dataset(normalize_text(direction))

    rate_rec = found[0]
    converted = round(value * float(rate_rec["rate"]), 2)
    return LookupOutcome(
        status=LookupStatus.MATCHED,
        records=found,
        message=(
            f"{_format_number(value)} {rate_rec['source']} = "
            f"{converted:.2f} {rate_rec['target']}"
        ),
        value=converted,
    )


# ---------------------------------------------------------------------------
# Grades and acronyms
# ---------------------------------------------------------------------------

def grade_for_mark(mark: Any, records: Optional[Sequence[Record]] = None) -> LookupOutcome:
    value = parse_int(mark)
    if value is None:
        return _invalid("Invalid Input")

    rows = records if records is not None else load_dataset("grade_bands")
    bands = [b for b in rows if int(b["min"]) <= value <= int(b["max"])]
    if not bands:
        return _invalid("Invalid Input")

    grade = str(bands[0]["grade"])
    return LookupOutcome(
        status=LookupStatus.MATCHED,
        records=(bands[0],),
        message=grade,
        value=grade,
    )


def expand_acronym(
    code: Any,
    table: str = "course",
    records: Optional[Sequence[Record]] = None,
) -> LookupOutcome:
    if is_blank(code):
        return _invalid("Invalid Input")

    rows = records if records is not None else load_dataset(f"{table}_acronyms")
    result = run_query(rows, {"code": Exact(code)}, name=f"{table}_acronyms")
    if not result.records:
        return LookupOutcome(status=LookupStatus.NO_MATCH, message="Invalid Input")

    meaning = str(result.records[0]["meaning"])
    return LookupOutcome(
        status=LookupStatus.MATCHED,
        records=result.records,
        message=meaning,
        value=meaning,
    )
