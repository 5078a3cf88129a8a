# tests/test_lookups.py

from __future__ import annotations

from datetime import date

from lanka_lookup.core.lookups import (
    calculate_fare,
    check_festival_date,
    check_room_availability,
    convert_currency,
    expand_acronym,
    filter_properties,
    find_train_schedules,
    grade_for_mark,
    route_key,
    search_attraction,
)
from lanka_lookup.core.query_engine import LookupStatus


def test_search_attraction_found_case_insensitive() -> None:
    out = search_attraction("  GALLE face green ")
    assert out.found
    assert out.records[0]["name"] == "Galle Face Green"
    assert "Open 24 hours" in out.message


def test_search_attraction_not_found_lists_suggestions() -> None:
    out = search_attraction("Sigiriya")
    assert out.status is LookupStatus.NO_DATASET
    assert out.records == ()
    assert 'Sorry, no details available for "sigiriya".' in out.message
    assert '"Galle Face Green", ' in out.message
    assert 'or "Independence Square".' in out.message


def test_search_attraction_blank_input() -> None:
    out = search_attraction("   ")
    assert out.status is LookupStatus.INVALID_INPUT
    assert out.message == "Please enter an attraction name."


def test_filter_properties_apartment_under_budget() -> None:
    out = filter_properties(property_type="Apartment", min_price=0, max_price=10_000_000)
    assert out.found
    assert [p["name"] for p in out.records] == ["City Loft Apartment"]
    assert out.summary is not None
    assert out.summary.range_for("price") == (8_000_000.0, 8_000_000.0)


def test_filter_properties_bad_budget_widens() -> None:
    out = filter_properties(property_type="Apartment", max_price="not a number")
    assert [p["name"] for p in out.records] == ["City Loft Apartment", "Lakeside Apartment"]


def test_filter_properties_no_match_is_not_an_error() -> None:
    out = filter_properties(property_type="Villa", max_price=1_000)
    assert out.status is LookupStatus.NO_MATCH
    assert out.message == "No records match the selected criteria."


def test_trains_third_class_on_colombo_kandy() -> None:
    out = find_train_schedules("Colombo", "Kandy", classes=["Third Class"])
    assert out.found
    assert [s["train"] for s in out.records] == ["Podi Menike", "Udarata Menike"]


def test_trains_no_class_selected_shows_all() -> None:
    out = find_train_schedules("colombo", "kandy")
    assert len(out.records) == 3


def test_trains_unknown_route_is_no_dataset() -> None:
    out = find_train_schedules("Galle", "Kandy", classes=["Third Class"])
    assert out.status is LookupStatus.NO_DATASET
    assert out.records == ()
    assert "galle-kandy" in out.message


def test_trains_class_too_narrow_is_no_match() -> None:
    out = find_train_schedules("Colombo", "Galle", classes=["First Class"])
    assert out.status is LookupStatus.NO_MATCH


def test_trains_with_injected_schedules() -> None:
    schedules = {"a-b": [{"train": "X", "classes": ["Third Class"]}]}
    out = find_train_schedules("A", "B", classes=["third class"], schedules=schedules)
    assert [s["train"] for s in out.records] == ["X"]


def test_route_key() -> None:
    assert route_key(" Colombo ", "KANDY") == "colombo-kandy"


def test_calculate_fare() -> None:
    out = calculate_fare("Colombo", "Kandy", "second class", passengers="3")
    assert out.found
    assert out.value == 1500
    assert out.message == "Total fare for 3 passenger(s) in Second Class: LKR 1500"


def test_calculate_fare_invalid_passengers_defaults_to_one() -> None:
    assert calculate_fare("Colombo", "Kandy", "Third Class", passengers="many").value == 280
    assert calculate_fare("Colombo", "Kandy", "Third Class", passengers=0).value == 280


def test_calculate_fare_unknown_route_or_class() -> None:
    assert calculate_fare("Galle", "Kandy", "Third Class").status is LookupStatus.NO_DATASET
    assert calculate_fare("Colombo", "Galle", "First Class").status is LookupStatus.NO_DATASET
    assert calculate_fare("Colombo", "Kandy", "").status is LookupStatus.INVALID_INPUT


def test_room_availability_skips_booked_rooms() -> None:
    out = check_room_availability(room_type="Double")
    assert [r["room"] for r in out.records] == ["201"]


def test_room_availability_guests_and_rate() -> None:
    out = check_room_availability(guests=3, max_rate=30_000)
    assert [r["room"] for r in out.records] == ["202"]
    assert check_room_availability(guests=10).status is LookupStatus.NO_MATCH


def test_festival_date_correct_and_incorrect() -> None:
    ok = check_festival_date("Vesak", date(2025, 5, 12))
    assert ok.found
    assert ok.message == "Correct! Vesak is on 2025-05-12."

    wrong = check_festival_date("Sinhala New Year", "2025-04-13")
    assert wrong.status is LookupStatus.NO_MATCH
    assert wrong.message == "Incorrect. Sinhala New Year is on 2025-04-14, not 2025-04-13."

    assert check_festival_date("", "2025-04-13").status is LookupStatus.INVALID_INPUT


def test_convert_currency() -> None:
    out = convert_currency("1000", "LKRtoUSD")
    assert out.value == 3.3
    assert out.message == "1000 LKR = 3.30 USD"

    out = convert_currency(2, "USDtoLKR")
    assert out.message == "2 USD = 606.06 LKR"


def test_convert_currency_rejects_bad_amount() -> None:
    for bad in ("abc", -5, None):
        out = convert_currency(bad)
        assert out.status is LookupStatus.INVALID_INPUT
        assert out.message == "Please enter a valid amount."


def test_grade_for_mark() -> None:
    assert grade_for_mark("75").value == "A"
    assert grade_for_mark(100).value == "A"
    assert grade_for_mark(74.9).value == "B"
    assert grade_for_mark("55").value == "C"
    assert grade_for_mark(35).value == "S"
    assert grade_for_mark(0).value == "Fail"
    for bad in (101, -1, "x"):
        out = grade_for_mark(bad)
        assert out.status is LookupStatus.INVALID_INPUT
        assert out.message == "Invalid Input"


def test_expand_acronym() -> None:
    assert expand_acronym("se").message == "Software Engineering"
    assert expand_acronym("SE", table="role").message == "Software Engineer"
    miss = expand_acronym("XYZ")
    assert miss.status is LookupStatus.NO_MATCH
    assert miss.message == "Invalid Input"


def test_search_attraction_literal_null_is_a_name() -> None:
    out = search_attraction("null")
    assert out.status is LookupStatus.NO_DATASET
    assert 'Sorry, no details available for "null".' in out.message


def test_calculate_fare_without_price_is_no_dataset() -> None:
    for fare in ({"class": "Third Class"}, {"class": "Third Class", "price": ""}):
        out = calculate_fare("A", "B", "Third Class", fares={"a-b": [fare]})
        assert out.status is LookupStatus.NO_DATASET
        assert out.value is None
        assert "LKR" not in out.message
