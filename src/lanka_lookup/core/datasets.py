from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import logging
import re

import pandas as pd

from lanka_lookup import config
from lanka_lookup.core.normalize import normalize_key, normalize_text
from lanka_lookup.core.query_engine import Record, RecordTable

logger = logging.getLogger(__name__)


class DatasetError(Exception):
    """Raised when a dataset name is unknown or its CSV override is unreadable."""


# ---------------------------------------------------------------------------
# Builtin tables
#
# Plain literals; _freeze() turns them into tuples of read-only records.
# ---------------------------------------------------------------------------

_ATTRACTIONS = [
    {
        "name": "Galle Face Green",
        "description": "A popular urban park and promenade along the coast, perfect for evening walks and street food.",
        "location": "Colombo 3, Sri Lanka",
        "hours": "Open 24 hours",
    },
    {
        "name": "Venerable Gangaramaya Temple",
        "description": "A historic Buddhist temple with a mix of modern and traditional architecture, featuring a museum and library.",
        "location": "61 Sri Jinarathana Rd, Colombo 2, Sri Lanka",
        "hours": "6:00 AM - 10:00 PM",
    },
    {
        "name": "National Museum of Colombo",
        "description": "The largest museum in Sri Lanka, showcasing the country's cultural and historical artifacts.",
        "location": "Sir Marcus Fernando Mawatha, Colombo 7, Sri Lanka",
        "hours": "9:00 AM - 5:00 PM, closed on Fridays",
    },
    {
        "name": "Independence Square",
        "description": "A landmark commemorating Sri Lanka's independence, surrounded by lush gardens and colonial-era architecture.",
        "location": "Independence Ave, Colombo 7, Sri Lanka",
        "hours": "Open 24 hours",
    },
]

# Prices in LKR
_PROPERTIES = [
    {"name": "Ocean View Villa", "type": "Villa", "location": "Galle", "price": 45_000_000, "bedrooms": 4},
    {"name": "City Loft Apartment", "type": "Apartment", "location": "Colombo", "price": 8_000_000, "bedrooms": 2},
    {"name": "Hillside Bungalow", "type": "Bungalow", "location": "Kandy", "price": 15_000_000, "bedrooms": 3},
    {"name": "Lakeside Apartment", "type": "Apartment", "location": "Colombo", "price": 18_500_000, "bedrooms": 3},
    {"name": "Beachfront Land Plot", "type": "Land", "location": "Negombo", "price": 6_500_000, "bedrooms": 0},
]

_TRAIN_SCHEDULES = [
    {"route": "colombo-kandy", "train": "Podi Menike", "departure": "05:55", "arrival": "09:15",
     "classes": ["Second Class", "Third Class"]},
    {"route": "colombo-kandy", "train": "Intercity Express", "departure": "07:00", "arrival": "09:30",
     "classes": ["First Class", "Second Class"]},
    {"route": "colombo-kandy", "train": "Udarata Menike", "departure": "08:30", "arrival": "11:35",
     "classes": ["First Class", "Second Class", "Third Class"]},
    {"route": "colombo-galle", "train": "Galu Kumari", "departure": "06:50", "arrival": "09:05",
     "classes": ["Second Class", "Third Class"]},
    {"route": "colombo-galle", "train": "Ruhunu Kumari", "departure": "15:50", "arrival": "18:10",
     "classes": ["Second Class", "Third Class"]},
    {"route": "kandy-ella", "train": "Podi Menike", "departure": "08:47", "arrival": "15:20",
     "classes": ["First Class", "Second Class", "Third Class"]},
    {"route": "kandy-ella", "train": "Ella Odyssey", "departure": "09:45", "arrival": "15:10",
     "classes": ["First Class"]},
    {"route": "colombo-jaffna", "train": "Yal Devi", "departure": "05:45", "arrival": "12:20",
     "classes": ["First Class", "Second Class", "Third Class"]},
]

# One-way fare per passenger, LKR
_FARES = [
    {"route": "colombo-kandy", "class": "First Class", "price": 1000},
    {"route": "colombo-kandy", "class": "Second Class", "price": 500},
    {"route": "colombo-kandy", "class": "Third Class", "price": 280},
    {"route": "colombo-galle", "class": "Second Class", "price": 360},
    {"route": "colombo-galle", "class": "Third Class", "price": 200},
    {"route": "kandy-ella", "class": "First Class", "price": 1500},
    {"route": "kandy-ella", "class": "Second Class", "price": 600},
    {"route": "kandy-ella", "class": "Third Class", "price": 330},
    {"route": "colombo-jaffna", "class": "First Class", "price": 2500},
    {"route": "colombo-jaffna", "class": "Second Class", "price": 1200},
    {"route": "colombo-jaffna", "class": "Third Class", "price": 660},
]

# Nightly rate in LKR
_ROOMS = [
    {"room": "101", "room_type": "Single", "rate": 9_500, "capacity": 1, "available": True},
    {"room": "102", "room_type": "Double", "rate": 14_000, "capacity": 2, "available": False},
    {"room": "201", "room_type": "Double", "rate": 15_500, "capacity": 2, "available": True},
    {"room": "202", "room_type": "Family", "rate": 24_000, "capacity": 4, "available": True},
    {"room": "301", "room_type": "Suite", "rate": 38_000, "capacity": 3, "available": True},
]

_FESTIVAL_DATES = [
    {"festival": "Vesak", "date": "2025-05-12"},
    {"festival": "Sinhala New Year", "date": "2025-04-14"},
]

# Approximate rates as of May 2025
_EXCHANGE_RATES = [
    {"direction": "LKRtoUSD", "source": "LKR", "target": "USD", "rate": 0.0033},
    {"direction": "USDtoLKR", "source": "USD", "target": "LKR", "rate": 303.03},
]

# Inclusive integer bands
_GRADE_BANDS = [
    {"grade": "A", "min": 75, "max": 100},
    {"grade": "B", "min": 65, "max": 74},
    {"grade": "C", "min": 55, "max": 64},
    {"grade": "S", "min": 35, "max": 54},
    {"grade": "Fail", "min": 0, "max": 34},
]

_COURSE_ACRONYMS = [
    {"code": "SE", "meaning": "Software Engineering"},
    {"code": "CE", "meaning": "Computer Engineering"},
    {"code": "IT", "meaning": "Information Technology"},
    {"code": "CS", "meaning": "Computer Science"},
    {"code": "IS", "meaning": "Information Systems"},
    {"code": "DS", "meaning": "Data Science"},
    {"code": "AI", "meaning": "Artificial Intelligence"},
    {"code": "ML", "meaning": "Machine Learning"},
    {"code": "DB", "meaning": "Database"},
    {"code": "OS", "meaning": "Operating System"},
    {"code": "CN", "meaning": "Computer Networks"},
    {"code": "SSE", "meaning": "Senior Software Engineering"},
    {"code": "CSE", "meaning": "Computer Science Engineering"},
]

_ROLE_ACRONYMS = [
    {"code": "INTERN", "meaning": "Intern Software Engineer"},
    {"code": "ASE", "meaning": "Associate Software Engineer"},
    {"code": "SE", "meaning": "Software Engineer"},
    {"code": "SSE", "meaning": "Senior Software Engineer"},
    {"code": "TL", "meaning": "Tech Lead"},
    {"code": "PM", "meaning": "Project Manager"},
]

_BUILTIN: Dict[str, List[Dict[str, Any]]] = {
    "attractions": _ATTRACTIONS,
    "properties": _PROPERTIES,
    "train_schedules": _TRAIN_SCHEDULES,
    "fares": _FARES,
    "rooms": _ROOMS,
    "festival_dates": _FESTIVAL_DATES,
    "exchange_rates": _EXCHANGE_RATES,
    "grade_bands": _GRADE_BANDS,
    "course_acronyms": _COURSE_ACRONYMS,
    "role_acronyms": _ROLE_ACRONYMS,
}

# Column typing hints for CSV overrides
_LIST_FIELDS: Dict[str, Tuple[str, ...]] = {
    "train_schedules": ("classes",),
}
_BOOL_FIELDS: Dict[str, Tuple[str, ...]] = {
    "rooms": ("available",),
}
# Columns that look numeric but are identifiers
_TEXT_FIELDS: Dict[str, Tuple[str, ...]] = {
    "rooms": ("room",),
}

_TRUE_STRINGS = {"true", "yes", "y", "1"}

# In-memory cache
_DATASET_CACHE: Dict[str, RecordTable] = {}

# Dataset names double as CSV file stems
_NAME_PATTERN = re.compile(r"^[a-z0-9_\-]+$")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _freeze_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return value


def _freeze(rows: Iterable[Mapping[str, Any]], fields: Optional[Iterable[str]] = None) -> RecordTable:
    """Read-only records; fields defaults to the union of the rows' keys."""
    return RecordTable(
        (MappingProxyType({k: _freeze_value(v) for k, v in row.items()}) for row in rows),
        fields,
    )


def _check_name(name: str) -> str:
    key = normalize_key(name)
    if not _NAME_PATTERN.match(key):
        raise DatasetError(
            f"Invalid dataset name {name!r}: use letters, digits, '_' or '-' only."
        )
    return key


def _csv_path(name: str, data_dir: Optional[Path]) -> Path:
    base = Path(data_dir) if data_dir is not None else config.DATA_DIR
    return base / f"{name}.csv"


def _split_list(val: Any) -> Tuple[str, ...]:
    text = normalize_text(val)
    if not text:
        return ()
    return tuple(p.strip() for p in text.split(config.CSV_LIST_SEPARATOR) if p.strip())


def _coerce_columns(df: pd.DataFrame, name: str) -> pd.DataFrame:
    """
    Give a raw all-string frame the types the builtin table would have:
    numeric columns become numbers, declared list / bool columns are parsed.
    """
    out = df.copy()
    list_cols = set(_LIST_FIELDS.get(name, ()))
    bool_cols = set(_BOOL_FIELDS.get(name, ()))
    text_cols = set(_TEXT_FIELDS.get(name, ()))

    for col in out.columns:
        if col in list_cols:
            out[col] = out[col].apply(_split_list)
        elif col in bool_cols:
            out[col] = out[col].apply(
                lambda v: None if normalize_text(v) == "" else normalize_key(v) in _TRUE_STRINGS
            )
        elif col in text_cols:
            continue
        else:
            present = out[col].dropna()
            numeric = pd.to_numeric(present, errors="coerce")
            if len(present) > 0 and numeric.notna().all():
                out[col] = pd.to_numeric(out[col], errors="coerce")
    return out


def _frame_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """Rows as dicts; blank cells are dropped so the field reads as missing."""
    rows: List[Dict[str, Any]] = []
    for rec in df.to_dict(orient="records"):
        row: Dict[str, Any] = {}
        for k, v in rec.items():
            if isinstance(v, tuple):
                row[str(k)] = v
                continue
            if v is None:
                continue
            try:
                if pd.isna(v):
                    continue
            except (TypeError, ValueError):
                pass
            if hasattr(v, "item"):
                # numpy scalar -> python scalar
                v = v.item()
            if isinstance(v, float) and v.is_integer():
                v = int(v)
            row[str(k)] = v
        rows.append(row)
    return rows


def _read_csv_dataset(path: Path, name: str) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Rows plus the header, so columns blank in every row stay in the schema."""
    logger.info("Loading dataset %s from %s", name, path)
    try:
        df = pd.read_csv(path, dtype=str, keep_default_na=True)
    except Exception as exc:
        raise DatasetError(f"Could not read dataset file {path}: {exc}") from exc

    df.columns = [normalize_text(c) for c in df.columns]
    if any(c == "" for c in df.columns):
        raise DatasetError(f"Dataset file {path} has a blank column header.")

    return _frame_to_rows(_coerce_columns(df, name)), list(df.columns)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def available_datasets() -> List[str]:
    return sorted(_BUILTIN)


def load_dataset(name: str, refresh: bool = False, data_dir: Optional[Path] = None) -> RecordTable:
    """
    Load a dataset as a RecordTable of read-only records.

    If <data_dir>/<name>.csv exists it replaces the builtin table; otherwise
    the builtin literal is used. The table's declared fields are the CSV
    header, or the union of the builtin rows' keys. Results are cached per
    name.
    """
    key = _check_name(name)
    if key in _DATASET_CACHE and not refresh and data_dir is None:
        return _DATASET_CACHE[key]

    path = _csv_path(key, data_dir)
    fields: Optional[List[str]] = None
    if path.exists():
        rows, fields = _read_csv_dataset(path, key)
    elif key in _BUILTIN:
        rows = _BUILTIN[key]
    else:
        raise DatasetError(
            f"Unknown dataset {name!r}. Expected one of {available_datasets()} "
            f"or a CSV file at {path}."
        )

    records = _freeze(rows, fields)
    if data_dir is None:
        _DATASET_CACHE[key] = records
    logger.debug("Dataset %s: %d records", key, len(records))
    return records


def load_keyed_dataset(
    name: str,
    key_field: str,
    refresh: bool = False,
    data_dir: Optional[Path] = None,
) -> Dict[str, RecordTable]:
    """
    Group a dataset by one field (e.g. train schedules by route), keeping
    each group in dataset order. Keys are normalized with normalize_key.
    Records without the key field are skipped. Every group keeps the full
    dataset's fields.
    """
    table = load_dataset(name, refresh=refresh, data_dir=data_dir)
    grouped: Dict[str, List[Record]] = {}
    for rec in table:
        k = normalize_key(rec.get(key_field))
        if not k:
            logger.warning("Dataset %s: record without %r skipped: %s", name, key_field, dict(rec))
            continue
        grouped.setdefault(k, []).append(rec)
    return {k: RecordTable(v, table.fields) for k, v in grouped.items()}


def clear_cache() -> None:
    _DATASET_CACHE.clear()
