from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import logging
import pandas as pd

from lanka_lookup.core.normalize import coerce_number, is_blank, normalize_key, parse_float

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]

# Sentinel for "record has no such field" (distinct from a None value)
_MISSING = object()


def infer_fields(records: Iterable[Record]) -> FrozenSet[str]:
    known = set()
    for r in records:
        known.update(r.keys())
    return frozenset(known)


def fields_of(records: Any) -> Optional[FrozenSet[str]]:
    """Declared field set carried by a RecordTable / RecordList, if any."""
    declared = getattr(records, "fields", None)
    return None if declared is None else frozenset(declared)


class RecordTable(tuple):
    """
    Immutable sequence of records plus the field set of the dataset it
    belongs to. The field set decides which criteria names are unknown, so
    it travels with every subset taken from the table.
    """

    def __new__(cls, records: Iterable[Record] = (), fields: Optional[Iterable[str]] = None) -> "RecordTable":
        obj = super().__new__(cls, records)
        obj.fields = frozenset(fields) if fields is not None else infer_fields(obj)
        return obj


class RecordList(list):
    """Mutable-list twin of RecordTable, returned by filter()."""

    def __init__(self, records: Iterable[Record] = (), fields: Optional[Iterable[str]] = None) -> None:
        super().__init__(records)
        self.fields = frozenset(fields) if fields is not None else infer_fields(self)


class LookupStatus(str, Enum):
    """
    Outcome of a query or lookup.

    Both NO_MATCH and NO_DATASET are valid, non-exceptional outcomes:
      - NO_DATASET: the lookup key (e.g. a route) has no table at all
      - NO_MATCH:   a table exists but the criteria were too narrow
    """
    MATCHED = "matched"
    NO_MATCH = "no_match"
    NO_DATASET = "no_dataset"
    INVALID_INPUT = "invalid_input"


# ---------------------------------------------------------------------------
# Matchers
# ---------------------------------------------------------------------------

def _same_text(a: Any, b: Any) -> bool:
    return normalize_key(a) == normalize_key(b)


@dataclass(frozen=True)
class Exact:
    """
    Equality on one field.

    Strings are compared trimmed and lower-cased unless case_insensitive is
    False. A None or blank value means the user left the field empty, so the
    criterion is inactive.
    """
    value: Any
    case_insensitive: bool = True

    def is_active(self) -> bool:
        if self.value is None:
            return False
        if isinstance(self.value, str) and is_blank(self.value):
            return False
        return True

    def matches(self, field_value: Any) -> bool:
        if field_value is _MISSING:
            return False
        if self.case_insensitive and (isinstance(self.value, str) or isinstance(field_value, str)):
            return _same_text(self.value, field_value)
        return field_value == self.value


@dataclass(frozen=True)
class Range:
    """
    Inclusive numeric range; either side may be omitted.

    Bounds are parsed leniently: a bound that is None, blank or not a number
    is an open bound. A range with two open bounds is inactive.
    """
    min: Any = None
    max: Any = None

    @property
    def lower(self) -> float:
        v = parse_float(self.min)
        return float("-inf") if v is None else v

    @property
    def upper(self) -> float:
        v = parse_float(self.max)
        return float("inf") if v is None else v

    def discarded_bounds(self) -> List[str]:
        """Names of bounds that were supplied but could not be parsed."""
        out: List[str] = []
        if not is_blank(self.min) and parse_float(self.min) is None:
            out.append("min")
        if not is_blank(self.max) and parse_float(self.max) is None:
            out.append("max")
        return out

    def is_active(self) -> bool:
        return parse_float(self.min) is not None or parse_float(self.max) is not None

    def matches(self, field_value: Any) -> bool:
        if field_value is _MISSING:
            return False
        n = coerce_number(field_value)
        if n is None:
            return False
        return self.lower <= n <= self.upper


@dataclass(frozen=True)
class AnyOf:
    """
    Set intersection: the record's (list) field must contain at least one of
    the requested values. An empty request matches everything.
    """
    values: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        vals = self.values
        if vals is None:
            vals = ()
        elif isinstance(vals, (str, bytes)) or not isinstance(vals, Iterable):
            vals = (vals,)
        object.__setattr__(self, "values", tuple(v for v in vals if not is_blank(v)))

    def is_active(self) -> bool:
        return len(self.values) > 0

    def matches(self, field_value: Any) -> bool:
        if field_value is _MISSING or field_value is None:
            return False
        if isinstance(field_value, (list, tuple, set, frozenset)):
            items = field_value
        else:
            items = (field_value,)
        wanted = {normalize_key(v) for v in self.values}
        return any(normalize_key(item) in wanted for item in items)


@dataclass(frozen=True)
class AllOf:
    """Several matchers on the same field, all of which must hold."""
    matchers: Tuple[Any, ...] = ()

    def is_active(self) -> bool:
        return any(m.is_active() for m in self.matchers)

    def matches(self, field_value: Any) -> bool:
        return all(m.matches(field_value) for m in self.matchers if m.is_active())


Matcher = Union[Exact, Range, AnyOf, AllOf]
Criteria = Mapping[str, Any]

_MATCHER_TYPES = (Exact, Range, AnyOf, AllOf)


def as_matcher(value: Any) -> Matcher:
    """
    Accept shorthand in criteria mappings:
      - a matcher is used as-is
      - a list / tuple / set becomes AnyOf
      - any other value becomes Exact
    """
    if isinstance(value, _MATCHER_TYPES):
        return value
    if isinstance(value, (list, tuple, set, frozenset)):
        return AnyOf(tuple(value))
    return Exact(value)


def _coerce_criteria(criteria: Optional[Criteria]) -> Dict[str, Matcher]:
    if not criteria:
        return {}
    out: Dict[str, Matcher] = {}
    for name, value in criteria.items():
        if not isinstance(name, str):
            # can never name a record field
            logger.debug("Ignoring criterion with non-string field name %r.", name)
            continue
        out[name] = as_matcher(value)
    return out


def combine_criteria(*criteria: Optional[Criteria]) -> Dict[str, Matcher]:
    """
    AND-merge several criteria mappings.

    Two constraints on the same field are kept together under AllOf, so
    filtering by the combination equals filtering by each one in turn.
    """
    merged: Dict[str, Matcher] = {}
    for c in criteria:
        for name, matcher in _coerce_criteria(c).items():
            if name not in merged:
                merged[name] = matcher
                continue
            existing = merged[name]
            parts = existing.matchers if isinstance(existing, AllOf) else (existing,)
            merged[name] = AllOf(tuple(parts) + (matcher,))
    return merged


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class QueryResult:
    dataset: str
    records: Tuple[Record, ...]
    total: int
    criteria: Mapping[str, Matcher] = field(default_factory=dict)
    status: LookupStatus = LookupStatus.MATCHED

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def matched(self) -> bool:
        return self.status is LookupStatus.MATCHED

    def to_frame(self) -> pd.DataFrame:
        """Matched records as a DataFrame (one column per field seen)."""
        if not self.records:
            return pd.DataFrame()
        return pd.DataFrame.from_records([dict(r) for r in self.records])


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class QueryEngine:
    """
    Stable, side-effect-free filter over a fixed snapshot of records.

    The field set (schema) comes from, in order: the fields argument, the
    fields carried by a RecordTable / RecordList, or the union of the
    records' keys. Criteria on names outside the schema are ignored. A
    criterion on a schema field excludes any record that lacks the field,
    whatever the other records look like.
    """

    def __init__(
        self,
        records: Iterable[Record],
        name: str = "",
        fields: Optional[Iterable[str]] = None,
    ) -> None:
        declared = frozenset(fields) if fields is not None else fields_of(records)
        self._records: Tuple[Record, ...] = tuple(records)
        self.name = name
        self._known_fields: FrozenSet[str] = (
            declared if declared is not None else infer_fields(self._records)
        )

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> Tuple[Record, ...]:
        return self._records

    @property
    def known_fields(self) -> FrozenSet[str]:
        return self._known_fields

    def _active_criteria(self, criteria: Optional[Criteria]) -> Dict[str, Matcher]:
        active: Dict[str, Matcher] = {}
        for name, matcher in _coerce_criteria(criteria).items():
            if name not in self._known_fields:
                logger.debug("Ignoring criterion on unknown field %r (dataset=%s).", name, self.name)
                continue
            if isinstance(matcher, Range):
                dropped = matcher.discarded_bounds()
                if dropped:
                    logger.debug(
                        "Unparsable %s bound(s) on %r treated as open: %r",
                        "/".join(dropped), name, matcher,
                    )
            if not matcher.is_active():
                continue
            active[name] = matcher
        return active

    def filter(self, criteria: Optional[Criteria] = None) -> RecordList:
        """Matching records in dataset order; the result keeps this schema."""
        active = self._active_criteria(criteria)
        if not active:
            return RecordList(self._records, self._known_fields)
        return RecordList(
            (
                r for r in self._records
                if all(m.matches(r.get(name, _MISSING)) for name, m in active.items())
            ),
            self._known_fields,
        )

    def run(self, criteria: Optional[Criteria] = None) -> QueryResult:
        logger.debug("Running query on %s with criteria=%s", self.name or "<anonymous>", criteria)
        matches = self.filter(criteria)
        status = LookupStatus.MATCHED if matches else LookupStatus.NO_MATCH
        return QueryResult(
            dataset=self.name,
            records=RecordTable(matches, self._known_fields),
            total=len(self._records),
            criteria=_coerce_criteria(criteria),
            status=status,
        )


def filter_records(
    dataset: Iterable[Record],
    criteria: Optional[Criteria] = None,
    fields: Optional[Iterable[str]] = None,
) -> RecordList:
    """Return the records of dataset matching every criterion, in dataset order."""
    return QueryEngine(dataset, fields=fields).filter(criteria)


def run_query(
    dataset: Iterable[Record],
    criteria: Optional[Criteria] = None,
    name: str = "",
    fields: Optional[Iterable[str]] = None,
) -> QueryResult:
    return QueryEngine(dataset, name=name, fields=fields).run(criteria)


def select_partition(keyed: Mapping[str, Sequence[Record]], key: Any) -> Optional[RecordTable]:
    """
    Look up one partition of a keyed table (e.g. the schedules for route
    "colombo-kandy"). Returns None when the key has no partition so the
    caller can tell "no dataset" apart from "no match".
    """
    wanted = normalize_key(key)
    if not wanted:
        return None
    for k, rows in keyed.items():
        if normalize_key(k) == wanted:
            return RecordTable(rows, fields_of(rows))
    return None
