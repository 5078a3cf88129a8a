from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import pandas as pd

from lanka_lookup import config
from lanka_lookup.core.query_engine import LookupStatus, QueryResult


@dataclass
class NumericRange:
    """Observed spread of one numeric field across the matched records."""
    field: str
    minimum: float
    maximum: float
    count: int


@dataclass
class ResultSummary:
    """
    Canonical facts derived from a QueryResult.

    These are the numbers a caller may show next to the matched records;
    nothing here is computed from records outside the match.
    """
    dataset: str
    status: LookupStatus
    match_count: int
    total: int
    numeric_ranges: Dict[str, NumericRange] = field(default_factory=dict)
    message: str = ""

    def range_for(self, name: str) -> Optional[Tuple[float, float]]:
        r = self.numeric_ranges.get(name)
        return None if r is None else (r.minimum, r.maximum)


def _numeric_ranges(df: pd.DataFrame) -> Dict[str, NumericRange]:
    """
    Min / max per numeric column. A column counts as numeric only if every
    present value is a number. Columns holding any string (room "101") are
    identifiers and are skipped, as are bool and list columns.
    """
    out: Dict[str, NumericRange] = {}
    for col in df.columns:
        series = df[col].dropna()
        if series.empty:
            continue
        if pd.api.types.is_bool_dtype(series):
            continue
        if pd.api.types.is_numeric_dtype(series):
            numeric = series
        else:
            if series.map(pd.api.types.is_bool).any():
                continue
            if series.map(lambda v: isinstance(v, str)).any():
                continue
            if series.map(pd.api.types.is_list_like).any():
                continue
            numeric = pd.to_numeric(series, errors="coerce")
        if numeric.isna().any():
            continue
        out[str(col)] = NumericRange(
            field=str(col),
            minimum=float(numeric.min()),
            maximum=float(numeric.max()),
            count=int(numeric.size),
        )
    return out


def message_for(status: LookupStatus, count: int = 0, total: int = 0, key: str = "") -> str:
    if status is LookupStatus.NO_DATASET:
        return config.MSG_NO_DATASET.format(key=key or "this selection")
    if status is LookupStatus.NO_MATCH:
        return config.MSG_NO_MATCH
    if status is LookupStatus.MATCHED:
        return config.MSG_FOUND.format(count=count, total=total)
    return ""


def build_result_summary(result: QueryResult, key: str = "") -> ResultSummary:
    """
    Summarize a QueryResult:
      - match count against dataset size
      - numeric ranges over the matched records only
      - the user message for the outcome (found / too narrow / no dataset)
    """
    ranges: Dict[str, NumericRange] = {}
    if result.records:
        ranges = _numeric_ranges(result.to_frame())

    return ResultSummary(
        dataset=result.dataset,
        status=result.status,
        match_count=result.count,
        total=result.total,
        numeric_ranges=ranges,
        message=message_for(result.status, result.count, result.total, key=key),
    )


def describe_ranges(summary: ResultSummary) -> List[str]:
    """Human-readable lines, e.g. 'price: 8000000 - 18500000'."""
    lines: List[str] = []
    for name, r in summary.numeric_ranges.items():
        lo = int(r.minimum) if r.minimum.is_integer() else r.minimum
        hi = int(r.maximum) if r.maximum.is_integer() else r.maximum
        lines.append(f"{name}: {lo}" if lo == hi else f"{name}: {lo} - {hi}")
    return lines
