"""
Lanka Lookup: filter small static datasets and summarize the matches.

Packages:
- core: query engine, builtin datasets, per-task lookups, summaries and
  append-only stores
"""
from __future__ import annotations

from lanka_lookup.config import APP_NAME, APP_VERSION

__version__ = APP_VERSION

__all__ = ["APP_NAME", "__version__"]
