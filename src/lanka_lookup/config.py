from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Optional CSV overrides for the builtin tables live here:
#   data/<dataset name>.csv   (e.g. data/properties.csv)
DATA_DIR = Path(
    os.getenv("LANKA_LOOKUP_DATA_DIR", str(PROJECT_ROOT / "data"))
).expanduser()

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "Lanka Lookup"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("LANKA_LOOKUP_LOG_LEVEL", "INFO").strip().upper() or "INFO"

# ---------------------------------------------------------------------------
# CSV parsing
#
# List-valued fields (e.g. train classes) are stored in a single CSV cell,
# separated by this character: "First Class|Third Class".
# ---------------------------------------------------------------------------

CSV_LIST_SEPARATOR = "|"

# ---------------------------------------------------------------------------
# User-facing messages
#
# An empty result is never an error. Callers pick one of these depending on
# whether the lookup key had no dataset at all or the criteria were too narrow.
# ---------------------------------------------------------------------------

MSG_NO_DATASET = "No data available for {key}."
MSG_NO_MATCH = "No records match the selected criteria."
MSG_FOUND = "Found {count} of {total} records."
