from __future__ import annotations

import logging
import sys

from lanka_lookup.config import LOG_LEVEL


def setup_logging(level: str | int | None = None) -> None:
    """
    Configure a single stderr handler on the root logger.

    Call this once from the embedding application; library modules only ever
    use logging.getLogger(__name__).
    """
    if level is None:
        level = LOG_LEVEL
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(handler)

    logging.captureWarnings(True)
    # pandas can be chatty about dtype coercion on CSV load
    logging.getLogger("py.warnings").setLevel(logging.ERROR)
