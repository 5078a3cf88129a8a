# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest

from lanka_lookup import config
from lanka_lookup.core import datasets


@pytest.fixture(autouse=True)
def isolated_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    """
    Point DATA_DIR at an empty temp dir and clear the dataset cache, so every
    test sees the builtin tables unless it writes a CSV override itself.
    """
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr(config, "DATA_DIR", data_dir)
    datasets.clear_cache()
    yield data_dir
    datasets.clear_cache()


@pytest.fixture()
def properties() -> list[dict]:
    return [
        {"name": "Ocean View Villa", "type": "Villa", "price": 45_000_000},
        {"name": "City Loft Apartment", "type": "Apartment", "price": 8_000_000},
        {"name": "Hillside Bungalow", "type": "Bungalow", "price": 15_000_000},
        {"name": "Lakeside Apartment", "type": "Apartment", "price": 18_500_000},
        {"name": "Beachfront Land Plot", "type": "Land", "price": 6_500_000},
    ]


@pytest.fixture()
def colombo_kandy() -> list[dict]:
    return [
        {"train": "Podi Menike", "classes": ["Second Class", "Third Class"]},
        {"train": "Intercity Express", "classes": ["First Class", "Second Class"]},
        {"train": "Udarata Menike", "classes": ["First Class", "Second Class", "Third Class"]},
    ]
