"""Shared pytest fixtures for the scorecard test suite.

Provides:
- inventory_columns / inventory_records: a poorly maintained tulip bulb inventory
- inventory: the inventory as an InMemoryTable
- pricing_columns / pricing_records: competitor tulip pricing
- pricing: the pricing as an InMemoryTable
- sqlite_engine: in-memory SQLite engine shared across connections
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from src.quality.models import Column, ColumnType
from src.quality.table import InMemoryTable

INVENTORY_COLUMNS = [
    Column("species", ColumnType.TEXT),
    Column("price", ColumnType.NUMERIC),
    Column("quantity", ColumnType.NUMERIC),
]

# missing: rows 3, 4      duplicates on (species, price): rows 1, 2
# invalid (< 0): rows 5, 6  outliers: none (too few rows to reach 3 sigma)
INVENTORY_RECORDS = [
    {"species": "Tulipa kaufmanniana", "price": 10.0, "quantity": 5},
    {"species": "Tulipa kaufmanniana", "price": 10.0, "quantity": 7},
    {"species": "Tulipa gesneriana", "price": 12.0, "quantity": None},
    {"species": None, "price": None, "quantity": 3},
    {"species": "Tulipa tarda", "price": -4.0, "quantity": 6},
    {"species": "Tulipa tarda", "price": 8.0, "quantity": -1},
    {"species": "Tulipa clusiana", "price": 11.0, "quantity": 4},
]

PRICING_COLUMNS = [
    Column("competitor_name", ColumnType.TEXT),
    Column("price", ColumnType.NUMERIC),
]

# GardenCo:  missing 1, invalid 1, duplicate 2
# BulbBarn:  missing 1, invalid 1, duplicate 3
# Petals:    missing 0, invalid 0, duplicate 0
# FloraMart: missing 0, invalid 1, duplicate 2
PRICING_RECORDS = [
    {"competitor_name": "GardenCo", "price": 5.0},
    {"competitor_name": "GardenCo", "price": 5.0},
    {"competitor_name": "GardenCo", "price": None},
    {"competitor_name": "GardenCo", "price": 150.0},
    {"competitor_name": "BulbBarn", "price": 7.0},
    {"competitor_name": "BulbBarn", "price": 7.0},
    {"competitor_name": "BulbBarn", "price": 7.0},
    {"competitor_name": "BulbBarn", "price": -2.0},
    {"competitor_name": "BulbBarn", "price": None},
    {"competitor_name": "Petals", "price": 3.0},
    {"competitor_name": "Petals", "price": 4.0},
    {"competitor_name": "FloraMart", "price": 9.0},
    {"competitor_name": "FloraMart", "price": 9.0},
    {"competitor_name": "FloraMart", "price": 200.0},
]


@pytest.fixture
def inventory_columns() -> list[Column]:
    return list(INVENTORY_COLUMNS)


@pytest.fixture
def inventory_records() -> list[dict]:
    return [dict(r) for r in INVENTORY_RECORDS]


@pytest.fixture
def inventory(inventory_columns, inventory_records) -> InMemoryTable:
    """Tulip inventory with missing, duplicate and negative values."""
    return InMemoryTable(inventory_columns, inventory_records)


@pytest.fixture
def pricing() -> InMemoryTable:
    """Competitor pricing with per-competitor quality problems."""
    return InMemoryTable(PRICING_COLUMNS, PRICING_RECORDS)


@pytest.fixture
def sqlite_engine():
    """In-memory SQLite engine; StaticPool keeps one shared database."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield eng
    eng.dispose()


@pytest.fixture
def pricing_columns() -> list[Column]:
    return list(PRICING_COLUMNS)


@pytest.fixture
def pricing_records() -> list[dict]:
    return [dict(r) for r in PRICING_RECORDS]
