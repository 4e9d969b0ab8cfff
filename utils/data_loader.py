"""
utils/data_loader.py
────────────────────
Loads optional on-disk overrides for the matching engine:

  - directory CSV     : extra counterpart entries (settings.directory_file)
  - matching tables   : JSON replacing synonym / region / material tables
                        (settings.matching_tables_file)

Both are cached so each file is read once per process.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from backend.errors import DirectoryError
from backend.schemas import CounterpartEntry
from config.settings import get_settings
from utils.constants import DEFAULT_TABLES, MatchingTables
from utils.logger import component_logger

logger = component_logger("directory")

DIRECTORY_COLUMNS = [
    "id", "company_name", "city", "role", "material_type",
    "quantity", "price_per_kg", "industry_type",
]
_NUMERIC_COLUMNS = ["quantity", "price_per_kg", "latitude", "longitude"]
_REQUIRED_COLUMNS = ["id", "company_name", "role"]


def _normalise_columns(df: pd.DataFrame) -> pd.DataFrame:
    """snake_case every column name."""
    df.columns = [
        re.sub(r"[^a-z0-9]+", "_", str(c).strip().lower()).strip("_")
        for c in df.columns
    ]
    return df


def read_directory_csv(path: str | Path) -> list[CounterpartEntry]:
    """Parse a directory CSV; rows that fail validation are skipped and logged."""
    path = Path(path)
    if not path.exists():
        raise DirectoryError(f"Directory file not found at {path}")

    df = _normalise_columns(pd.read_csv(path, dtype=str))
    missing = [c for c in _REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise DirectoryError(f"Directory file {path.name} is missing columns: {missing}")
    absent = [c for c in DIRECTORY_COLUMNS if c not in df.columns]
    if absent:
        logger.debug(f"Directory file '{path.name}' has no {absent} columns, defaults apply")

    for col in _NUMERIC_COLUMNS:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    df["role"] = df["role"].fillna("").str.strip().str.lower()
    df = df.astype(object).where(pd.notna(df), None)

    entries: list[CounterpartEntry] = []
    for row in df.to_dict(orient="records"):
        try:
            entries.append(CounterpartEntry.model_validate({k: v for k, v in row.items() if v is not None}))
        except ValidationError as exc:
            logger.warning(f"Skipping directory row id={row.get('id')}: {exc.error_count()} error(s)")

    logger.info(f"Directory file '{path.name}': {len(entries)} of {len(df)} rows loaded")
    return entries


@lru_cache(maxsize=1)
def load_directory_file() -> tuple[CounterpartEntry, ...]:
    path = get_settings().directory_path
    if path is None:
        return ()
    return tuple(read_directory_csv(path))


def read_matching_tables(path: str | Path) -> MatchingTables:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Matching tables not found at {path}")
    tables = MatchingTables.model_validate_json(path.read_text(encoding="utf-8"))
    logger.info(
        f"Matching tables from '{path.name}': {len(tables.synonyms)} synonym families, "
        f"{len(tables.regions)} regions"
    )
    return tables


@lru_cache(maxsize=1)
def load_matching_tables() -> MatchingTables:
    path = get_settings().matching_tables_path
    return read_matching_tables(path) if path is not None else DEFAULT_TABLES
