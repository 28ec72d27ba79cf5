from __future__ import annotations

from functools import partial
from pathlib import Path

import numpy as np
import pandas as pd

from survey_trees.config.constants import (
    BINARY_COLS,
    CATEGORICAL_COLS,
    CONTINUOUS_COLS,
    ORDINAL_LEVELS,
    SCHEMA_COLS,
)
from survey_trees.exceptions import LoadError
from survey_trees.utils.logging_config import get_logger
from survey_trees.utils.validate import require_columns, require_no_nulls

logger = get_logger(__name__)

READERS = {
    # only empty cells are missing; "None" is a party label
    ".csv": partial(pd.read_csv, keep_default_na=False, na_values=[""]),
    ".dta": pd.read_stata,
}


def _read_table(path: Path) -> pd.DataFrame:
    if not path.exists():
        raise LoadError(f"File not found: {path}")

    reader = READERS.get(path.suffix.lower())
    if reader is None:
        raise LoadError(f"Unsupported file type '{path.suffix}'. Expected one of {sorted(READERS)}")

    try:
        return reader(path)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, ValueError) as err:
        raise LoadError(f"Could not parse {path}: {err}") from err


def _coerce_numeric(df: pd.DataFrame, col: str) -> pd.Series:
    vals = pd.to_numeric(df[col], errors="coerce")
    if vals.isna().any():
        bad = df.loc[vals.isna(), col].head(5).tolist()
        raise LoadError(f"Non-numeric values in '{col}': {bad}")
    return vals


def _check_codes(vals: pd.Series, col: str, allowed: set[int]) -> pd.Series:
    if not np.all(np.equal(np.mod(vals, 1), 0)):
        raise LoadError(f"'{col}' must hold integer codes")
    vals = vals.astype(int)
    bad = sorted(set(vals.unique()) - allowed)
    if bad:
        raise LoadError(f"'{col}' has values outside {sorted(allowed)}: {bad}")
    return vals


def coerce_schema(df_raw: pd.DataFrame, name: str = "survey") -> pd.DataFrame:
    """
    Select the schema columns (in schema order) and enforce their types:
      - binary columns: 0/1 integers
      - ordinal columns: integer codes 1..n_levels
      - categorical columns: stripped strings
      - continuous columns: floats
    """
    require_columns(df_raw, SCHEMA_COLS, name=name, exc=LoadError)
    require_no_nulls(df_raw, SCHEMA_COLS, name=name, exc=LoadError)

    df = df_raw[SCHEMA_COLS].copy()

    for col in BINARY_COLS:
        df[col] = _check_codes(_coerce_numeric(df, col), col, {0, 1})

    for col, n_levels in ORDINAL_LEVELS.items():
        df[col] = _check_codes(_coerce_numeric(df, col), col, set(range(1, n_levels + 1)))

    for col in CATEGORICAL_COLS:
        df[col] = df[col].astype(str).str.strip()

    for col in CONTINUOUS_COLS:
        df[col] = _coerce_numeric(df, col).astype(float)

    return df.reset_index(drop=True)


def load_respondents(path: Path | str) -> pd.DataFrame:
    """
    Load the respondent table from a .csv or Stata .dta file.
    Raises LoadError if the file is missing, unreadable or does not match the schema.
    """
    path = Path(path)
    df = coerce_schema(_read_table(path), name=path.name)
    if df.empty:
        raise LoadError(f"{path} has no rows")

    logger.info("Loaded %d respondents from %s", len(df), path)
    return df
