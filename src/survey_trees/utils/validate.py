from __future__ import annotations
import pandas as pd

def require_columns(
    df: pd.DataFrame,
    cols: list[str],
    name: str = "df",
    exc: type[Exception] = ValueError,
) -> None:
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise exc(f"{name} missing columns: {missing}")

def require_no_nulls(
    df: pd.DataFrame,
    cols: list[str],
    name: str = "df",
    exc: type[Exception] = ValueError,
) -> None:
    bad = [c for c in cols if df[c].isna().any()]
    if bad:
        raise exc(f"{name} has nulls in columns: {bad}")
