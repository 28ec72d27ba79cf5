"""Exceptions raised by the survey tree pipeline."""

from __future__ import annotations


class SurveyTreesError(Exception):
    """Base exception for all pipeline errors."""


class LoadError(SurveyTreesError):
    """Raised when the survey file is missing, unreadable or off-schema."""


class SplitError(SurveyTreesError):
    """Raised when a train/test split would leave one side empty."""

    def __init__(self, n_rows: int, fraction: float, n_train: int) -> None:
        self.n_rows = n_rows
        self.fraction = fraction
        self.n_train = n_train
        super().__init__(
            f"Split of {n_rows} rows with fraction {fraction} gives "
            f"{n_train} train / {n_rows - n_train} test rows; both must be non-empty."
        )


class FitError(SurveyTreesError):
    """Raised when no tree can be grown from the given target and predictors."""


class PruneError(SurveyTreesError):
    """Raised for invalid pruning or cross-validation requests."""


__all__ = [
    "FitError",
    "LoadError",
    "PruneError",
    "SplitError",
    "SurveyTreesError",
]
