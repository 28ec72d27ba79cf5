from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from survey_trees.config.constants import RND, TRAIN_FRACTION
from survey_trees.exceptions import SplitError


@dataclass(frozen=True)
class ValidationSplit:
    train_idx: np.ndarray
    test_idx: np.ndarray
    seed: int | None = None

    @property
    def n_rows(self) -> int:
        return len(self.train_idx) + len(self.test_idx)

    def apply(self, df: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
        if len(df) != self.n_rows:
            raise ValueError(f"Split covers {self.n_rows} rows but frame has {len(df)}")
        return df.iloc[self.train_idx].copy(), df.iloc[self.test_idx].copy()


def validation_split(
    data: pd.DataFrame | int,
    fraction: float = TRAIN_FRACTION,
    seed: int | None = RND,
    rng: np.random.Generator | None = None,
) -> ValidationSplit:
    """
    Draw floor(N * fraction) row positions without replacement for training;
    the remaining positions form the test set.

    Pass `rng` to control the generator directly; otherwise one is built from `seed`.
    """
    n_rows = int(data) if isinstance(data, (int, np.integer)) else len(data)
    n_train = math.floor(n_rows * fraction) if 0.0 < fraction < 1.0 else 0
    if n_train == 0 or n_train == n_rows:
        raise SplitError(n_rows, fraction, n_train)

    gen = rng if rng is not None else np.random.default_rng(seed)
    train_idx = np.sort(gen.choice(n_rows, size=n_train, replace=False))
    test_idx = np.setdiff1d(np.arange(n_rows), train_idx)

    return ValidationSplit(train_idx=train_idx, test_idx=test_idx, seed=seed if rng is None else None)
