from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

from sklearn import metrics

from survey_trees.exceptions import FitError
from survey_trees.models.tree import TreeModel
from survey_trees.utils.validate import require_columns


@dataclass(frozen=True)
class ClassificationReport:
    confusion: pd.DataFrame
    accuracy: float
    n: int

    @property
    def error_rate(self) -> float:
        return 1.0 - self.accuracy


@dataclass(frozen=True)
class RegressionReport:
    mse: float
    n: int


# -----------------------------
# Metrics
# -----------------------------
def predict(model: TreeModel, df: pd.DataFrame) -> pd.Series:
    return pd.Series(model.predict(df), index=df.index, name=f"pred_{model.target}")


def confusion_matrix(actual, predicted) -> pd.DataFrame:
    """Actual classes as rows, predicted classes as columns, over the union of labels."""
    actual = np.asarray(actual)
    predicted = np.asarray(predicted)
    labels = np.unique(np.concatenate([actual, predicted]))
    cm = metrics.confusion_matrix(actual, predicted, labels=labels)
    return pd.DataFrame(
        cm,
        index=pd.Index(labels, name="actual"),
        columns=pd.Index(labels, name="predicted"),
    )


def accuracy(actual, predicted) -> float:
    return float(metrics.accuracy_score(actual, predicted))


def mean_squared_error(actual, predicted) -> float:
    return float(metrics.mean_squared_error(actual, predicted))


def error_reduction(baseline: float, new: float) -> float:
    """Fractional drop from `baseline` to `new`: (baseline - new) / baseline."""
    if not baseline > 0:
        raise ValueError(f"baseline must be positive, got {baseline}")
    return (baseline - new) / baseline


# -----------------------------
# Reports
# -----------------------------
def _actual(model: TreeModel, df: pd.DataFrame) -> np.ndarray:
    require_columns(df, [model.target], name="evaluation data", exc=FitError)
    return df[model.target].to_numpy()


def evaluate_classifier(model: TreeModel, df: pd.DataFrame) -> ClassificationReport:
    if model.task != "classification":
        raise FitError(f"'{model.target}' tree is a regression tree")
    y = _actual(model, df)
    pred = model.predict(df)
    return ClassificationReport(
        confusion=confusion_matrix(y, pred),
        accuracy=accuracy(y, pred),
        n=len(y),
    )


def evaluate_regressor(model: TreeModel, df: pd.DataFrame) -> RegressionReport:
    if model.task != "regression":
        raise FitError(f"'{model.target}' tree is a classification tree")
    y = _actual(model, df)
    return RegressionReport(mse=mean_squared_error(y, model.predict(df)), n=len(y))
