from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

import numpy as np
import pandas as pd
from pandas.api.types import is_numeric_dtype

from sklearn.pipeline import Pipeline
from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

from survey_trees.config.constants import (
    BINARY_COLS,
    CATEGORICAL_COLS,
    CONTINUOUS_COLS,
    MIN_IMPURITY_DECREASE,
    MIN_SAMPLES_LEAF,
    MIN_SAMPLES_SPLIT,
    RND,
)
from survey_trees.exceptions import FitError
from survey_trees.features.preprocess import build_preprocessor
from survey_trees.models.tree import Task, TreeModel
from survey_trees.utils.logging_config import get_logger
from survey_trees.utils.validate import require_columns

logger = get_logger(__name__)


@dataclass(frozen=True)
class TreeConfig:
    task: Task | None = None  # inferred from the target when None
    min_samples_split: int = MIN_SAMPLES_SPLIT
    min_samples_leaf: int = MIN_SAMPLES_LEAF
    min_impurity_decrease: float = MIN_IMPURITY_DECREASE
    classification_criterion: str = "log_loss"
    regression_criterion: str = "squared_error"
    random_state: int = RND


@dataclass(frozen=True)
class TreeSummary:
    task: Task
    target: str
    used_attributes: tuple[str, ...]
    n_leaves: int
    n_obs: int
    residual_mean_deviance: float
    misclassified: int | None = None
    misclassification_rate: float | None = None


# Pipeline construction

def infer_task(target: str, y: pd.Series) -> Task:
    if target in CONTINUOUS_COLS:
        return "regression"
    if target in BINARY_COLS or not is_numeric_dtype(y) or y.nunique() <= 2:
        return "classification"
    return "regression"


def split_feature_kinds(X: pd.DataFrame) -> tuple[list[str], list[str]]:
    categorical = [c for c in X.columns if c in CATEGORICAL_COLS or not is_numeric_dtype(X[c])]
    numeric = [c for c in X.columns if c not in categorical]
    return numeric, categorical


def build_tree_pipeline(
    numeric_features: list[str],
    categorical_features: list[str],
    task: Task,
    cfg: TreeConfig,
    ccp_alpha: float = 0.0,
) -> Pipeline:
    params = dict(
        min_samples_split=cfg.min_samples_split,
        min_samples_leaf=cfg.min_samples_leaf,
        min_impurity_decrease=cfg.min_impurity_decrease,
        random_state=cfg.random_state,
        ccp_alpha=ccp_alpha,
    )
    if task == "classification":
        tree = DecisionTreeClassifier(criterion=cfg.classification_criterion, **params)
    else:
        tree = DecisionTreeRegressor(criterion=cfg.regression_criterion, **params)

    pre = build_preprocessor(numeric_features, categorical_features)
    return Pipeline([("pre", pre), ("tree", tree)])


def fit_pipeline(
    X: pd.DataFrame,
    y: pd.Series,
    task: Task,
    cfg: TreeConfig,
    ccp_alpha: float = 0.0,
) -> Pipeline:
    numeric, categorical = split_feature_kinds(X)
    pipe = build_tree_pipeline(numeric, categorical, task, cfg, ccp_alpha=ccp_alpha)
    pipe.fit(X, y)
    return pipe


# Fitting

def fit_tree(
    df: pd.DataFrame,
    target: str,
    predictors: Iterable[str] | None = None,
    exclude: Iterable[str] = (),
    cfg: TreeConfig = TreeConfig(),
) -> TreeModel:
    """
    Grow a tree for `target`. Predictors default to every column except the
    target and anything in `exclude` (the `target ~ . - excluded` form).
    """
    require_columns(df, [target], name="training data", exc=FitError)

    excluded = set(exclude)
    if predictors is None:
        preds = [c for c in df.columns if c != target and c not in excluded]
    else:
        preds = [c for c in predictors if c not in excluded]
        require_columns(df, preds, name="training data", exc=FitError)
        if target in preds:
            raise FitError(f"Target '{target}' cannot also be a predictor")
    if not preds:
        raise FitError(f"No predictors left for target '{target}'")

    X = df[preds].copy()
    y = df[target].copy()

    if y.nunique() < 2:
        raise FitError(f"Target '{target}' has a single value; no split is possible")

    task = cfg.task or infer_task(target, y)
    if task == "regression" and not is_numeric_dtype(y):
        raise FitError(f"Regression target '{target}' must be numeric")

    pipe = fit_pipeline(X, y, task, cfg)
    model = TreeModel(
        pipeline=pipe,
        task=task,
        target=target,
        predictors=tuple(preds),
        cfg=cfg,
        X_train=X,
        y_train=y,
    )
    logger.info("Fitted %s tree for '%s' on %d rows: %d leaves", task, target, len(y), model.n_leaves)
    return model


def refit(model: TreeModel, ccp_alpha: float) -> TreeModel:
    """Regrow `model` on its own training rows with a cost-complexity penalty."""
    pipe = fit_pipeline(model.X_train, model.y_train, model.task, model.cfg, ccp_alpha=ccp_alpha)
    return TreeModel(
        pipeline=pipe,
        task=model.task,
        target=model.target,
        predictors=model.predictors,
        cfg=model.cfg,
        X_train=model.X_train,
        y_train=model.y_train,
        ccp_alpha=ccp_alpha,
    )


# Summary

def summarize_tree(model: TreeModel) -> TreeSummary:
    leaves = model.leaves()
    n = model.n_obs
    total_dev = float(sum(leaf.deviance for leaf in leaves))
    dof = n - len(leaves)
    rmd = total_dev / dof if dof > 0 else float("nan")

    misclassified = None
    rate = None
    if model.task == "classification":
        misclassified = int(round(sum(leaf.n * (1.0 - max(leaf.yprob)) for leaf in leaves)))
        rate = misclassified / n

    return TreeSummary(
        task=model.task,
        target=model.target,
        used_attributes=tuple(model.used_attributes()),
        n_leaves=len(leaves),
        n_obs=n,
        residual_mean_deviance=rmd,
        misclassified=misclassified,
        misclassification_rate=rate,
    )


def training_error(model: TreeModel) -> float:
    """Misclassification rate (classification) or MSE (regression) on the training rows."""
    pred = model.predict(model.X_train)
    y = model.y_train.to_numpy()
    if model.task == "classification":
        return float(np.mean(pred != y))
    return float(np.mean((pred - y) ** 2))
