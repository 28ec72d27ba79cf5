from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from survey_trees.config.constants import (
    CV_FOLDS,
    REGRESSION_PRUNE_SIZE,
    REGRESSION_TARGET,
    RND,
    TRAIN_FRACTION,
)
from survey_trees.models.evaluate import error_reduction, evaluate_regressor
from survey_trees.models.fit import TreeConfig, fit_tree, summarize_tree
from survey_trees.models.prune import SelectionRule, cv_tree, prune_tree, select_size
from survey_trees.models.split import validation_split
from survey_trees.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegressionLabConfig:
    target: str = REGRESSION_TARGET
    exclude: tuple[str, ...] = ()
    train_fraction: float = TRAIN_FRACTION
    seed: int = RND
    cv_folds: int = CV_FOLDS
    prune_size: int | None = REGRESSION_PRUNE_SIZE  # None -> use the CV choice
    selection_rule: SelectionRule = "min"
    tree: TreeConfig = field(default_factory=lambda: TreeConfig(task="regression"))


def run_regression_lab(df: pd.DataFrame, cfg: RegressionLabConfig) -> dict[str, Any]:
    """
    Income regression tree on a validation-set split: grow on the training
    half, cross-validate by deviance, prune, and compare test MSE before and
    after pruning.
    """
    split = validation_split(df, fraction=cfg.train_fraction, seed=cfg.seed)
    df_train, df_test = split.apply(df)

    train_model = fit_tree(df_train, cfg.target, exclude=cfg.exclude, cfg=cfg.tree)
    summary = summarize_tree(train_model)
    unpruned_report = evaluate_regressor(train_model, df_test)

    cv = cv_tree(train_model, n_folds=cfg.cv_folds, method="deviance", seed=cfg.seed)
    cv_size = select_size(cv, rule=cfg.selection_rule)
    target_size = cfg.prune_size if cfg.prune_size is not None else cv_size

    pruned_model = prune_tree(train_model, target_size)
    pruned_report = evaluate_regressor(pruned_model, df_test)

    reduction = error_reduction(unpruned_report.mse, pruned_report.mse)
    logger.info(
        "Income tree: test MSE %.4f unpruned (%d leaves), %.4f pruned (%d leaves), reduction %.1f%%",
        unpruned_report.mse,
        train_model.n_leaves,
        pruned_report.mse,
        pruned_model.n_leaves,
        100.0 * reduction,
    )

    return {
        "config": cfg,
        "split": split,
        "train_model": train_model,
        "summary": summary,
        "unpruned_report": unpruned_report,
        "cv": cv,
        "cv_selected_size": cv_size,
        "pruned_model": pruned_model,
        "pruned_report": pruned_report,
        "mse_reduction": reduction,
    }
