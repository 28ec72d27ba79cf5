from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from survey_trees.config.constants import (
    CLASSIFICATION_PRUNE_SIZE,
    CLASSIFICATION_TARGET,
    CV_FOLDS,
    RND,
    TRAIN_FRACTION,
)
from survey_trees.models.evaluate import evaluate_classifier
from survey_trees.models.fit import TreeConfig, fit_tree, summarize_tree
from survey_trees.models.prune import SelectionRule, cv_tree, prune_tree, select_size
from survey_trees.models.split import validation_split
from survey_trees.utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ClassificationLabConfig:
    target: str = CLASSIFICATION_TARGET
    exclude: tuple[str, ...] = ("household_income",)
    train_fraction: float = TRAIN_FRACTION
    seed: int = RND
    cv_folds: int = CV_FOLDS
    prune_size: int | None = CLASSIFICATION_PRUNE_SIZE  # None -> use the CV choice
    selection_rule: SelectionRule = "min"
    tree: TreeConfig = field(default_factory=TreeConfig)


def run_classification_lab(df: pd.DataFrame, cfg: ClassificationLabConfig) -> dict[str, Any]:
    """
    Turnout classification tree, end to end:
      1) grow on all rows and summarize
      2) validation-set split; grow on the training half, score the test half
      3) misclassification CV on the training-half tree
      4) prune (to cfg.prune_size or the CV choice) and score the test half again

    Returns a dict with the fitted models, summaries, reports and the CV result.
    """
    full_model = fit_tree(df, cfg.target, exclude=cfg.exclude, cfg=cfg.tree)
    full_summary = summarize_tree(full_model)

    split = validation_split(df, fraction=cfg.train_fraction, seed=cfg.seed)
    df_train, df_test = split.apply(df)

    train_model = fit_tree(df_train, cfg.target, exclude=cfg.exclude, cfg=cfg.tree)
    unpruned_report = evaluate_classifier(train_model, df_test)

    cv = cv_tree(train_model, n_folds=cfg.cv_folds, method="misclass", seed=cfg.seed)
    cv_size = select_size(cv, rule=cfg.selection_rule)
    target_size = cfg.prune_size if cfg.prune_size is not None else cv_size

    pruned_model = prune_tree(train_model, target_size)
    pruned_report = evaluate_classifier(pruned_model, df_test)

    logger.info(
        "Turnout tree: test accuracy %.4f unpruned (%d leaves), %.4f pruned (%d leaves)",
        unpruned_report.accuracy,
        train_model.n_leaves,
        pruned_report.accuracy,
        pruned_model.n_leaves,
    )

    return {
        "config": cfg,
        "split": split,
        "full_model": full_model,
        "full_summary": full_summary,
        "train_model": train_model,
        "unpruned_report": unpruned_report,
        "cv": cv,
        "cv_selected_size": cv_size,
        "pruned_model": pruned_model,
        "pruned_report": pruned_report,
    }
