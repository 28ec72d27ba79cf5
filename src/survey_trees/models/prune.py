from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
import pandas as pd

from sklearn.metrics import log_loss, mean_squared_error
from sklearn.model_selection import KFold
from sklearn.pipeline import Pipeline

from survey_trees.config.constants import CV_FOLDS, RND
from survey_trees.exceptions import PruneError
from survey_trees.models.fit import fit_pipeline, refit
from survey_trees.models.tree import TreeModel
from survey_trees.utils.logging_config import get_logger

logger = get_logger(__name__)

CVMethod = Literal["misclass", "deviance"]
SelectionRule = Literal["min", "1se"]


@dataclass(frozen=True)
class Subtree:
    alpha: float
    n_leaves: int
    model: TreeModel


@dataclass(frozen=True)
class CVResult:
    table: pd.DataFrame  # size, alpha, error, mean, se; largest tree first
    fold_errors: np.ndarray  # (n_folds, n_sizes)
    method: CVMethod
    n_folds: int

    @property
    def sizes(self) -> list[int]:
        return [int(s) for s in self.table["size"]]


# -----------------------------
# Cost-complexity sequence
# -----------------------------
def _representative_alphas(path_alphas: np.ndarray) -> list[float]:
    """
    Subtree i of the path is optimal for alpha in [a_i, a_{i+1}); pick the
    geometric midpoint so refits do not land on a breakpoint.
    """
    a = np.unique(np.maximum(np.asarray(path_alphas, dtype=float), 0.0))
    reps: list[float] = []
    for i in range(len(a) - 1):
        reps.append(float(np.sqrt(a[i] * a[i + 1])))
    reps.append(float(a[-1] * 2.0))
    return reps


def subtree_sequence(model: TreeModel) -> list[Subtree]:
    """Nested subtrees of `model`, largest first, ending with the root-only tree."""
    Xt = model.transform(model.X_train)
    path = model.estimator.cost_complexity_pruning_path(Xt, model.y_train)

    seq: list[Subtree] = [Subtree(alpha=model.ccp_alpha, n_leaves=model.n_leaves, model=model)]
    for alpha in _representative_alphas(path.ccp_alphas):
        if alpha <= model.ccp_alpha:
            continue
        sub = refit(model, alpha)
        if sub.n_leaves < seq[-1].n_leaves:
            seq.append(Subtree(alpha=alpha, n_leaves=sub.n_leaves, model=sub))
    return seq


def prune_tree(
    model: TreeModel,
    n_leaves: int,
    on_oversize: Literal["clamp", "raise"] = "clamp",
) -> TreeModel:
    """
    Smallest subtree in the cost-complexity sequence with at least `n_leaves`
    leaves. When the sequence has no tree of exactly that size the next larger
    one is returned.
    """
    if n_leaves < 1:
        raise PruneError(f"Cannot prune to {n_leaves} leaves; need at least 1")

    full = model.n_leaves
    if n_leaves > full:
        if on_oversize == "raise":
            raise PruneError(f"Requested {n_leaves} leaves but the tree only has {full}")
        logger.warning("Requested %d leaves but the tree has %d; keeping the full tree", n_leaves, full)
        return model
    if n_leaves == full:
        return model

    candidates = [s for s in subtree_sequence(model) if s.n_leaves >= n_leaves]
    chosen = min(candidates, key=lambda s: s.n_leaves)
    if chosen.n_leaves != n_leaves:
        logger.info("No subtree with %d leaves; using the next larger (%d)", n_leaves, chosen.n_leaves)

    logger.info("Pruned '%s' tree from %d to %d leaves (alpha=%.6g)", model.target, full, chosen.n_leaves, chosen.alpha)
    return chosen.model


# -----------------------------
# Cross-validation
# -----------------------------
def _heldout_error(
    pipe: Pipeline,
    X_te: pd.DataFrame,
    y_te: pd.Series,
    model: TreeModel,
    method: CVMethod,
) -> float:
    y = y_te.to_numpy()
    if method == "misclass":
        return float(np.sum(pipe.predict(X_te) != y))

    if model.task == "regression":
        return float(mean_squared_error(y, pipe.predict(X_te)) * len(y))

    # Align fold probabilities with the full model's classes (a fold may miss one)
    labels = model.classes_
    proba = np.zeros((len(y), len(labels)))
    fold_proba = pipe.predict_proba(X_te)
    for k, cls in enumerate(pipe.classes_):
        proba[:, np.flatnonzero(labels == cls)[0]] = fold_proba[:, k]
    return float(2.0 * log_loss(y, proba, labels=labels, normalize=False))


def cv_tree(
    model: TreeModel,
    n_folds: int = CV_FOLDS,
    method: CVMethod | None = None,
    seed: int = RND,
) -> CVResult:
    """
    K-fold CV over the cost-complexity sequence of `model`.

    Each fold regrows a tree on its training part and prunes it with the
    sequence's alphas, then scores the held-out part:
      - "misclass": number of misclassified rows (classification default)
      - "deviance": SSE for regression, -2 log-likelihood for classification
    """
    method = method or ("misclass" if model.task == "classification" else "deviance")
    if method not in ("misclass", "deviance"):
        raise PruneError(f"Unknown CV method '{method}'")
    if method == "misclass" and model.task != "classification":
        raise PruneError("Misclassification CV needs a classification tree")

    n_rows = model.n_obs
    if n_folds < 2 or n_folds > n_rows:
        raise PruneError(f"n_folds must be in [2, {n_rows}], got {n_folds}")

    seq = subtree_sequence(model)
    X, y = model.X_train, model.y_train

    kf = KFold(n_splits=n_folds, shuffle=True, random_state=seed)
    errors = np.zeros((n_folds, len(seq)))

    for fold, (tr_idx, te_idx) in enumerate(kf.split(X), start=1):
        X_tr, y_tr = X.iloc[tr_idx], y.iloc[tr_idx]
        X_te, y_te = X.iloc[te_idx], y.iloc[te_idx]

        for j, sub in enumerate(seq):
            pipe = fit_pipeline(X_tr, y_tr, model.task, model.cfg, ccp_alpha=sub.alpha)
            errors[fold - 1, j] = _heldout_error(pipe, X_te, y_te, model, method)

        logger.debug("[fold %d/%d] done", fold, n_folds)

    table = pd.DataFrame(
        {
            "size": [s.n_leaves for s in seq],
            "alpha": [s.alpha for s in seq],
            "error": errors.sum(axis=0),
            "mean": errors.mean(axis=0),
            "se": errors.std(axis=0, ddof=1) / np.sqrt(n_folds),
        }
    )
    logger.info("Cross-validated %d subtree sizes with %d folds (%s)", len(seq), n_folds, method)
    return CVResult(table=table, fold_errors=errors, method=method, n_folds=n_folds)


def select_size(cv: CVResult, rule: SelectionRule = "min") -> int:
    """
    "min": smallest size reaching the lowest total CV error.
    "1se": smallest size whose mean fold error is within one standard error of the best.
    """
    t = cv.table
    if rule == "min":
        best = t["error"].min()
        return int(t.loc[np.isclose(t["error"], best), "size"].min())
    if rule == "1se":
        i_best = t["mean"].idxmin()
        threshold = t.loc[i_best, "mean"] + t.loc[i_best, "se"]
        return int(t.loc[t["mean"] <= threshold + 1e-12, "size"].min())
    raise PruneError(f"Unknown selection rule '{rule}'")
