from __future__ import annotations

from pathlib import Path

import matplotlib.pyplot as plt
from sklearn.tree import plot_tree

from survey_trees.models.prune import CVResult
from survey_trees.models.tree import TreeModel

PLOT_DPI = 150
FIGURE_SIZE = (14, 8)
FONT_SIZE = 9


def plot_tree_diagram(model: TreeModel, path: Path, title: str | None = None) -> Path:
    """Draw the fitted tree and save it as an image."""
    names = model.preprocessor.get_feature_names_out()
    class_names = [str(c) for c in model.classes_] if model.task == "classification" else None

    fig, ax = plt.subplots(figsize=FIGURE_SIZE)
    plot_tree(
        model.estimator,
        feature_names=[str(n) for n in names],
        class_names=class_names,
        filled=True,
        impurity=False,
        fontsize=FONT_SIZE,
        ax=ax,
    )
    ax.set_title(title or f"{model.target}: {model.n_leaves} terminal nodes")

    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=PLOT_DPI, bbox_inches="tight")
    plt.close(fig)
    return path


def plot_cv_curve(cv: CVResult, path: Path, title: str | None = None) -> Path:
    """CV error against tree size."""
    fig, ax = plt.subplots(figsize=(7, 5))
    ax.plot(cv.table["size"], cv.table["error"], marker="o")
    ax.set_xlabel("Number of terminal nodes")
    ax.set_ylabel("CV misclassifications" if cv.method == "misclass" else "CV deviance")
    ax.set_title(title or f"{cv.n_folds}-fold cross-validation")
    ax.grid(True, alpha=0.3)

    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=PLOT_DPI, bbox_inches="tight")
    plt.close(fig)
    return path
