from __future__ import annotations

from survey_trees.analysis.classification import ClassificationLabConfig, run_classification_lab
from survey_trees.config.paths import PATHS
from survey_trees.data.load import load_respondents
from survey_trees.reporting.plots import plot_cv_curve, plot_tree_diagram
from survey_trees.reporting.text import format_cv, format_summary, format_tree
from survey_trees.utils.logging_config import setup_logging

DATA_PATH = PATHS.survey
FIG_DIR = PATHS.figures


def main() -> None:
    setup_logging("INFO")

    df = load_respondents(DATA_PATH)
    cfg = ClassificationLabConfig()
    out = run_classification_lab(df, cfg)

    # Tree on all respondents
    print(format_summary(out["full_summary"]))
    print()
    print(format_tree(out["full_model"]))
    plot_tree_diagram(out["full_model"], FIG_DIR / "turnout_tree_full.png")

    # Validation-set approach
    unpruned = out["unpruned_report"]
    print("\nTest-half confusion matrix (unpruned):")
    print(unpruned.confusion)
    print(f"Correctly classified: {unpruned.accuracy:.1%}")

    # CV + pruning
    print()
    print(format_cv(out["cv"]))
    print(f"CV-selected size ({cfg.selection_rule}): {out['cv_selected_size']}")
    plot_cv_curve(out["cv"], FIG_DIR / "turnout_tree_cv.png")

    pruned = out["pruned_report"]
    print(f"\nTest-half confusion matrix (pruned to {out['pruned_model'].n_leaves} leaves):")
    print(pruned.confusion)
    print(f"Correctly classified: {pruned.accuracy:.1%}")
    plot_tree_diagram(out["pruned_model"], FIG_DIR / "turnout_tree_pruned.png")

    print("\n[OK] Figures saved to:", FIG_DIR)


if __name__ == "__main__":
    main()
