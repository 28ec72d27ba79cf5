from __future__ import annotations

from survey_trees.analysis.regression import RegressionLabConfig, run_regression_lab
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
    out = run_regression_lab(df, RegressionLabConfig())

    print(format_summary(out["summary"]))
    print()
    print(format_tree(out["train_model"]))
    plot_tree_diagram(out["train_model"], FIG_DIR / "income_tree_full.png")

    print()
    print(format_cv(out["cv"]))
    plot_cv_curve(out["cv"], FIG_DIR / "income_tree_cv.png")

    pruned_model = out["pruned_model"]
    print()
    print(format_tree(pruned_model))
    plot_tree_diagram(pruned_model, FIG_DIR / "income_tree_pruned.png")

    mse_full = out["unpruned_report"].mse
    mse_pruned = out["pruned_report"].mse
    print(f"\nTest MSE, unpruned ({out['train_model'].n_leaves} leaves): {mse_full:.4f}")
    print(f"Test MSE, pruned ({pruned_model.n_leaves} leaves): {mse_pruned:.4f}")
    print(f"Error-rate reduction: ({mse_full:.6g} - {mse_pruned:.6g}) / {mse_full:.6g} = {out['mse_reduction']:.1%}")

    print("\n[OK] Figures saved to:", FIG_DIR)


if __name__ == "__main__":
    main()
