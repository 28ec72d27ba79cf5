from __future__ import annotations

from survey_trees.models.fit import TreeSummary
from survey_trees.models.prune import CVResult
from survey_trees.models.tree import TreeModel


def format_tree(model: TreeModel) -> str:
    """
    One line per node, indented by depth:
      node), split, n, deviance, yval, (yprob)
    Leaves end with '*'.
    """
    if model.task == "classification":
        header = "node), split, n, deviance, yval, (yprob)"
    else:
        header = "node), split, n, deviance, yval"

    lines = [header, "      * denotes terminal node", ""]
    for node in model.nodes():
        yval = f"{node.yval:.4g}" if model.task == "regression" else str(node.yval)
        parts = [f"{'  ' * node.depth}{node.node_id})", node.split, str(node.n), f"{node.deviance:.4g}", yval]
        if node.yprob is not None:
            parts.append("( " + " ".join(f"{p:.5f}" for p in node.yprob) + " )")
        if node.is_leaf:
            parts.append("*")
        lines.append(" ".join(parts))
    return "\n".join(lines)


def format_summary(summary: TreeSummary) -> str:
    kind = "Classification" if summary.task == "classification" else "Regression"
    dof = summary.n_obs - summary.n_leaves
    lines = [
        f"{kind} tree for '{summary.target}':",
        f"Variables actually used in tree construction: {list(summary.used_attributes)}",
        f"Number of terminal nodes:  {summary.n_leaves}",
        f"Residual mean deviance:  {summary.residual_mean_deviance:.4g} (on {dof} df)",
    ]
    if summary.misclassification_rate is not None:
        lines.append(
            f"Misclassification error rate: {summary.misclassification_rate:.4g} "
            f"= {summary.misclassified} / {summary.n_obs}"
        )
    return "\n".join(lines)


def format_cv(cv: CVResult) -> str:
    label = "misclassified" if cv.method == "misclass" else "deviance"
    table = cv.table.rename(columns={"error": label})
    return f"{cv.n_folds}-fold CV ({cv.method}):\n{table.to_string(index=False)}"
