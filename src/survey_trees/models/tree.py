from __future__ import annotations

from dataclasses import dataclass, field
from functools import cached_property
from typing import TYPE_CHECKING, Any, Literal

import numpy as np
import pandas as pd
from sklearn.pipeline import Pipeline

from survey_trees.exceptions import FitError
from survey_trees.features.preprocess import feature_sources
from survey_trees.utils.validate import require_columns

if TYPE_CHECKING:
    from survey_trees.models.fit import TreeConfig

Task = Literal["classification", "regression"]

TREE_LEAF = -1


@dataclass(frozen=True)
class TreeNode:
    node_id: int
    depth: int
    split: str
    n: int
    deviance: float
    yval: Any
    yprob: tuple[float, ...] | None
    is_leaf: bool


@dataclass(frozen=True)
class TreeModel:
    """
    A fitted tree plus the training rows it was grown on.

    Nodes are numbered heap-style: the root is 1 and the children of node i
    are 2i (left) and 2i + 1 (right).
    """

    pipeline: Pipeline
    task: Task
    target: str
    predictors: tuple[str, ...]
    cfg: TreeConfig
    X_train: pd.DataFrame = field(repr=False, compare=False)
    y_train: pd.Series = field(repr=False, compare=False)
    ccp_alpha: float = 0.0

    @property
    def estimator(self):
        return self.pipeline.named_steps["tree"]

    @property
    def preprocessor(self):
        return self.pipeline.named_steps["pre"]

    @property
    def classes_(self) -> np.ndarray | None:
        return self.estimator.classes_ if self.task == "classification" else None

    @property
    def n_leaves(self) -> int:
        return int(self.estimator.get_n_leaves())

    @property
    def n_obs(self) -> int:
        return len(self.y_train)

    # Walking records

    def transform(self, df: pd.DataFrame) -> np.ndarray:
        require_columns(df, list(self.predictors), name="prediction data", exc=FitError)
        return self.preprocessor.transform(df[list(self.predictors)])

    def apply(self, df: pd.DataFrame) -> np.ndarray:
        """Heap id of the leaf each record lands in."""
        return self._heap_ids[self.estimator.apply(self.transform(df))]

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        return self.estimator.predict(self.transform(df))

    # Node structure

    @cached_property
    def _sources(self) -> list[tuple[str, str | None]]:
        return feature_sources(self.preprocessor)

    @cached_property
    def _heap_ids(self) -> np.ndarray:
        t = self.estimator.tree_
        ids = np.zeros(t.node_count, dtype=np.int64)
        stack = [(0, 1)]
        while stack:
            idx, heap_id = stack.pop()
            ids[idx] = heap_id
            if t.children_left[idx] != TREE_LEAF:
                stack.append((t.children_left[idx], 2 * heap_id))
                stack.append((t.children_right[idx], 2 * heap_id + 1))
        return ids

    def _split_labels(self, idx: int) -> tuple[str, str]:
        t = self.estimator.tree_
        col, cat = self._sources[t.feature[idx]]
        if cat is not None:
            return f"{col} != {cat}", f"{col} == {cat}"
        thr = float(t.threshold[idx])
        return f"{col} < {thr:g}", f"{col} > {thr:g}"

    def _node_stats(self, idx: int) -> tuple[int, float, Any, tuple[float, ...] | None]:
        t = self.estimator.tree_
        n = float(t.weighted_n_node_samples[idx])
        if self.task == "regression":
            return int(t.n_node_samples[idx]), float(t.impurity[idx]) * n, float(t.value[idx, 0, 0]), None

        # value holds counts or fractions depending on the sklearn version
        p = t.value[idx, 0, :] / t.value[idx, 0, :].sum()
        counts = p * n
        nz = p > 0
        dev = float(-2.0 * np.sum(counts[nz] * np.log(p[nz])))
        yval = self.estimator.classes_[int(np.argmax(p))]
        return int(t.n_node_samples[idx]), dev, yval, tuple(float(v) for v in p)

    def nodes(self) -> list[TreeNode]:
        """Nodes in pre-order (root, left subtree, right subtree)."""
        t = self.estimator.tree_
        out: list[TreeNode] = []
        stack: list[tuple[int, int, str]] = [(0, 0, "root")]
        while stack:
            idx, depth, split = stack.pop()
            n, dev, yval, yprob = self._node_stats(idx)
            is_leaf = t.children_left[idx] == TREE_LEAF
            out.append(
                TreeNode(
                    node_id=int(self._heap_ids[idx]),
                    depth=depth,
                    split=split,
                    n=n,
                    deviance=dev,
                    yval=yval,
                    yprob=yprob,
                    is_leaf=bool(is_leaf),
                )
            )
            if not is_leaf:
                left, right = self._split_labels(idx)
                stack.append((t.children_right[idx], depth + 1, right))
                stack.append((t.children_left[idx], depth + 1, left))
        return out

    def leaves(self) -> list[TreeNode]:
        return [n for n in self.nodes() if n.is_leaf]

    def used_attributes(self) -> list[str]:
        """Source columns that appear in at least one split, in first-use order."""
        t = self.estimator.tree_
        used: list[str] = []
        stack = [0]
        while stack:
            idx = stack.pop()
            if t.children_left[idx] == TREE_LEAF:
                continue
            col = self._sources[t.feature[idx]][0]
            if col not in used:
                used.append(col)
            stack.append(t.children_right[idx])
            stack.append(t.children_left[idx])
        return used
