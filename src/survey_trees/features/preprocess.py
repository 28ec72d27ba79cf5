from __future__ import annotations

from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder


def build_preprocessor(numeric_features: list[str], categorical_features: list[str]) -> ColumnTransformer:
    """
    Trees split on raw values, so numeric/ordinal columns pass through untouched.
    Categorical columns are one-hot encoded; each indicator becomes a candidate split.
    """
    transformers = []
    if numeric_features:
        transformers.append(("num", "passthrough", numeric_features))
    if categorical_features:
        cat_pipe = Pipeline([("ohe", OneHotEncoder(handle_unknown="ignore"))])
        transformers.append(("cat", cat_pipe, categorical_features))

    return ColumnTransformer(
        transformers=transformers,
        remainder="drop",
        sparse_threshold=0.0,
    )


def feature_sources(pre: ColumnTransformer) -> list[tuple[str, str | None]]:
    """
    Map each output column of a fitted preprocessor back to its source:
      - (column, None) for pass-through columns
      - (column, category) for one-hot indicators
    """
    sources: list[tuple[str, str | None]] = []
    for name, trans, cols in pre.transformers_:
        if name == "num":
            sources.extend((c, None) for c in cols)
        elif name == "cat":
            ohe = trans.named_steps["ohe"]
            for col, cats in zip(cols, ohe.categories_):
                sources.extend((col, str(cat)) for cat in cats)
    return sources
