"""Shared fixtures: a seeded synthetic respondent table with the survey schema."""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest

from survey_trees.models.fit import TreeConfig, fit_tree

PARTIES = ["Labour", "Conservative", "Liberal Democrat", "Other", "None"]


def make_respondents(n: int = 400, seed: int = 0) -> pd.DataFrame:
    """Turnout driven by past turnout and civic duty; income by schooling and phone."""
    rng = np.random.default_rng(seed)

    turnout01 = rng.integers(0, 2, n)
    female = rng.integers(0, 2, n)
    party_id = rng.choice(PARTIES, n)
    phone = (rng.random(n) < 0.85).astype(int)
    left_school_age = rng.integers(1, 8, n)
    civic_duty = rng.integers(1, 6, n)

    p_vote = np.clip(0.1 + 0.55 * turnout01 + 0.07 * (5 - civic_duty), 0.02, 0.97)
    turnout05 = (rng.random(n) < p_vote).astype(int)

    household_income = 3.0 + 0.8 * left_school_age + 1.5 * phone + rng.normal(0.0, 2.0, n)

    return pd.DataFrame(
        {
            "turnout05": turnout05,
            "turnout01": turnout01,
            "female": female,
            "party_id": party_id,
            "phone": phone,
            "left_school_age": left_school_age,
            "civic_duty": civic_duty,
            "household_income": household_income,
        }
    )


@pytest.fixture
def respondents() -> pd.DataFrame:
    return make_respondents()


@pytest.fixture
def survey_csv(tmp_path, respondents):
    path = tmp_path / "survey.csv"
    respondents.assign(respondent_id=np.arange(len(respondents))).to_csv(path, index=False)
    return path


@pytest.fixture(scope="session")
def turnout_model():
    return fit_tree(make_respondents(), "turnout05", exclude=["household_income"])


@pytest.fixture(scope="session")
def income_model():
    return fit_tree(make_respondents(n=300, seed=1), "household_income", cfg=TreeConfig(task="regression"))
