"""Tree fitting, task inference, summaries and FitError paths."""

import numpy as np
import pytest

from survey_trees.exceptions import FitError
from survey_trees.models.fit import TreeConfig, fit_tree, summarize_tree, training_error

from conftest import make_respondents


def test_classification_tree_excludes_income(turnout_model):
    assert turnout_model.task == "classification"
    assert "household_income" not in turnout_model.predictors
    assert "turnout05" not in turnout_model.predictors
    assert turnout_model.n_leaves >= 2


def test_summary_reports_used_attributes_and_error_rate(turnout_model):
    summary = summarize_tree(turnout_model)

    assert summary.n_leaves == turnout_model.n_leaves
    assert summary.n_obs == 400
    assert "turnout01" in summary.used_attributes
    assert set(summary.used_attributes) <= set(turnout_model.predictors)
    assert summary.residual_mean_deviance > 0
    assert 0.0 <= summary.misclassification_rate < 0.5
    assert summary.misclassification_rate == pytest.approx(training_error(turnout_model))


def test_regression_task_is_inferred_for_income():
    model = fit_tree(make_respondents(n=200, seed=4), "household_income")
    summary = summarize_tree(model)

    assert model.task == "regression"
    assert summary.misclassification_rate is None
    assert summary.misclassified is None
    assert "left_school_age" in summary.used_attributes


def test_fit_is_deterministic():
    df = make_respondents(seed=9)
    a = fit_tree(df, "turnout05", exclude=["household_income"])
    b = fit_tree(df, "turnout05", exclude=["household_income"])

    assert a.n_leaves == b.n_leaves
    np.testing.assert_array_equal(a.predict(df), b.predict(df))
    assert [n.node_id for n in a.nodes()] == [n.node_id for n in b.nodes()]


def test_explicit_predictors_are_respected(respondents):
    model = fit_tree(respondents, "turnout05", predictors=["turnout01", "civic_duty"])
    assert model.predictors == ("turnout01", "civic_duty")
    assert set(model.used_attributes()) <= {"turnout01", "civic_duty"}


def test_categorical_predictor_splits_render_as_category_tests(respondents):
    model = fit_tree(respondents, "turnout05", predictors=["party_id"], cfg=TreeConfig(min_impurity_decrease=0.0))
    for node in model.nodes()[1:]:
        assert node.split.startswith("party_id ")
        assert "==" in node.split or "!=" in node.split


def test_unknown_target_raises(respondents):
    with pytest.raises(FitError, match="missing columns"):
        fit_tree(respondents, "turnout10")


def test_unknown_predictor_raises(respondents):
    with pytest.raises(FitError, match="missing columns"):
        fit_tree(respondents, "turnout05", predictors=["turnout01", "age"])


def test_target_as_predictor_raises(respondents):
    with pytest.raises(FitError):
        fit_tree(respondents, "turnout05", predictors=["turnout05", "turnout01"])


def test_no_predictors_left_raises(respondents):
    with pytest.raises(FitError, match="No predictors"):
        fit_tree(respondents, "turnout05", predictors=["turnout01"], exclude=["turnout01"])


def test_constant_target_raises(respondents):
    df = respondents.assign(turnout05=1)
    with pytest.raises(FitError, match="single value"):
        fit_tree(df, "turnout05")


def test_regression_on_text_target_raises(respondents):
    with pytest.raises(FitError, match="numeric"):
        fit_tree(respondents, "party_id", cfg=TreeConfig(task="regression"))


def test_continuous_target_with_two_values_is_regression(respondents):
    df = respondents.assign(household_income=np.where(respondents["left_school_age"] > 3, 20.0, 10.0))
    model = fit_tree(df, "household_income")

    assert model.task == "regression"
    assert set(np.unique(model.predict(df))) <= {10.0, 20.0}


def test_infer_task_uses_schema_before_value_counts(respondents):
    from survey_trees.models.fit import infer_task

    assert infer_task("household_income", respondents["turnout01"].astype(float)) == "regression"
    assert infer_task("turnout05", respondents["turnout05"]) == "classification"
    assert infer_task("score", respondents["household_income"]) == "regression"
    assert infer_task("flag", respondents["female"]) == "classification"
