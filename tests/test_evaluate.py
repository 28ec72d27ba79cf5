"""Prediction reports and metric helpers."""

import numpy as np
import pytest

from survey_trees.exceptions import FitError
from survey_trees.models.evaluate import (
    accuracy,
    confusion_matrix,
    error_reduction,
    evaluate_classifier,
    evaluate_regressor,
    mean_squared_error,
    predict,
)
from survey_trees.models.split import validation_split

from conftest import make_respondents


def test_confusion_matrix_rows_are_actual_columns_predicted():
    cm = confusion_matrix([0, 0, 1, 1, 1], [0, 1, 1, 1, 0])

    assert cm.index.name == "actual"
    assert cm.columns.name == "predicted"
    assert cm.loc[0, 0] == 1
    assert cm.loc[0, 1] == 1
    assert cm.loc[1, 0] == 1
    assert cm.loc[1, 1] == 2


def test_confusion_matrix_uses_union_of_labels():
    cm = confusion_matrix([1, 1, 1], [1, 1, 0])
    assert list(cm.index) == [0, 1]
    assert list(cm.columns) == [0, 1]
    assert cm.to_numpy().sum() == 3


def test_accuracy_and_mse():
    assert accuracy([1, 0, 1, 1], [1, 1, 1, 1]) == pytest.approx(0.75)
    assert mean_squared_error([1.0, 2.0, 3.0], [1.0, 2.0, 5.0]) == pytest.approx(4.0 / 3.0)


def test_error_reduction_matches_documented_figures():
    assert error_reduction(10.61289, 9.332945) == pytest.approx(0.1206, abs=5e-4)


def test_error_reduction_can_be_negative():
    assert error_reduction(2.0, 3.0) == pytest.approx(-0.5)


@pytest.mark.parametrize("baseline", [0.0, -1.0])
def test_error_reduction_needs_positive_baseline(baseline):
    with pytest.raises(ValueError):
        error_reduction(baseline, 1.0)


def test_classifier_report_on_test_half(turnout_model):
    df = make_respondents(seed=21)
    _, test = validation_split(df, seed=21).apply(df)

    report = evaluate_classifier(turnout_model, test)

    assert report.n == len(test)
    assert report.confusion.to_numpy().sum() == len(test)
    assert report.accuracy == pytest.approx(np.trace(report.confusion.to_numpy()) / len(test))
    assert report.error_rate == pytest.approx(1.0 - report.accuracy)
    assert report.accuracy > 0.6


def test_regressor_report(income_model):
    df = make_respondents(n=200, seed=22)
    report = evaluate_regressor(income_model, df)

    manual = float(np.mean((income_model.predict(df) - df["household_income"].to_numpy()) ** 2))
    assert report.mse == pytest.approx(manual)
    assert report.n == 200


def test_predict_keeps_index(turnout_model, respondents):
    sub = respondents.iloc[10:20]
    pred = predict(turnout_model, sub)
    assert list(pred.index) == list(sub.index)
    assert pred.name == "pred_turnout05"


def test_task_mismatch_raises(turnout_model, income_model, respondents):
    with pytest.raises(FitError):
        evaluate_regressor(turnout_model, respondents)
    with pytest.raises(FitError):
        evaluate_classifier(income_model, respondents)


def test_missing_target_column_raises(turnout_model, respondents):
    with pytest.raises(FitError):
        evaluate_classifier(turnout_model, respondents.drop(columns=["turnout05"]))
