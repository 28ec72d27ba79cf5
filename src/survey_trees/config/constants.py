from __future__ import annotations

RND = 42

# --- Split / CV settings ---
TRAIN_FRACTION = 0.5
CV_FOLDS = 10

# Sizes the lab prunes to after looking at the CV curves
CLASSIFICATION_PRUNE_SIZE = 4
REGRESSION_PRUNE_SIZE = 3

# --- Model columns ---
CLASSIFICATION_TARGET = "turnout05"
REGRESSION_TARGET = "household_income"

BINARY_COLS = ["turnout05", "turnout01", "female", "phone"]
CATEGORICAL_COLS = ["party_id"]

# Ordinal codes are stored as integers 1..n_levels
ORDINAL_LEVELS = {
    "left_school_age": 7,
    "civic_duty": 5,
}

CONTINUOUS_COLS = ["household_income"]

# Schema order of the respondent table
SCHEMA_COLS = [
    "turnout05",
    "turnout01",
    "female",
    "party_id",
    "phone",
    "left_school_age",
    "civic_duty",
    "household_income",
]

# --- Tree growth defaults ---
MIN_SAMPLES_SPLIT = 10
MIN_SAMPLES_LEAF = 5
MIN_IMPURITY_DECREASE = 0.002
