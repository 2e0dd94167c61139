import pandas as pd

from albumrank.preparation import CATEGORICAL_COLUMNS, NUMERIC_COLUMNS
from albumrank.schemas import ExplorationSummary


def missing_counts(frame: pd.DataFrame) -> pd.Series:
    return frame.isna().sum().rename("missing")


def numeric_summary(frame: pd.DataFrame, columns: tuple[str, ...] = NUMERIC_COLUMNS) -> pd.DataFrame:
    return frame.loc[:, list(columns)].describe().T


def frequency_table(frame: pd.DataFrame, column: str) -> pd.Series:
    return frame[column].value_counts(dropna=False).rename("count")


def correlation_matrix(frame: pd.DataFrame, columns: tuple[str, ...] = NUMERIC_COLUMNS) -> pd.DataFrame:
    return frame.loc[:, list(columns)].corr(method="pearson")


def explore(
    frame: pd.DataFrame,
    *,
    numeric_columns: tuple[str, ...] = NUMERIC_COLUMNS,
    categorical_columns: tuple[str, ...] = CATEGORICAL_COLUMNS,
) -> ExplorationSummary:
    return ExplorationSummary(
        row_count=len(frame),
        missing_counts=missing_counts(frame),
        numeric_summary=numeric_summary(frame, numeric_columns),
        frequency_tables={column: frequency_table(frame, column) for column in categorical_columns},
        correlations=correlation_matrix(frame, numeric_columns),
    )
