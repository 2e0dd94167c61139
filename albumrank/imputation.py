import logging
import warnings

import numpy as np
import pandas as pd
from sklearn.ensemble import RandomForestRegressor
from sklearn.exceptions import ConvergenceWarning
from sklearn.experimental import enable_iterative_imputer  # noqa: F401
from sklearn.impute import IterativeImputer

from albumrank.errors import IncompleteCovariatesError
from albumrank.preparation import POPULARITY
from albumrank.schemas import ImputationResult


logger = logging.getLogger(__name__)

POPULARITY_PREDICTORS = ("release_year", "peak_billboard_position", "average_birth_year")


def impute_column(
    frame: pd.DataFrame,
    target: str,
    predictors: tuple[str, ...],
    *,
    max_iter: int = 10,
    n_estimators: int = 100,
    random_state: int | None = None,
) -> ImputationResult:
    incomplete = [column for column in predictors if frame[column].isna().any()]
    if incomplete:
        raise IncompleteCovariatesError(f"predictors contain missing values: {', '.join(incomplete)}")

    missing_mask = frame[target].isna()
    imputed_count = int(missing_mask.sum())
    if imputed_count == 0:
        return ImputationResult(frame=frame.copy(), column=target, imputed_count=0, n_iter=0, converged=True)
    if imputed_count == len(frame):
        raise ValueError(f"column '{target}' has no observed values to learn from")

    columns = [target, *predictors]
    imputer = IterativeImputer(
        estimator=RandomForestRegressor(n_estimators=n_estimators, random_state=random_state),
        max_iter=max_iter,
        skip_complete=True,
        random_state=random_state,
    )
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", ConvergenceWarning)
        completed = imputer.fit_transform(frame.loc[:, columns].astype(float))
    converged = True
    for caught_warning in caught:
        if issubclass(caught_warning.category, ConvergenceWarning):
            converged = False
        else:
            warnings.warn(caught_warning.message, caught_warning.category, stacklevel=2)
    completed = np.asarray(completed)
    if completed.shape[1] != len(columns):
        raise ValueError(f"imputer returned {completed.shape[1]} columns for {len(columns)} inputs")

    out = frame.copy()
    estimates = pd.Series(completed[:, 0], index=frame.index)
    # Only previously missing target cells are written back.
    out[target] = out[target].astype(float)
    out.loc[missing_mask, target] = estimates[missing_mask]

    if not converged:
        logger.warning(
            "imputation stopped at the iteration cap; keeping the last estimate",
            extra={"column": target, "max_iter": max_iter},
        )
    logger.info(
        "imputed missing values",
        extra={"column": target, "imputed": imputed_count, "n_iter": int(imputer.n_iter_)},
    )
    return ImputationResult(
        frame=out,
        column=target,
        imputed_count=imputed_count,
        n_iter=int(imputer.n_iter_),
        converged=converged,
    )


def impute_popularity(
    frame: pd.DataFrame,
    *,
    max_iter: int = 10,
    n_estimators: int = 100,
    random_state: int | None = None,
) -> ImputationResult:
    return impute_column(
        frame,
        POPULARITY,
        POPULARITY_PREDICTORS,
        max_iter=max_iter,
        n_estimators=n_estimators,
        random_state=random_state,
    )
