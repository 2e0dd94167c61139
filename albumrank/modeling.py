import logging
from collections.abc import Iterable, Mapping

import numpy as np
import pandas as pd
import statsmodels.api as sm

from albumrank.errors import RankDeficiencyError
from albumrank.preparation import GENDER, RESPONSE
from albumrank.schemas import FittedModel


logger = logging.getLogger(__name__)

SIMPLE_PREDICTORS = ("release_year", "peak_billboard_position", "spotify_popularity")
COMPLEX_PREDICTORS = SIMPLE_PREDICTORS + (GENDER, "artist_member_count", "average_birth_year")


def reference_level(values: pd.Series, preferred: str | None = None) -> str:
    levels = sorted(values.dropna().astype(str).unique())
    if not levels:
        raise ValueError(f"column '{values.name}' has no levels to code")
    if preferred is not None:
        if preferred not in levels:
            raise ValueError(f"reference level '{preferred}' not found in column '{values.name}'")
        return preferred
    return levels[0]


def build_design(
    frame: pd.DataFrame,
    predictors: Iterable[str],
    *,
    categorical: Iterable[str] = (GENDER,),
    reference_levels: Mapping[str, str] | None = None,
) -> tuple[pd.DataFrame, dict[str, str]]:
    categorical = set(categorical)
    reference_levels = reference_levels or {}
    parts: list[pd.DataFrame] = []
    references: dict[str, str] = {}

    for column in predictors:
        if column not in categorical:
            parts.append(frame[[column]].astype(float))
            continue
        values = frame[column].astype(str)
        reference = reference_level(frame[column], reference_levels.get(column))
        others = sorted(level for level in values.unique() if level != reference)
        # The reference level comes first so drop_first removes it.
        coded = pd.Categorical(values, categories=[reference, *others])
        dummies = pd.get_dummies(coded, prefix=column, prefix_sep="_", drop_first=True, dtype=float)
        dummies.index = frame.index
        parts.append(dummies)
        references[column] = reference

    design = pd.concat(parts, axis=1) if parts else pd.DataFrame(index=frame.index)
    design = sm.add_constant(design, has_constant="add")
    return design, references


def _check_rank(design: pd.DataFrame, name: str) -> None:
    n_obs, n_params = design.shape
    if n_obs <= n_params:
        raise RankDeficiencyError(
            f"model '{name}' has {n_params} parameters but only {n_obs} observations"
        )
    rank = np.linalg.matrix_rank(design.to_numpy())
    if rank < n_params:
        raise RankDeficiencyError(
            f"model '{name}' design matrix has rank {rank} for {n_params} parameters; check for collinear predictors"
        )


def fit_ols(
    frame: pd.DataFrame,
    predictors: Iterable[str],
    *,
    name: str,
    response: str = RESPONSE,
    categorical: Iterable[str] = (GENDER,),
    reference_levels: Mapping[str, str] | None = None,
) -> FittedModel:
    predictors = tuple(predictors)
    involved = [response, *predictors]
    incomplete = [column for column in involved if frame[column].isna().any()]
    if incomplete:
        raise ValueError(f"model '{name}' columns contain missing values: {', '.join(incomplete)}")

    design, references = build_design(
        frame,
        predictors,
        categorical=categorical,
        reference_levels=reference_levels,
    )
    _check_rank(design, name)
    endog = frame[response].astype(float)

    results = sm.OLS(endog, design).fit()
    coefficients = pd.DataFrame(
        {
            "estimate": results.params,
            "std_error": results.bse,
            "t_value": results.tvalues,
            "p_value": results.pvalues,
        }
    )
    logger.info(
        "fitted ols model",
        extra={"model": name, "n_obs": int(results.nobs), "r_squared": float(results.rsquared)},
    )
    return FittedModel(
        name=name,
        response=response,
        predictors=predictors,
        design_columns=tuple(design.columns),
        reference_levels=references,
        coefficients=coefficients,
        residuals=results.resid,
        fitted_values=results.fittedvalues,
        r_squared=float(results.rsquared),
        adj_r_squared=float(results.rsquared_adj),
        f_statistic=float(results.fvalue),
        f_pvalue=float(results.f_pvalue),
        log_likelihood=float(results.llf),
        aic=float(results.aic),
        bic=float(results.bic),
        n_obs=int(results.nobs),
        design=design,
        endog=endog,
        results=results,
    )


def fit_simple(frame: pd.DataFrame) -> FittedModel:
    return fit_ols(frame, SIMPLE_PREDICTORS, name="simple")


def fit_complex(frame: pd.DataFrame, *, gender_reference: str | None = None) -> FittedModel:
    references = {GENDER: gender_reference} if gender_reference else None
    return fit_ols(frame, COMPLEX_PREDICTORS, name="complex", reference_levels=references)
