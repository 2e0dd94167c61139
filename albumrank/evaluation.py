import logging

import numpy as np
import pandas as pd
from scipy import stats
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.outliers_influence import variance_inflation_factor

from albumrank.schemas import (
    FittedModel,
    HeteroscedasticityResult,
    InfluenceReport,
    ModelComparison,
    ModelDiagnostics,
    NormalityResult,
)


logger = logging.getLogger(__name__)

SEVERE_VIF = 10.0
EXACT_FIT_TOLERANCE = 1e-12


def _is_exact_fit(model: FittedModel) -> bool:
    total = float(((model.endog - model.endog.mean()) ** 2).sum())
    return float(model.results.ssr) <= EXACT_FIT_TOLERANCE * max(total, 1.0)


def cooks_distance(model: FittedModel) -> pd.Series:
    index = model.residuals.index
    # Removing any row from an exact fit leaves the fit unchanged.
    if _is_exact_fit(model):
        return pd.Series(np.zeros(len(index)), index=index, name="cooks_distance")
    distances, _ = model.results.get_influence().cooks_distance
    return pd.Series(np.asarray(distances), index=index, name="cooks_distance")


def influence_report(model: FittedModel, threshold: float = 1.0) -> InfluenceReport:
    distances = cooks_distance(model)
    influential = tuple(distances.index[distances > threshold])
    if influential:
        logger.warning(
            "influential observations found",
            extra={"model": model.name, "count": len(influential), "threshold": threshold},
        )
    return InfluenceReport(cooks_distance=distances, threshold=threshold, influential=influential)


def residual_normality(model: FittedModel, alpha: float = 0.05) -> NormalityResult:
    statistic, pvalue = stats.shapiro(model.residuals.to_numpy())
    return NormalityResult(statistic=float(statistic), pvalue=float(pvalue), normal=bool(pvalue >= alpha))


def residuals_vs_fitted(model: FittedModel) -> pd.DataFrame:
    return pd.DataFrame({"fitted": model.fitted_values, "residual": model.residuals})


def breusch_pagan(model: FittedModel, alpha: float = 0.05) -> HeteroscedasticityResult:
    lm_statistic, lm_pvalue, _, _ = het_breuschpagan(model.residuals, model.design)
    return HeteroscedasticityResult(
        statistic=float(lm_statistic),
        df=model.n_params - 1,
        pvalue=float(lm_pvalue),
        homoscedastic=bool(lm_pvalue >= alpha),
    )


def variance_inflation(model: FittedModel, threshold: float = 5.0) -> pd.DataFrame:
    exog = model.design.to_numpy()
    rows = []
    for position, column in enumerate(model.design_columns):
        if column == "const":
            continue
        vif = float(variance_inflation_factor(exog, position))
        rows.append(
            {
                "predictor": column,
                "vif": vif,
                "flagged": vif > threshold,
                "severe": vif > SEVERE_VIF,
            }
        )
    return pd.DataFrame(rows, columns=["predictor", "vif", "flagged", "severe"]).set_index("predictor")


def standardized_coefficients(model: FittedModel) -> pd.Series:
    response_sd = model.endog.std(ddof=1)
    predictors = model.design.drop(columns="const")
    estimates = model.coefficients.loc[predictors.columns, "estimate"]
    return (estimates * predictors.std(ddof=1) / response_sd).rename("standardized")


def evaluate_model(
    model: FittedModel,
    *,
    alpha: float = 0.05,
    cooks_threshold: float = 1.0,
    vif_threshold: float = 5.0,
) -> ModelDiagnostics:
    return ModelDiagnostics(
        model_name=model.name,
        influence=influence_report(model, cooks_threshold),
        normality=residual_normality(model, alpha),
        linearity=residuals_vs_fitted(model),
        homoscedasticity=breusch_pagan(model, alpha),
        vif=variance_inflation(model, vif_threshold),
        standardized_coefficients=standardized_coefficients(model),
    )


def compare_models(simple: FittedModel, full: FittedModel, *, alpha: float = 0.05) -> ModelComparison:
    if not set(simple.design_columns) < set(full.design_columns):
        raise ValueError(f"model '{simple.name}' is not nested in model '{full.name}'")
    if simple.n_obs != full.n_obs:
        raise ValueError("nested comparison needs both models fitted on the same observations")

    f_statistic, f_pvalue, df_diff = full.results.compare_f_test(simple.results)
    preferred = full.name if f_pvalue < alpha else simple.name
    logger.info(
        "compared nested models",
        extra={"f_statistic": float(f_statistic), "f_pvalue": float(f_pvalue), "preferred": preferred},
    )
    return ModelComparison(
        simple_name=simple.name,
        complex_name=full.name,
        simple_adj_r_squared=simple.adj_r_squared,
        complex_adj_r_squared=full.adj_r_squared,
        simple_aic=simple.aic,
        complex_aic=full.aic,
        f_statistic=float(f_statistic),
        f_pvalue=float(f_pvalue),
        df_diff=int(round(df_diff)),
        alpha=alpha,
        preferred=preferred,
    )
