from dataclasses import dataclass
from typing import Any

import pandas as pd


@dataclass(frozen=True)
class ExplorationSummary:
    row_count: int
    missing_counts: pd.Series
    numeric_summary: pd.DataFrame
    frequency_tables: dict[str, pd.Series]
    correlations: pd.DataFrame


@dataclass(frozen=True)
class DropOutcome:
    frame: pd.DataFrame
    rows_before: int
    rows_dropped: int


@dataclass(frozen=True)
class ImputationResult:
    frame: pd.DataFrame
    column: str
    imputed_count: int
    n_iter: int
    converged: bool


@dataclass(frozen=True)
class FittedModel:
    name: str
    response: str
    predictors: tuple[str, ...]
    design_columns: tuple[str, ...]
    reference_levels: dict[str, str]
    coefficients: pd.DataFrame
    residuals: pd.Series
    fitted_values: pd.Series
    r_squared: float
    adj_r_squared: float
    f_statistic: float
    f_pvalue: float
    log_likelihood: float
    aic: float
    bic: float
    n_obs: int
    design: pd.DataFrame
    endog: pd.Series
    results: Any

    @property
    def n_params(self) -> int:
        return len(self.design_columns)


@dataclass(frozen=True)
class InfluenceReport:
    cooks_distance: pd.Series
    threshold: float
    influential: tuple[Any, ...]


@dataclass(frozen=True)
class NormalityResult:
    statistic: float
    pvalue: float
    normal: bool


@dataclass(frozen=True)
class HeteroscedasticityResult:
    statistic: float
    df: int
    pvalue: float
    homoscedastic: bool


@dataclass(frozen=True)
class ModelDiagnostics:
    model_name: str
    influence: InfluenceReport
    normality: NormalityResult
    linearity: pd.DataFrame
    homoscedasticity: HeteroscedasticityResult
    vif: pd.DataFrame
    standardized_coefficients: pd.Series


@dataclass(frozen=True)
class ModelComparison:
    simple_name: str
    complex_name: str
    simple_adj_r_squared: float
    complex_adj_r_squared: float
    simple_aic: float
    complex_aic: float
    f_statistic: float
    f_pvalue: float
    df_diff: int
    alpha: float
    preferred: str


@dataclass(frozen=True)
class AnalysisResult:
    run_key: str
    source: str
    raw_rows: int
    prepared_rows: int
    exploration: ExplorationSummary
    dropped_unattributed: int
    imputation: ImputationResult
    models: dict[str, FittedModel]
    diagnostics: dict[str, ModelDiagnostics]
    comparison: ModelComparison
    report_path: str | None
    text_report_path: str | None
    plot_paths: tuple[str, ...]
