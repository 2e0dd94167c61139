import json
from pathlib import Path

import pandas as pd

from albumrank.schemas import AnalysisResult, ModelComparison, ModelDiagnostics


def _records(frame: pd.DataFrame, index_name: str) -> list[dict[str, object]]:
    table = frame.rename_axis(index_name).reset_index()
    return json.loads(table.to_json(orient="records"))


def _mapping(series: pd.Series) -> dict[str, object]:
    return json.loads(series.to_json(orient="index"))


def _diagnostics_record(diagnostics: ModelDiagnostics) -> dict[str, object]:
    influence = diagnostics.influence
    return {
        "influence": {
            "threshold": influence.threshold,
            "max_cooks_distance": float(influence.cooks_distance.max()),
            "influential_rows": [int(row) for row in influence.influential],
        },
        "normality": {
            "test": "shapiro-wilk",
            "statistic": diagnostics.normality.statistic,
            "p_value": diagnostics.normality.pvalue,
            "normal": diagnostics.normality.normal,
        },
        "homoscedasticity": {
            "test": "breusch-pagan",
            "statistic": diagnostics.homoscedasticity.statistic,
            "df": diagnostics.homoscedasticity.df,
            "p_value": diagnostics.homoscedasticity.pvalue,
            "homoscedastic": diagnostics.homoscedasticity.homoscedastic,
        },
        "vif": _records(diagnostics.vif, "predictor"),
        "standardized_coefficients": _mapping(diagnostics.standardized_coefficients),
    }


def _comparison_record(comparison: ModelComparison) -> dict[str, object]:
    return {
        "models": {
            comparison.simple_name: {
                "adj_r_squared": comparison.simple_adj_r_squared,
                "aic": comparison.simple_aic,
            },
            comparison.complex_name: {
                "adj_r_squared": comparison.complex_adj_r_squared,
                "aic": comparison.complex_aic,
            },
        },
        "nested_f_test": {
            "f_statistic": comparison.f_statistic,
            "p_value": comparison.f_pvalue,
            "df_diff": comparison.df_diff,
            "df_diff_counts": "design parameters; each indicator column counts once",
            "alpha": comparison.alpha,
        },
        "preferred": comparison.preferred,
    }


def build_report_record(result: AnalysisResult) -> dict[str, object]:
    exploration = result.exploration
    imputation = result.imputation
    return {
        "run_key": result.run_key,
        "source": result.source,
        "raw_rows": result.raw_rows,
        "prepared_rows": result.prepared_rows,
        "exploration": {
            "missing_counts": _mapping(exploration.missing_counts),
            "numeric_summary": _records(exploration.numeric_summary, "column"),
            "frequency_tables": {
                column: _mapping(table.rename(index=lambda level: "missing" if pd.isna(level) else level))
                for column, table in exploration.frequency_tables.items()
            },
            "correlations": _records(exploration.correlations, "column"),
        },
        "dropped_unattributed": result.dropped_unattributed,
        "imputation": {
            "column": imputation.column,
            "imputed_count": imputation.imputed_count,
            "n_iter": imputation.n_iter,
            "converged": imputation.converged,
        },
        "models": {
            name: {
                "predictors": list(model.predictors),
                "reference_levels": model.reference_levels,
                "n_obs": model.n_obs,
                "r_squared": model.r_squared,
                "adj_r_squared": model.adj_r_squared,
                "f_statistic": model.f_statistic,
                "f_pvalue": model.f_pvalue,
                "log_likelihood": model.log_likelihood,
                "aic": model.aic,
                "bic": model.bic,
                "coefficients": _records(model.coefficients, "term"),
            }
            for name, model in result.models.items()
        },
        "diagnostics": {name: _diagnostics_record(diag) for name, diag in result.diagnostics.items()},
        "comparison": _comparison_record(result.comparison),
    }


def _conclusions(result: AnalysisResult) -> list[str]:
    lines: list[str] = []
    for name, diagnostics in result.diagnostics.items():
        influential = diagnostics.influence.influential
        if influential:
            lines.append(
                f"{name}: {len(influential)} observation(s) exceed Cook's distance "
                f"{diagnostics.influence.threshold:g} and drive the fit disproportionately."
            )
        else:
            lines.append(f"{name}: no observation exceeds Cook's distance {diagnostics.influence.threshold:g}.")

        normality = diagnostics.normality
        verdict = "consistent with normality" if normality.normal else "depart from normality"
        lines.append(f"{name}: residuals {verdict} (Shapiro-Wilk W={normality.statistic:.3f}, p={normality.pvalue:.4f}).")

        spread = diagnostics.homoscedasticity
        verdict = "constant" if spread.homoscedastic else "dependent on the predictors"
        lines.append(
            f"{name}: residual variance looks {verdict} "
            f"(Breusch-Pagan LM={spread.statistic:.3f}, df={spread.df}, p={spread.pvalue:.4f})."
        )

        flagged = diagnostics.vif.index[diagnostics.vif["flagged"]].tolist()
        if flagged:
            lines.append(f"{name}: multicollinearity flagged for {', '.join(flagged)}.")
        else:
            lines.append(f"{name}: no predictor shows problematic multicollinearity.")

    comparison = result.comparison
    if comparison.preferred == comparison.complex_name:
        lines.append(
            "The added predictors reduce residual variance significantly "
            f"(F={comparison.f_statistic:.3f}, df={comparison.df_diff}, p={comparison.f_pvalue:.4f}); "
            f"prefer the {comparison.complex_name} model."
        )
    else:
        lines.append(
            "The added predictors do not justify their complexity "
            f"(F={comparison.f_statistic:.3f}, df={comparison.df_diff}, p={comparison.f_pvalue:.4f}); "
            f"prefer the {comparison.simple_name} model."
        )
    return lines


def render_text_report(result: AnalysisResult) -> str:
    exploration = result.exploration
    sections = [
        f"Album ranking analysis ({result.run_key})",
        f"source: {result.source}",
        f"rows: {result.raw_rows} loaded, {result.prepared_rows} ranked, "
        f"{result.dropped_unattributed} dropped without a single attributable artist",
        "",
        "Missing values",
        exploration.missing_counts.to_string(),
        "",
        "Numeric summary",
        exploration.numeric_summary.round(3).to_string(),
    ]
    for column, table in exploration.frequency_tables.items():
        sections += ["", f"Frequency of {column}", table.to_string()]
    sections += ["", "Pearson correlations", exploration.correlations.round(3).to_string()]

    imputation = result.imputation
    sections += [
        "",
        f"Imputed {imputation.imputed_count} missing {imputation.column} value(s) "
        f"in {imputation.n_iter} iteration(s)"
        + ("" if imputation.converged else " without reaching the stopping criterion"),
    ]

    for name, model in result.models.items():
        sections += [
            "",
            f"Model: {name} ({model.response} ~ {' + '.join(model.predictors)})",
            model.coefficients.round(4).to_string(),
            f"R2={model.r_squared:.4f} adj.R2={model.adj_r_squared:.4f} "
            f"F={model.f_statistic:.3f} (p={model.f_pvalue:.4g}) "
            f"logLik={model.log_likelihood:.2f} AIC={model.aic:.2f} BIC={model.bic:.2f}",
        ]
        diagnostics = result.diagnostics[name]
        sections += ["VIF", diagnostics.vif.round(3).to_string()]
        sections += ["Standardized coefficients", diagnostics.standardized_coefficients.round(4).to_string()]

    comparison = result.comparison
    table = pd.DataFrame(
        {
            "adj_r_squared": [comparison.simple_adj_r_squared, comparison.complex_adj_r_squared],
            "aic": [comparison.simple_aic, comparison.complex_aic],
        },
        index=[comparison.simple_name, comparison.complex_name],
    )
    sections += ["", "Model comparison", table.round(4).to_string(), "", "Conclusions"]
    sections += [f"- {line}" for line in _conclusions(result)]
    return "\n".join(sections) + "\n"


def write_json(path: Path, payload: dict[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as outfile:
        json.dump(payload, outfile, indent=2, sort_keys=True)
        outfile.write("\n")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
