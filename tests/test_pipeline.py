from dataclasses import replace
import json
from pathlib import Path

import pandas as pd
import pytest

from albumrank.config import Settings
from albumrank.errors import DataUnavailableError, IncompleteCovariatesError
from albumrank.pipeline import AnalysisRunner
from albumrank.report import build_report_record, render_text_report


def test_full_run_produces_models_and_reports(test_settings: Settings, raw_albums: pd.DataFrame) -> None:
    result = AnalysisRunner(test_settings).run(run_key="report-2026-10-19")

    ranked = int(raw_albums["rank_2020"].notna().sum())
    assert result.raw_rows == len(raw_albums)
    assert result.prepared_rows == ranked
    assert result.dropped_unattributed == 2
    assert result.imputation.imputed_count == 4
    assert result.imputation.frame.isna().sum().sum() == 0
    assert set(result.models) == {"simple", "complex"}
    assert result.models["simple"].n_obs == result.models["complex"].n_obs == ranked - 2
    assert result.comparison.df_diff == 4
    assert result.comparison.preferred in {"simple", "complex"}
    assert result.plot_paths == ()

    record = json.loads(Path(result.report_path).read_text(encoding="utf-8"))
    assert record["run_key"] == "report-2026-10-19"
    assert record["imputation"]["imputed_count"] == 4
    assert record["comparison"]["preferred"] == result.comparison.preferred
    assert record["comparison"]["nested_f_test"]["df_diff"] == 4
    assert "design parameters" in record["comparison"]["nested_f_test"]["df_diff_counts"]
    assert {row["term"] for row in record["models"]["simple"]["coefficients"]} == {
        "const",
        "release_year",
        "peak_billboard_position",
        "spotify_popularity",
    }
    assert record["exploration"]["frequency_tables"]["artist_gender"]["missing"] == 2

    text = Path(result.text_report_path).read_text(encoding="utf-8")
    assert "Model comparison" in text
    assert f"prefer the {result.comparison.preferred} model" in text


def test_report_record_is_json_serializable(test_settings: Settings) -> None:
    result = AnalysisRunner(test_settings).run(run_key="serializable")

    payload = build_report_record(result)

    assert json.loads(json.dumps(payload))["models"]["complex"]["reference_levels"] == {"artist_gender": "Female"}
    assert "Conclusions" in render_text_report(result)


def test_run_writes_plots_when_enabled(test_settings: Settings) -> None:
    result = AnalysisRunner(test_settings).run(run_key="with-plots", make_plots=True)

    assert len(result.plot_paths) == 7
    for path in result.plot_paths:
        assert Path(path).exists()
        assert Path(path).parent == Path(test_settings.output_dir) / "plots" / "with-plots"


def test_missing_source_aborts_the_run(test_settings: Settings, tmp_path: Path) -> None:
    runner = AnalysisRunner(test_settings)

    with pytest.raises(DataUnavailableError):
        runner.run(run_key="missing", source=str(tmp_path / "absent.csv"))

    assert not (Path(test_settings.output_dir) / "reports" / "missing.json").exists()


def test_incomplete_covariates_abort_the_run(test_settings: Settings, raw_albums: pd.DataFrame, tmp_path: Path) -> None:
    broken = raw_albums.copy()
    broken.loc[5, "artist_birth_year_sum"] = None
    source = tmp_path / "broken.csv"
    broken.to_csv(source, index=False)

    with pytest.raises(IncompleteCovariatesError):
        AnalysisRunner(test_settings).run(run_key="broken", source=str(source))


def test_gender_reference_comes_from_settings(test_settings: Settings) -> None:
    settings = replace(test_settings, gender_reference="Male")

    result = AnalysisRunner(settings).run(run_key="male-reference")

    assert result.models["complex"].reference_levels == {"artist_gender": "Male"}
    assert "artist_gender_Female" in result.models["complex"].design_columns
