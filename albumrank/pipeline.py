from collections.abc import Callable
import logging
from pathlib import Path
import time
from typing import TypeVar

from albumrank.config import Settings
from albumrank.evaluation import compare_models, evaluate_model
from albumrank.exploration import explore
from albumrank.imputation import impute_popularity
from albumrank.loader import load_albums
from albumrank.modeling import SIMPLE_PREDICTORS, fit_complex, fit_simple
from albumrank.plots import render_plots
from albumrank.preparation import drop_unattributed, prepare_albums
from albumrank.report import build_report_record, render_text_report, write_json, write_text
from albumrank.schemas import AnalysisResult, FittedModel


logger = logging.getLogger(__name__)
T = TypeVar("T")


class AnalysisRunner:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def run(self, *, run_key: str, source: str | None = None, make_plots: bool | None = None) -> AnalysisResult:
        source = source or self.settings.data_source
        make_plots = self.settings.make_plots if make_plots is None else make_plots
        logger.info("analysis run started", extra={"run_key": run_key, "source": source})

        raw = self._run_step("load", lambda: load_albums(source))
        prepared = self._run_step("filter", lambda: prepare_albums(raw))
        exploration = self._run_step("explore", lambda: explore(prepared))
        dropped = self._run_step("drop_unattributed", lambda: drop_unattributed(prepared))
        imputation = self._run_step(
            "impute",
            lambda: impute_popularity(
                dropped.frame,
                max_iter=self.settings.imputer_max_iter,
                n_estimators=self.settings.imputer_n_estimators,
                random_state=self.settings.random_seed,
            ),
        )
        modeled = imputation.frame

        models: dict[str, FittedModel] = {}
        models["simple"] = self._run_step("fit_simple", lambda: fit_simple(modeled))
        models["complex"] = self._run_step(
            "fit_complex",
            lambda: fit_complex(modeled, gender_reference=self.settings.gender_reference),
        )
        diagnostics = self._run_step(
            "evaluate",
            lambda: {
                name: evaluate_model(
                    model,
                    alpha=self.settings.significance_level,
                    cooks_threshold=self.settings.cooks_threshold,
                    vif_threshold=self.settings.vif_threshold,
                )
                for name, model in models.items()
            },
        )
        comparison = self._run_step(
            "compare",
            lambda: compare_models(models["simple"], models["complex"], alpha=self.settings.significance_level),
        )

        plot_paths: tuple[str, ...] = ()
        if make_plots:
            plot_paths = self._run_step(
                "plot",
                lambda: render_plots(
                    self._plot_dir(run_key),
                    prepared=prepared,
                    correlations=exploration.correlations,
                    modeled=modeled,
                    models=models,
                    scatter_predictors=SIMPLE_PREDICTORS,
                ),
            )

        result = AnalysisResult(
            run_key=run_key,
            source=source,
            raw_rows=len(raw),
            prepared_rows=len(prepared),
            exploration=exploration,
            dropped_unattributed=dropped.rows_dropped,
            imputation=imputation,
            models=models,
            diagnostics=diagnostics,
            comparison=comparison,
            report_path=str(self._report_path(run_key, "json")),
            text_report_path=str(self._report_path(run_key, "txt")),
            plot_paths=plot_paths,
        )
        self._run_step("publish_report", lambda: self._publish_outputs(result))
        logger.info(
            "analysis run finished",
            extra={"run_key": run_key, "preferred": comparison.preferred, "rows": len(modeled)},
        )
        return result

    def _run_step(self, step_name: str, fn: Callable[[], T]) -> T:
        started = time.perf_counter()
        logger.info("step started", extra={"step": step_name})
        try:
            result = fn()
        except Exception:
            logger.exception("step failed", extra={"step": step_name})
            raise
        logger.info(
            "step finished",
            extra={"step": step_name, "elapsed_seconds": round(time.perf_counter() - started, 3)},
        )
        return result

    def _publish_outputs(self, result: AnalysisResult) -> None:
        write_json(Path(result.report_path), build_report_record(result))
        write_text(Path(result.text_report_path), render_text_report(result))

    def _report_path(self, run_key: str, suffix: str) -> Path:
        return Path(self.settings.output_dir) / "reports" / f"{run_key}.{suffix}"

    def _plot_dir(self, run_key: str) -> Path:
        return Path(self.settings.output_dir) / "plots" / run_key
