import argparse
from dataclasses import replace
from datetime import date
import logging

from albumrank.config import get_settings
from albumrank.pipeline import AnalysisRunner
from albumrank.report import render_text_report


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Explore the album ranking table and compare two OLS models")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="run the analysis once")
    run_parser.add_argument("--source", required=False, help="CSV path or URL; defaults to DATA_SOURCE")
    run_parser.add_argument("--run-key", required=False, help="Name for the report files; defaults to today's date")
    run_parser.add_argument("--seed", type=int, required=False, help="Seed for the imputation forest")
    run_parser.add_argument("--no-plots", action="store_true", help="skip writing plot images")
    run_parser.add_argument("--quiet", action="store_true", help="do not print the text report")

    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = get_settings()
    if args.seed is not None:
        settings = replace(settings, random_seed=args.seed)

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    run_key = args.run_key or date.today().isoformat()
    runner = AnalysisRunner(settings)
    try:
        result = runner.run(
            run_key=run_key,
            source=args.source,
            make_plots=False if args.no_plots else None,
        )
    except Exception as exc:
        print(f"run_key={run_key} status=failed error={exc}")
        raise SystemExit(1) from exc

    if not args.quiet:
        print(render_text_report(result))
    print(
        "run_key={run_key} status={status} rows={rows} imputed={imputed} preferred={preferred} report={report}".format(
            run_key=result.run_key,
            status="succeeded",
            rows=result.imputation.frame.shape[0],
            imputed=result.imputation.imputed_count,
            preferred=result.comparison.preferred,
            report=result.report_path,
        )
    )


if __name__ == "__main__":
    main()
