import logging
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from albumrank.preparation import GENDER, NUMERIC_COLUMNS, RESPONSE
from albumrank.schemas import FittedModel


logger = logging.getLogger(__name__)


def _save(fig: plt.Figure, path: Path) -> str:
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return str(path)


def plot_histograms(frame: pd.DataFrame, path: Path, columns: tuple[str, ...] = NUMERIC_COLUMNS) -> str:
    fig, axes = plt.subplots(2, (len(columns) + 1) // 2, figsize=(4 * ((len(columns) + 1) // 2), 7))
    for ax, column in zip(axes.flat, columns):
        sns.histplot(frame[column].dropna(), ax=ax, bins=30)
        ax.set_title(column)
    for ax in list(axes.flat)[len(columns):]:
        ax.set_visible(False)
    fig.tight_layout()
    return _save(fig, path)


def plot_boxplots(frame: pd.DataFrame, path: Path, columns: tuple[str, ...] = NUMERIC_COLUMNS) -> str:
    fig, axes = plt.subplots(1, len(columns), figsize=(3 * len(columns), 4))
    for ax, column in zip(axes, columns):
        sns.boxplot(y=frame[column].dropna(), ax=ax)
        ax.set_title(column)
    fig.tight_layout()
    return _save(fig, path)


def plot_correlations(correlations: pd.DataFrame, path: Path) -> str:
    fig, ax = plt.subplots(figsize=(8, 6))
    sns.heatmap(correlations, annot=True, fmt=".2f", cmap="coolwarm", center=0, ax=ax)
    ax.set_title("Pearson correlation")
    return _save(fig, path)


def plot_response_scatter(frame: pd.DataFrame, path: Path, predictors: tuple[str, ...]) -> str:
    fig, axes = plt.subplots(1, len(predictors), figsize=(4 * len(predictors), 4), squeeze=False)
    for ax, column in zip(axes[0], predictors):
        sns.regplot(data=frame, x=column, y=RESPONSE, ax=ax, scatter_kws={"s": 10})
    fig.tight_layout()
    return _save(fig, path)


def plot_rank_by_gender(frame: pd.DataFrame, path: Path) -> str:
    fig, ax = plt.subplots(figsize=(6, 4))
    sns.boxplot(data=frame, x=GENDER, y=RESPONSE, order=sorted(frame[GENDER].dropna().unique()), ax=ax)
    return _save(fig, path)


def plot_residuals(model: FittedModel, path: Path) -> str:
    fig, ax = plt.subplots(figsize=(6, 4))
    sns.regplot(x=model.fitted_values, y=model.residuals, lowess=True, ax=ax, scatter_kws={"s": 10})
    ax.axhline(0, color="grey", linewidth=1)
    ax.set_xlabel("fitted")
    ax.set_ylabel("residual")
    ax.set_title(f"{model.name}: residuals vs fitted")
    return _save(fig, path)


def render_plots(
    output_dir: Path,
    *,
    prepared: pd.DataFrame,
    correlations: pd.DataFrame,
    modeled: pd.DataFrame,
    models: dict[str, FittedModel],
    scatter_predictors: tuple[str, ...],
) -> tuple[str, ...]:
    paths = [
        plot_histograms(prepared, output_dir / "histograms.png"),
        plot_boxplots(prepared, output_dir / "boxplots.png"),
        plot_correlations(correlations, output_dir / "correlations.png"),
        plot_response_scatter(modeled, output_dir / "rank_scatter.png", scatter_predictors),
        plot_rank_by_gender(modeled, output_dir / "rank_by_gender.png"),
    ]
    for name, model in models.items():
        paths.append(plot_residuals(model, output_dir / f"residuals_{name}.png"))
    logger.info("plots written", extra={"count": len(paths), "output_dir": str(output_dir)})
    return tuple(paths)
