from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()

DEFAULT_DATA_SOURCE = (
    "https://raw.githubusercontent.com/rfordatascience/tidytuesday/main/data/2024/2024-05-07/rolling_stone.csv"
)


@dataclass(frozen=True)
class Settings:
    app_name: str
    log_level: str
    data_source: str
    output_dir: str
    random_seed: int | None
    imputer_max_iter: int
    imputer_n_estimators: int
    significance_level: float
    cooks_threshold: float
    vif_threshold: float
    gender_reference: str | None
    make_plots: bool


def _optional_int(raw: str | None) -> int | None:
    if raw is None or not raw.strip():
        return None
    return int(raw)


def _flag(raw: str) -> bool:
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "albumrank"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        data_source=os.getenv("DATA_SOURCE", DEFAULT_DATA_SOURCE),
        output_dir=os.getenv("OUTPUT_DIR", "./outputs"),
        random_seed=_optional_int(os.getenv("RANDOM_SEED")),
        imputer_max_iter=int(os.getenv("IMPUTER_MAX_ITER", "10")),
        imputer_n_estimators=int(os.getenv("IMPUTER_N_ESTIMATORS", "100")),
        significance_level=float(os.getenv("SIGNIFICANCE_LEVEL", "0.05")),
        cooks_threshold=float(os.getenv("COOKS_THRESHOLD", "1.0")),
        vif_threshold=float(os.getenv("VIF_THRESHOLD", "5.0")),
        gender_reference=os.getenv("GENDER_REFERENCE") or None,
        make_plots=_flag(os.getenv("MAKE_PLOTS", "true")),
    )
