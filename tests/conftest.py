from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from albumrank.config import Settings


def make_raw_albums(n_ranked: int = 60, n_unranked: int = 8, n_missing_popularity: int = 4, seed: int = 7) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    n = n_ranked + n_unranked
    release_year = rng.integers(1955, 2020, size=n)
    peak = rng.integers(1, 201, size=n)
    members = rng.integers(1, 6, size=n)
    birth_avg = release_year - rng.integers(20, 35, size=n)
    popularity = np.clip(0.5 * (release_year - 1950) - 0.1 * peak + rng.normal(0, 5, size=n), 0, 100).round()
    gender = rng.choice(["Male", "Female", "Male/Female"], size=n)
    rank = 520 - 3.0 * (release_year - 1950) + 0.8 * peak - 2.0 * popularity + rng.normal(0, 40, size=n)

    frame = pd.DataFrame(
        {
            "sort_name": [f"Artist {i:03d}" for i in range(n)],
            "clean_name": [f"Artist {i:03d}" for i in range(n)],
            "album": [f"Album {i:03d}" for i in range(n)],
            "rank_2003": rng.integers(1, 501, size=n),
            "rank_2020": rank.round(),
            "release_year": release_year,
            "genre": rng.choice(["Rock", "Soul", "Hip-Hop"], size=n),
            "peak_billboard_position": peak,
            "spotify_popularity": popularity,
            "artist_member_count": members,
            "artist_gender": gender,
            "artist_birth_year_sum": birth_avg * members,
        }
    )
    frame.loc[n_ranked:, "rank_2020"] = np.nan
    frame.loc[: n_missing_popularity - 1, "spotify_popularity"] = np.nan
    return frame


def add_various_artists(frame: pd.DataFrame, count: int = 2) -> pd.DataFrame:
    rows = pd.DataFrame(
        {
            "sort_name": ["Various Artists"] * count,
            "clean_name": ["Various Artists"] * count,
            "album": [f"Compilation {i}" for i in range(count)],
            "rank_2020": [float(100 + i) for i in range(count)],
            "release_year": [1970 + i for i in range(count)],
            "peak_billboard_position": [40 + i for i in range(count)],
            "spotify_popularity": [50.0 + i for i in range(count)],
            "artist_member_count": [np.nan] * count,
            "artist_gender": [np.nan] * count,
            "artist_birth_year_sum": [np.nan] * count,
        }
    )
    return pd.concat([frame, rows], ignore_index=True)


@pytest.fixture()
def raw_albums() -> pd.DataFrame:
    return add_various_artists(make_raw_albums())


@pytest.fixture()
def albums_csv(tmp_path: Path, raw_albums: pd.DataFrame) -> Path:
    path = tmp_path / "data" / "rolling_stone.csv"
    path.parent.mkdir(parents=True, exist_ok=True)
    raw_albums.to_csv(path, index=False)
    return path


@pytest.fixture()
def test_settings(tmp_path: Path, albums_csv: Path) -> Settings:
    return Settings(
        app_name="albumrank",
        log_level="INFO",
        data_source=str(albums_csv),
        output_dir=str(tmp_path / "outputs"),
        random_seed=11,
        imputer_max_iter=5,
        imputer_n_estimators=20,
        significance_level=0.05,
        cooks_threshold=1.0,
        vif_threshold=5.0,
        gender_reference=None,
        make_plots=False,
    )
