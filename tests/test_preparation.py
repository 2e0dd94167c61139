import numpy as np
import pandas as pd

from albumrank.exploration import explore
from albumrank.preparation import (
    SELECTED_COLUMNS,
    add_average_birth_year,
    drop_unattributed,
    filter_ranked,
    prepare_albums,
)


def test_filter_keeps_only_ranked_albums(raw_albums: pd.DataFrame) -> None:
    ranked = filter_ranked(raw_albums)

    assert len(ranked) == raw_albums["rank_2020"].notna().sum()
    assert ranked["rank_2020"].notna().all()


def test_average_birth_year_is_sum_over_member_count() -> None:
    frame = pd.DataFrame(
        {
            "artist_birth_year_sum": [3880.0, 1942.0, np.nan, 1950.0, 7800.0],
            "artist_member_count": [2, 1, 3, 0, np.nan],
        }
    )

    derived = add_average_birth_year(frame)["average_birth_year"]

    assert derived.iloc[0] == 1940.0
    assert derived.iloc[1] == 1942.0
    assert derived.iloc[2:].isna().all()


def test_prepare_projects_onto_the_ten_columns(raw_albums: pd.DataFrame) -> None:
    prepared = prepare_albums(raw_albums)

    assert list(prepared.columns) == list(SELECTED_COLUMNS)
    assert len(prepared.columns) == 10
    assert "genre" not in prepared.columns
    assert prepared["rank_2020"].notna().all()


def test_prepare_does_not_modify_input(raw_albums: pd.DataFrame) -> None:
    before = raw_albums.copy()

    prepare_albums(raw_albums)

    pd.testing.assert_frame_equal(raw_albums, before)


def test_drop_unattributed_removes_rows_without_gender(raw_albums: pd.DataFrame) -> None:
    prepared = prepare_albums(raw_albums)

    outcome = drop_unattributed(prepared)

    assert outcome.rows_dropped == 2
    assert len(outcome.frame) == len(prepared) - 2
    assert outcome.frame["artist_gender"].notna().all()
    assert "Various Artists" not in set(outcome.frame["clean_name"])


def test_explore_reports_missing_counts_and_tables(raw_albums: pd.DataFrame) -> None:
    prepared = prepare_albums(raw_albums)

    summary = explore(prepared)

    assert summary.row_count == len(prepared)
    assert summary.missing_counts["spotify_popularity"] == 4
    assert summary.missing_counts["artist_gender"] == 2
    assert summary.missing_counts["average_birth_year"] == 2
    assert summary.missing_counts["rank_2020"] == 0
    assert {"min", "25%", "50%", "mean", "75%", "max"} <= set(summary.numeric_summary.columns)
    gender_counts = summary.frequency_tables["artist_gender"]
    assert gender_counts.sum() == len(prepared)
    assert gender_counts[gender_counts.index.isna()].iloc[0] == 2
    assert np.allclose(np.diag(summary.correlations), 1.0)
    assert summary.correlations.loc["release_year", "rank_2020"] < 0
