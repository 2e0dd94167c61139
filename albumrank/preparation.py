import logging

import numpy as np
import pandas as pd

from albumrank.schemas import DropOutcome


logger = logging.getLogger(__name__)

RESPONSE = "rank_2020"
GENDER = "artist_gender"
POPULARITY = "spotify_popularity"

IDENTIFIER_COLUMNS = ("sort_name", "clean_name", "album")
NUMERIC_COLUMNS = (
    "rank_2020",
    "release_year",
    "peak_billboard_position",
    "spotify_popularity",
    "artist_member_count",
    "average_birth_year",
)
CATEGORICAL_COLUMNS = (GENDER,)
SELECTED_COLUMNS = IDENTIFIER_COLUMNS + NUMERIC_COLUMNS + CATEGORICAL_COLUMNS


def filter_ranked(frame: pd.DataFrame) -> pd.DataFrame:
    ranked = frame.loc[frame[RESPONSE].notna()].reset_index(drop=True)
    logger.info("kept ranked albums", extra={"rows_before": len(frame), "rows_after": len(ranked)})
    return ranked


def add_average_birth_year(frame: pd.DataFrame) -> pd.DataFrame:
    out = frame.copy()
    birth_sum = pd.to_numeric(out["artist_birth_year_sum"], errors="coerce")
    members = pd.to_numeric(out["artist_member_count"], errors="coerce")
    defined = birth_sum.notna() & members.notna() & (members > 0)
    out["average_birth_year"] = np.nan
    out.loc[defined, "average_birth_year"] = birth_sum[defined] / members[defined]
    return out


def select_columns(frame: pd.DataFrame) -> pd.DataFrame:
    return frame.loc[:, list(SELECTED_COLUMNS)].copy()


def prepare_albums(raw: pd.DataFrame) -> pd.DataFrame:
    return select_columns(add_average_birth_year(filter_ranked(raw)))


def drop_unattributed(frame: pd.DataFrame) -> DropOutcome:
    attributed = frame.loc[frame[GENDER].notna()].reset_index(drop=True)
    dropped = len(frame) - len(attributed)
    if dropped:
        names = frame.loc[frame[GENDER].isna(), "clean_name"]
        logger.info(
            "dropped albums without a single attributable artist",
            extra={"rows_dropped": dropped, "artists": sorted(set(names.dropna()))},
        )
    return DropOutcome(frame=attributed, rows_before=len(frame), rows_dropped=dropped)
