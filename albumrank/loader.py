import logging
from pathlib import Path

import pandas as pd

from albumrank.errors import DataUnavailableError


logger = logging.getLogger(__name__)

REQUIRED_RAW_COLUMNS = (
    "sort_name",
    "clean_name",
    "album",
    "rank_2020",
    "release_year",
    "peak_billboard_position",
    "spotify_popularity",
    "artist_member_count",
    "artist_gender",
    "artist_birth_year_sum",
)


def _is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://", "ftp://"))


def load_albums(source: str | Path) -> pd.DataFrame:
    source = str(source)
    if not _is_remote(source) and not Path(source).exists():
        raise DataUnavailableError(f"album table not found: {source}")

    try:
        frame = pd.read_csv(source)
    except OSError as exc:
        raise DataUnavailableError(f"could not fetch album table from {source}: {exc}") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise DataUnavailableError(f"album table at {source} is malformed: {exc}") from exc

    missing = [column for column in REQUIRED_RAW_COLUMNS if column not in frame.columns]
    if missing:
        raise DataUnavailableError(f"album table at {source} lacks columns: {', '.join(missing)}")

    logger.info("album table loaded", extra={"source": source, "rows": len(frame)})
    return frame
