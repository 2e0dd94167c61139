from pathlib import Path

import pandas as pd
import pytest

from albumrank.errors import DataUnavailableError
from albumrank.loader import load_albums


def test_load_returns_table_unmodified(albums_csv: Path, raw_albums: pd.DataFrame) -> None:
    loaded = load_albums(albums_csv)

    assert list(loaded.columns) == list(raw_albums.columns)
    assert len(loaded) == len(raw_albums)


def test_missing_file_is_unavailable(tmp_path: Path) -> None:
    with pytest.raises(DataUnavailableError):
        load_albums(tmp_path / "nope.csv")


def test_empty_file_is_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "empty.csv"
    path.write_text("", encoding="utf-8")

    with pytest.raises(DataUnavailableError):
        load_albums(path)


def test_missing_required_columns_is_unavailable(tmp_path: Path) -> None:
    path = tmp_path / "partial.csv"
    pd.DataFrame({"album": ["Blue"], "rank_2020": [3]}).to_csv(path, index=False)

    with pytest.raises(DataUnavailableError, match="lacks columns"):
        load_albums(path)
