"""Tests for long/wide reshaping and column splitting."""

import pandas as pd
import pytest

from py4envchem.exceptions import DataValidationError, MissingColumnError
from py4envchem.pipeline.data_import.reshape import (
    pivot_longer,
    pivot_wider,
    require_columns,
    separate,
)


@pytest.fixture
def wide():
    """Fixture: wide metal table."""
    return pd.DataFrame(
        {
            "lake": ["Ashby", "Brennan"],
            "cu": [3.2, 8.7],
            "zn": [11.5, float("nan")],
        }
    )


def test_require_columns_names_missing(wide):
    """Test Require columns names missing."""
    with pytest.raises(MissingColumnError) as excinfo:
        require_columns(wide, ["lake", "pb", "cd"])
    assert excinfo.value.missing == ["pb", "cd"]
    assert "lake" in excinfo.value.available


def test_pivot_longer_orders_by_row_then_column(wide):
    """Test Pivot longer orders by row then column."""
    long = pivot_longer(wide, ["cu", "zn"], names_to="metal", values_to="conc")
    assert list(long.columns) == ["lake", "metal", "conc"]
    assert long["lake"].tolist() == ["Ashby", "Ashby", "Brennan", "Brennan"]
    assert long["metal"].tolist() == ["cu", "zn", "cu", "zn"]
    assert long["conc"].isna().sum() == 1


def test_pivot_longer_missing_column(wide):
    """Test Pivot longer missing column."""
    with pytest.raises(MissingColumnError):
        pivot_longer(wide, ["cu", "pb"])


def test_pivot_wider_restores_original(wide):
    """Test Pivot wider restores original."""
    long = pivot_longer(wide, ["cu", "zn"])
    restored = pivot_wider(long, names_from="name", values_from="value")
    assert list(restored.columns) == ["lake", "cu", "zn"]
    pd.testing.assert_frame_equal(restored, wide, check_dtype=False)


def test_pivot_wider_rejects_duplicates():
    """Test Pivot wider rejects duplicates."""
    long = pd.DataFrame(
        {"lake": ["A", "A"], "name": ["cu", "cu"], "value": [1.0, 2.0]}
    )
    with pytest.raises(DataValidationError):
        pivot_wider(long)


def test_pivot_wider_without_id_columns():
    """Test Pivot wider without id columns."""
    long = pd.DataFrame({"name": ["cu", "zn"], "value": [1.0, 2.0]})
    wide = pivot_wider(long)
    assert wide.to_dict("list") == {"cu": [1.0], "zn": [2.0]}


def test_separate_splits_at_first_separator():
    """Test Separate splits at first separator."""
    df = pd.DataFrame({"metal": ["cu_ug_l", "zn_ug_l"], "v": [1, 2]})
    out = separate(df, "metal", ["element", "unit"])
    assert out["element"].tolist() == ["cu", "zn"]
    assert out["unit"].tolist() == ["ug_l", "ug_l"]
    assert "metal" not in out.columns


def test_separate_too_few_parts_raises():
    """Test Separate too few parts raises."""
    df = pd.DataFrame({"sample": ["A-2021", "B"]})
    with pytest.raises(DataValidationError):
        separate(df, "sample", ["site", "year"], sep="-")
