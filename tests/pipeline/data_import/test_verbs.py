"""Tests for the pipeline-style data verbs."""

import pandas as pd
import pytest

from py4envchem.exceptions import DataValidationError, MissingColumnError
from py4envchem.pipeline.data_import.verbs import (
    arrange,
    filter_rows,
    mutate,
    rename,
    select,
    summarize,
)


@pytest.fixture
def ozone():
    """Fixture: ozone readings at three sites."""
    return pd.DataFrame(
        {
            "site": ["A", "B", "A", "C", "B"],
            "day": [1, 1, 2, 1, 2],
            "o3_ppb": [31.0, 45.0, 35.0, 28.0, None],
        }
    )


def test_select_orders_columns_and_copies(ozone):
    """Test Select orders columns and copies."""
    out = select(ozone, "o3_ppb", "site")
    assert list(out.columns) == ["o3_ppb", "site"]
    out.loc[0, "site"] = "Z"
    assert ozone.loc[0, "site"] == "A"


def test_select_missing_column(ozone):
    """Test Select missing column."""
    with pytest.raises(MissingColumnError):
        select(ozone, "site", "no2_ppb")


def test_rename_new_equals_old(ozone):
    """Test Rename new equals old."""
    out = rename(ozone, station="site")
    assert "station" in out.columns
    assert "site" in ozone.columns
    with pytest.raises(MissingColumnError):
        rename(ozone, x="nope")


def test_filter_rows_query_and_callable(ozone):
    """Test Filter rows query and callable."""
    assert filter_rows(ozone, "o3_ppb > 30")["site"].tolist() == ["A", "B", "A"]
    assert filter_rows(ozone, lambda d: d["site"] == "B")["day"].tolist() == [1, 2]


def test_filter_rows_bad_expression(ozone):
    """Test Filter rows bad expression."""
    with pytest.raises(DataValidationError):
        filter_rows(ozone, "no2_ppb > 3")
    with pytest.raises(DataValidationError):
        filter_rows(ozone, lambda d: d["o3_ppb"])


def test_filter_rows_callable_missing_column(ozone):
    """Test Filter rows callable missing column."""
    with pytest.raises(MissingColumnError, match="no2_ppb") as excinfo:
        filter_rows(ozone, lambda d: d["no2_ppb"] > 0)
    assert excinfo.value.context["missing"] == ["no2_ppb"]


def test_filter_rows_callable_wrong_length(ozone):
    """Test Filter rows callable wrong length."""
    with pytest.raises(DataValidationError, match="one value per row"):
        filter_rows(ozone, lambda d: [True, False])


def test_mutate_callable_missing_column(ozone):
    """Test Mutate callable missing column."""
    with pytest.raises(MissingColumnError, match="no2_ppb"):
        mutate(ozone, no2_ppm=lambda d: d["no2_ppb"] / 1000)


def test_mutate_wrong_length_values(ozone):
    """Test Mutate wrong length values."""
    with pytest.raises(DataValidationError):
        mutate(ozone, flag=[1, 2])
    with pytest.raises(DataValidationError):
        mutate(ozone, flag=lambda d: [True])
    assert "flag" not in ozone.columns


def test_mutate_sees_earlier_columns(ozone):
    """Test Mutate sees earlier columns."""
    out = mutate(
        ozone,
        o3_ppm=lambda d: d["o3_ppb"] / 1000,
        exceeds=lambda d: d["o3_ppm"] > 0.04,
        campaign="2024",
    )
    assert out["exceeds"].tolist() == [False, True, False, False, False]
    assert set(out["campaign"]) == {"2024"}
    assert "o3_ppm" not in ozone.columns


def test_arrange_is_stable_and_descending(ozone):
    """Test Arrange is stable and descending."""
    assert arrange(ozone, "day")["site"].tolist() == ["A", "B", "C", "A", "B"]
    out = arrange(ozone, "o3_ppb", descending=True)
    assert out["o3_ppb"].tolist()[:4] == [45.0, 35.0, 31.0, 28.0]
    assert list(out.index) == [0, 1, 2, 3, 4]


def test_summarize_by_group(ozone):
    """Test Summarize by group."""
    out = summarize(ozone, by="site", mean_o3=("o3_ppb", "mean"), n=("day", "count"))
    assert list(out.columns) == ["site", "mean_o3", "n"]
    assert out["site"].tolist() == ["A", "B", "C"]
    assert out["mean_o3"].tolist() == [33.0, 45.0, 28.0]
    assert out["n"].tolist() == [2, 2, 1]


def test_summarize_without_groups(ozone):
    """Test Summarize without groups."""
    out = summarize(ozone, max_o3=("o3_ppb", "max"), days=("day", "nunique"))
    assert out.to_dict("records") == [{"max_o3": 45.0, "days": 2}]


def test_summarize_requires_aggregation(ozone):
    """Test Summarize requires aggregation."""
    with pytest.raises(DataValidationError):
        summarize(ozone, by="site")
    with pytest.raises(MissingColumnError):
        summarize(ozone, by="region", n=("day", "count"))


def test_verbs_compose_with_pipe(ozone):
    """Test Verbs compose with pipe."""
    out = (
        ozone.pipe(filter_rows, "day == 1")
        .pipe(mutate, o3_ppm=lambda d: d["o3_ppb"] / 1000)
        .pipe(arrange, "o3_ppm")
        .pipe(select, "site", "o3_ppm")
    )
    assert out["site"].tolist() == ["C", "A", "B"]
