import pandas as pd
import pytest

from songstats.binner import assign_bins, bin_field, binned_stats, make_bins


def test_two_bins_example():
    binning = bin_field(pd.DataFrame({"bpm": [0, 50, 100]}), "bpm", n_bins=2)
    assert binning.labels == ["[0, 50]", "(50, 100]"]
    assert binning.assignments.tolist() == ["[0, 50]", "[0, 50]", "(50, 100]"]


def test_bins_span_range_without_gaps():
    values = [64, 65.5, 99, 120, 171, 206]
    bins = make_bins(values, 20)
    assert len(bins) == 20
    assert bins[0].left == 64 and bins[-1].right == 206
    for prev, nxt in zip(bins, bins[1:]):
        assert prev.right == nxt.left
    widths = [b.width for b in bins]
    assert max(widths) == pytest.approx(min(widths))


def test_every_value_lands_in_exactly_one_bin():
    values = [64, 65.5, 99, 120, 171, 206, 135.0]
    bins = make_bins(values, 20)
    idx = assign_bins(values, bins)
    for v, i in zip(values, idx):
        assert [b.index for b in bins if b.contains(v)] == [i]


def test_constant_field_collapses_to_one_bin():
    binning = bin_field(pd.DataFrame({"bpm": [120, 120, 120]}), "bpm")
    assert len(binning.intervals) == 1
    assert binning.intervals[0].width == 0
    assert binning.assignments.tolist() == ["[120, 120]"] * 3


def test_missing_values_get_no_bin():
    binning = bin_field(pd.DataFrame({"x": [1.0, None, 3.0]}), "x", n_bins=2)
    assert pd.isna(binning.assignments.iloc[1])


def test_invalid_inputs():
    with pytest.raises(ValueError):
        make_bins([1, 2], 0)
    with pytest.raises(ValueError):
        make_bins([None, None])
    with pytest.raises(KeyError):
        bin_field(pd.DataFrame({"x": [1]}), "y")


def test_binned_stats_joins_categories_onto_bins():
    df = pd.DataFrame({
        "bpm": [0, 40, 60, 100],
        "mode": ["Minor", "Major", "Major", "Major"],
        "energy_%": [10, 20, 30, 50],
    })
    table = binned_stats(df, "bpm", "mode", "energy_%", n_bins=2)
    assert table.columns == ("bpm_bin", "mode", "mean", "median", "count")
    assert table.rows == (
        ("[0, 50]", "Major", 20.0, 20.0, 1),
        ("[0, 50]", "Minor", 10.0, 10.0, 1),
        ("(50, 100]", "Major", 40.0, 40.0, 2),
    )


def test_close_edges_get_distinct_labels():
    binning = bin_field(pd.DataFrame({"streams": [1000000.0, 1000001.0]}), "streams")
    assert len(binning.intervals) == 20
    assert len(set(binning.labels)) == 20
    assert binning.labels[0].startswith("[1000000, 1000000.05")
    assert binning.assignments.tolist() == [binning.labels[0], binning.labels[-1]]


def test_edges_below_float_spacing_collapse():
    bins = make_bins([1.0, 1.0 + 2 ** -52], 20)
    assert 1 <= len(bins) < 20
    assert bins[0].left == 1.0 and bins[-1].right == 1.0 + 2 ** -52


def test_binned_stats_without_numeric_values_is_empty():
    df = pd.DataFrame({"bpm": [None, None], "mode": ["Major", "Minor"], "energy_%": [1, 2]})
    table = binned_stats(df, "bpm", "mode", "energy_%")
    assert len(table) == 0
    assert table.columns == ("bpm_bin", "mode", "mean", "median", "count")
