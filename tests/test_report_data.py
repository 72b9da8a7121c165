from dataclasses import FrozenInstanceError

import pytest

from songstats.cleaner import clean
from songstats.report_data import ReportDataBuilder, melt_qualities, top_songs
from songstats.schema import QUALITIES


@pytest.fixture
def cleaned(raw_songs):
    return clean(raw_songs).frame


def test_melt_keeps_songs_contiguous(cleaned):
    long = melt_qualities(cleaned)
    assert len(long) == 7 * len(cleaned)
    assert long["track_name"].tolist() == [n for n in ["A", "B", "C"] for _ in range(7)]
    assert long["quality"].tolist()[:7] == QUALITIES
    assert long.loc[0, "value"] == 60


def test_top_songs_by_chart_position(cleaned):
    assert top_songs(cleaned, 2)["track_name"].tolist() == ["B", "C"]
    assert len(top_songs(cleaned, 10)) == 3
    with pytest.raises(ValueError):
        top_songs(cleaned, -1)


def test_build_returns_four_tables(cleaned):
    tables = ReportDataBuilder(cleaned, n_bins=2, top_k=2).build()
    assert list(tables.as_dict()) == [
        "quality_by_chart_position", "quality_by_bpm_bin", "mode_averages", "key_mode_counts"
    ]

    chart = tables.quality_by_chart_position.to_frame().set_index("quality")
    assert chart.loc["danceability", "mean"] == pytest.approx(75.0)
    assert chart.loc["danceability", "count"] == 2

    modes = tables.mode_averages
    assert modes.columns[0] == "mode"
    assert modes.column("mode") == ["Major", "Minor"]
    assert modes.column("danceability_%_mean") == [75.0, 60.0]

    counts = tables.key_mode_counts
    assert counts.rows == (("C#", "Major", 2), ("G", "Minor", 1))

    bpm = tables.quality_by_bpm_bin
    assert bpm.columns[:2] == ("bpm_bin", "quality")
    assert sum(bpm.column("count")) == 7 * 3


def test_tables_are_snapshots(cleaned):
    tables = ReportDataBuilder(cleaned, n_bins=2, top_k=2).build()
    cleaned.loc[:, "bpm"] = 1
    assert tables.key_mode_counts.rows == (("C#", "Major", 2), ("G", "Minor", 1))
    with pytest.raises(FrozenInstanceError):
        tables.key_mode_counts.rows = ()


def test_build_accepts_progress_wrapper(cleaned):
    seen = []

    def progress(items):
        seen.extend(items)
        return items

    ReportDataBuilder(cleaned, n_bins=2).build(progress=progress)
    assert seen == ReportDataBuilder.QUESTIONS
