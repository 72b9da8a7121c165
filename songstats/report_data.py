from dataclasses import dataclass, fields
from typing import Dict, List, Sequence

import pandas as pd

from songstats.aggregator import aggregate
from songstats.binner import DEFAULT_BINS, binned_stats
from songstats.schema import PERCENT_FIELDS, QUALITY_DTYPE
from songstats.tables import DerivedTable

ID_FIELDS = ["track_name", "in_spotify_charts", "bpm", "key", "mode"]
MODE_QUALITIES = ["danceability_%", "energy_%", "valence_%"]


def melt_qualities(frame: pd.DataFrame, id_fields: Sequence[str] = ID_FIELDS) -> pd.DataFrame:
    """
    Reshape the seven percentage columns into (quality, value) rows.
    Each song keeps its seven rows together, in the original song order.
    """
    ids = [c for c in id_fields if c in frame.columns]
    df = frame[ids + PERCENT_FIELDS].copy()
    df["_song"] = range(len(df))
    long = df.melt(id_vars=ids + ["_song"], value_vars=PERCENT_FIELDS,
                   var_name="quality", value_name="value")
    long["_rank"] = long["quality"].map({f: i for i, f in enumerate(PERCENT_FIELDS)})
    long = long.sort_values(["_song", "_rank"], kind="mergesort")
    long["quality"] = long["quality"].str[:-2].astype(QUALITY_DTYPE)
    long["value"] = pd.to_numeric(long["value"], errors="coerce")
    return long.drop(columns=["_song", "_rank"]).reset_index(drop=True)


def top_songs(frame: pd.DataFrame, k: int) -> pd.DataFrame:
    """
    The k rows with the best (lowest) Spotify chart position. Each row is
    one song; rows sharing a track_name are not merged.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")
    return frame.sort_values("in_spotify_charts", kind="mergesort").head(k)


@dataclass(frozen=True)
class ReportTables:
    quality_by_chart_position: DerivedTable
    quality_by_bpm_bin: DerivedTable
    mode_averages: DerivedTable
    key_mode_counts: DerivedTable

    def as_dict(self) -> Dict[str, DerivedTable]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


class ReportDataBuilder:
    """Derive the four report tables from a cleaned song table."""

    QUESTIONS: List[str] = [f.name for f in fields(ReportTables)]

    def __init__(self, cleaned: pd.DataFrame, n_bins: int = DEFAULT_BINS, top_k: int = 50, q: float = 0.5):
        self.cleaned = cleaned
        self.n_bins = n_bins
        self.top_k = top_k
        self.q = q

    def quality_by_chart_position(self) -> DerivedTable:
        long = melt_qualities(top_songs(self.cleaned, self.top_k))
        return aggregate(long, "quality", "value", q=self.q, name="quality_by_chart_position")

    def quality_by_bpm_bin(self) -> DerivedTable:
        long = melt_qualities(self.cleaned)
        return binned_stats(long, "bpm", "quality", "value", n_bins=self.n_bins,
                            q=self.q, name="quality_by_bpm_bin")

    def mode_averages(self) -> DerivedTable:
        return aggregate(self.cleaned, "mode", MODE_QUALITIES, q=self.q, name="mode_averages")

    def key_mode_counts(self) -> DerivedTable:
        return aggregate(self.cleaned, ["key", "mode"], name="key_mode_counts")

    def build(self, progress=None) -> ReportTables:
        questions = progress(self.QUESTIONS) if progress else self.QUESTIONS
        return ReportTables(**{q: getattr(self, q)() for q in questions})
