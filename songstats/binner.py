from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
import pandas as pd

from songstats.aggregator import aggregate, stat_columns
from songstats.tables import DerivedTable

DEFAULT_BINS = 20


def _fmt(x: float) -> str:
    text = f"{x:.15g}"
    return text if float(text) == x else repr(float(x))


@dataclass(frozen=True)
class BinInterval:
    index: int
    left: float
    right: float
    closed: str = "right"   # "both" for the first bin

    @property
    def label(self) -> str:
        opener = "[" if self.closed == "both" else "("
        return f"{opener}{_fmt(self.left)}, {_fmt(self.right)}]"

    @property
    def width(self) -> float:
        return self.right - self.left

    def contains(self, value: float) -> bool:
        if self.closed == "both":
            return self.left <= value <= self.right
        return self.left < value <= self.right


@dataclass(frozen=True)
class Binning:
    field: str
    intervals: Tuple[BinInterval, ...]
    assignments: pd.Series

    @property
    def labels(self):
        return [b.label for b in self.intervals]


def _as_floats(values) -> np.ndarray:
    return pd.to_numeric(pd.Series(values), errors="coerce").to_numpy(dtype="float64", na_value=np.nan)


def make_bins(values, n_bins: int = DEFAULT_BINS) -> Tuple[BinInterval, ...]:
    """Equal-width bins spanning [min, max] of the finite values."""
    if n_bins < 1:
        raise ValueError(f"n_bins must be at least 1, got {n_bins}")
    arr = _as_floats(values)
    arr = arr[np.isfinite(arr)]
    if arr.size == 0:
        raise ValueError("cannot bin a field with no numeric values")

    lo, hi = float(arr.min()), float(arr.max())
    if lo == hi:
        return (BinInterval(0, lo, hi, "both"),)

    edges = np.linspace(lo, hi, n_bins + 1)
    edges[0], edges[-1] = lo, hi
    # edges closer than float spacing collapse into one
    edges = np.unique(edges)
    return tuple(
        BinInterval(i, float(edges[i]), float(edges[i + 1]), "both" if i == 0 else "right")
        for i in range(len(edges) - 1)
    )


def assign_bins(values, intervals: Sequence[BinInterval]) -> np.ndarray:
    """Bin index per value; -1 where the value is missing or outside the bins."""
    arr = _as_floats(values)
    uppers = np.array([b.right for b in intervals])
    lo, hi = intervals[0].left, intervals[-1].right

    idx = np.searchsorted(uppers, arr, side="left")
    idx = np.minimum(idx, len(intervals) - 1)
    outside = ~np.isfinite(arr) | (arr < lo) | (arr > hi)
    idx[outside] = -1
    return idx


def bin_field(frame: pd.DataFrame, field: str, n_bins: int = DEFAULT_BINS) -> Binning:
    if field not in frame.columns:
        raise KeyError(f"unknown field: {field}")
    intervals = make_bins(frame[field], n_bins)
    idx = assign_bins(frame[field], intervals)
    labels = [b.label for b in intervals]
    codes = pd.Categorical.from_codes(idx, categories=labels, ordered=True)
    assignments = pd.Series(codes, index=frame.index, name=f"{field}_bin")
    return Binning(field=field, intervals=intervals, assignments=assignments)


def binned_stats(
    frame: pd.DataFrame,
    field: str,
    by: Union[str, Sequence[str]],
    target: str,
    n_bins: int = DEFAULT_BINS,
    q: float = 0.5,
    name: str = None,
) -> DerivedTable:
    """Join per-category statistics of target onto the bins of field."""
    keys = [by] if isinstance(by, str) else list(by)
    name = name or f"{target}_by_{field}_bin"
    if field not in frame.columns:
        raise KeyError(f"unknown field: {field}")
    if not np.isfinite(_as_floats(frame[field])).any():
        return DerivedTable(name, tuple([f"{field}_bin"] + keys + stat_columns([target], q)), ())

    binning = bin_field(frame, field, n_bins)
    df = frame.assign(**{binning.assignments.name: binning.assignments})
    return aggregate(df, [binning.assignments.name] + keys, target, q=q, name=name)


if __name__ == "__main__":
    b = bin_field(pd.DataFrame({"bpm": [0, 50, 100]}), "bpm", n_bins=2)
    print(b.labels)
    print(b.assignments.tolist())
