from typing import List, Optional, Sequence, Union

import pandas as pd

from songstats.schema import canonical_order
from songstats.tables import DerivedTable


def quantile_label(q: float) -> str:
    if q == 0.5:
        return "median"
    return f"q{q * 100:g}"


def stat_columns(targets: Sequence[str], q: float = 0.5) -> List[str]:
    """Names of the statistic columns aggregate() emits for these targets."""
    label = quantile_label(q)
    cols = []
    for col in targets:
        prefix = "" if len(targets) == 1 else f"{col}_"
        cols += [f"{prefix}mean", f"{prefix}{label}"]
    return cols + ["count"]


def _as_list(fields: Union[str, Sequence[str], None]) -> List[str]:
    if fields is None:
        return []
    if isinstance(fields, str):
        return [fields]
    return list(fields)


def _ordered_key(series: pd.Series) -> pd.Series:
    """Give a group key an explicit, input-order independent sort order."""
    order = canonical_order(str(series.name))
    if order is not None and not isinstance(series.dtype, pd.CategoricalDtype):
        return series.astype(object).astype(pd.CategoricalDtype(order, ordered=True))
    if isinstance(series.dtype, pd.CategoricalDtype):
        return series
    values = sorted(series.dropna().unique())
    return series.astype(pd.CategoricalDtype(values, ordered=True))


def aggregate(
    frame: pd.DataFrame,
    by: Union[str, Sequence[str]],
    targets: Union[str, Sequence[str], None] = (),
    q: float = 0.5,
    name: Optional[str] = None,
) -> DerivedTable:
    """
    Per-group mean, q-quantile (linear interpolation) and row count.

    Groups are ordered by the canonical order of their keys. Category
    combinations with no rows are left out of the result.
    """
    keys = _as_list(by)
    values = _as_list(targets)
    if not keys:
        raise ValueError("aggregate needs at least one grouping field")
    unknown = [c for c in keys + values if c not in frame.columns]
    if unknown:
        raise KeyError(f"unknown field(s): {', '.join(unknown)}")
    if not 0 <= q <= 1:
        raise ValueError(f"quantile must be within [0, 1], got {q}")

    df = frame[keys + values].copy()
    for col in keys:
        df[col] = _ordered_key(df[col])
    for col in values:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype("float64")

    name = name or "_by_".join(["stats"] + keys)
    if df[keys].dropna().empty:
        return DerivedTable(name, tuple(keys + stat_columns(values, q)), ())

    grouped = df.groupby(keys, observed=True, sort=True)
    out = grouped.size().rename("count").to_frame()

    names = iter(stat_columns(values, q))
    stats = []
    for col in values:
        stats.append(grouped[col].mean().rename(next(names)))
        stats.append(grouped[col].quantile(q, interpolation="linear").rename(next(names)))
    if stats:
        out = pd.concat(stats + [out["count"]], axis=1)

    out = out.reset_index()
    return DerivedTable.from_frame(name, out)


if __name__ == "__main__":
    df = pd.DataFrame({
        "mode": ["Minor", "Major", "Major"],
        "danceability_%": [60, 70, 80],
    })
    table = aggregate(df, "mode", "danceability_%")
    print(table.to_frame())
