from dataclasses import asdict, dataclass
from typing import Callable, Dict, List, Optional

import numpy as np
import pandas as pd

from songstats.schema import (
    DATE_FIELDS, KEY_DTYPE, KEYS, MODE_DTYPE, MODES, REQUIRED_FIELDS,
    SCHEMA, is_missing, require_fields
)

CLEAN_FIELDS = [f for f in REQUIRED_FIELDS if f not in DATE_FIELDS] + ["release_date"]

_KEY_LOOKUP = {k: k for k in KEYS}
_MODE_LOOKUP = {m.lower(): m for m in MODES}


@dataclass(frozen=True)
class DropCounts:
    missing_key: int = 0
    bad_date: int = 0
    bad_enum: int = 0
    bad_streams: int = 0

    @property
    def total(self) -> int:
        return self.missing_key + self.bad_date + self.bad_enum + self.bad_streams

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)

    def summary(self) -> List[str]:
        reasons = {
            "missing_key": "key is missing",
            "bad_date": "release year/month/day is not a calendar date",
            "bad_enum": "key or mode is not a recognised value",
            "bad_streams": "streams is not a non-negative number",
        }
        return [f"{n:,} row(s) dropped: {reasons[step]}" for step, n in self.as_dict().items()]


@dataclass(frozen=True)
class CleanResult:
    frame: pd.DataFrame
    dropped: DropCounts


def _integral(x) -> Optional[int]:
    try:
        x = float(x)
    except (TypeError, ValueError):
        return None
    if np.isnan(x) or not x.is_integer():
        return None
    return int(x)


def synthesize_date(year, month, day):
    """Strict year/month/day -> Timestamp, NaT when the triple is not a calendar date."""
    parts = [_integral(p) for p in (year, month, day)]
    if any(p is None for p in parts):
        return pd.NaT
    try:
        stamp = pd.Timestamp(*parts)
    except (ValueError, OverflowError):
        return pd.NaT
    if not pd.Timestamp.min <= stamp <= pd.Timestamp.max:
        return pd.NaT
    return stamp


def normalize_key(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip().replace("♯", "#").replace("♭", "b")
    if not value:
        return None
    return _KEY_LOOKUP.get(value[0].upper() + value[1:])


def normalize_mode(value) -> Optional[str]:
    if not isinstance(value, str):
        return None
    return _MODE_LOOKUP.get(value.strip().lower())


def _to_int(series: pd.Series) -> pd.Series:
    """Nullable integers, or Float64 when any value is fractional."""
    numbers = pd.to_numeric(series, errors="coerce").astype("Float64")
    integral = numbers.isna() | (numbers % 1 == 0)
    if not integral.all():
        return numbers
    return numbers.astype("Int64")


def _to_count(series: pd.Series) -> pd.Series:
    text = series.map(lambda x: x.replace(",", "").strip() if isinstance(x, str) else x)
    return _to_int(text)


KIND_TRANSFORMS: Dict[str, Callable[[pd.Series], pd.Series]] = {
    "count": _to_count,
    "percentage": _to_int,
    "tempo": _to_int,
}

FIELD_TRANSFORMS = {
    name: KIND_TRANSFORMS[spec.kind] for name, spec in SCHEMA.items() if spec.kind in KIND_TRANSFORMS
}


def transform_fields(df: pd.DataFrame, transforms: Dict[str, Callable] = FIELD_TRANSFORMS) -> pd.DataFrame:
    """Apply each named per-field transform to the matching columns of a copy of df."""
    df = df.copy()
    for col, func in transforms.items():
        if col in df.columns:
            df[col] = func(df[col])
    return df


def _drop_missing_key(df):
    bad = is_missing(df["key"])
    return df.loc[~bad], int(bad.sum())


def _build_release_date(df):
    if all(f in df.columns for f in DATE_FIELDS):
        dates = [synthesize_date(y, m, d) for y, m, d in zip(*(df[f] for f in DATE_FIELDS))]
        dates = pd.Series(dates, index=df.index, dtype="datetime64[ns]")
        df = df.drop(columns=DATE_FIELDS).assign(release_date=dates)
    else:
        df = df.assign(release_date=pd.to_datetime(df["release_date"], errors="coerce"))
    bad = df["release_date"].isna()
    return df.loc[~bad], int(bad.sum())


def _encode_categories(df):
    keys = df["key"].astype(object).map(normalize_key)
    modes = df["mode"].astype(object).map(normalize_mode)
    bad = keys.isna() | modes.isna()
    df = df.assign(
        key=keys.astype(object).astype(KEY_DTYPE),
        mode=modes.astype(object).astype(MODE_DTYPE),
    )
    return df.loc[~bad], int(bad.sum())


def _coerce_streams(df):
    text = df["streams"].map(lambda x: x.strip() if isinstance(x, str) else x)
    streams = pd.to_numeric(text, errors="coerce").astype("float64")
    bad = ~np.isfinite(streams) | (streams < 0)
    df = df.assign(streams=streams)
    return df.loc[~bad], int(bad.sum())


def clean(raw: pd.DataFrame, verbose: bool = False) -> CleanResult:
    """
    Apply the missing-data and type-coercion policy, in order:
    missing key, release date, key/mode encoding, streams.
    Each step only sees rows that survived the previous one.
    """
    if "release_date" in raw.columns and not any(f in raw.columns for f in DATE_FIELDS):
        require_fields(raw.columns, CLEAN_FIELDS)
    else:
        require_fields(raw.columns)

    df = raw.copy()
    df, missing_key = _drop_missing_key(df)
    df, bad_date = _build_release_date(df)
    df, bad_enum = _encode_categories(df)
    df, bad_streams = _coerce_streams(df)
    df = transform_fields(df)

    dropped = DropCounts(missing_key, bad_date, bad_enum, bad_streams)

    if verbose:
        print(f"Cleaning: {len(raw):,} -> {len(df):,} rows", flush=True)
        for line in dropped.summary():
            print("  " + line, flush=True)

    return CleanResult(frame=df, dropped=dropped)


if __name__ == "__main__":
    from songstats.config import DATA_PATH
    from songstats.pipeline import load_raw

    result = clean(load_raw(DATA_PATH), verbose=True)
    print("Cleaned data:")
    print(result.frame.shape)
    print(f"Total tracks: {len(result.frame)}")
