from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import pandas as pd

# Canonical orders double as the sort order of every grouped table.
KEYS = [
    "A", "A#", "Ab", "B", "B#", "Bb", "C", "C#", "Cb", "D", "D#",
    "Db", "E", "E#", "Eb", "F", "F#", "Fb", "G", "G#", "Gb"
]
MODES = ["Major", "Minor"]

DATE_FIELDS = ["released_year", "released_month", "released_day"]
COUNT_FIELDS = [
    "in_spotify_playlists", "in_spotify_charts",
    "in_apple_playlists", "in_apple_charts", "shazam_charts"
]
PERCENT_FIELDS = [
    "danceability_%", "valence_%", "energy_%", "acousticness_%",
    "instrumentalness_%", "liveness_%", "speechiness_%"
]
QUALITIES = [f[:-2] for f in PERCENT_FIELDS]

KEY_DTYPE = pd.CategoricalDtype(KEYS, ordered=True)
MODE_DTYPE = pd.CategoricalDtype(MODES, ordered=True)
QUALITY_DTYPE = pd.CategoricalDtype(QUALITIES, ordered=True)


class SchemaError(KeyError):
    """Required fields are absent from the input table."""

    def __init__(self, missing: List[str]):
        self.missing = list(missing)
        super().__init__(f"missing required field(s): {', '.join(self.missing)}")

    def __str__(self):
        return self.args[0]


def _number(x) -> Optional[float]:
    if isinstance(x, bool):
        return None
    try:
        x = float(x)
    except (TypeError, ValueError):
        return None
    return None if pd.isna(x) else x


def _is_int(x) -> bool:
    x = _number(x)
    return x is not None and x.is_integer()


def _non_negative_int(x) -> bool:
    return _is_int(x) and float(x) >= 0


def _count(x) -> bool:
    if isinstance(x, str):
        x = x.replace(",", "")
    return _non_negative_int(x)


def _percentage(x) -> bool:
    return _is_int(x) and 0 <= float(x) <= 100


def _positive_int(x) -> bool:
    return _is_int(x) and float(x) > 0


def _non_negative_number(x) -> bool:
    x = _number(x)
    return x is not None and x >= 0


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: str
    check: Callable[[object], bool]
    nullable: bool = False

    def is_valid(self, value) -> bool:
        if is_missing_value(value):
            return self.nullable
        return self.check(value)


def _build_schema():
    specs = [FieldSpec("track_name", "identifier", lambda x: isinstance(x, str))]
    specs += [FieldSpec(f, "date_part", _is_int) for f in DATE_FIELDS]
    specs += [
        FieldSpec(f, "count", _count, nullable=(f == "shazam_charts"))
        for f in COUNT_FIELDS
    ]
    specs += [
        FieldSpec("streams", "text_number", _non_negative_number),
        FieldSpec("bpm", "tempo", _positive_int),
        FieldSpec("key", "enum", lambda x: x in KEYS),
        FieldSpec("mode", "enum", lambda x: x in MODES),
    ]
    specs += [FieldSpec(f, "percentage", _percentage) for f in PERCENT_FIELDS]
    return {s.name: s for s in specs}


SCHEMA = _build_schema()
REQUIRED_FIELDS = list(SCHEMA)

_ORDERS = {"key": KEYS, "mode": MODES, "quality": QUALITIES}


def canonical_order(field: str) -> Optional[List[str]]:
    return _ORDERS.get(field)


def missing_fields(columns: Iterable[str], required: Iterable[str] = None) -> List[str]:
    present = set(columns)
    return [f for f in (required or REQUIRED_FIELDS) if f not in present]


def require_fields(columns: Iterable[str], required: Iterable[str] = None) -> None:
    missing = missing_fields(columns, required)
    if missing:
        raise SchemaError(missing)


def is_missing_value(x) -> bool:
    if isinstance(x, str):
        return not x.strip()
    return bool(pd.isna(x))


def is_missing(series: pd.Series) -> pd.Series:
    """NA values and blank strings both count as missing."""
    blank = series.astype(object).map(lambda x: isinstance(x, str) and not x.strip())
    return series.isna() | blank.astype(bool)


if __name__ == "__main__":
    print("Schema preview:")
    for spec in SCHEMA.values():
        print(f"  {spec.name:<22} {spec.kind:<12} nullable={spec.nullable}")
