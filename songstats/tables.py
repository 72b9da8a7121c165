from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Tuple

import numpy as np
import pandas as pd


def to_scalar(x):
    """Reduce a cell to a str tag, int or float."""
    if isinstance(x, (bool, np.bool_)):
        return int(x)
    if isinstance(x, (int, np.integer)):
        return int(x)
    if isinstance(x, (float, np.floating)):
        return float(x)
    if x is None or x is pd.NA or x is pd.NaT:
        return float("nan")
    return str(x)


@dataclass(frozen=True)
class DerivedTable:
    name: str
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[Any, ...], ...]

    @classmethod
    def from_frame(cls, name: str, frame: pd.DataFrame) -> "DerivedTable":
        rows = tuple(
            tuple(to_scalar(v) for v in row)
            for row in frame.itertuples(index=False, name=None)
        )
        return cls(name=name, columns=tuple(str(c) for c in frame.columns), rows=rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Tuple[Any, ...]]:
        return iter(self.rows)

    def column(self, col: str) -> List[Any]:
        i = self.columns.index(col)
        return [row[i] for row in self.rows]

    def to_records(self) -> List[Dict[str, Any]]:
        return [dict(zip(self.columns, row)) for row in self.rows]

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(list(self.rows), columns=list(self.columns))
