from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from songstats.schema import PERCENT_FIELDS, SCHEMA, is_missing, missing_fields


@dataclass(frozen=True)
class ValidationReport:
    n_rows: int
    incomplete_rows: int
    out_of_range_rows: int
    fields_with_missing: List[str] = field(default_factory=list)
    missing_counts: Dict[str, int] = field(default_factory=dict)
    absent_fields: List[str] = field(default_factory=list)
    invalid_counts: Dict[str, int] = field(default_factory=dict)

    def summary(self) -> List[str]:
        lines = [
            f"Rows: {self.n_rows:,}",
            f"Rows with any missing value: {self.incomplete_rows:,}",
            f"Rows with a percentage that is not an integer in [0, 100]: {self.out_of_range_rows:,}",
        ]
        if self.fields_with_missing:
            counts = ", ".join(f"{f} ({self.missing_counts[f]})" for f in self.fields_with_missing)
            lines.append(f"Fields with missing values: {counts}")
        else:
            lines.append("Fields with missing values: none")
        if self.invalid_counts:
            counts = ", ".join(f"{f} ({n})" for f, n in self.invalid_counts.items())
            lines.append(f"Fields with invalid values: {counts}")
        if self.absent_fields:
            lines.append(f"Absent required fields: {', '.join(self.absent_fields)}")
        return lines


def _invalid(values: pd.Series, missing: pd.Series, name: str) -> pd.Series:
    """Present values failing the field's schema predicate."""
    check = SCHEMA[name].check
    passes = values.astype(object).map(lambda x: bool(check(x))).astype(bool)
    return ~missing & ~passes


def validate(raw: pd.DataFrame, verbose: bool = False) -> ValidationReport:
    """
    Scan raw records and report quality findings. Findings are advisory:
    nothing is dropped or corrected here.
    """
    missing = pd.DataFrame({c: is_missing(raw[c]) for c in raw.columns}, index=raw.index)
    per_field = missing.sum()
    fields_with_missing = [str(c) for c in raw.columns if per_field.get(c, 0) > 0]

    invalid = pd.DataFrame(
        {f: _invalid(raw[f], missing[f], f) for f in SCHEMA if f in raw.columns},
        index=raw.index,
    )
    invalid_counts = {f: int(n) for f, n in invalid.sum().items() if n > 0}

    present = [f for f in PERCENT_FIELDS if f in invalid.columns]
    out_of_range = invalid[present].any(axis=1)

    report = ValidationReport(
        n_rows=len(raw),
        incomplete_rows=int(missing.any(axis=1).sum()),
        out_of_range_rows=int(out_of_range.sum()),
        fields_with_missing=fields_with_missing,
        missing_counts={f: int(per_field[f]) for f in fields_with_missing},
        absent_fields=missing_fields(raw.columns),
        invalid_counts=invalid_counts,
    )

    if verbose:
        print("Validation report:", flush=True)
        for line in report.summary():
            print("  " + line, flush=True)

    return report
