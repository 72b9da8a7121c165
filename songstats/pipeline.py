import sys
from dataclasses import dataclass

import pandas as pd
from tqdm import tqdm

from songstats.cleaner import CleanResult, clean
from songstats.config import DATA_ENCODING, DATA_PATH, N_BINS, QUANTILE, TOP_K
from songstats.report_data import ReportDataBuilder, ReportTables
from songstats.schema import SchemaError
from songstats.validator import ValidationReport, validate

SOURCE_RENAMES = {"in_shazam_charts": "shazam_charts"}


def load_raw(filepath: str, encoding: str = DATA_ENCODING) -> pd.DataFrame:
    df = pd.read_csv(filepath, encoding=encoding, dtype={"streams": str, "key": str, "mode": str})
    return df.rename(columns=SOURCE_RENAMES)


@dataclass(frozen=True)
class PipelineResult:
    report: ValidationReport
    cleaned: CleanResult
    tables: ReportTables


def run(
    raw: pd.DataFrame,
    n_bins: int = N_BINS,
    top_k: int = TOP_K,
    q: float = QUANTILE,
    verbose: bool = False,
) -> PipelineResult:
    report = validate(raw, verbose=verbose)
    cleaned = clean(raw, verbose=verbose)
    builder = ReportDataBuilder(cleaned.frame, n_bins=n_bins, top_k=top_k, q=q)
    tables = builder.build(progress=tqdm if verbose else None)
    return PipelineResult(report=report, cleaned=cleaned, tables=tables)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    filepath = argv[0] if argv else DATA_PATH

    print(f"Loading raw data from '{filepath}'...")
    raw = load_raw(filepath)

    try:
        result = run(raw, verbose=True)
    except SchemaError as e:
        print(f"Error: {e}")
        return 1

    print(f"\nCleaned rows: {len(result.cleaned.frame):,}")
    for name, table in result.tables.as_dict().items():
        print(f"\n--- {name} ({len(table)} rows) ---")
        print(table.to_frame().head(10).to_string(index=False))

    return 0


if __name__ == "__main__":
    sys.exit(main())
