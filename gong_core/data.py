from __future__ import annotations

import io
import logging
from dataclasses import asdict, dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from gong_core.filters import quarter_for_month
from gong_core.settings import get_settings

logger = logging.getLogger(__name__)

RECORD_COLUMNS = ["rep_name", "month", "metric", "value"]

SOURCE_COLUMNS = {
    "User Name": "rep_name",
    "Month": "month",
    "Metric": "metric",
    "Value": "value",
}

EXCLUDED_METRICS = {"Total Calls (Interaction)"}

# Exact-match relabels so the unit in the name matches the values.
METRIC_RENAMES = {
    "Longest Monologue (min)": "Longest Monologue (sec)",
    "Longest Interview (min)": "Longest Interview (sec)",
    "Total Call Time (min)": "Total Call Time (Avg min)",
    "Avg Call Duration (min)": "Avg Call Duration (Avg min)",
    "Call Time per Week (min)": "Call Time per Week (Avg min)",
}


@dataclass
class DataQuality:
    rows_read: int = 0
    dropped_missing_fields: int = 0
    dropped_excluded_metric: int = 0
    dropped_non_numeric: int = 0
    records: int = 0


@dataclass
class LoadResult:
    records: pd.DataFrame
    error: Optional[str] = None
    dq: DataQuality = field(default_factory=DataQuality)

    @property
    def ok(self) -> bool:
        return self.error is None


def empty_records() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "rep_name": pd.Series(dtype=object),
            "month": pd.Series(dtype=object),
            "metric": pd.Series(dtype=object),
            "value": pd.Series(dtype=float),
        }
    )


def drop_duplicate_columns(df: pd.DataFrame) -> pd.DataFrame:
    return df.loc[:, ~df.columns.duplicated()]


def numericize(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")
    return df


def coerce_str_safe(df: pd.DataFrame, cols: Iterable[str]) -> pd.DataFrame:
    for col in cols:
        if col in df.columns:
            series = df[col].astype("string").str.strip()
            series = series.replace({"": pd.NA})
            df[col] = series.astype(object).where(series.notna(), None)
    return df


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def normalize_records(raw: pd.DataFrame, dq: Optional[DataQuality] = None) -> pd.DataFrame:
    """Turn a raw CSV frame into the canonical record frame.

    Rows missing a rep, month or metric are dropped, the interaction call
    count is excluded, minute-based labels are renamed and rows whose value
    is not a finite number are discarded. Source order is preserved.
    """
    dq = dq if dq is not None else DataQuality()
    missing = [c for c in SOURCE_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"CSV is missing required columns: {', '.join(missing)}")

    # Source headers win over stray columns that already use a canonical name.
    raw = raw.drop(columns=[c for c in RECORD_COLUMNS if c in raw.columns])
    df = drop_duplicate_columns(raw.rename(columns=SOURCE_COLUMNS))[RECORD_COLUMNS].copy()
    dq.rows_read = int(len(df))

    df = coerce_str_safe(df, ["rep_name", "month", "metric"])
    before = len(df)
    df = df.dropna(subset=["rep_name", "month", "metric"]).copy()
    dq.dropped_missing_fields = int(before - len(df))

    before = len(df)
    df = df[~df["metric"].isin(EXCLUDED_METRICS)].copy()
    dq.dropped_excluded_metric = int(before - len(df))

    df["metric"] = df["metric"].map(lambda m: METRIC_RENAMES.get(m, m))

    df = numericize(df, ["value"])
    before = len(df)
    df = df[np.isfinite(df["value"].astype(float))].copy()
    dq.dropped_non_numeric = int(before - len(df))

    df["value"] = df["value"].astype(float)
    df = df.reset_index(drop=True)
    dq.records = int(len(df))
    return df


def read_records_csv(source: Union[str, Path, io.StringIO], dq: Optional[DataQuality] = None) -> pd.DataFrame:
    """Parse a CSV path or buffer and normalize it. Parse errors propagate."""
    raw = pd.read_csv(source, skip_blank_lines=True)
    return normalize_records(raw, dq)


def parse_records_text(text: str, dq: Optional[DataQuality] = None) -> pd.DataFrame:
    return read_records_csv(io.StringIO(text), dq)


def load_records(path: Union[str, Path]) -> LoadResult:
    """Load and normalize one CSV file. Never raises; failures are logged."""
    dq = DataQuality()
    try:
        records = read_records_csv(Path(path), dq)
    except (OSError, ValueError, pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        logger.exception("Error loading CSV %s", path)
        return LoadResult(records=empty_records(), error=f"{type(exc).__name__}: {exc}", dq=dq)
    logger.info("Loaded %d records from %s", len(records), Path(path).name)
    return LoadResult(records=records, dq=dq)


def file_signature(path: Path) -> Tuple[str, float]:
    return str(path), path.stat().st_mtime


@lru_cache(maxsize=4)
def _load_dashboard_data_cached(files_sig: Tuple[str, float]) -> Dict[str, object]:
    path = Path(files_sig[0])
    result = load_records(path)
    return {
        "files": [path.name],
        "records": result.records,
        "error": result.error,
        "dq": asdict(result.dq),
    }


def load_dashboard_data() -> Dict[str, object]:
    path = get_settings().data_path
    if not path.is_file():
        logger.error("Data file not found: %s", path)
        return {
            "files": [],
            "records": empty_records(),
            "error": f"Data file not found: {path.name}",
            "dq": asdict(DataQuality()),
        }
    return _load_dashboard_data_cached(file_signature(path))


def unique_quarters(records: pd.DataFrame) -> List[str]:
    if records.empty:
        return []
    quarters = records["month"].map(quarter_for_month).dropna()
    return sorted(set(quarters))


def filter_options(records: pd.DataFrame) -> Dict[str, List[str]]:
    if records.empty:
        return {"reps": [], "metrics": [], "months": [], "quarters": []}
    return {
        "reps": sorted(records["rep_name"].unique().tolist()),
        "metrics": sorted(records["metric"].unique().tolist()),
        "months": sorted(records["month"].unique().tolist()),
        "quarters": unique_quarters(records),
    }
