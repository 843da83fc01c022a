"""
Reading and writing corpus tables.

JSON files may hold a bare list of records or ``{"items": [...]}`` with
optional metadata; CSV and Parquet go through pandas (Parquet via pyarrow).
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

FORMATS = ("json", "csv", "parquet")


def infer_format(path: str | Path) -> str:
    """Infer the table format from a file extension.

    Raises:
        ValueError: For unsupported extensions.
    """
    suffix = Path(path).suffix.lower().lstrip(".")
    if suffix == "pq":
        suffix = "parquet"
    if suffix not in FORMATS:
        raise ValueError(f"Unsupported table format '{suffix}' for {path}")
    return suffix


def read_table(path: str | Path) -> pd.DataFrame:
    """Load a table from JSON, CSV or Parquet.

    Args:
        path: Input file.

    Returns:
        DataFrame with one row per record.
    """
    path = Path(path)
    fmt = infer_format(path)

    if fmt == "json":
        with open(path) as f:
            data = json.load(f)
        items = data.get("items", data) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise ValueError(f"JSON table {path} must be a list or contain an 'items' list")
        frame = pd.DataFrame(items)
    elif fmt == "csv":
        frame = pd.read_csv(path)
    else:
        frame = pd.read_parquet(path)

    logger.info(f"Loaded {len(frame)} rows from {path}")
    return frame


def _flatten_nested(frame: pd.DataFrame) -> pd.DataFrame:
    """JSON-encode list and dict cells so Parquet gets flat columns."""
    flat = frame.copy()
    for column in flat.columns:
        if flat[column].map(lambda v: isinstance(v, (list, dict, set, frozenset))).any():
            flat[column] = flat[column].map(
                lambda v: json.dumps(sorted(v) if isinstance(v, (set, frozenset)) else v)
                if isinstance(v, (list, dict, set, frozenset)) else v
            )
    return flat


def write_table(
    frame: pd.DataFrame,
    path: str | Path,
    format: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Path:
    """Save a table as JSON, CSV or Parquet.

    Args:
        frame: Table to write.
        path: Output file. Parent directories are created.
        format: Output format; inferred from the extension if None.
        metadata: Extra metadata stored alongside JSON output.

    Returns:
        The output path.
    """
    path = Path(path)
    fmt = format or infer_format(path)
    if fmt not in FORMATS:
        raise ValueError(f"Unsupported table format '{fmt}'")
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "json":
        records = json.loads(frame.to_json(orient="records", date_format="iso"))
        with open(path, "w") as f:
            json.dump(
                {
                    "metadata": {
                        **(metadata or {}),
                        "rows": len(frame),
                        "timestamp": datetime.now().isoformat(),
                    },
                    "items": records,
                },
                f,
                indent=2,
                default=str,
            )
    elif fmt == "csv":
        frame.to_csv(path, index=False)
    else:
        _flatten_nested(frame).to_parquet(path, compression="snappy")

    logger.info(f"Wrote {len(frame)} rows to {path}")
    return path


def write_report(report: dict[str, Any], path: str | Path) -> Path:
    """Save a validation or reliability report as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(report, f, indent=2, default=str)
    logger.info(f"Wrote report to {path}")
    return path
