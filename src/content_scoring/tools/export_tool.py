"""Export tool - flatten stored scans into an Excel sheet."""

import logging
from pathlib import Path

import pandas as pd

from .storage_tool import load_records

logger = logging.getLogger(__name__)

# Bulky nested fields that do not fit a spreadsheet cell
DROPPED_COLUMNS = ("rejections",)


def scans_to_frame(records: list[dict]) -> pd.DataFrame:
    """One row per scan; nested score and counts become dotted columns (score.graaf.total)."""
    trimmed = [{k: v for k, v in rec.items() if k not in DROPPED_COLUMNS} for rec in records]
    df = pd.json_normalize(trimmed)
    for col in df.columns:
        if df[col].dtype == "object" and df[col].apply(lambda x: isinstance(x, list)).any():
            df[col] = df[col].apply(
                lambda x: ", ".join(str(v) for v in x) if isinstance(x, list) else x
            )
    return df


def jsonl_to_excel(jsonl_path: str | Path, excel_path: str | Path | None = None) -> Path:
    """
    Convert a JSONL (or JSON array) results file to Excel format.
    Returns the path written. Raises ValueError when there is nothing to export.
    """
    jsonl_file = Path(jsonl_path)
    if not jsonl_file.exists():
        raise FileNotFoundError(f"File not found: {jsonl_file}")
    excel_file = Path(excel_path) if excel_path else jsonl_file.with_suffix(".xlsx")

    records = load_records(str(jsonl_file))
    if not records:
        raise ValueError(f"No valid records found in {jsonl_file}")

    df = scans_to_frame(records)
    df.to_excel(excel_file, index=False, engine="openpyxl")
    logger.info("Converted %d records from %s to %s", len(records), jsonl_file.name, excel_file)
    return excel_file
