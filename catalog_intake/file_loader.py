"""
File loader utilities for uploaded product files.

Supports CSV/TSV/XLSX/XLSM/XLS with encoding fallbacks, delimiter sniffing
and sheet selection. Every cell is read as text so the pipeline sees exactly
what the source tool wrote.
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Any

import pandas as pd

from catalog_intake.logger import get_logger

logger = get_logger(__name__)

ALLOWED_SUFFIXES = (".csv", ".tsv", ".xlsx", ".xlsm", ".xls")
CSV_ENCODINGS = ["utf-8-sig", "utf-8", "latin-1", "cp1252"]
CSV_DELIMITERS = [",", ";", "\t", "|"]

# Keep cells verbatim: no dtype inference, empty cells stay ""
_TEXT_OPTIONS = {"dtype": str, "keep_default_na": False}


def _read_sample(path: Path, encoding: str, sample_size: int = 8192) -> str | None:
    try:
        with path.open("r", encoding=encoding) as handle:
            return handle.read(sample_size)
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug(f"Failed to read sample for {path} ({encoding}): {exc}")
        return None


def sniff_csv_delimiter(path: Path, encoding: str) -> str | None:
    sample = _read_sample(path, encoding)
    if not sample:
        return None
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters="".join(CSV_DELIMITERS))
        return dialect.delimiter
    except csv.Error:
        return None


def load_csv(
    path: Path,
    *,
    delimiter: str | None = None,
    encoding: str | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if delimiter is None and path.suffix.lower() == ".tsv":
        delimiter = "\t"

    encodings_to_try = [encoding] if encoding else CSV_ENCODINGS
    last_error: Exception | None = None
    for candidate in encodings_to_try:
        try:
            sep = delimiter or sniff_csv_delimiter(path, candidate) or ","
            return pd.read_csv(path, encoding=candidate, sep=sep, **_TEXT_OPTIONS, **kwargs)
        except pd.errors.EmptyDataError:
            logger.warning(f"Empty file: {path}")
            return pd.DataFrame()
        except (UnicodeDecodeError, pd.errors.ParserError) as exc:
            logger.debug(f"CSV parse failed for {path} ({candidate}): {exc}")
            last_error = exc
            continue
    raise ValueError(f"Failed to load CSV: {path}") from last_error


def load_excel(
    path: Path,
    *,
    sheet_name: str | int | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    suffix = path.suffix.lower()
    engine = "openpyxl" if suffix in (".xlsx", ".xlsm") else "xlrd"
    # First sheet unless one is named
    sheet = 0 if sheet_name is None else sheet_name
    return pd.read_excel(path, engine=engine, sheet_name=sheet, **_TEXT_OPTIONS, **kwargs)


def load_file(
    path: Path | str,
    *,
    delimiter: str | None = None,
    sheet_name: str | int | None = None,
    encoding: str | None = None,
    **kwargs: Any,
) -> pd.DataFrame:
    """
    Load an uploaded file into an all-text DataFrame.

    Raises:
        FileNotFoundError: If the path does not exist.
        ValueError: If the suffix is unsupported or the CSV cannot be decoded.
    """
    file_path = Path(path)
    suffix = file_path.suffix.lower()

    if suffix in (".csv", ".tsv"):
        return load_csv(file_path, delimiter=delimiter, encoding=encoding, **kwargs)
    if suffix in (".xlsx", ".xls", ".xlsm"):
        return load_excel(file_path, sheet_name=sheet_name, **kwargs)

    raise ValueError(f"Unsupported file format: {suffix}")


def frame_to_table(df: pd.DataFrame) -> tuple[list[str], list[dict[str, str]]]:
    """
    Split a DataFrame into (headers, rows) for the pipeline.

    Every row dict carries the full header key set; missing cells are "".
    """
    headers = [str(col) for col in df.columns]
    if df.empty:
        return headers, []
    text = df.fillna("").astype(str)
    text.columns = headers
    rows = text.to_dict(orient="records")
    return headers, rows


def read_table(
    path: Path | str,
    *,
    sheet_name: str | int | None = None,
    **kwargs: Any,
) -> tuple[list[str], list[dict[str, str]]]:
    """Load a file and return its headers and rows."""
    df = load_file(path, sheet_name=sheet_name, **kwargs)
    headers, rows = frame_to_table(df)
    logger.info(f"Read {Path(path).name}: {len(rows)} rows x {len(headers)} columns")
    return headers, rows
