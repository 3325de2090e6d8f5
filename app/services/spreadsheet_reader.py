"""
Spreadsheet parsing for bulk imports.
"""
import csv
import logging
from io import BytesIO, StringIO
from typing import Any, List

import pandas as pd
from pandas.errors import EmptyDataError

logger = logging.getLogger("app.import")

CSV_EXTENSIONS = (".csv",)


class SpreadsheetReadError(Exception):
    """Raised when an uploaded file cannot be parsed as a spreadsheet."""


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    elif pd.isna(value):
        return ""
    return str(value)


def _read_csv(content: bytes) -> pd.DataFrame:
    """
    Read a CSV whose lines may carry different numbers of fields.

    Columns are sized to the widest line so short lines are padded with "".
    Fully blank lines are dropped, as on the Excel path.
    """
    text = content.decode("utf-8-sig")
    width = max((len(record) for record in csv.reader(StringIO(text))), default=0)
    if width == 0:
        raise EmptyDataError("No columns to parse from file")

    return pd.read_csv(
        StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
    )


def read_rows(content: bytes, file_name: str) -> List[List[str]]:
    """
    Read the first worksheet of a spreadsheet into rows of strings.

    Row 0 is whatever the sheet holds in its first line; no header inference
    happens here. Missing cells come back as empty strings.

    Args:
        content: Raw file bytes
        file_name: Original file name, used to pick the CSV or Excel reader

    Returns:
        Ordered list of rows, each an ordered list of cell strings

    Raises:
        SpreadsheetReadError: If the payload cannot be parsed
    """
    buffer = BytesIO(content)
    try:
        if file_name.lower().endswith(CSV_EXTENSIONS):
            df = _read_csv(content)
        else:
            df = pd.read_excel(buffer, sheet_name=0, header=None, dtype=object)
    except Exception as e:
        message = str(e) or e.__class__.__name__
        logger.error(f"Failed to read spreadsheet {file_name}: {message}")
        raise SpreadsheetReadError(message) from e

    rows = [[_cell_to_str(value) for value in record] for record in df.itertuples(index=False, name=None)]
    logger.info(f"Found {len(rows)} rows in {file_name}")
    return rows
