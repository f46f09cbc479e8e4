"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of stored-function results.
"""

import io
from datetime import datetime

import pandas as pd

from mapping.rows import rows_to_dicts
from repositories.function_repo import FunctionRepository, Params
from utils.logger import get_logger

logger = get_logger(__name__)


def _holds_aware_datetimes(series: pd.Series) -> bool:
    """True for object columns of aware datetimes, e.g. mixed UTC offsets across DST."""
    if series.dtype != object:
        return False
    values = series.dropna()
    return not values.empty and all(
        isinstance(v, datetime) and v.tzinfo is not None for v in values
    )


class ExportService:
    """Turns the rows of a table-returning function into downloadable files."""

    def __init__(self, functions: FunctionRepository | None = None):
        self.functions = functions or FunctionRepository()

    def to_dataframe(self, name: str, params: Params = None) -> pd.DataFrame:
        """
        Call ``name`` and load its rows into a DataFrame.

        Columns come from the cursor description, so an empty result keeps
        its header. Timezone-aware timestamps are converted to naive UTC,
        since Excel cannot store offsets.
        """
        columns, rows = self.functions.call_tuples(name, params)
        df = pd.DataFrame(rows_to_dicts(rows, columns), columns=columns)
        for col in df.columns:
            if isinstance(df[col].dtype, pd.DatetimeTZDtype) or _holds_aware_datetimes(df[col]):
                df[col] = pd.to_datetime(df[col], utc=True).dt.tz_localize(None)
        return df

    def export_csv(self, name: str, params: Params = None) -> io.BytesIO:
        """
        Export a function's result as a CSV file.

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = self.to_dataframe(name, params)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8-sig")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} rows of {name} as CSV")
        return buffer

    def export_excel(
        self, name: str, params: Params = None, sheet_name: str = "results"
    ) -> io.BytesIO:
        """
        Export a function's result as an Excel (.xlsx) file.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = self.to_dataframe(name, params)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=sheet_name, index=False)

            # Add column overview sheet
            if not df.empty:
                columns = pd.DataFrame(
                    {"column": df.columns, "dtype": [str(t) for t in df.dtypes]}
                )
                columns.to_excel(writer, sheet_name="columns", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} rows of {name} as Excel")
        return buffer
