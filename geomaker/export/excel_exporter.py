"""
Excel Report Export.

Styled workbook with one sheet per table: classification report,
confusion matrix and training metrics. Header cells use the green
``D7E4BC`` fill, every cell a thin border, and columns are auto-sized.
"""

# =========================================================================== #
#                                Standard Imports                             #
# =========================================================================== #
import logging
from pathlib import Path
from typing import Optional

# =========================================================================== #
#                                Third-Party Imports                          #
# =========================================================================== #
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.worksheet import Worksheet

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from geomaker.core.exceptions import ResultsUnavailableError
from geomaker.core.paths import LOGGER_NAME
from geomaker.evaluation.history import MetricsHistory
from geomaker.evaluation.synthesizer import ResultsBundle

from .csv_exporter import confusion_frame, report_frame

logger = logging.getLogger(LOGGER_NAME)

HEADER_FILL = PatternFill(start_color="D7E4BC", end_color="D7E4BC", fill_type="solid")
HEADER_FONT = Font(bold=True)
THIN_BORDER = Border(
    left=Side(style="thin"),
    right=Side(style="thin"),
    top=Side(style="thin"),
    bottom=Side(style="thin"),
)
ALIGN_LEFT = Alignment(horizontal="left", vertical="center", wrap_text=True)
ALIGN_CENTER = Alignment(horizontal="center", vertical="center")


def _write_sheet(ws: Worksheet, df: pd.DataFrame, index: bool = False) -> None:
    if index:
        df = df.reset_index()

    for r_idx, row in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
        for c_idx, value in enumerate(row, 1):
            if value is not None and pd.isna(value):
                value = None
            cell = ws.cell(row=r_idx, column=c_idx, value=value)
            cell.border = THIN_BORDER

            if r_idx == 1:
                cell.fill = HEADER_FILL
                cell.font = HEADER_FONT
                cell.alignment = ALIGN_CENTER
            else:
                cell.alignment = ALIGN_LEFT
                if isinstance(value, float):
                    cell.number_format = "0.0000"
                elif isinstance(value, int) and not isinstance(value, bool):
                    cell.number_format = "0"

    for column in ws.columns:
        max_length = 0
        column_letter = column[0].column_letter
        for cell in column:
            if cell.value is not None:
                max_length = max(max_length, len(str(cell.value)))
        ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 50)


def export_excel(
    results: Optional[ResultsBundle], metrics: Optional[MetricsHistory], path: Path
) -> Path:
    """
    Saves the report workbook.

    Raises:
        ResultsUnavailableError: No completed run to report on.
    """
    if results is None:
        raise ResultsUnavailableError("No completed run: train a model before exporting a report.")

    wb = Workbook()
    ws = wb.active
    ws.title = "Report"
    _write_sheet(ws, report_frame(results))

    _write_sheet(wb.create_sheet("Confusion Matrix"), confusion_frame(results), index=True)

    if metrics is not None and len(metrics):
        _write_sheet(wb.create_sheet("Training Metrics"), metrics.to_dataframe())

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(path)
    logger.info(f"Excel report saved to {path.name}")
    return path
