"""
Export Package.

Writers for the session artifacts: CSV tables, the full JSON snapshot,
the configuration parameter list and the Excel report.
"""

from .config_exporter import config_file_name, export_config, parameter_entries
from .csv_exporter import (
    export_metrics_csv,
    export_results_csv,
    render_metrics_csv,
    render_results_csv,
)
from .excel_exporter import export_excel
from .json_exporter import build_export_document, export_json

__all__ = [
    "config_file_name",
    "export_config",
    "parameter_entries",
    "export_metrics_csv",
    "export_results_csv",
    "render_metrics_csv",
    "render_results_csv",
    "export_excel",
    "build_export_document",
    "export_json",
]
