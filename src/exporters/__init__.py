"""
Report export functionality for MRONJ Risk.
"""

from .json_export import build_report_data, export_json, export_json_summary
from .markdown import export_markdown

__all__ = [
    "build_report_data",
    "export_json",
    "export_json_summary",
    "export_markdown",
]
