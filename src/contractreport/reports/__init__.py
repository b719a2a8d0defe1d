"""Report writers for contract test runs."""

from contractreport.reports.base import FileReporter, Reporter
from contractreport.reports.formatting import MarkdownEntryFormatter, XmlEntryFormatter
from contractreport.reports.markdown import MarkdownReporter
from contractreport.reports.registry import (
    ReportFormat,
    available_formats,
    build_reporters,
    find_format,
    register_format,
)
from contractreport.reports.xunit import XUnitReporter


__all__ = [
    "FileReporter",
    "MarkdownEntryFormatter",
    "MarkdownReporter",
    "ReportFormat",
    "Reporter",
    "XUnitReporter",
    "XmlEntryFormatter",
    "available_formats",
    "build_reporters",
    "find_format",
    "register_format",
]
