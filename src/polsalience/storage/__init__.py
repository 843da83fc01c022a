"""
Data storage for polsalience.

Provides table and report input/output.
"""

from polsalience.storage.tables import FORMATS, infer_format, read_table, write_report, write_table

__all__ = [
    "FORMATS",
    "infer_format",
    "read_table",
    "write_report",
    "write_table",
]
