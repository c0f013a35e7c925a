"""Spreadsheet reconciliation tools for a small retail operation.

Sales report grouping, settlement reconciliation, stock merge and product
name comparison over rows decoded from uploaded spreadsheets.
"""

__version__ = "0.1.0"
