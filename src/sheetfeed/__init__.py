"""Read Google Sheets through the spreadsheets cell, list and CSV feeds."""

__version__ = "0.1.0"
