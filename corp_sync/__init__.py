"""
Corp Name Sync

Batch worker that resolves business names for queued ledger records by
rendering a target page and writing the name back to Google Sheets.
"""

__version__ = "0.1.0"
