"""Path identity and safe reconciliation for Google Takeout exports."""

__version__ = "0.1.0"
