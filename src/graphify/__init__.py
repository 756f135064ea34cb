"""Graphify client: drives a remote charting service from spreadsheet files."""

__version__ = "0.1.0"
