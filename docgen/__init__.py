"""Bulk document generation from templates and tabular data."""

__version__ = "0.1.0"
