"""Reporting service for charging transactions and their meter values."""

__version__ = "0.1.0"
