"""Lockfile extraction, vulnerability records, alias grouping, ignore configuration and call-analysis helpers."""

__version__ = "0.1.0"