"""Summarize GitHub repositories per file, per folder and as a whole."""

__version__ = "0.1.0"
