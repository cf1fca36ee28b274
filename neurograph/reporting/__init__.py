"""Reporting utilities for neurograph."""

from .summary import describe, dumps_summary, write_summary

__all__ = ["describe", "dumps_summary", "write_summary"]
