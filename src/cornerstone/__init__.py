"""Cornerstone - Critical path scheduling for construction work items."""

__version__ = "0.1.0"
