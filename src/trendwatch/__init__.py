"""Trendwatch — multi-source trending digest."""

__version__ = "1.0.0"
