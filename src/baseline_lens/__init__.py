"""Baseline Lens — web feature compatibility analysis for source trees."""

__version__ = "0.4.0"
