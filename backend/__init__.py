"""Compound growth projection backend."""

__version__ = "0.3.0"
