"""Sentinel Suite - save editor for Dragon Quest IX."""

__version__ = "1.0.0"
