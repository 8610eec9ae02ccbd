"""Transformation OS mentoring and program access service."""

__version__ = "0.1.0"
