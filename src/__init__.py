# src/__init__.py
"""Soustack Mise: freeform recipe text to always-valid Soustack recipes."""

__version__ = "0.1.0"
