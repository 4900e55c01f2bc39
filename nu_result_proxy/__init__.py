"""Headless-browser proxy for the National University results site."""

__version__ = "0.1.0"
