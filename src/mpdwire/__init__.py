"""Typed client for the MPD text protocol."""

__version__ = "0.1.0"
