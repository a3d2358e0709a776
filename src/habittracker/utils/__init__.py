"""
Utility functions and helpers for the habit tracker.

This module contains shared helpers used across the package, currently the
structured logging setup.
"""

from .log import configure_logging, log_event

__all__ = ["configure_logging", "log_event"]
