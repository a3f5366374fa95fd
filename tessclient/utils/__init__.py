"""
Utility functions and helper classes.

This module contains common utilities for logging and other supporting functionality.
"""

from .logger import setup_logger, get_logger

__all__ = ["setup_logger", "get_logger"]
