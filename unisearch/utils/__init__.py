"""
UniSearch Utility Library.

Modules:
--------
logging_setup
    Logging configuration utilities.
"""

from unisearch.utils.logging_setup import setup_logging, configure_basic_logging

__all__ = [
    "setup_logging",
    "configure_basic_logging",
]
