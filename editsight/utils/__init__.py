"""
EditSight utilities module.

Provides logging helpers.
"""

from .logging import StructuredLogger, setup_console_logging

__all__ = [
    'StructuredLogger',
    'setup_console_logging',
]
