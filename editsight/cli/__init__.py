"""
Command line interface for EditSight.
"""

from .main import main

__all__ = ['main']
