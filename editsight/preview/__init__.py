"""
Background rendering for EditSight.

Debounced, latest-wins scheduling of adjustment renders.
"""

from .scheduler import AdjustmentScheduler, RenderRequest

__all__ = [
    'AdjustmentScheduler',
    'RenderRequest',
]
