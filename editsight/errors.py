"""
Exception hierarchy for EditSight.

All errors raised by the core are terminal for the requested operation;
callers decide whether to surface them or retry upstream.
"""


class EditSightError(Exception):
    """Base exception for EditSight operations."""
    pass


class DecodeError(EditSightError):
    """Raised when input cannot be turned into a pixel buffer."""
    pass


class RenderError(EditSightError):
    """Raised when no drawable surface can be obtained for an image."""
    pass


class EmptyHistoryError(EditSightError):
    """Raised when the current snapshot is requested before initialization."""
    pass


class UnknownFieldError(EditSightError, ValueError):
    """Raised when an update names a field that does not exist."""
    pass
