"""
Exception types raised by the video editing feature.

Callers can catch `EditError` for any editing failure, or one of the
specific subclasses to tell a bad request apart from a tool failure.
The subclasses also inherit from the builtin exception that best matches
their meaning, so `except ValueError` still catches bad arguments.
"""

from typing import List, Optional, Tuple


class EditError(Exception):
    """Base class for all editing failures."""

    pass


class ValidationError(EditError, ValueError):
    """
    Raised when a request is malformed: blank paths, inverted or out of
    range timestamps, or paths the concat manifest cannot represent.

    Always raised before the offending input reaches ffmpeg.
    """

    pass


class ProbeError(EditError, RuntimeError):
    """Raised when ffprobe cannot report a usable duration for a file."""

    pass


class EngineError(EditError, RuntimeError):
    """
    Raised when every transcoding strategy for a step has failed.

    `attempts` keeps the (strategy name, diagnostic text) pairs in the
    order they were tried.
    """

    def __init__(self, message: str, attempts: Optional[List[Tuple[str, str]]] = None):
        super().__init__(message)
        self.attempts = list(attempts or [])


class FilesystemError(EditError, OSError):
    """Raised when a scratch file, manifest, rename or delete fails."""

    pass


class EditCancelled(EditError):
    """Raised when the caller's cancellation event stops a running edit."""

    pass
