from abc import ABC, abstractmethod
from pathlib import Path
from threading import Event
from typing import Optional

from .models import EngineInvocation, EngineResult


class IMediaEngine(ABC):
    """
    Contract for the transcoding engine.
    Abstracts away the underlying tool (FFmpeg) from the editing logic.
    """

    @abstractmethod
    def run(self, invocation: EngineInvocation, cancel_event: Optional[Event] = None) -> EngineResult:
        """
        Runs a single invocation to completion.

        Args:
            invocation: The mode and argument list to execute.
            cancel_event: When set, the running process is terminated.

        Returns:
            EngineResult with the success flag and trimmed diagnostic text.
            A failed run is reported through the result, not raised.

        Raises:
            EditCancelled: If cancel_event was set while the process ran.
        """
        pass


class IDurationProber(ABC):
    """
    Contract for reading a container's playback length.
    """

    @abstractmethod
    def probe_duration_ms(self, path: Path, cancel_event: Optional[Event] = None) -> int:
        """
        Returns the container duration in whole milliseconds (truncated).

        Raises:
            ProbeError: If the duration cannot be obtained.
            EditCancelled: If cancel_event was set while probing.
        """
        pass
