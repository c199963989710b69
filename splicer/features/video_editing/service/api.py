from threading import Event
from typing import Optional

from ..domain.models import PathLike
from .editor import VideoEditor

# Public Service API: thin wrappers over a VideoEditor backed by ffmpeg/ffprobe.
# Timestamps are milliseconds; every function accepts an optional
# threading.Event that cancels the running ffmpeg process when set.


def get_duration_ms(path: PathLike, cancel_event: Optional[Event] = None) -> int:
    """Returns the media duration in milliseconds."""
    return VideoEditor().get_duration_ms(path, cancel_event)


def delete_file(path: PathLike) -> None:
    """Removes the video file from disk. Idempotent."""
    VideoEditor().delete_file(path)


def copy_file(input_path: PathLike, output_path: PathLike, cancel_event: Optional[Event] = None) -> None:
    VideoEditor().copy_file(input_path, output_path, cancel_event)


def copy_section(input_path: PathLike, output_path: PathLike, start_ms: int, end_ms: int,
                 cancel_event: Optional[Event] = None) -> None:
    VideoEditor().copy_section(input_path, output_path, start_ms, end_ms, cancel_event)


def delete_section(input_path: PathLike, output_path: PathLike, start_ms: int, end_ms: int,
                   cancel_event: Optional[Event] = None) -> None:
    VideoEditor().delete_section(input_path, output_path, start_ms, end_ms, cancel_event)


def append_file(input_path: PathLike, append_path: PathLike, output_path: PathLike,
                cancel_event: Optional[Event] = None) -> int:
    """
    Appends append_path to input_path.

    Returns:
        The new total duration (ms).
    """
    return VideoEditor().append_file(input_path, append_path, output_path, cancel_event)


def append_section(input_path: PathLike, append_path: PathLike, output_path: PathLike, insert_ms: int,
                   cancel_event: Optional[Event] = None) -> int:
    """
    Inserts append_path at insert_ms.

    Returns:
        The timestamp (ms) where the inserted clip ends.
    """
    return VideoEditor().append_section(input_path, append_path, output_path, insert_ms, cancel_event)


def replace_section(input_path: PathLike, replace_path: PathLike, output_path: PathLike, start_ms: int, end_ms: int,
                    cancel_event: Optional[Event] = None) -> int:
    """
    Replaces [start_ms, end_ms) of input_path with replace_path.

    Returns:
        The timestamp (ms) corresponding to the original end_ms.
    """
    return VideoEditor().replace_section(input_path, replace_path, output_path, start_ms, end_ms, cancel_event)
