"""
Scratch file lifecycle for edit operations.

Scratch files live next to the destination so the final rename stays on one
filesystem and is atomic. Each scratch path belongs to the call that made it
and is removed on every exit path of that call.
"""

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

from ..domain.exceptions import FilesystemError

logger = logging.getLogger(__name__)


def create_scratch(destination_hint: Path, prefix: str) -> Path:
    """
    Reserves a unique file name beside destination_hint, keeping its extension.

    The file is created empty and closed; callers may overwrite it freely.
    """
    destination_hint = Path(destination_hint)
    directory = destination_hint.parent
    try:
        fd, name = tempfile.mkstemp(prefix=f"{prefix}-", suffix=destination_hint.suffix, dir=directory)
        os.close(fd)
    except OSError as e:
        raise FilesystemError(f"could not create scratch file in {directory}: {e}") from e
    return Path(name)


def release(path: Path) -> None:
    """Deletes path. A file that is already gone counts as released."""
    try:
        Path(path).unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        raise FilesystemError(f"could not remove {path}: {e}") from e


@contextmanager
def scoped_release(path: Path) -> Iterator[Path]:
    """Yields path and deletes it when the block exits, however it exits."""
    try:
        yield path
    finally:
        release(path)


@contextmanager
def scratch_file(destination_hint: Path, prefix: str) -> Iterator[Path]:
    with scoped_release(create_scratch(destination_hint, prefix)) as path:
        yield path


def replace_into(source: Path, destination: Path) -> None:
    """Atomically renames source over destination."""
    try:
        os.replace(source, destination)
    except OSError as e:
        raise FilesystemError(f"could not move {source} to {destination}: {e}") from e


class StagedOutput:
    """
    Where an operation should write its result.

    When the destination is one of the operation's inputs or already exists,
    the result is staged in a scratch file and only renamed over the
    destination by finalize(). Otherwise the destination is written directly
    and finalize()/release() do nothing.
    """

    def __init__(self, destination: Path, working_path: Path, staged: bool):
        self.destination = destination
        self.working_path = working_path
        self.staged = staged
        self.finalized = False

    def finalize(self) -> None:
        if not self.staged:
            return
        replace_into(self.working_path, self.destination)
        self.finalized = True
        logger.debug(f"Finalized {self.destination} from {self.working_path.name}")

    def release(self) -> None:
        # After finalize() the scratch name no longer exists, so this is a no-op.
        if self.staged:
            release(self.working_path)

    def __enter__(self) -> "StagedOutput":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()


def prepare_in_place_output(input_paths: Iterable[Path], output_path: Path, prefix: str,
                            always_stage: bool = False) -> StagedOutput:
    """
    Decides whether output_path must be staged.

    Staging is required when output_path resolves to any of input_paths, so
    ffmpeg never reads and writes the same file, and when output_path already
    holds a file, so a failed edit cannot clobber it. Either way the existing
    file is only ever replaced by finalize(). A fresh destination is written
    directly. always_stage forces staging regardless.
    """
    output_path = Path(output_path)
    target = output_path.resolve()
    in_place = any(Path(p).resolve() == target for p in input_paths)

    if not (in_place or always_stage or output_path.exists()):
        return StagedOutput(output_path, output_path, staged=False)

    working = create_scratch(output_path, prefix)
    return StagedOutput(output_path, working, staged=True)
