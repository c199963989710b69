import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Sequence

from ..domain.exceptions import FilesystemError, ValidationError
from .scratch import scoped_release

logger = logging.getLogger(__name__)

# The concat demuxer reads one single-quoted path per line.
UNSAFE_CHARACTERS = ("'", "\r", "\n")


def validate_manifest_paths(paths: Sequence[Path]) -> List[Path]:
    if not paths:
        raise ValidationError("no concat paths")
    checked = []
    for p in paths:
        text = "" if p is None else str(p)
        if text.strip() == "":
            raise ValidationError("concat path is empty")
        # Check the form actually written, a relative path inherits the cwd.
        absolute = Path(text).absolute()
        if any(ch in str(absolute) for ch in UNSAFE_CHARACTERS):
            raise ValidationError(f"concat path contains unsupported characters: {text!r}")
        checked.append(absolute)
    return checked


def render_manifest(paths: Sequence[Path]) -> str:
    """One `file '<path>'` line per source, in join order."""
    return "".join(f"file '{p}'\n" for p in paths)


@contextmanager
def concat_manifest(directory: Path, paths: Sequence[Path], prefix: str = "splicer") -> Iterator[Path]:
    """
    Writes a concat manifest for paths into directory and yields its path.
    The manifest is deleted when the block exits.
    """
    checked = validate_manifest_paths(paths)

    try:
        fd, name = tempfile.mkstemp(prefix=f"{prefix}-concat-", suffix=".txt", dir=directory)
    except OSError as e:
        raise FilesystemError(f"could not create concat manifest in {directory}: {e}") from e

    with scoped_release(Path(name)) as manifest_path:
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(render_manifest(checked))
        except OSError as e:
            raise FilesystemError(f"could not write concat manifest {manifest_path}: {e}") from e

        logger.debug(f"Concat manifest {manifest_path.name}: {[p.name for p in checked]}")
        yield manifest_path
