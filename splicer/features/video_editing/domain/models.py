from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Union

from .exceptions import ValidationError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class MediaFile:
    """
    Value Object representing a media file path.
    Duration is deliberately not stored: it is probed each time it is needed.
    """
    path: Path
    label: str = "path"

    def __post_init__(self):
        if str(self.path).strip() in ("", "."):
            raise ValidationError(f"{self.label} is empty")

    @classmethod
    def of(cls, value: PathLike, label: str = "path") -> "MediaFile":
        """Wraps a caller supplied str/Path, rejecting blanks before Path() normalises them."""
        if value is None or str(value).strip() == "":
            raise ValidationError(f"{label} is empty")
        return cls(Path(value), label)

    def exists(self) -> bool:
        return self.path.exists()

    def same_file_as(self, other: "MediaFile") -> bool:
        return self.path.resolve() == other.path.resolve()

    def ensure_parent_dir(self) -> None:
        """Creates the directory structure for this file if it doesn't exist."""
        self.path.parent.mkdir(parents=True, exist_ok=True)


@dataclass(frozen=True)
class EditRange:
    """
    A span of a media timeline in absolute milliseconds.
    """
    start_ms: int
    end_ms: int

    def __post_init__(self):
        if self.start_ms < 0:
            raise ValidationError("startMs must be >= 0")
        if self.end_ms <= self.start_ms:
            raise ValidationError("endMs must be > startMs")

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


class TranscodeMode(str, Enum):
    STREAM_COPY = "stream_copy"
    RE_ENCODE = "re_encode"


@dataclass(frozen=True)
class EngineInvocation:
    """
    One single-shot ffmpeg run. `args` excludes the binary itself.
    """
    mode: TranscodeMode
    args: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class EngineResult:
    succeeded: bool
    output: str = ""


# --- Splice pipeline parts ---

@dataclass(frozen=True)
class InputRange:
    """A part cut out of the operation's input file."""
    start_ms: int
    end_ms: int
    label: str = "part"


@dataclass(frozen=True)
class SourceClip:
    """A part taken as-is from an existing file."""
    media: MediaFile


SplicePart = Union[InputRange, SourceClip]
