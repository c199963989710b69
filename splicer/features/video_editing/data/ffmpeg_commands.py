"""
Argument lists for the ffmpeg invocations used by the editor.

Every builder returns an EngineInvocation whose args exclude the binary.
All of them select the first video stream and, when present, the audio
streams; they differ only in how the input is addressed (whole file,
seeked range, or concat manifest) and in the codec options of the mode.
"""

from pathlib import Path
from typing import List

from splicer.core.config.settings import settings
from ..domain.models import EditRange, EngineInvocation, TranscodeMode

# Containers that benefit from moving the moov atom to the front.
FASTSTART_EXTENSIONS = (".mp4", ".m4v", ".mov")

COMMON_ARGS = ["-y", "-hide_banner", "-loglevel", "error"]
STREAM_MAP_ARGS = ["-map", "0:v:0", "-map", "0:a?"]
ZERO_TIMESTAMP_ARGS = ["-avoid_negative_ts", "make_zero"]


def format_timestamp_ms(ms: int) -> str:
    """Formats milliseconds as HH:MM:SS.mmm. Negative values clamp to zero."""
    if ms < 0:
        ms = 0
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}.{millis:03d}"


def movflags(output_path: Path) -> List[str]:
    if Path(output_path).suffix.lower() in FASTSTART_EXTENSIONS:
        return ["-movflags", "+faststart"]
    return []


def codec_args(mode: TranscodeMode) -> List[str]:
    if mode == TranscodeMode.STREAM_COPY:
        return ["-c", "copy"]
    return [
        "-c:v", settings.REENCODE_VIDEO_CODEC,
        "-preset", settings.REENCODE_PRESET,
        "-crf", str(settings.REENCODE_CRF),
        "-pix_fmt", settings.REENCODE_PIX_FMT,
        "-c:a", settings.REENCODE_AUDIO_CODEC,
        "-b:a", settings.REENCODE_AUDIO_BITRATE,
    ]


def build_remux(input_path: Path, output_path: Path) -> EngineInvocation:
    """Whole-file stream copy into a new container."""
    args = [
        *COMMON_ARGS,
        "-i", str(input_path),
        *STREAM_MAP_ARGS,
        *codec_args(TranscodeMode.STREAM_COPY),
        *movflags(output_path),
        str(output_path),
    ]
    return EngineInvocation(TranscodeMode.STREAM_COPY, args)


def build_section(mode: TranscodeMode, input_path: Path, output_path: Path, edit_range: EditRange) -> EngineInvocation:
    """
    Cut edit_range out of input_path.

    Seeking happens on the input side (-ss before -i) so stream copy snaps to
    keyframes, while re-encode lands exactly on the requested boundaries.
    """
    args = [
        *COMMON_ARGS,
        "-ss", format_timestamp_ms(edit_range.start_ms),
        "-t", format_timestamp_ms(edit_range.duration_ms),
        "-i", str(input_path),
        *STREAM_MAP_ARGS,
        *codec_args(mode),
        *ZERO_TIMESTAMP_ARGS,
        *movflags(output_path),
        str(output_path),
    ]
    return EngineInvocation(mode, args)


def build_concat(mode: TranscodeMode, manifest_path: Path, output_path: Path) -> EngineInvocation:
    """Join the files listed in a concat manifest, in order."""
    args = [
        *COMMON_ARGS,
        "-f", "concat",
        "-safe", "0",
        "-i", str(manifest_path),
        *STREAM_MAP_ARGS,
        *codec_args(mode),
        *ZERO_TIMESTAMP_ARGS,
        *movflags(output_path),
        str(output_path),
    ]
    return EngineInvocation(mode, args)
