import json
import logging
import math
from pathlib import Path
from threading import Event
from typing import Optional

from splicer.core.config.settings import settings
from ..domain.exceptions import ProbeError
from ..domain.interfaces import IDurationProber
from .process_runner import run_process

logger = logging.getLogger(__name__)

class FFprobeDurationAdapter(IDurationProber):
    """
    Reads the container-level duration reported by ffprobe.
    """

    def __init__(self, binary: Optional[str] = None):
        self.binary = binary or settings.FFPROBE_BINARY

    def probe_duration_ms(self, path: Path, cancel_event: Optional[Event] = None) -> int:
        if path is None or str(path).strip() in ("", "."):
            raise ProbeError("filePath is empty")

        cmd = [
            self.binary,
            "-v", "error",
            "-print_format", "json",
            "-show_entries", "format=duration",
            str(path),
        ]

        try:
            outcome = run_process(cmd, cancel_event=cancel_event)
        except OSError as e:
            raise ProbeError(f"ffprobe failed: {e}") from e

        if outcome.returncode != 0:
            message = outcome.stderr.strip() or f"exit status {outcome.returncode}"
            logger.error(f"ffprobe failed for {path}: {message}")
            raise ProbeError(f"ffprobe failed: {message}")

        return parse_duration_ms(outcome.stdout)


def parse_duration_ms(raw_json: str) -> int:
    """
    Extracts format.duration (decimal seconds) from ffprobe's JSON output
    and truncates it to whole milliseconds.
    """
    try:
        data = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise ProbeError(f"ffprobe returned malformed JSON: {e}") from e

    fmt = data.get("format") if isinstance(data, dict) else None
    seconds_text = str((fmt or {}).get("duration") or "").strip()
    if not seconds_text:
        raise ProbeError("ffprobe returned empty duration")

    try:
        seconds = float(seconds_text)
    except ValueError as e:
        raise ProbeError(f"ffprobe returned unparsable duration: {seconds_text!r}") from e
    if not math.isfinite(seconds):
        raise ProbeError(f"ffprobe returned unparsable duration: {seconds_text!r}")

    # int() truncates toward zero, matching the millisecond markers callers store
    return max(int(seconds * 1000), 0)
