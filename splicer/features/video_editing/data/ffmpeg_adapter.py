import logging
import subprocess
from threading import Event
from typing import Optional

from splicer.core.config.settings import settings
from ..domain.interfaces import IMediaEngine
from ..domain.models import EngineInvocation, EngineResult
from .process_runner import run_process

logger = logging.getLogger(__name__)

class FFmpegEngineAdapter(IMediaEngine):
    """
    Concrete implementation of IMediaEngine using FFmpeg.
    Failures are reported through EngineResult so callers can try the next strategy.
    """

    def __init__(self, binary: Optional[str] = None):
        self.binary = binary or settings.FFMPEG_BINARY

    def run(self, invocation: EngineInvocation, cancel_event: Optional[Event] = None) -> EngineResult:
        cmd = [self.binary, *invocation.args]
        logger.info(f"Executing FFmpeg ({invocation.mode.value}): {subprocess.list2cmdline(cmd)}")

        try:
            # stdout and stderr share one buffer so diagnostics keep their order
            outcome = run_process(cmd, cancel_event=cancel_event, merge_stderr=True)
        except OSError as e:
            logger.error(f"FFmpeg could not be launched: {e}")
            return EngineResult(succeeded=False, output=str(e))

        output = outcome.stdout.strip()
        if outcome.returncode != 0:
            if not output:
                output = f"exit status {outcome.returncode}"
            logger.error(f"FFmpeg Failed ({invocation.mode.value}). Output: {output}")
            return EngineResult(succeeded=False, output=output)

        return EngineResult(succeeded=True, output=output)
