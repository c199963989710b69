import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from threading import Event
from typing import List, Optional

from splicer.core.config.settings import settings
from ..domain.exceptions import EditCancelled

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessOutcome:
    returncode: int
    stdout: str
    stderr: str


def run_process(cmd: List[str], cancel_event: Optional[Event] = None, merge_stderr: bool = False) -> ProcessOutcome:
    """
    Runs an external tool to completion, honouring a cancellation event.

    The process is polled every CANCEL_POLL_INTERVAL seconds; once the event
    is set it is terminated (then killed after TERMINATE_GRACE_SECONDS) and
    EditCancelled is raised.

    Raises:
        OSError: If the executable cannot be launched.
        EditCancelled: If cancel_event was set before or during the run.
    """
    tool = Path(cmd[0]).name
    if cancel_event is not None and cancel_event.is_set():
        raise EditCancelled(f"{tool} cancelled before start")

    process = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
    )

    try:
        if cancel_event is None:
            stdout, stderr = process.communicate()
        else:
            while True:
                try:
                    stdout, stderr = process.communicate(timeout=settings.CANCEL_POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if cancel_event.is_set():
                        logger.warning(f"Cancellation requested, terminating {tool} (pid {process.pid})")
                        _terminate(process)
                        raise EditCancelled(f"{tool} cancelled")
    except BaseException:
        # Never leave an orphaned encoder behind.
        if process.poll() is None:
            process.kill()
            process.wait()
        raise

    return ProcessOutcome(process.returncode, stdout or "", stderr or "")


def _terminate(process: subprocess.Popen) -> None:
    process.terminate()
    try:
        process.communicate(timeout=settings.TERMINATE_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
