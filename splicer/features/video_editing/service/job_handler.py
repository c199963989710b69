import logging
from threading import Event
from typing import Optional

from splicer.core.jobs.types import JobType

from ..domain.exceptions import ValidationError
from .editor import VideoEditor

logger = logging.getLogger(__name__)

class VideoEditingHandler:
    """
    Worker for every edit JobType.

    Payload keys: "input", "output", "append", "replacement", "path" (paths)
    and "start_ms", "end_ms", "insert_ms" (integer milliseconds). Which keys
    are required depends on the job type.
    """

    def __init__(self, editor: Optional[VideoEditor] = None):
        self.editor = editor or VideoEditor()

    def handle(self, job_type: JobType, params: dict, cancel_event: Optional[Event] = None) -> dict:
        logger.info(f"Processing {job_type.value} job: {params}")
        editor = self.editor

        if job_type == JobType.DELETE_FILE:
            path = _require(params, "path")
            editor.delete_file(path)
            return {"path": path}

        if job_type == JobType.COPY_FILE:
            output = _require(params, "output")
            editor.copy_file(_require(params, "input"), output, cancel_event)
            return {"output": output}

        if job_type == JobType.COPY_SECTION:
            output = _require(params, "output")
            editor.copy_section(_require(params, "input"), output,
                                _require_ms(params, "start_ms"), _require_ms(params, "end_ms"), cancel_event)
            return {"output": output}

        if job_type == JobType.DELETE_SECTION:
            output = _require(params, "output")
            editor.delete_section(_require(params, "input"), output,
                                  _require_ms(params, "start_ms"), _require_ms(params, "end_ms"), cancel_event)
            return {"output": output}

        if job_type == JobType.APPEND_FILE:
            output = _require(params, "output")
            duration_ms = editor.append_file(_require(params, "input"), _require(params, "append"), output,
                                             cancel_event)
            return {"output": output, "duration_ms": duration_ms}

        if job_type == JobType.APPEND_SECTION:
            output = _require(params, "output")
            boundary_ms = editor.append_section(_require(params, "input"), _require(params, "append"), output,
                                                _require_ms(params, "insert_ms"), cancel_event)
            return {"output": output, "boundary_ms": boundary_ms}

        if job_type == JobType.REPLACE_SECTION:
            output = _require(params, "output")
            boundary_ms = editor.replace_section(_require(params, "input"), _require(params, "replacement"), output,
                                                 _require_ms(params, "start_ms"), _require_ms(params, "end_ms"),
                                                 cancel_event)
            return {"output": output, "boundary_ms": boundary_ms}

        raise NotImplementedError(f"No edit registered for JobType: {job_type}")


def _require(params: dict, key: str) -> str:
    value = params.get(key)
    if value is None or str(value).strip() == "":
        raise ValidationError(f"job payload is missing '{key}'")
    return str(value)


def _require_ms(params: dict, key: str) -> int:
    value = params.get(key)
    # bool is an int subclass but never a valid timestamp
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"job payload '{key}' must be an integer number of milliseconds")
    return value
