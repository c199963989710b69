import pytest

from splicer.features.video_editing.domain.exceptions import EditCancelled, EngineError
from splicer.features.video_editing.domain.interfaces import IMediaEngine
from splicer.features.video_editing.domain.models import EngineInvocation, EngineResult, TranscodeMode
from splicer.features.video_editing.service.fallback import Strategy, run_strategies


class ScriptedEngine(IMediaEngine):
    """Returns the queued results in order."""

    def __init__(self, *results):
        self.results = list(results)
        self.calls = []

    def run(self, invocation, cancel_event=None):
        self.calls.append(invocation)
        outcome = self.results.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


COPY = Strategy("stream-copy", EngineInvocation(TranscodeMode.STREAM_COPY, ["copy"]))
ENCODE = Strategy("re-encode", EngineInvocation(TranscodeMode.RE_ENCODE, ["encode"]))


def test_first_success_stops_the_chain():
    engine = ScriptedEngine(EngineResult(True))
    assert run_strategies(engine, [COPY, ENCODE]) == "stream-copy"
    assert len(engine.calls) == 1


def test_falls_back_to_re_encode():
    engine = ScriptedEngine(EngineResult(False, "non-monotonic DTS"), EngineResult(True))
    assert run_strategies(engine, [COPY, ENCODE]) == "re-encode"
    assert [c.mode for c in engine.calls] == [TranscodeMode.STREAM_COPY, TranscodeMode.RE_ENCODE]


def test_exhausted_chain_reports_every_attempt():
    engine = ScriptedEngine(EngineResult(False, "copy says no"), EngineResult(False, "encoder says no"))

    with pytest.raises(EngineError) as excinfo:
        run_strategies(engine, [COPY, ENCODE])

    assert str(excinfo.value) == "stream-copy failed: copy says no\nre-encode failed: encoder says no"
    assert excinfo.value.attempts == [("stream-copy", "copy says no"), ("re-encode", "encoder says no")]


def test_cancellation_is_not_treated_as_a_failure():
    engine = ScriptedEngine(EditCancelled("ffmpeg cancelled"), EngineResult(True))

    with pytest.raises(EditCancelled):
        run_strategies(engine, [COPY, ENCODE])
    assert len(engine.calls) == 1
