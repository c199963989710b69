import pytest
from pathlib import Path

from splicer.features.video_editing.domain.exceptions import EditCancelled, ProbeError
from splicer.features.video_editing.domain.interfaces import IDurationProber, IMediaEngine
from splicer.features.video_editing.domain.models import EngineResult, TranscodeMode
from splicer.features.video_editing.service.editor import VideoEditor

# --- Fake media ---
# A "video" in these tests is a text file holding its duration in ms.
# FakeEngine interprets the ffmpeg argument lists the editor builds and
# writes the resulting durations, so orchestration can be checked without ffmpeg.


def parse_timestamp(text: str) -> int:
    hms, millis = text.split(".")
    hours, minutes, seconds = (int(v) for v in hms.split(":"))
    return ((hours * 60 + minutes) * 60 + seconds) * 1000 + int(millis)


def make_video(path: Path, duration_ms: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(str(duration_ms))
    return path


def read_duration(path: Path) -> int:
    return int(Path(path).read_text())


class FakeProber(IDurationProber):
    def __init__(self):
        self.probed = []

    def probe_duration_ms(self, path, cancel_event=None):
        self.probed.append(Path(path))
        if cancel_event is not None and cancel_event.is_set():
            raise EditCancelled("ffprobe cancelled")
        try:
            return read_duration(path)
        except (OSError, ValueError) as e:
            raise ProbeError(f"ffprobe failed: {e}") from e


class FakeEngine(IMediaEngine):
    """
    Options:
        failing_modes: modes that always fail.
        fail_all: every call fails.
        copy_drift_ms: extra length a stream-copy section gains (keyframe snapping).
        cancel_on_call: 1-based call number at which EditCancelled is raised.
    """

    def __init__(self, failing_modes=(), fail_all=False, copy_drift_ms=0, cancel_on_call=None):
        self.failing_modes = set(failing_modes)
        self.fail_all = fail_all
        self.copy_drift_ms = copy_drift_ms
        self.cancel_on_call = cancel_on_call
        self.calls = []
        self.manifests = []

    def run(self, invocation, cancel_event=None):
        self.calls.append(invocation)
        if self.cancel_on_call is not None and len(self.calls) == self.cancel_on_call:
            raise EditCancelled("ffmpeg cancelled")

        args = invocation.args
        output = Path(args[-1])

        if self.fail_all or invocation.mode in self.failing_modes:
            # A crashed ffmpeg may leave a truncated file behind.
            output.write_text("garbage")
            return EngineResult(False, f"{invocation.mode.value} boom")

        if "concat" in args:
            manifest = Path(args[args.index("-i") + 1])
            lines = manifest.read_text(encoding="utf-8").splitlines()
            self.manifests.append(lines)
            sources = [line[len("file '"):-1] for line in lines]
            output.write_text(str(sum(read_duration(Path(s)) for s in sources)))
        elif "-ss" in args:
            start = parse_timestamp(args[args.index("-ss") + 1])
            length = parse_timestamp(args[args.index("-t") + 1])
            source = Path(args[args.index("-i") + 1])
            produced = min(length, read_duration(source) - start)
            if invocation.mode == TranscodeMode.STREAM_COPY:
                produced += self.copy_drift_ms
            output.write_text(str(produced))
        else:
            source = Path(args[args.index("-i") + 1])
            output.write_text(str(read_duration(source)))

        return EngineResult(True, "")


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def fake_prober():
    return FakeProber()


@pytest.fixture
def editor(fake_engine, fake_prober):
    return VideoEditor(engine=fake_engine, prober=fake_prober, scratch_prefix="splicer-test")


@pytest.fixture
def make_editor(fake_prober):
    """Builds an editor around a FakeEngine configured with the given options."""
    def _make(**engine_options):
        engine = FakeEngine(**engine_options)
        return VideoEditor(engine=engine, prober=fake_prober, scratch_prefix="splicer-test"), engine
    return _make


@pytest.fixture
def video_factory(tmp_path):
    def _make(name: str, duration_ms: int) -> Path:
        return make_video(tmp_path / name, duration_ms)
    return _make
