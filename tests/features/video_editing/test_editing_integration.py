import pytest
import shutil
import subprocess

from splicer.features.video_editing.domain.exceptions import ValidationError
from splicer.features.video_editing.service.editor import VideoEditor

pytestmark = pytest.mark.skipif(
    shutil.which("ffmpeg") is None or shutil.which("ffprobe") is None,
    reason="ffmpeg/ffprobe not installed",
)

# Stream copy cuts snap to keyframes; the fixtures use a short GOP so this stays small.
TOLERANCE_MS = 500

# --- Fixtures ---

def generate_video(path, seconds, pattern="testsrc"):
    """
    Generates a video with a counter pattern and a sine tone.
    """
    cmd = [
        "ffmpeg", "-y",
        "-f", "lavfi", "-i", f"{pattern}=duration={seconds}:size=320x240:rate=25",
        "-f", "lavfi", "-i", f"sine=frequency=440:duration={seconds}",
        "-c:v", "libx264", "-g", "10", "-pix_fmt", "yuv420p",
        "-c:a", "aac", "-shortest",
        str(path)
    ]
    subprocess.run(cmd, check=True, capture_output=True)
    return path


@pytest.fixture
def real_editor():
    return VideoEditor(scratch_prefix="splicer-it")


@pytest.fixture
def source_video(tmp_path):
    return generate_video(tmp_path / "source.mp4", 5)


@pytest.fixture
def clip_video(tmp_path):
    return generate_video(tmp_path / "clip.mp4", 2, pattern="smptebars")


def assert_close(actual_ms, expected_ms):
    assert abs(actual_ms - expected_ms) <= TOLERANCE_MS, f"{actual_ms}ms vs expected {expected_ms}ms"


def leftovers(directory):
    return sorted(p.name for p in directory.iterdir() if p.name.startswith("splicer-it"))

# --- Tests ---

def test_probe_duration(real_editor, source_video):
    assert_close(real_editor.get_duration_ms(source_video), 5000)


def test_copy_section_and_file(real_editor, source_video, tmp_path):
    section = tmp_path / "out" / "section.mp4"
    real_editor.copy_section(source_video, section, 1000, 3000)
    assert_close(real_editor.get_duration_ms(section), 2000)

    container = tmp_path / "copy.mkv"
    real_editor.copy_file(source_video, container)
    assert_close(real_editor.get_duration_ms(container), 5000)


def test_delete_section(real_editor, source_video, tmp_path):
    output = tmp_path / "deleted.mp4"
    real_editor.delete_section(source_video, output, 1000, 2000)

    assert_close(real_editor.get_duration_ms(output), 4000)
    assert leftovers(tmp_path) == []


def test_insert_and_append(real_editor, source_video, clip_video, tmp_path):
    inserted = tmp_path / "inserted.mp4"
    boundary = real_editor.append_section(source_video, clip_video, inserted, 2000)

    assert_close(boundary, 4000)
    assert_close(real_editor.get_duration_ms(inserted), 7000)

    appended = tmp_path / "appended.mp4"
    assert_close(real_editor.append_file(source_video, clip_video, appended), 7000)
    assert leftovers(tmp_path) == []


def test_replace_section_in_place(real_editor, source_video, clip_video, tmp_path):
    boundary = real_editor.replace_section(source_video, clip_video, source_video, 1000, 4000)

    assert_close(boundary, 3000)
    assert_close(real_editor.get_duration_ms(source_video), 4000)
    assert leftovers(tmp_path) == []


def test_delete_past_end_is_rejected(real_editor, source_video, tmp_path):
    with pytest.raises(ValidationError):
        real_editor.delete_section(source_video, tmp_path / "out.mp4", 6000, 7000)
