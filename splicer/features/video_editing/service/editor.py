import logging
from contextlib import ExitStack, contextmanager
from pathlib import Path
from threading import Event
from typing import Iterator, List, Optional, Sequence

from splicer.core.config.settings import settings
from ..data.ffmpeg_adapter import FFmpegEngineAdapter
from ..data.ffmpeg_commands import build_concat, build_remux, build_section
from ..data.ffprobe_adapter import FFprobeDurationAdapter
from ..data.manifest import concat_manifest, validate_manifest_paths
from ..data.scratch import prepare_in_place_output, release, replace_into, scratch_file
from ..domain.exceptions import EngineError, FilesystemError, ValidationError
from ..domain.interfaces import IDurationProber, IMediaEngine
from ..domain.models import (
    EditRange,
    InputRange,
    MediaFile,
    PathLike,
    SourceClip,
    SplicePart,
    TranscodeMode,
)
from .fallback import Strategy, run_strategies

logger = logging.getLogger(__name__)

class VideoEditor:
    """
    Facade for the Video Editing Feature.

    Every edit is built from two primitives, range extraction and
    concatenation, each of which tries a stream copy first and re-encodes
    only when that fails. Intermediate parts are written to scratch files
    beside the destination and removed on every exit path; when the
    destination is an input or already exists, the result is staged and
    renamed into place only after it is complete.

    All timestamps are integer milliseconds on the input's timeline.
    """

    def __init__(self, engine: Optional[IMediaEngine] = None, prober: Optional[IDurationProber] = None,
                 scratch_prefix: Optional[str] = None):
        # In a full DI framework, these would be injected.
        self.engine = engine or FFmpegEngineAdapter()
        self.prober = prober or FFprobeDurationAdapter()
        self.scratch_prefix = scratch_prefix or settings.SCRATCH_PREFIX

    # --- Queries ---

    def get_duration_ms(self, path: PathLike, cancel_event: Optional[Event] = None) -> int:
        media = MediaFile.of(path, "filePath")
        return self.prober.probe_duration_ms(media.path, cancel_event)

    # --- Whole-file operations ---

    def delete_file(self, path: PathLike) -> None:
        """Removes the file. A file that does not exist is already deleted."""
        media = MediaFile.of(path, "filePath")
        release(media.path)
        logger.info(f"Deleted {media.path}")

    def copy_file(self, input_path: PathLike, output_path: PathLike, cancel_event: Optional[Event] = None) -> None:
        """Remuxes the first video stream and any audio into a new container, without re-encoding."""
        source = MediaFile.of(input_path, "inputPath")
        output = MediaFile.of(output_path, "outputPath")
        self._ensure_parent_dir(output)
        self._copy(source, output, cancel_event)

    def copy_section(self, input_path: PathLike, output_path: PathLike, start_ms: int, end_ms: int,
                     cancel_event: Optional[Event] = None) -> None:
        """
        Copies [start_ms, end_ms) of the input into a new file.

        A stream copy is tried first; it is fast but may only cut on
        keyframes. If it fails the section is re-encoded for exact cuts.
        """
        source = MediaFile.of(input_path, "inputPath")
        output = MediaFile.of(output_path, "outputPath")
        edit_range = EditRange(start_ms, end_ms)
        self._ensure_parent_dir(output)

        logger.info(f"Copying {start_ms}-{end_ms}ms of {source.path.name} to {output.path}")
        with prepare_in_place_output([source.path], output.path, self._tag("section")) as staged:
            self._extract(source.path, staged.working_path, edit_range, cancel_event)
            staged.finalize()

    # --- Composite edits ---

    def delete_section(self, input_path: PathLike, output_path: PathLike, start_ms: int, end_ms: int,
                       cancel_event: Optional[Event] = None) -> None:
        """
        Writes everything except [start_ms, end_ms) to the output.

        end_ms is clamped to the input duration. Deleting the whole input is
        only allowed in place, where it removes the file.
        """
        source = MediaFile.of(input_path, "inputPath")
        output = MediaFile.of(output_path, "outputPath")
        EditRange(start_ms, end_ms)  # validates the requested range
        self._check_concat_paths([], output)
        self._ensure_parent_dir(output)

        duration_ms = self.prober.probe_duration_ms(source.path, cancel_event)
        if start_ms >= duration_ms:
            raise ValidationError("startMs must be < duration")
        end_ms = min(end_ms, duration_ms)

        if start_ms == 0 and end_ms >= duration_ms:
            if source.same_file_as(output):
                self.delete_file(output.path)
                return
            raise ValidationError("delete range removes entire video")

        parts: List[SplicePart] = []
        if start_ms > 0:
            parts.append(InputRange(0, start_ms, "partA"))
        if end_ms < duration_ms:
            parts.append(InputRange(end_ms, duration_ms, "partB"))
        if not parts:
            raise ValidationError("nothing to keep after delete")

        logger.info(f"Deleting {start_ms}-{end_ms}ms from {source.path.name} ({duration_ms}ms)")
        with self._materialize(source, parts, output.path, cancel_event) as paths:
            if len(paths) == 1:
                # The only surviving part already is the result.
                replace_into(paths[0], output.path)
                return
            with prepare_in_place_output([source.path], output.path, self._tag("joined"),
                                         always_stage=True) as staged:
                self._concat(paths, staged.working_path, cancel_event)
                staged.finalize()

    def append_file(self, input_path: PathLike, append_path: PathLike, output_path: PathLike,
                    cancel_event: Optional[Event] = None) -> int:
        """
        Appends one file to the end of another.

        Returns:
            The duration (ms) of the result, which is also the timestamp of its new end.
        """
        source = MediaFile.of(input_path, "inputPath")
        clip = MediaFile.of(append_path, "appendPath")
        output = MediaFile.of(output_path, "outputPath")
        self._check_concat_paths([source, clip], output)
        self._ensure_parent_dir(output)
        return self._append(source, clip, output, cancel_event)

    def append_section(self, input_path: PathLike, append_path: PathLike, output_path: PathLike, insert_ms: int,
                       cancel_event: Optional[Event] = None) -> int:
        """
        Inserts a clip at insert_ms. Everything originally after insert_ms is
        pushed back by the clip's duration.

        Returns:
            The timestamp (ms) where the inserted clip ends in the output.
        """
        source = MediaFile.of(input_path, "inputPath")
        clip = MediaFile.of(append_path, "appendPath")
        output = MediaFile.of(output_path, "outputPath")
        if insert_ms < 0:
            raise ValidationError("insertMs must be >= 0")
        # The prepend and append shortcuts put the input itself in the manifest.
        self._check_concat_paths([source, clip], output)
        self._ensure_parent_dir(output)

        input_duration_ms = self.prober.probe_duration_ms(source.path, cancel_event)
        if insert_ms > input_duration_ms:
            raise ValidationError("insertMs must be <= duration")
        clip_duration_ms = self.prober.probe_duration_ms(clip.path, cancel_event)

        # Prepend shortcut.
        if insert_ms == 0:
            self._append(clip, source, output, cancel_event)
            return clip_duration_ms

        # Append shortcut.
        if insert_ms == input_duration_ms:
            return self._append(source, clip, output, cancel_event)

        logger.info(f"Inserting {clip.path.name} into {source.path.name} at {insert_ms}ms")
        parts = [
            InputRange(0, insert_ms, "partA"),
            SourceClip(clip),
            InputRange(insert_ms, input_duration_ms, "partB"),
        ]
        return self._splice(source, clip, clip_duration_ms, parts, output, "insert", cancel_event)

    def replace_section(self, input_path: PathLike, replace_path: PathLike, output_path: PathLike,
                        start_ms: int, end_ms: int, cancel_event: Optional[Event] = None) -> int:
        """
        Replaces [start_ms, end_ms) of the input with another clip.

        Returns:
            The timestamp (ms) in the output that corresponds to the original end_ms.
        """
        source = MediaFile.of(input_path, "inputPath")
        replacement = MediaFile.of(replace_path, "replacePath")
        output = MediaFile.of(output_path, "outputPath")
        EditRange(start_ms, end_ms)  # validates the requested range
        self._check_concat_paths([replacement], output)
        self._ensure_parent_dir(output)

        input_duration_ms = self.prober.probe_duration_ms(source.path, cancel_event)
        if start_ms >= input_duration_ms:
            raise ValidationError("startMs must be < duration")
        end_ms = min(end_ms, input_duration_ms)
        replacement_duration_ms = self.prober.probe_duration_ms(replacement.path, cancel_event)

        # Whole-file replace.
        if start_ms == 0 and end_ms >= input_duration_ms:
            self._copy(replacement, output, cancel_event)
            return replacement_duration_ms

        logger.info(f"Replacing {start_ms}-{end_ms}ms of {source.path.name} with {replacement.path.name}")
        parts: List[SplicePart] = []
        if start_ms > 0:
            parts.append(InputRange(0, start_ms, "partA"))
        parts.append(SourceClip(replacement))
        if end_ms < input_duration_ms:
            parts.append(InputRange(end_ms, input_duration_ms, "partB"))
        return self._splice(source, replacement, replacement_duration_ms, parts, output, "replace", cancel_event)

    # --- Pipeline steps ---

    def _copy(self, source: MediaFile, output: MediaFile, cancel_event: Optional[Event]) -> None:
        logger.info(f"Remuxing {source.path.name} to {output.path}")
        with prepare_in_place_output([source.path], output.path, self._tag("copy")) as staged:
            result = self.engine.run(build_remux(source.path, staged.working_path), cancel_event)
            if not result.succeeded:
                raise EngineError(f"copy failed: {result.output}".strip(), [("copy", result.output)])
            staged.finalize()

    def _append(self, first: MediaFile, second: MediaFile, output: MediaFile, cancel_event: Optional[Event]) -> int:
        logger.info(f"Appending {second.path.name} to {first.path.name}")
        with prepare_in_place_output([first.path, second.path], output.path, self._tag("append")) as staged:
            self._concat([first.path, second.path], staged.working_path, cancel_event)
            staged.finalize()
        return self.prober.probe_duration_ms(output.path, cancel_event)

    def _splice(self, source: MediaFile, inserted: MediaFile, inserted_duration_ms: int,
                parts: Sequence[SplicePart], output: MediaFile, name: str, cancel_event: Optional[Event]) -> int:
        """
        Materializes parts, joins them into output and returns the boundary
        where the inserted clip ends.

        The boundary uses the probed length of the extracted leading part,
        not the requested cut point, because a stream copy may have moved
        the cut to a keyframe.
        """
        with ExitStack() as stack:
            staged = stack.enter_context(
                prepare_in_place_output([source.path, inserted.path], output.path, self._tag(name)))
            paths = stack.enter_context(self._materialize(source, parts, output.path, cancel_event))

            lead_ms = 0
            if isinstance(parts[0], InputRange):
                lead_ms = self.prober.probe_duration_ms(paths[0], cancel_event)
            boundary_ms = lead_ms + inserted_duration_ms

            self._concat(paths, staged.working_path, cancel_event)
            staged.finalize()

        return boundary_ms

    @contextmanager
    def _materialize(self, source: MediaFile, parts: Sequence[SplicePart], destination: Path,
                     cancel_event: Optional[Event]) -> Iterator[List[Path]]:
        """
        Yields one file per part, in order: a fresh scratch extraction for
        each InputRange, the clip's own path for each SourceClip. Scratch
        extractions are removed when the block exits.
        """
        with ExitStack() as stack:
            paths: List[Path] = []
            for part in parts:
                if isinstance(part, SourceClip):
                    paths.append(part.media.path)
                    continue
                scratch = stack.enter_context(scratch_file(destination, self._tag(part.label)))
                self._extract(source.path, scratch, EditRange(part.start_ms, part.end_ms), cancel_event)
                paths.append(scratch)
            yield paths

    def _extract(self, input_path: Path, output_path: Path, edit_range: EditRange,
                 cancel_event: Optional[Event]) -> str:
        strategies = [
            Strategy("stream-copy", build_section(TranscodeMode.STREAM_COPY, input_path, output_path, edit_range)),
            Strategy("re-encode", build_section(TranscodeMode.RE_ENCODE, input_path, output_path, edit_range)),
        ]
        return run_strategies(self.engine, strategies, cancel_event)

    def _concat(self, paths: Sequence[Path], output_path: Path, cancel_event: Optional[Event]) -> str:
        with concat_manifest(output_path.parent, paths, self.scratch_prefix) as manifest:
            strategies = [
                Strategy("concat-copy", build_concat(TranscodeMode.STREAM_COPY, manifest, output_path)),
                Strategy("re-encode", build_concat(TranscodeMode.RE_ENCODE, manifest, output_path)),
            ]
            return run_strategies(self.engine, strategies, cancel_event)

    # --- Helpers ---

    def _tag(self, name: str) -> str:
        return f"{self.scratch_prefix}-{name}"

    def _check_concat_paths(self, sources: Sequence[MediaFile], output: MediaFile) -> None:
        """
        Rejects, before anything runs, paths a concat manifest could not list:
        the given sources plus the scratch parts that will sit beside output.
        """
        scratch_hint = output.path.with_name(f"{self._tag('part')}{output.path.suffix}")
        validate_manifest_paths([*(s.path for s in sources), scratch_hint])

    @staticmethod
    def _ensure_parent_dir(media: MediaFile) -> None:
        try:
            media.ensure_parent_dir()
        except OSError as e:
            raise FilesystemError(f"could not create directory for {media.path}: {e}") from e
