"""
G-code post-processor: annotates KISSlicer output for CraftWare.

The file is streamed line by line into ``<file>.$$$`` next to it:

  1. KISSlicer path comments (``; 'Loop Path', ...``) are copied and
     followed by a CraftWare ``;segType:<tag>`` line.
  2. G0/G1 moves go through :class:`FeedrateNormalizer`.
  3. Everything else is copied byte for byte.

When the whole file has been written the temp file replaces the
original with a single rename.  On any failure the original is left
untouched; a temp file that failed mid-write is kept for inspection.

Re-running over already annotated output is safe: once this run has
emitted its first tag, old ``;segType:`` lines are dropped so the tags
are not duplicated.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from craftmap.config.settings import CraftmapSettings, load_settings
from craftmap.gcode.feedrate import FeedrateNormalizer, line_ending
from craftmap.gcode.path_types import (
    is_motion_command,
    is_seg_type_line,
    match_path_type,
    seg_type_line,
)

log = logging.getLogger("craftmap.gcode.postprocessor")

# Text mode with newline="" keeps CR/LF untouched; surrogateescape lets
# non-UTF-8 bytes round-trip.
_ENCODING = "utf-8"
_ERRORS = "surrogateescape"


class AnnotateStatus(enum.Enum):
    OK = "ok"
    INPUT_OPEN_FAILURE = "input_open_failure"
    OUTPUT_CREATE_FAILURE = "output_create_failure"
    WRITE_FAILURE = "write_failure"
    LINE_TOO_LONG = "line_too_long"
    REPLACE_FAILURE = "replace_failure"


@dataclass
class AnnotateResult:
    """Outcome of post-processing a single file."""

    path: Path
    status: AnnotateStatus
    message: str
    temp_path: Path | None = None
    lines_read: int = 0
    annotations: int = 0
    stale_annotations: int = 0
    feeds_removed: int = 0
    feeds_rewritten: int = 0
    feeds_added: int = 0
    short_segments: int = 0
    zero_length_moves: int = 0
    stages: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is AnnotateStatus.OK


def temp_path_for(path: Path, settings: CraftmapSettings) -> Path:
    """Replacement file name: same directory, ``temp_suffix`` appended."""
    return path.with_name(path.name + settings.temp_suffix)


def _open_input(path: Path):
    return open(path, "r", encoding=_ENCODING, errors=_ERRORS, newline="")


def _open_output(path: Path):
    return open(path, "w", encoding=_ENCODING, errors=_ERRORS, newline="")


def annotate_gcode(
    path: Path | str,
    settings: CraftmapSettings | None = None,
    *,
    reprocess: bool | None = None,
) -> AnnotateResult:
    """Annotate one G-code file in place.

    Parameters
    ----------
    path : Path or str
        KISSlicer ``.gcode`` file.  Rewritten in place on success.
    settings : CraftmapSettings, optional
        Defaults to the packaged defaults.
    reprocess : bool, optional
        Drop stale ``;segType:`` lines.  Defaults to ``settings.reprocess``.

    Returns
    -------
    AnnotateResult
        Never raises for I/O problems; check ``result.success``.
    """
    path = Path(path)
    settings = settings or load_settings()
    if reprocess is None:
        reprocess = settings.reprocess
    tmp = temp_path_for(path, settings)
    result = AnnotateResult(path=path, status=AnnotateStatus.OK, message="", temp_path=tmp)

    try:
        src = _open_input(path)
    except OSError as exc:
        return _fail(result, AnnotateStatus.INPUT_OPEN_FAILURE, f"Cannot open {path}: {exc.strerror or exc}")

    with src:
        try:
            dst = _open_output(tmp)
        except OSError as exc:
            return _fail(result, AnnotateStatus.OUTPUT_CREATE_FAILURE, f"Cannot create {tmp}: {exc.strerror or exc}")

        normalizer = FeedrateNormalizer(settings)
        try:
            with dst:
                too_long = _transduce(src, dst, normalizer, settings, reprocess, result)
        except OSError as exc:
            # Read errors land here too; either way the output is incomplete.
            return _fail(result, AnnotateStatus.WRITE_FAILURE, f"Error writing {tmp}: {exc.strerror or exc}")

    if too_long is not None:
        _discard(tmp)
        return _fail(
            result, AnnotateStatus.LINE_TOO_LONG,
            f"Line {result.lines_read} of {path} is too long "
            f"({too_long} > {settings.max_line_length} characters)",
        )

    stats = normalizer.stats
    result.feeds_removed = stats.removed
    result.feeds_rewritten = stats.rewritten
    result.feeds_added = stats.added
    result.short_segments = stats.clamped
    result.zero_length_moves = stats.wrapped

    try:
        os.replace(tmp, path)
    except OSError as exc:
        return _fail(result, AnnotateStatus.REPLACE_FAILURE, f"Cannot replace {path} with {tmp}: {exc.strerror or exc}")

    result.message = f"Annotated {path}"
    result.stages.append(
        f"{result.lines_read} lines, {result.annotations} segType tags"
        + (f" ({result.stale_annotations} stale tags dropped)" if result.stale_annotations else "")
    )
    result.stages.append(
        f"Feedrate: {result.feeds_removed} removed, {result.feeds_rewritten} rewritten, "
        f"{result.feeds_added} added, {result.short_segments} short segments, "
        f"{result.zero_length_moves} zero-length moves wrapped"
    )
    log.info("%s: %s", path, "; ".join(result.stages))
    return result


def _transduce(src, dst, normalizer, settings, reprocess, result) -> int | None:
    """Stream *src* into *dst*.

    Returns *None* when every line was written, or the length of the
    first line over ``max_line_length`` (processing stops there).
    """
    max_len = settings.max_line_length

    for line in src:
        result.lines_read += 1
        length = len(line.rstrip("\r\n"))
        if length > max_len:
            return length

        tag = match_path_type(line)

        if reprocess and result.annotations and is_seg_type_line(line):
            result.stale_annotations += 1
            continue

        if is_motion_command(line):
            dst.writelines(normalizer.process(line))
        else:
            dst.write(line)

        if tag is not None:
            if not line.endswith("\n"):
                dst.write("\n")
            dst.write(seg_type_line(tag, line_ending(line)))
            result.annotations += 1

    return None


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        log.warning("Could not remove %s: %s", path, exc)


def _fail(result: AnnotateResult, status: AnnotateStatus, message: str) -> AnnotateResult:
    result.status = status
    result.message = message
    log.error(message)
    return result
