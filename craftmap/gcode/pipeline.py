"""
Batch driver: runs the post-processor over every file given.

Files are processed one at a time, in order.  A failure is recorded and
the batch moves on to the next file; nothing here raises for a bad file.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from craftmap.config.settings import CraftmapSettings, load_settings
from craftmap.gcode.postprocessor import AnnotateResult, annotate_gcode

log = logging.getLogger("craftmap.gcode.pipeline")


@dataclass
class BatchResult:
    """Per-file results of one batch, in input order."""

    results: list[AnnotateResult] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failures(self) -> list[AnnotateResult]:
        return [r for r in self.results if not r.success]


def run_batch(
    paths: Iterable[Path | str],
    settings: CraftmapSettings | None = None,
    *,
    reprocess: bool | None = None,
) -> BatchResult:
    """Annotate each of *paths* in place with the same settings."""
    settings = settings or load_settings()
    batch = BatchResult()

    log.debug(
        "Settings: min feedrate %s, min length %s",
        settings.min_feedrate, settings.min_length,
    )
    for path in paths:
        batch.results.append(annotate_gcode(path, settings, reprocess=reprocess))

    if batch.failures:
        log.info("%d of %d file(s) failed", len(batch.failures), len(batch.results))
    else:
        log.info("%d file(s) annotated", len(batch.results))
    return batch
