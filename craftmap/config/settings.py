"""
Post-processor settings: single source of truth for the tunables.

Packaged defaults live in ``defaults.json`` next to this module.  A user
JSON file and explicit overrides (CLI flags) are layered on top, and the
merged result is validated by :class:`CraftmapSettings`.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


DEFAULTS_PATH = Path(__file__).resolve().parent / "defaults.json"


class CraftmapSettings(BaseModel):
    """Validated settings for one post-processing run.

    Read-only while files are processed; one instance is shared by every
    file in a batch.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    min_feedrate: float = Field(default=900, ge=0)
    """Feedrate written for segments shorter than ``min_length``."""

    min_length: float = Field(default=2, ge=0)
    """Segments shorter than this (native length unit) are clamped."""

    max_line_length: int = Field(default=16382, gt=0)
    """Longest accepted input line, terminator excluded."""

    temp_suffix: str = Field(default=".$$$", min_length=1)
    """Appended to the input path to name the replacement file."""

    reprocess: bool = True
    """Drop stale ``;segType:`` lines when re-running over own output."""

    @property
    def min_length_sq(self) -> float:
        return self.min_length * self.min_length


@lru_cache(maxsize=1)
def _load_defaults() -> dict:
    return json.loads(DEFAULTS_PATH.read_text(encoding="utf-8"))


def load_settings(path: Path | str | None = None, **overrides) -> CraftmapSettings:
    """Build settings from packaged defaults, an optional JSON file and overrides.

    Parameters
    ----------
    path : Path or str, optional
        JSON file with any subset of the settings keys.
    **overrides
        Explicit values (typically CLI flags).  ``None`` values are
        ignored so callers can pass unset flags straight through.

    Raises
    ------
    pydantic.ValidationError
        If a value is out of range or a key is unknown.
    OSError, json.JSONDecodeError
        If *path* cannot be read or parsed.
    """
    data = dict(_load_defaults())
    if path is not None:
        data.update(json.loads(Path(path).read_text(encoding="utf-8")))
    data.update({k: v for k, v in overrides.items() if v is not None})
    return CraftmapSettings(**data)
