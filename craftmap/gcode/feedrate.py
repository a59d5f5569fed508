"""
Feedrate normalization ("bang removal") for G0/G1 moves.

Two rewrites are applied to every motion line:

1. **Short-segment clamp**: a segment shorter than ``min_length`` whose
   requested feedrate is below ``min_feedrate`` is written with
   ``min_feedrate`` instead.
2. **Bang removal**: an ``F`` word whose value is already in effect is
   dropped; a changed value is written exactly once.

Feedrate is modal in G-code: a line without ``F`` moves at the last
requested value, so a clamped segment is followed by an explicit ``F``
on the next line that restores the requested value.

A zero-length extrusion or Z move (retract, prime, layer change) is
special-cased: it is wrapped between two ``G1 F<min>`` lines and the
move itself is left untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from craftmap.config.settings import CraftmapSettings

log = logging.getLogger("craftmap.gcode.feedrate")

# Letter + optional number.  A letter without a parsable number is
# tolerated and leaves the corresponding state unchanged.
_WORD_RE = re.compile(
    r"(?P<letter>[XYZEF])\s*"
    r"(?P<value>[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)?"
)


def format_number(value: float) -> str:
    """Shortest round-trippable decimal without a trailing ``.0``."""
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text


def code_end(line: str) -> int:
    """Index where the code part of *line* ends (comment or terminator)."""
    for i, ch in enumerate(line):
        if ch in ";\r\n":
            return i
    return len(line)


def line_ending(line: str) -> str:
    return "\r\n" if line.endswith("\r\n") else "\n"


@dataclass
class MotionWords:
    """The words of one G0/G1 line that the normalizer cares about."""

    x: float
    y: float
    has_ez: bool = False
    feed: float | None = None
    feed_span: tuple[int, int] | None = None
    end: int = 0
    """Where parsing stopped (start of comment / terminator)."""


@dataclass
class FeedrateStats:
    removed: int = 0
    rewritten: int = 0
    added: int = 0
    clamped: int = 0
    wrapped: int = 0


def parse_motion(line: str, x: float, y: float) -> MotionWords:
    """Parse X/Y/E/Z/F words up to the comment, defaulting X/Y to *x*, *y*."""
    end = code_end(line)
    words = MotionWords(x=x, y=y, end=end)
    for m in _WORD_RE.finditer(line, 0, end):
        letter = m.group("letter")
        value = m.group("value")
        if letter in "EZ":
            words.has_ez = True
            continue
        if value is None:
            continue
        if letter == "X":
            words.x = float(value)
        elif letter == "Y":
            words.y = float(value)
        else:
            words.feed = float(value)
            words.feed_span = m.span()
    return words


class FeedrateNormalizer:
    """Per-file feedrate state for G0/G1 lines.

    Create one per file; :meth:`process` must see every motion line of
    that file in order.
    """

    def __init__(self, settings: CraftmapSettings):
        self.settings = settings
        self.x = 0.0
        self.y = 0.0
        self.requested_f: float | None = None
        """Last ``F`` parsed from the input (modal)."""
        self.written_f: float | None = None
        """Last ``F`` actually written to the output."""
        self.stats = FeedrateStats()

    def process(self, line: str) -> list[str]:
        """Return the output line(s) for one G0/G1 input line."""
        words = parse_motion(line, self.x, self.y)

        dx = words.x - self.x
        dy = words.y - self.y
        self.x, self.y = words.x, words.y
        length_sq = dx * dx + dy * dy

        if words.feed is not None:
            self.requested_f = words.feed

        effective = self.requested_f
        if effective is None:
            # No feedrate seen yet; nothing to clamp or deduplicate.
            return [line]

        min_f = self.settings.min_feedrate
        if length_sq < self.settings.min_length_sq and min_f > effective:
            if words.has_ez and length_sq == 0.0:
                return self._wrap_zero_length(line)
            effective = min_f
            self.stats.clamped += 1

        return [self._rewrite(line, words, effective)]

    def _wrap_zero_length(self, line: str) -> list[str]:
        min_f = self.settings.min_feedrate
        newline = line_ending(line)
        set_feed = f"G1 F{format_number(min_f)}{newline}"

        out: list[str] = []
        if self.written_f != min_f:
            out.append(set_feed)
        out.append(line if line.endswith("\n") else line + newline)
        out.append(set_feed)

        self.written_f = min_f
        self.stats.wrapped += 1
        log.debug("Wrapped zero-length move at F%s: %s", format_number(min_f), line.rstrip())
        return out

    def _rewrite(self, line: str, words: MotionWords, effective: float) -> str:
        if words.feed_span is not None:
            start, end = words.feed_span
            if start > 0 and line[start - 1] == " ":
                start -= 1

            if effective == self.written_f:
                self.stats.removed += 1
                return line[:start] + line[end:]

            self.written_f = effective
            if effective == words.feed:
                return line
            self.stats.rewritten += 1
            return line[:start] + f" F{format_number(effective)}" + line[end:]

        if effective == self.written_f:
            return line

        # Insert before any whitespace that precedes the comment/terminator.
        pos = len(line[:words.end].rstrip(" \t"))
        self.written_f = effective
        self.stats.added += 1
        return line[:pos] + f" F{format_number(effective)}" + line[pos:]
