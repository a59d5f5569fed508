"""
Path-type classification: KISSlicer comment → CraftWare segment type.

KISSlicer emits a path-type comment before every toolpath section:

    ; 'Support Interface Path', 1.9 [feed mm/s], 30.0 [head mm/s]

CraftWare colours its preview by ``;segType:`` comments instead:

    ;segType:SoftSupport

The label between the opening quote and `` Path', `` is looked up in
``PATH_TYPES`` by exact match, so "Pillar" never matches inside
"Prime Pillar".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class PathTypeEntry:
    """One KISSlicer label and the CraftWare tag it maps to."""

    label: str
    tag: str


# Ordered; the first exact match wins.
PATH_TYPES: tuple[PathTypeEntry, ...] = (
    PathTypeEntry("Crown", "InnerHair"),
    PathTypeEntry("Loop", "Loop"),
    PathTypeEntry("Perimeter", "Perimeter"),
    PathTypeEntry("Pillar", "Raft"),
    PathTypeEntry("Prime Pillar", "Skirt"),
    PathTypeEntry("Raft", "Raft"),
    PathTypeEntry("Skirt", "Skirt"),
    PathTypeEntry("Solid", "HShell"),
    PathTypeEntry("Sparse Infill", "Infill"),
    PathTypeEntry("Stacked Sparse Infill", "Infill"),
    PathTypeEntry("Support (may Stack)", "Support"),
    PathTypeEntry("Support Interface", "SoftSupport"),
)

COMMENT_PREFIX = "; '"
PATH_MARKER = " Path', "
SEG_TYPE_PREFIX = ";segType:"


def match_path_type(line: str) -> str | None:
    """Return the CraftWare tag for a KISSlicer path comment, or *None*.

    The label must match a table entry byte for byte (case-sensitive,
    no trimming).  Lines that are not path comments, and labels that are
    not in the table, both return *None*.
    """
    if not line.startswith(COMMENT_PREFIX):
        return None
    end = line.find(PATH_MARKER)
    if end < len(COMMENT_PREFIX):
        return None
    label = line[len(COMMENT_PREFIX):end]
    for entry in PATH_TYPES:
        if len(entry.label) == len(label) and entry.label == label:
            return entry.tag
    return None


def seg_type_line(tag: str, newline: str = "\n") -> str:
    """Format the CraftWare annotation line for *tag*."""
    return f"{SEG_TYPE_PREFIX}{tag}{newline}"


def is_seg_type_line(line: str) -> bool:
    """True for a ``;segType:`` annotation (e.g. from a previous run)."""
    return line.startswith(SEG_TYPE_PREFIX)


def is_motion_command(line: str) -> bool:
    """True for ``G0``/``G1`` not followed by a digit or ``.`` (so not ``G10``)."""
    if len(line) < 2 or line[0] != "G" or line[1] not in "01":
        return False
    if len(line) == 2:
        return True
    nxt = line[2]
    return not ("0" <= nxt <= "9" or nxt == ".")
