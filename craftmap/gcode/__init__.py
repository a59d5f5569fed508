"""
G-code post-processing: KISSlicer path comments → CraftWare segment
types, plus short-segment feedrate normalization.
"""

from .path_types import PATH_TYPES, PathTypeEntry, match_path_type, seg_type_line
from .feedrate import FeedrateNormalizer, format_number
from .postprocessor import AnnotateResult, AnnotateStatus, annotate_gcode
from .pipeline import BatchResult, run_batch

__all__ = [
    "PATH_TYPES", "PathTypeEntry", "match_path_type", "seg_type_line",
    "FeedrateNormalizer", "format_number",
    "AnnotateResult", "AnnotateStatus", "annotate_gcode",
    "BatchResult", "run_batch",
]
