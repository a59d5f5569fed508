"""Tests for KISSlicer → CraftWare path-type classification.

Validates:
  - Every table label maps to its tag (exact line form from KISSlicer)
  - Unknown, near-miss and differently-cased labels do not match
  - "Pillar" and "Prime Pillar" are distinct entries
  - G0/G1 detection excludes G10, G01 and G1.5
"""

from __future__ import annotations

import unittest

from craftmap.gcode.path_types import (
    PATH_TYPES,
    PathTypeEntry,
    is_motion_command,
    is_seg_type_line,
    match_path_type,
    seg_type_line,
)
from tests.kisslicer_fixture import path_comment


class TestMatchPathType(unittest.TestCase):

    def test_every_table_label(self):
        for entry in PATH_TYPES:
            with self.subTest(label=entry.label):
                self.assertEqual(match_path_type(path_comment(entry.label)), entry.tag)

    def test_unknown_label(self):
        self.assertIsNone(match_path_type(path_comment("Wipe (and De-string)")))
        self.assertIsNone(match_path_type(path_comment("Travel")))

    def test_case_sensitive(self):
        self.assertIsNone(match_path_type(path_comment("loop")))
        self.assertIsNone(match_path_type(path_comment("SKIRT")))

    def test_no_trimming(self):
        self.assertIsNone(match_path_type(path_comment("Loop ")))
        self.assertIsNone(match_path_type(path_comment(" Loop")))

    def test_pillar_vs_prime_pillar(self):
        """Exact-length matching keeps the two labels apart."""
        self.assertEqual(match_path_type(path_comment("Pillar")), "Raft")
        self.assertEqual(match_path_type(path_comment("Prime Pillar")), "Skirt")

    def test_prefix_of_label_does_not_match(self):
        self.assertIsNone(match_path_type(path_comment("Sparse")))
        self.assertIsNone(match_path_type(path_comment("Support")))

    def test_not_a_path_comment(self):
        self.assertIsNone(match_path_type("; Loop Path', 1.0\n"))
        self.assertIsNone(match_path_type(";'Loop Path', 1.0\n"))
        self.assertIsNone(match_path_type("; 'Loop Path' 1.0\n"))
        self.assertIsNone(match_path_type("G1 X1 Y1\n"))
        self.assertIsNone(match_path_type(""))

    def test_empty_label(self):
        self.assertIsNone(match_path_type("; ' Path', 1.0\n"))

    def test_table_is_immutable(self):
        entry = PATH_TYPES[0]
        self.assertIsInstance(entry, PathTypeEntry)
        with self.assertRaises(AttributeError):
            entry.tag = "Other"


class TestSegTypeLines(unittest.TestCase):

    def test_format(self):
        self.assertEqual(seg_type_line("Loop"), ";segType:Loop\n")
        self.assertEqual(seg_type_line("Infill", "\r\n"), ";segType:Infill\r\n")

    def test_recognize(self):
        self.assertTrue(is_seg_type_line(";segType:HShell\n"))
        self.assertFalse(is_seg_type_line("; segType:HShell\n"))
        self.assertFalse(is_seg_type_line(";TYPE:Perimeter\n"))


class TestMotionCommand(unittest.TestCase):

    def test_motion(self):
        for line in ("G0 X1 Y2\n", "G1 X1\n", "G1\n", "G1", "G1X5Y5\n", "G0;travel\n"):
            with self.subTest(line=line):
                self.assertTrue(is_motion_command(line))

    def test_not_motion(self):
        for line in ("G10\n", "G11 ; unretract\n", "G01 X1\n", "G1.5 X1\n",
                     "G2 X1 Y1 I1\n", "G28\n", "g1 X1\n", "; G1 X1\n", "M106\n", "G", ""):
            with self.subTest(line=line):
                self.assertFalse(is_motion_command(line))


if __name__ == "__main__":
    unittest.main()
