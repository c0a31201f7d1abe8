"""
Segment-Codec Tests (LINE / ARC3_CW / ARC3_CCW)
"""

import math

import pytest

from turnedit.geometry import Point
from turnedit.segments import (
    ArcSeg, LineSeg, Pick, PickedEnd, SegKind, SegmentParseError, format_arc3,
    format_fillet_arc3, format_line, format_segment, parse_segment,
    seed_radius_from_segment,
)


def test_parse_line():
    seg = parse_segment("LINE 0 0   10 0")
    assert isinstance(seg, LineSeg)
    assert seg.kind == SegKind.LINE
    assert seg.a == Point(0.0, 0.0)
    assert seg.b == Point(10.0, 0.0)
    assert math.isclose(seg.length, 10.0, rel_tol=0.0, abs_tol=1e-12)


def test_parse_arc_is_case_insensitive_and_strips_comment():
    seg = parse_segment("arc3_ccw 5 0  3.5355 3.5355  0 5  0 0 ; Viertelkreis")
    assert isinstance(seg, ArcSeg)
    assert seg.kind == SegKind.ARC
    assert seg.ccw is True
    assert seg.c == Point(0.0, 0.0)
    assert math.isclose(seg.radius, 5.0, rel_tol=0.0, abs_tol=1e-12)


def test_parse_arc_ignores_trailing_values():
    seg = parse_segment("ARC3_CW 0 5 3.5 3.5 5 0 0 0 0 -5 -5 0")
    assert isinstance(seg, ArcSeg)
    assert seg.ccw is False
    assert seg.b == Point(5.0, 0.0)


@pytest.mark.parametrize("text", [
    "",
    "   ; nur Kommentar",
    "LINE 0 0 10",
    "ARC3_CCW 1 2 3 4 5 6 7",
    "CIRCLE 0 0 5",
    "LINE 0 0 1_0 0",
    "LINE 0 0 nan 0",
    "LINE 0 0 abc 0",
])
def test_parse_rejects_invalid_lines(text):
    with pytest.raises(SegmentParseError):
        parse_segment(text)


def test_parse_error_is_value_error():
    with pytest.raises(ValueError):
        parse_segment("LINE 1")


def test_format_line_and_arc_round_trip_values():
    text = format_line(Point(0.1, 2.0), Point(-3.0, 4.25))
    assert text == "LINE 0.1 2.0   -3.0 4.25"
    assert parse_segment(text) == LineSeg(Point(0.1, 2.0), Point(-3.0, 4.25))

    arc_text = format_arc3(Point(5, 0), Point(0, 5), Point(-5, 0), Point(0, 0), ccw=False)
    assert arc_text.startswith("ARC3_CW ")
    assert parse_segment(arc_text).ccw is False


def test_format_segment_keeps_winding_flag():
    seg = ArcSeg(a=Point(5, 0), b=Point(0, 5), m=Point(3.5, 3.5), c=Point(0, 0), ccw=True)
    assert format_segment(seg).startswith("ARC3_CCW ")
    assert format_segment(LineSeg(Point(0, 0), Point(1, 1))).startswith("LINE ")


def test_format_fillet_arc3_has_six_pairs():
    text = format_fillet_arc3(Point(8, 0), Point(8.5858, 0.5858), Point(10, 2), Point(8, 2))
    parts = text.split()
    assert parts[0] == "ARC3_CCW"
    assert len(parts) == 13
    # start->center und end->center
    assert [float(v) for v in parts[9:13]] == [0.0, 2.0, -2.0, 0.0]


def test_degenerate_segments():
    assert LineSeg(Point(1, 1), Point(1, 1)).is_degenerate
    assert ArcSeg(a=Point(0, 0), b=Point(0, 0), m=Point(0, 0), c=Point(0, 0)).is_degenerate
    assert not LineSeg(Point(0, 0), Point(1, 0)).is_degenerate


def test_pick_picked_end_point():
    seg = LineSeg(Point(0, 0), Point(10, 0))
    assert Pick(seg, PickedEnd.START).picked_end_point == Point(0, 0)
    assert Pick(seg).picked_end_point == Point(10, 0)
    assert Pick(None).picked_end_point is None


def test_seed_radius_from_segment():
    seg = ArcSeg(a=Point(3, 0), b=Point(0, 3), m=Point(2.1, 2.1), c=Point(0, 0))
    assert math.isclose(seed_radius_from_segment(seg), 3.0, rel_tol=0.0, abs_tol=1e-12)
    assert seed_radius_from_segment(LineSeg(Point(0, 0), Point(1, 0))) is None
    assert seed_radius_from_segment(None) is None
