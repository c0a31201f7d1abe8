"""
Trim Tests - Schnittpunkte, Linien-/Bogen-Ergebnisse und Session-Protokoll
"""

import math

import pytest

from config.feature_flags import set_flag
from turnedit.geometry import Point, dist
from turnedit.operations import ResultStatus, SessionState, TrimSession, run_trim
from turnedit.operations.trim import (
    build_arc_trim_options, build_helper_target_line, build_intersection_candidates,
    classify_short_long_cw, dedup_options,
)
from turnedit.segments import ArcSeg, LineSeg, PickedEnd, format_line, parse_segment
from turnedit_test_utils import RecordingHost, arc, line, pick


def _near(p, x, z, tol=1e-9):
    return math.isclose(p.x, x, rel_tol=0.0, abs_tol=tol) and math.isclose(p.z, z, rel_tol=0.0, abs_tol=tol)


@pytest.fixture
def quarter_arc():
    """Bogen um (0,0), R=5, Endpunkte bei 0° und 90°."""
    return arc((5, 0), (3.5355339, 3.5355339), (0, 5), (0, 0), ccw=True)


@pytest.fixture
def tangent_at_180():
    """Vertikale Linie X=-5, berührt den Kreis nur bei 180°."""
    return line(-5, -10, -5, 10)


# =============================================================================
# Schnittpunkte
# =============================================================================

def test_intersections_use_infinite_primitives():
    ips = build_intersection_candidates(line(0, 0, 5, 0), line(8, -3, 8, 3))
    assert len(ips) == 1
    assert _near(ips[0], 8.0, 0.0)


def test_intersections_arc_uses_full_circle(quarter_arc):
    ips = build_intersection_candidates(quarter_arc, line(-10, 0, 10, 0))
    assert sorted(round(p.x, 9) for p in ips) == [-5.0, 5.0]


def test_intersections_parallel_lines_empty():
    assert build_intersection_candidates(line(0, 0, 10, 0), line(0, 1, 10, 1)) == []


def test_helper_target_line_arc_is_normal_through_center():
    helper = build_helper_target_line(line(0, 0, 10, 0), arc((8, 10), (5, 13), (2, 10), (5, 10)))
    assert isinstance(helper, LineSeg)
    assert math.isclose(helper.a.x, 5.0, rel_tol=0.0, abs_tol=1e-12)
    assert math.isclose(helper.b.x, 5.0, rel_tol=0.0, abs_tol=1e-12)


def test_helper_target_arc_arc_joins_centers():
    a1 = arc((5, 0), (3.5, 3.5), (0, 5), (0, 0))
    a2 = arc((23, 0), (20, 3), (17, 0), (20, 0))
    helper = build_helper_target_line(a1, a2)
    assert helper == LineSeg(Point(0, 0), Point(20, 0))
    assert build_helper_target_line(line(0, 0, 1, 0), line(0, 1, 1, 1)) is None


# =============================================================================
# Linie
# =============================================================================

def test_line_extend_moves_only_end():
    pa = pick(line(0, 0, 5, 0), end=PickedEnd.END, index=4)
    pb = pick(line(8, -3, 8, 3), index=7)

    session = TrimSession(pa, pb)
    result = session.open()

    assert result.success
    assert len(session.options) == 1
    opt = session.current
    assert opt.label == "LINE trim @IP1: move End"
    assert opt.endpoint_a == Point(0.0, 0.0)
    assert _near(opt.endpoint_b, 8.0, 0.0)
    assert opt.replacement_text == "LINE 0.0 0.0   8.0 0.0"
    assert "[1] LINE trim @IP1: move End" in session.info_text


def test_line_split_outcomes_use_original_endpoints_or_ip():
    a = line(0, 0, 10, 0)
    session = TrimSession(pick(a, index=0), pick(line(4, -1, 4, 1), index=1))
    assert session.open().success

    labels = [o.label for o in session.options]
    assert labels == ["LINE split @IP1: keep Start→IP", "LINE split @IP1: keep IP→End"]

    ip = session.intersections[0]
    for o in session.options:
        for e in (o.endpoint_a, o.endpoint_b):
            assert e in (a.a, a.b, ip)

    first, second = session.options
    assert first.endpoint_a == a.a
    assert second.endpoint_b == a.b
    total = dist(first.endpoint_a, first.endpoint_b) + dist(second.endpoint_a, second.endpoint_b)
    assert math.isclose(total, a.length, rel_tol=0.0, abs_tol=1e-6)


def test_line_default_prefers_moving_picked_end():
    a = line(0, 0, 10, 0)
    b = line(4, -1, 4, 1)

    end_session = TrimSession(pick(a, end=PickedEnd.END, index=0), pick(b, index=1))
    end_session.open()
    assert end_session.cursor == 0

    start_session = TrimSession(pick(a, end=PickedEnd.START, index=0), pick(b, index=1))
    start_session.open()
    assert start_session.cursor == 1
    assert start_session.current.label == "LINE split @IP1: keep IP→End"


def test_line_default_prefers_ip_nearest_click():
    a = line(0, 0, 10, 0)
    b = arc((8, 0), (5, 3), (2, 0), (5, 0))

    near_end = TrimSession(pick(a, end=PickedEnd.END, index=0, at=(9, 0)), pick(b, index=1))
    near_end.open()
    assert _near(near_end.current.intersection_point, 8.0, 0.0)
    assert _near(near_end.current.endpoint_a, 0.0, 0.0)

    near_start = TrimSession(pick(a, end=PickedEnd.END, index=0, at=(1, 0)), pick(b, index=1))
    near_start.open()
    assert _near(near_start.current.intersection_point, 2.0, 0.0)


def test_line_ip_at_moving_end_has_no_outcome():
    # Start bewegen ergibt Null-Länge, End bewegen die unveränderte Linie
    session = TrimSession(pick(line(0, 0, 5, 0), index=0), pick(line(5, -1, 5, 1), index=1))

    assert session.open().status == ResultStatus.NO_VALID_OUTCOMES
    assert session.options == []


def test_line_outcomes_never_reproduce_the_original():
    a = line(0, 0, 5, 0)
    session = TrimSession(pick(a, index=0), pick(line(8, -3, 8, 3), index=1))
    assert session.open().success

    for o in session.options:
        assert o.replacement_text != format_line(a.a, a.b)
        assert dist(o.endpoint_a, o.endpoint_b) > 1e-3


# =============================================================================
# Bogen
# =============================================================================

def test_arc_branch_classification(quarter_arc, tangent_at_180):
    session = TrimSession(pick(quarter_arc, index=0), pick(tangent_at_180, index=1))
    assert session.open().success

    classes = [o.sweep_class for o in session.options]
    assert len(session.options) == 4
    assert classes.count("180°") == 2
    assert classes.count("Short") == 1
    assert classes.count("Long") == 1

    texts = [o.replacement_text for o in session.options]
    assert len(set(texts)) == len(texts)

    short = next(o for o in session.options if o.sweep_class == "Short")
    long_ = next(o for o in session.options if o.sweep_class == "Long")
    assert short.label.endswith("| Short")
    assert long_.label.endswith("| Long")
    assert short.replacement_text != long_.replacement_text


def test_arc_outcomes_preserve_center_and_radius(quarter_arc):
    other = arc((13, 0), (8, 5), (3, 0), (8, 0))
    session = TrimSession(pick(quarter_arc, index=0), pick(other, index=1))
    assert session.open().success
    assert len(session.options) == 8

    for o in session.options:
        assert o.replacement_text.startswith("ARC3_CCW ")
        seg = parse_segment(o.replacement_text)
        assert isinstance(seg, ArcSeg)
        assert seg.c == Point(0.0, 0.0)
        assert math.isclose(seg.radius, 5.0, rel_tol=0.0, abs_tol=1e-6)
        assert math.isclose(dist(seg.b, seg.c), 5.0, rel_tol=0.0, abs_tol=1e-6)
        assert math.isclose(dist(seg.m, seg.c), 5.0, rel_tol=0.0, abs_tol=1e-6)
        assert o.is_arc


def test_arc_winding_is_normalized(quarter_arc, tangent_at_180):
    cw_arc = ArcSeg(a=quarter_arc.b, b=quarter_arc.a, m=quarter_arc.m, c=quarter_arc.c, ccw=False)

    s_ccw = TrimSession(pick(quarter_arc, index=0), pick(tangent_at_180, index=1))
    s_cw = TrimSession(pick(cw_arc, index=0), pick(tangent_at_180, index=1))
    s_ccw.open()
    s_cw.open()

    assert [o.replacement_text for o in s_ccw.options] == [o.replacement_text for o in s_cw.options]


def test_arc_ignores_ip_off_circle(quarter_arc):
    assert build_arc_trim_options(pick(quarter_arc), [Point(0.0, 0.0)]) == []


def test_classify_short_long_cw():
    c = Point(0.0, 0.0)
    assert classify_short_long_cw(Point(0, 5), Point(5, 0), c) == "Short"
    assert classify_short_long_cw(Point(5, 0), Point(0, 5), c) == "Long"
    assert classify_short_long_cw(Point(5, 0), Point(-5, 0), c) == "180°"


def test_dedup_options_by_text_and_points():
    a = line(0, 0, 10, 0)
    session = TrimSession(pick(a, index=0), pick(line(4, -1, 4, 1), index=1))
    session.open()

    doubled = session.options + session.options
    assert len(dedup_options(doubled, 1e-8)) == 2


# =============================================================================
# Status / Session
# =============================================================================

def test_parallel_lines_no_intersections():
    result = run_trim(pick(line(0, 0, 10, 0), index=0), pick(line(0, 1, 10, 1), index=1))

    assert result.accepted is False
    assert result.replace_index == -1
    assert result.segment_text is None
    assert result.status == ResultStatus.NO_INTERSECTIONS


def test_full_circle_with_ip_on_both_endpoints_has_no_outcomes():
    full_circle = ArcSeg(a=Point(5, 0), b=Point(5, 0), m=Point(-5, 0), c=Point(0, 0))
    session = TrimSession(pick(full_circle, index=0), pick(line(5, -3, 5, 3), index=1))
    result = session.open()

    assert result.status == ResultStatus.NO_VALID_OUTCOMES
    assert len(session.intersections) == 1
    assert _near(session.intersections[0], 5.0, 0.0)
    assert session.current is None


@pytest.mark.parametrize("make_picks", [
    lambda: (None, pick(line(0, 0, 1, 0))),
    lambda: (pick(line(0, 0, 1, 0), index=2), pick(line(0, 0, 0, 1), index=2)),
    lambda: (pick(line(0, 0, 1, 0)), pick(None)),
    lambda: (pick(line(2, 2, 2, 2)), pick(line(0, 0, 0, 1))),
])
def test_invalid_selection(make_picks):
    pa, pb = make_picks()
    assert TrimSession(pa, pb).open().status == ResultStatus.INVALID_SELECTION


def test_helper_target_fallback_behind_flag():
    a = line(0, 0, 10, 0)
    b = arc((8, 10), (5, 13), (2, 10), (5, 10))

    off = TrimSession(pick(a, index=0), pick(b, index=1))
    assert off.open().status == ResultStatus.NO_INTERSECTIONS
    assert not off.used_helper_target

    set_flag("trim_helper_target_fallback", True)
    on = TrimSession(pick(a, index=0), pick(b, index=1))
    assert on.open().success
    assert on.used_helper_target
    assert _near(on.intersections[0], 5.0, 0.0)


def test_cycle_next_prev_wrap(quarter_arc, tangent_at_180):
    session = TrimSession(pick(quarter_arc, index=0), pick(tangent_at_180, index=1))
    session.open()
    start = session.cursor
    n = len(session.options)

    session.prev()
    assert session.cursor == (start - 1) % n
    session.next()
    assert session.cursor == start
    for _ in range(n):
        session.next()
    assert session.cursor == start


def test_keep_closes_session():
    session = TrimSession(pick(line(0, 0, 5, 0), index=0), pick(line(8, -3, 8, 3), index=1))
    session.open()

    kept = session.keep()
    assert kept.success
    assert kept.data == "LINE 0.0 0.0   8.0 0.0"
    assert session.state == SessionState.KEPT
    assert session.next().status == ResultStatus.SESSION_CLOSED
    assert session.keep().status == ResultStatus.SESSION_CLOSED
    assert session.cancel().status == ResultStatus.SESSION_CLOSED


def test_preview_marks_ips_endpoints_and_outcome(host):
    session = TrimSession(pick(line(0, 0, 10, 0), index=0),
                          pick(arc((8, 0), (5, 3), (2, 0), (5, 0)), index=1), host=host)
    session.open()

    ip_marks = [p for p in host.points if p[1] == "red"]
    end_marks = [p for p in host.points if p[1] == "orange"]
    assert len(ip_marks) == 2
    assert sorted(d for _, _, d, _ in ip_marks) == [6.0, 11.0]
    assert len(end_marks) == 2

    assert len(host.polylines) == 1
    _, stroke, thickness, _ = host.polylines[0]
    assert stroke == "yellow"
    assert thickness == 2.4


def test_preview_arc_outcome_uses_arc_stroke(quarter_arc, tangent_at_180, host):
    session = TrimSession(pick(quarter_arc, index=0), pick(tangent_at_180, index=1), host=host)
    session.open()

    pts, stroke, thickness, _ = host.polylines[0]
    assert stroke == "magenta"
    assert thickness == 3.2
    assert len(pts) == 72


def test_preview_suppressed_without_map(quarter_arc, tangent_at_180):
    host = RecordingHost(map_valid=False)
    session = TrimSession(pick(quarter_arc, index=0), pick(tangent_at_180, index=1), host=host)

    assert session.open().success
    assert host.points == []
    assert host.clears == 0


# =============================================================================
# Run
# =============================================================================

def test_run_trim_default_outcome():
    result = run_trim(pick(line(0, 0, 5, 0), index=4), pick(line(8, -3, 8, 3), index=7))

    assert result.accepted
    assert result.replace_index == 4
    assert result.segment_text == "LINE 0.0 0.0   8.0 0.0"


def test_run_trim_with_driver(quarter_arc, tangent_at_180):
    chosen = {}

    def driver(session):
        session.next()
        chosen["text"] = session.current.replacement_text
        session.keep()

    result = run_trim(pick(quarter_arc, index=2), pick(tangent_at_180, index=3), driver=driver)
    assert result.accepted
    assert result.replace_index == 2
    assert result.segment_text == chosen["text"]


def test_run_trim_driver_cancel():
    result = run_trim(pick(line(0, 0, 5, 0), index=4), pick(line(8, -3, 8, 3), index=7),
                      driver=lambda session: session.cancel())

    assert result.accepted is False
    assert result.replace_index == -1
    assert result.status == ResultStatus.CANCELLED
