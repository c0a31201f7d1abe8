"""
TurnEdit - Trim Operation
=========================

Trim-Werkzeug (A = zu ersetzendes Element, B = Ziel).

Verwendung:
    from turnedit.operations import TrimSession

    session = TrimSession(pick_a, pick_b, host=host)
    result = session.open()

    if result.success:
        session.next()               # oder prev()
        kept = session.keep()
        region_line = kept.data      # "LINE ..." oder "ARC3_CCW ..."

Regeln:
- Schnittpunkte: B gilt als unendliche Linie bzw. Vollkreis, A ebenso
- Zyklisch gewählt werden Trim-ERGEBNISSE, nicht rohe Schnittpunkte
- Linie: Split (IP strikt innen) oder Trim/Extend beider Enden (Strahl-Test)
- Bogen: intern CW-normalisiert, beide Äste je festem Ende
"""

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances, edit_tolerance
from ..geometry import (
    Point, angle_std, dedup_points, delta_cw, dist, intersect_circle_circle,
    intersect_infinite_lines, intersect_line_circle_infinite,
    is_on_ray_from_fixed_through_moving, is_point_on_segment_interior,
    norm_2pi, project_onto_circle, sample_arc_std,
)
from ..host import (
    COLOR_ENDPOINT, COLOR_INTERSECTION, COLOR_TRIM_ARC, COLOR_TRIM_LINE, PreviewHost,
)
from ..segments import ArcSeg, LineSeg, Pick, Segment, format_arc3, format_line
from .base import OperationResult, ResultStatus, SessionState, ToolSession

PREVIEW_SAMPLES = 72


@dataclass
class TrimOption:
    """Ein mögliches Trim-Ergebnis für Element A."""
    label: str
    intersection_point: Point
    replacement_text: str
    endpoint_a: Point
    endpoint_b: Point
    preview_polyline: List[Point] = field(default_factory=list)
    sweep_class: Optional[str] = None   # nur Bögen: "Short" / "Long" / "180°"

    @property
    def is_arc(self) -> bool:
        return self.replacement_text.upper().startswith("ARC3_")


# =============================================================================
# Schnittpunkte (unendliche Primitive)
# =============================================================================

def build_intersection_candidates(a: Segment, b: Segment) -> List[Point]:
    """Schnittpunkte von A und B als unendliche Linie / Vollkreis, dedupliziert."""
    pts: List[Point] = []
    r_min = Tolerances.DEGENERATE_RADIUS

    if isinstance(a, LineSeg) and isinstance(b, LineSeg):
        ip = intersect_infinite_lines(a.a, a.b, b.a, b.b)
        if ip is not None:
            pts.append(ip)

    elif isinstance(a, LineSeg) and isinstance(b, ArcSeg):
        if b.radius > r_min:
            pts.extend(intersect_line_circle_infinite(a.a, a.b, b.c, b.radius))

    elif isinstance(a, ArcSeg) and isinstance(b, LineSeg):
        if a.radius > r_min:
            pts.extend(intersect_line_circle_infinite(b.a, b.b, a.c, a.radius))

    elif isinstance(a, ArcSeg) and isinstance(b, ArcSeg):
        if a.radius > r_min and b.radius > r_min:
            pts.extend(intersect_circle_circle(a.c, a.radius, b.c, b.radius))

    return dedup_points(pts, Tolerances.TRIM_INTERSECTION_DEDUP)


def build_helper_target_line(a: Segment, b: Segment) -> Optional[LineSeg]:
    """
    Hilfslinie als Ersatz-Ziel, wenn A und B sich nicht schneiden.

    Line-Arc: durch das Bogen-Zentrum, senkrecht zur Linie.
    Arc-Arc: durch beide Zentren.
    """
    if isinstance(a, ArcSeg) and isinstance(b, ArcSeg):
        if dist(a.c, b.c) < Tolerances.DEGENERATE_LENGTH:
            return None
        return LineSeg(a.c, b.c)

    if isinstance(a, LineSeg) and isinstance(b, ArcSeg):
        line, arc = a, b
    elif isinstance(a, ArcSeg) and isinstance(b, LineSeg):
        line, arc = b, a
    else:
        return None

    vx = line.b.x - line.a.x
    vz = line.b.z - line.a.z
    length = math.hypot(vx, vz)
    if not math.isfinite(length) or length < Tolerances.DEGENERATE_LENGTH:
        return None

    nx = -vz / length
    nz = vx / length
    return LineSeg(arc.c.offset(-nx, -nz), arc.c.offset(nx, nz))


# =============================================================================
# Linien-Ergebnisse
# =============================================================================

def _make_line_option(label: str, ip: Point, p0: Point, p1: Point) -> TrimOption:
    return TrimOption(
        label=label,
        intersection_point=ip,
        replacement_text=format_line(p0, p1),
        endpoint_a=p0,
        endpoint_b=p1,
        preview_polyline=[p0, p1],
    )


def build_line_trim_options(pick_a: Pick, ips: List[Point]) -> List[TrimOption]:
    """
    Split-, Trim- und Extend-Ergebnisse für eine Linie.

    Liegt der IP strikt innen: zwei Split-Ergebnisse (Start->IP, IP->End).
    Sonst: angeklicktes Ende und Gegen-Ende bewegen, sofern der IP auf dem
    Strahl vom festen Ende durch das bewegte Ende liegt.
    """
    seg = pick_a.segment
    a = seg.a
    b = seg.b

    edit_tol = edit_tolerance()
    col_tol = edit_tol
    between_tol = max(Tolerances.DEGENERATE_DETERMINANT, edit_tol * Tolerances.TRIM_BETWEEN_FACTOR)

    opts: List[TrimOption] = []

    for i, ip in enumerate(ips, start=1):
        if is_point_on_segment_interior(a, b, ip, col_tol, between_tol):
            opts.append(_make_line_option(f"LINE split @IP{i}: keep Start→IP", ip, a, ip))
            opts.append(_make_line_option(f"LINE split @IP{i}: keep IP→End", ip, ip, b))
            continue

        # Angeklicktes Ende zuerst, dann das Gegen-Ende
        for move_start in (pick_a.pick_start, not pick_a.pick_start):
            fixed_end = b if move_start else a
            moving_end = a if move_start else b

            if not is_on_ray_from_fixed_through_moving(ip, fixed_end, moving_end, edit_tol):
                continue

            p0 = ip if move_start else a
            p1 = b if move_start else ip
            if dist(p0, p1) <= edit_tol:
                continue
            # IP liegt auf dem bewegten Ende: Ergebnis wäre die Original-Linie
            if dist(p0, a) <= edit_tol and dist(p1, b) <= edit_tol:
                continue
            opts.append(_make_line_option(
                f"LINE trim @IP{i}: move {'Start' if move_start else 'End'}", ip, p0, p1))

    return dedup_options(opts, Tolerances.TRIM_OPTION_DEDUP)


# =============================================================================
# Bogen-Ergebnisse
# =============================================================================

def normalize_arc_to_cw(arc: ArcSeg) -> ArcSeg:
    """CCW -> CW (nur intern): Endpunkte tauschen, M und C bleiben."""
    if not arc.ccw:
        return arc
    return ArcSeg(a=arc.b, b=arc.a, m=arc.m, c=arc.c, ccw=False)


def classify_short_long_cw(start: Point, end: Point, c: Point) -> str:
    delta = delta_cw(angle_std(c, start), angle_std(c, end))

    if abs(delta - math.pi) <= Tolerances.ANGLE_180_TRIM:
        return "180°"
    return "Short" if delta <= math.pi + Tolerances.ANGLE_EPSILON else "Long"


def make_arc_cw_option(label: str, ip: Point, start: Point, end: Point,
                       c: Point, r: float) -> Optional[TrimOption]:
    """
    Gerichteter CW-Ast von start nach end um c.

    Der Ausgabe-Tag ist immer ARC3_CCW, auch wenn der Ast im Uhrzeigersinn
    aufgebaut wurde; der Leser der Zeile entscheidet über den Mittelpunkt.
    """
    a_start = angle_std(c, start)
    a_end = angle_std(c, end)

    delta = delta_cw(a_start, a_end)
    if not math.isfinite(delta) or delta < Tolerances.ANGLE_MIN_SWEEP:
        return None

    # CW ist negativ im Standard-Winkelraum
    sweep = -delta
    a_mid = norm_2pi(a_start + 0.5 * sweep)
    mid = Point(c.x + r * math.cos(a_mid), c.z + r * math.sin(a_mid))

    sweep_class = classify_short_long_cw(start, end, c)
    return TrimOption(
        label=f"{label} | {sweep_class}",
        intersection_point=ip,
        replacement_text=format_arc3(start, mid, end, c, ccw=True),
        endpoint_a=start,
        endpoint_b=end,
        preview_polyline=sample_arc_std(c, r, a_start, sweep, PREVIEW_SAMPLES),
        sweep_class=sweep_class,
    )


def build_arc_trim_options(pick_a: Pick, ips: List[Point]) -> List[TrimOption]:
    """
    Beide Äste (fest->IP und IP->fest) für beide Original-Endpunkte als festes Ende.
    Schnittpunkte, die nicht auf dem Vollkreis liegen, werden ignoriert.
    """
    arc = normalize_arc_to_cw(pick_a.segment)
    c = arc.c
    r = arc.radius
    if r <= Tolerances.DEGENERATE_RADIUS:
        return []

    tol = edit_tolerance()
    opts: List[TrimOption] = []

    for i, ip in enumerate(ips, start=1):
        if abs(dist(ip, c) - r) > Tolerances.TRIM_ON_CIRCLE:
            logger.debug(f"[TRIM] IP{i} nicht auf dem Kreis (|d-R|={abs(dist(ip, c) - r):.2e})")
            continue

        # Endpunkt exakt auf den Kreis, damit Radius und Zentrum erhalten bleiben
        ip_on = project_onto_circle(ip, c, r) or ip

        for fe, fixed_end in enumerate((arc.a, arc.b)):
            if dist(ip_on, fixed_end) <= tol:
                continue

            label = f"ARC @IP{i}: keep {'Start' if fe == 0 else 'End'}"
            for start, end in ((fixed_end, ip_on), (ip_on, fixed_end)):
                opt = make_arc_cw_option(label, ip, start, end, c, r)
                if opt is not None:
                    opts.append(opt)

    return dedup_options(opts, Tolerances.TRIM_OPTION_DEDUP)


def build_trim_options(pick_a: Pick, ips: List[Point]) -> List[TrimOption]:
    if isinstance(pick_a.segment, LineSeg):
        return build_line_trim_options(pick_a, ips)
    if isinstance(pick_a.segment, ArcSeg):
        return build_arc_trim_options(pick_a, ips)
    return []


def dedup_options(opts: List[TrimOption], tol: float) -> List[TrimOption]:
    """Gleicher Ersatz-Text oder (IP, A, B) innerhalb tol gilt als Duplikat."""
    out: List[TrimOption] = []
    for o in opts:
        dup = False
        for x in out:
            if o.replacement_text == x.replacement_text:
                dup = True
                break
            if (dist(o.intersection_point, x.intersection_point) <= tol
                    and dist(o.endpoint_a, x.endpoint_a) <= tol
                    and dist(o.endpoint_b, x.endpoint_b) <= tol):
                dup = True
                break
        if not dup:
            out.append(o)
    return out


def find_default_option_index(options: List[TrimOption], pick_a: Pick) -> int:
    """
    Bevorzugt ein Ergebnis, das das angeklickte Ende bewegt und das andere
    Ende unverändert lässt; unter mehreren gewinnt der IP nächst am Klick.
    Sonst Index 0.
    """
    if not options or pick_a is None or pick_a.segment is None:
        return 0

    tol = edit_tolerance()
    seg = pick_a.segment
    picked = pick_a.picked_end_point
    other = seg.b if pick_a.pick_start else seg.a
    target = pick_a.picked_point if pick_a.picked_point is not None else picked

    def qualifies(o: TrimOption) -> bool:
        if isinstance(seg, LineSeg):
            if pick_a.pick_start:
                return dist(o.endpoint_a, seg.a) > tol and dist(o.endpoint_b, seg.b) <= tol
            return dist(o.endpoint_b, seg.b) > tol and dist(o.endpoint_a, seg.a) <= tol

        ends = (o.endpoint_a, o.endpoint_b)
        keeps_other = any(dist(e, other) <= tol for e in ends)
        moves_picked = all(dist(e, picked) > tol for e in ends)
        return keeps_other and moves_picked

    best = -1
    best_d = float("inf")
    for i, o in enumerate(options):
        if not qualifies(o):
            continue
        d = dist(o.intersection_point, target)
        if d < best_d:
            best = i
            best_d = d

    return best if best >= 0 else 0


def _fmt(v: float) -> str:
    text = f"{v:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


# =============================================================================
# Session
# =============================================================================

class TrimSession(ToolSession):
    """
    Interaktive Trim-Session (Ersatz für den Prev/Next/Keep/Cancel-Dialog).

    Beim Öffnen wird ein Standard-Ergebnis markiert, Keep ist also sofort möglich.
    """

    tool_name = "Trim"

    def __init__(self, pick_a: Optional[Pick], pick_b: Optional[Pick],
                 host: Optional[PreviewHost] = None):
        super().__init__(host)
        self.pick_a = pick_a
        self.pick_b = pick_b
        self._options: List[TrimOption] = []
        self._intersections: List[Point] = []
        self.used_helper_target = False
        self.info_text = ""

    @property
    def candidates(self) -> List[TrimOption]:
        return self._options

    @property
    def options(self) -> List[TrimOption]:
        return self._options

    @property
    def intersections(self) -> List[Point]:
        return self._intersections

    @property
    def replace_index(self) -> int:
        return self.pick_a.index if self.pick_a is not None else -1

    def _selection_error(self) -> Optional[str]:
        if self.pick_a is None or self.pick_b is None:
            return "Trim: invalid selection."
        seg_a = self.pick_a.segment
        seg_b = self.pick_b.segment
        if seg_a is None or seg_b is None:
            return "Trim: invalid selection."
        if seg_a is seg_b or (self.pick_a.index >= 0 and self.pick_a.index == self.pick_b.index):
            return "Trim: select two different elements."
        if seg_a.is_degenerate or seg_b.is_degenerate:
            return "Trim: degenerate element."
        return None

    def open(self) -> OperationResult:
        """Berechnet Schnittpunkte und Ergebnisse, markiert das Standard-Ergebnis."""
        if not self.is_open:
            return self._closed()

        error = self._selection_error()
        if error is not None:
            logger.warning(f"[TRIM] {error}")
            return self._finish(OperationResult.fail(ResultStatus.INVALID_SELECTION, error))

        seg_a = self.pick_a.segment
        seg_b = self.pick_b.segment

        ips = build_intersection_candidates(seg_a, seg_b)
        if not ips and is_enabled("trim_helper_target_fallback"):
            helper = build_helper_target_line(seg_a, seg_b)
            if helper is not None:
                ips = build_intersection_candidates(seg_a, helper)
                self.used_helper_target = bool(ips)
                if ips:
                    logger.warning(f"[TRIM] Kein Schnitt A∩B, Hilfslinie {helper} als Ziel verwendet")

        self._intersections = ips
        if not ips:
            self._options = []
            logger.warning(f"[TRIM] Keine Schnittpunkte: {seg_a} / {seg_b}")
            return self._finish(OperationResult.fail(
                ResultStatus.NO_INTERSECTIONS, "Trim: no intersections found."))

        self._options = build_trim_options(self.pick_a, ips)
        if not self._options:
            logger.warning(f"[TRIM] {len(ips)} Schnittpunkte, aber keine gültigen Ergebnisse")
            return self._finish(OperationResult.fail(
                ResultStatus.NO_VALID_OUTCOMES, "Trim: no valid trim outcomes."))

        self._cursor = find_default_option_index(self._options, self.pick_a)
        logger.debug(f"[TRIM] {len(ips)} IPs, {len(self._options)} Ergebnisse, Standard={self._cursor + 1}")

        self._refresh()
        return self._finish(OperationResult.ok(self.info_text, data=len(self._options)))

    def cycle(self, step: int = 1) -> OperationResult:
        if not self.is_open:
            return self._closed()

        if not self._options:
            return self._finish(OperationResult.fail(
                ResultStatus.NO_VALID_OUTCOMES, "Trim: nothing to cycle."))

        self._advance(step)
        self._refresh()
        return self._finish(OperationResult.ok(self.info_text, data=self._cursor))

    def next(self) -> OperationResult:
        return self.cycle(+1)

    def prev(self) -> OperationResult:
        return self.cycle(-1)

    def keep(self) -> OperationResult:
        """Übernimmt das angezeigte Ergebnis und beendet die Session."""
        if not self.is_open:
            return self._closed()

        opt = self.current
        if opt is None:
            return self._finish(OperationResult.fail(
                ResultStatus.NOTHING_TO_KEEP, "Trim: nothing to keep."))

        logger.info(f"[TRIM] Ergebnis {self._cursor + 1} übernommen: {opt.label}")
        return self._close(SessionState.KEPT, OperationResult.ok(
            "Trim: replacement segment returned (applied by caller).", data=opt.replacement_text))

    def _refresh(self) -> None:
        opt = self.current
        if opt is not None:
            self.info_text = (
                f"Outcomes: {len(self._options)}   (cycle and Keep)\n"
                f"[{self._cursor + 1}] {opt.label}\n"
                f"IP ≈ ({_fmt(opt.intersection_point.x)},{_fmt(opt.intersection_point.z)})   "
                f"A=({_fmt(opt.endpoint_a.x)},{_fmt(opt.endpoint_a.z)})   "
                f"B=({_fmt(opt.endpoint_b.x)},{_fmt(opt.endpoint_b.z)})"
            )
        self.render_preview()

    def render_preview(self) -> None:
        if not self.host.map_valid:
            return

        self.host.clear_preview_only()
        opt = self.current
        if opt is None:
            return

        tol = edit_tolerance()
        ips = dedup_points([o.intersection_point for o in self._options], tol)
        for p in ips:
            hi = dist(p, opt.intersection_point) <= tol
            self.host.draw_preview_point_world(p, COLOR_INTERSECTION, 11.0 if hi else 6.0, 1.0 if hi else 0.35)

        self.host.draw_preview_point_world(opt.endpoint_a, COLOR_ENDPOINT, 7.0, 0.95)
        self.host.draw_preview_point_world(opt.endpoint_b, COLOR_ENDPOINT, 7.0, 0.95)

        if len(opt.preview_polyline) >= 2:
            self.host.draw_preview_polyline_world(
                opt.preview_polyline,
                COLOR_TRIM_ARC if opt.is_arc else COLOR_TRIM_LINE,
                3.2 if opt.is_arc else 2.4,
                1.0,
            )


# =============================================================================
# Run (headless Einstieg)
# =============================================================================

@dataclass
class TrimRunResult:
    accepted: bool
    replace_index: int
    segment_text: Optional[str]
    status: ResultStatus
    message: str = ""


def run_trim(pick_a: Optional[Pick], pick_b: Optional[Pick],
             host: Optional[PreviewHost] = None,
             driver: Optional[Callable[[TrimSession], None]] = None) -> TrimRunResult:
    """
    Kompletter Trim-Ablauf.

    driver übernimmt die Rolle des Dialogs (next/prev/keep/cancel). Ohne
    driver wird das Standard-Ergebnis übernommen.
    """
    session = TrimSession(pick_a, pick_b, host=host)
    opened = session.open()

    if not opened.success:
        session.cancel()
        return TrimRunResult(False, -1, None, opened.status, opened.message)

    if driver is None:
        final = session.keep()
    else:
        driver(session)
        final = session.cancel() if session.is_open else session.final_result

    if final is not None and final.success:
        return TrimRunResult(True, session.replace_index, final.data, final.status, final.message)

    status = final.status if final is not None else ResultStatus.CANCELLED
    message = final.message if final is not None else "Trim: cancelled."
    return TrimRunResult(False, -1, None, status, message)
