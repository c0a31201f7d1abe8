"""
TurnEdit - Fillet Operation
===========================

Tangentialer Bogen mit gewähltem Radius zwischen zwei Elementen
(Line-Line, Line-Arc, Arc-Arc).

Verwendung:
    from turnedit.operations import FilletSession

    session = FilletSession(pick_a, pick_b, host=host, radius="2.5")
    result = session.open()

    if result.success:
        session.cycle()              # ersten Kandidaten markieren
        kept = session.keep()
        region_line = kept.data      # "ARC3_CCW ..."

Zentren entstehen als Schnitt der Offset-Kurven (Linie um ±r verschoben,
Kreis mit Radius R±r). Die Tangentenpunkte liefert die Projektion auf die
Linie bzw. die radiale Projektion auf den Bogen-Kreis.
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances
from ..arc_law import FilletArcData, build_candidates, build_log
from ..geometry import (
    Point, add_unique_point, intersect_circle_circle, intersect_infinite_lines,
    intersect_line_circle_infinite, project_onto_circle, project_onto_line,
    sample_arc_cw_from_z, unit_dir_and_left_normal,
)
from ..host import (
    COLOR_CENTER, COLOR_FILLET_ARC, COLOR_MID, COLOR_TAN1, COLOR_TAN2, PreviewHost,
)
from ..segments import ArcSeg, LineSeg, Pick, Segment, format_fillet_arc3
from .base import OperationResult, ResultStatus, SessionState, ToolSession

RadiusInput = Union[str, float, int, None]

_SIDES = (-1, +1)

ARC_SAMPLES = 96
MARK_DIAM_PX = 7.0
BASE_OPACITY = 0.50
HIGHLIGHT_OPACITY = 1.00


# =============================================================================
# Zentren (LL / LA / AA)
# =============================================================================

def pair_type_label(a: Optional[Segment], b: Optional[Segment]) -> str:
    a_line = isinstance(a, LineSeg)
    b_line = isinstance(b, LineSeg)
    a_arc = isinstance(a, ArcSeg)
    b_arc = isinstance(b, ArcSeg)

    if a_line and b_line:
        return "LINE-LINE"
    if (a_line and b_arc) or (a_arc and b_line):
        return "LINE-ARC"
    if a_arc and b_arc:
        return "ARC-ARC"
    return "UNSUPPORTED"


def line_line_centers(l1: LineSeg, l2: LineSeg, r: float) -> List[Point]:
    """Schnitt der vier Offset-Linien-Kombinationen (±r je Linie)."""
    out: List[Point] = []
    if r <= Tolerances.FILLET_MIN_RADIUS:
        return out

    frame1 = unit_dir_and_left_normal(l1.a, l1.b)
    frame2 = unit_dir_and_left_normal(l2.a, l2.b)
    if frame1 is None or frame2 is None:
        return out

    (_, (n1x, n1z)), (_, (n2x, n2z)) = frame1, frame2

    for s1 in _SIDES:
        a1 = l1.a.offset(s1 * r * n1x, s1 * r * n1z)
        b1 = l1.b.offset(s1 * r * n1x, s1 * r * n1z)

        for s2 in _SIDES:
            a2 = l2.a.offset(s2 * r * n2x, s2 * r * n2z)
            b2 = l2.b.offset(s2 * r * n2x, s2 * r * n2z)

            ip = intersect_infinite_lines(a1, b1, a2, b2)
            if ip is not None:
                add_unique_point(out, ip, Tolerances.FILLET_CENTER_DEDUP)

    return out


def line_arc_centers(line: LineSeg, arc: ArcSeg, r: float) -> List[Point]:
    """Offset-Linie (±r) gegen Offset-Kreis (R±r), bis zu 8 Roh-Zentren."""
    out: List[Point] = []
    if r <= Tolerances.FILLET_MIN_RADIUS:
        return out

    frame = unit_dir_and_left_normal(line.a, line.b)
    if frame is None:
        return out
    _, (nx, nz) = frame

    arc_r = arc.radius
    if arc_r < Tolerances.DEGENERATE_RADIUS:
        return out

    for s_line in _SIDES:
        p1 = line.a.offset(s_line * r * nx, s_line * r * nz)
        p2 = line.b.offset(s_line * r * nx, s_line * r * nz)

        for s_arc in _SIDES:
            ro = arc_r + s_arc * r
            if ro <= Tolerances.DEGENERATE_RADIUS:
                continue

            for hit in intersect_line_circle_infinite(p1, p2, arc.c, ro):
                add_unique_point(out, hit, Tolerances.FILLET_CENTER_DEDUP)

    return out


def arc_arc_centers(a1: ArcSeg, a2: ArcSeg, r: float) -> List[Point]:
    """Schnitt der Offset-Kreise (R1±r, R2±r), bis zu 8 Roh-Zentren."""
    out: List[Point] = []
    if r <= Tolerances.FILLET_MIN_RADIUS:
        return out

    r1 = a1.radius
    r2 = a2.radius
    if r1 < Tolerances.DEGENERATE_RADIUS or r2 < Tolerances.DEGENERATE_RADIUS:
        return out

    for s1 in _SIDES:
        ro1 = r1 + s1 * r
        if ro1 <= Tolerances.DEGENERATE_RADIUS:
            continue

        for s2 in _SIDES:
            ro2 = r2 + s2 * r
            if ro2 <= Tolerances.DEGENERATE_RADIUS:
                continue

            for hit in intersect_circle_circle(a1.c, ro1, a2.c, ro2):
                add_unique_point(out, hit, Tolerances.FILLET_CENTER_DEDUP)

    return out


def build_fillet_centers(s1: Segment, s2: Segment, r: float) -> List[Point]:
    """Dispatch nach Paar-Typ; Reihenfolge der Elemente ist egal."""
    if isinstance(s1, LineSeg) and isinstance(s2, LineSeg):
        return line_line_centers(s1, s2, r)
    if isinstance(s1, LineSeg) and isinstance(s2, ArcSeg):
        return line_arc_centers(s1, s2, r)
    if isinstance(s1, ArcSeg) and isinstance(s2, LineSeg):
        return line_arc_centers(s2, s1, r)
    if isinstance(s1, ArcSeg) and isinstance(s2, ArcSeg):
        return arc_arc_centers(s1, s2, r)
    return []


def tangent_point_on_segment(seg: Segment, fillet_center: Point, r_fillet: float) -> Optional[Point]:
    """Tangentenpunkt des Fillet-Kreises auf dem (unendlichen/vollen) Element."""
    if isinstance(seg, LineSeg):
        return project_onto_line(fillet_center, seg.a, seg.b)
    if isinstance(seg, ArcSeg):
        return project_onto_circle(fillet_center, seg.c, seg.radius)
    return None


def build_fillet_arc3(d: FilletArcData) -> str:
    """Kandidat -> Region-Input-Zeile (ARC3_CCW, sechs Punkt-Paare)."""
    return format_fillet_arc3(d.tan1, d.mid_short, d.tan2, d.cp)


def parse_radius(value: RadiusInput) -> Optional[float]:
    """Radius aus Freitext (kulturinvariant) oder Zahl; None wenn ungültig."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, str):
        text = value.strip()
        if not text or "_" in text:
            return None
        try:
            r = float(text)
        except ValueError:
            return None
    else:
        try:
            r = float(value)
        except (TypeError, ValueError):
            return None

    if not math.isfinite(r) or r <= Tolerances.FILLET_MIN_RADIUS:
        return None
    return r


def _fmt_radius(r: float) -> str:
    text = f"{r:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _radius_text(radius: RadiusInput, seed_radius: Optional[float]) -> str:
    if radius is not None:
        return radius if isinstance(radius, str) else repr(float(radius))
    if seed_radius is not None and seed_radius > Tolerances.FILLET_MIN_RADIUS:
        return _fmt_radius(seed_radius)
    return "1.0"


# =============================================================================
# Session
# =============================================================================

class FilletSession(ToolSession):
    """
    Interaktive Fillet-Session (Ersatz für den modalen Dialog).

    Protokoll:
    - open(): Auswahl prüfen und Kandidaten berechnen
    - recompute(radius): bei Radius-Änderung neu rechnen, Markierung zurücksetzen
    - cycle(): nächsten Kandidaten markieren (mit Wrap)
    - keep(): markierten Kandidaten als ARC3_CCW-Zeile liefern, Session beenden
    - cancel(): Session ohne Ergebnis beenden
    """

    tool_name = "Fillet"

    def __init__(self, pick_a: Optional[Pick], pick_b: Optional[Pick],
                 host: Optional[PreviewHost] = None,
                 radius: RadiusInput = None,
                 seed_radius: Optional[float] = None):
        super().__init__(host)
        self.pick_a = pick_a
        self.pick_b = pick_b
        self.radius_text = _radius_text(radius, seed_radius)
        self._candidates: List[FilletArcData] = []
        self._radius = 0.0
        self.info_text = "Candidates: 0"

    @property
    def candidates(self) -> List[FilletArcData]:
        return self._candidates

    @property
    def radius(self) -> float:
        """Zuletzt gültiger Radius (0.0 wenn ungültig)."""
        return self._radius

    @property
    def pair_label(self) -> str:
        seg_a = self.pick_a.segment if self.pick_a else None
        seg_b = self.pick_b.segment if self.pick_b else None
        return pair_type_label(seg_a, seg_b)

    def _selection_error(self) -> Optional[str]:
        if self.pick_a is None or self.pick_b is None:
            return "Fillet: invalid selection."
        seg_a = self.pick_a.segment
        seg_b = self.pick_b.segment
        if seg_a is None or seg_b is None:
            return "Fillet: invalid selection."
        if seg_a is seg_b or seg_a == seg_b:
            return "Fillet: select two different elements."
        if self.pick_a.index >= 0 and self.pick_a.index == self.pick_b.index:
            return "Fillet: select two different elements."
        if seg_a.is_degenerate or seg_b.is_degenerate:
            return "Fillet: degenerate element."
        return None

    def open(self) -> OperationResult:
        """Prüft die Auswahl und berechnet die Kandidaten für den Start-Radius."""
        error = self._selection_error()
        if error is not None:
            logger.warning(f"[FILLET] {error}")
            return self._finish(OperationResult.fail(ResultStatus.INVALID_SELECTION, error))
        return self.recompute(self.radius_text)

    def recompute(self, radius: RadiusInput = None) -> OperationResult:
        """
        Berechnet Zentren und Kandidaten neu (z.B. bei Radius-Texteingabe).

        Args:
            radius: Freitext oder Zahl; None = aktueller radius_text

        Returns:
            OperationResult mit Kandidatenzahl oder Fehlerstatus
        """
        if not self.is_open:
            return self._closed()

        if radius is not None:
            self.radius_text = radius if isinstance(radius, str) else repr(float(radius))

        self._cursor = -1

        error = self._selection_error()
        if error is not None:
            self._candidates = []
            return self._finish(OperationResult.fail(ResultStatus.INVALID_SELECTION, error))

        r = parse_radius(self.radius_text)
        if r is None:
            self._candidates = []
            self._radius = 0.0
            self._clear_preview()
            self.info_text = "Candidates: 0 (invalid radius)"
            logger.warning(f"[FILLET] Ungültiger Radius: '{self.radius_text}'")
            return self._finish(OperationResult.fail(
                ResultStatus.DEGENERATE_RADIUS, "Fillet: invalid radius."))

        seg_a = self.pick_a.segment
        seg_b = self.pick_b.segment
        pair_label = self.pair_label

        centers = build_fillet_centers(seg_a, seg_b, r)
        self._radius = r
        self._candidates = build_candidates(
            pair_label, r, centers,
            lambda cp, rr: tangent_point_on_segment(seg_a, cp, rr),
            lambda cp, rr: tangent_point_on_segment(seg_b, cp, rr),
        )

        logger.debug(f"[FILLET] {pair_label} r={r:g}: {len(centers)} Zentren, "
                     f"{len(self._candidates)} Kandidaten")
        if is_enabled("turnedit_debug_logging"):
            logger.debug(build_log(self._candidates, r, pair_label))

        self.render_preview()
        self.info_text = (f"Candidates: {len(self._candidates)}   Pair: {pair_label}   "
                          f"r={_fmt_radius(r)}   Highlight: -")

        if not self._candidates:
            logger.warning(f"[FILLET] Keine Kandidaten für {pair_label} r={r:g}")
            return self._finish(OperationResult.fail(
                ResultStatus.NO_CANDIDATES, "Fillet: no fillet possible here."))

        return self._finish(OperationResult.ok(self.info_text, data=len(self._candidates)))

    def cycle(self) -> OperationResult:
        """Markiert den nächsten Kandidaten (-1 -> 0 -> 1 ... -> 0)."""
        if not self.is_open:
            return self._closed()

        if not self._candidates:
            self.info_text = "Candidates: 0 (nothing to cycle)"
            return self._finish(OperationResult.fail(
                ResultStatus.NO_CANDIDATES, "Fillet: nothing to cycle."))

        self._advance(+1)
        self.render_preview()

        n = len(self._candidates)
        self.info_text = (f"Candidates: {n}   Pair: {self.pair_label}   "
                          f"r={_fmt_radius(self._radius)}   Highlight: {self._cursor + 1}/{n}")
        return self._finish(OperationResult.ok(self.info_text, data=self._cursor))

    def keep(self) -> OperationResult:
        """Liefert den markierten Kandidaten als ARC3_CCW-Zeile und beendet die Session."""
        if not self.is_open:
            return self._closed()

        if not self._candidates or self._radius <= Tolerances.DEGENERATE_RADIUS:
            self.info_text = "Nothing to keep."
            return self._finish(OperationResult.fail(
                ResultStatus.NOTHING_TO_KEEP, "Fillet: nothing to keep."))

        d = self.current
        if d is None:
            self.info_text = "Cycle to select a fillet first, then Keep."
            return self._finish(OperationResult.fail(
                ResultStatus.NOTHING_TO_KEEP, "Fillet: cycle to select a fillet first."))

        line = build_fillet_arc3(d)

        if is_enabled("fillet_log_on_keep") and self.host.log_window_show:
            self.host.show_log("Arc Law (Fillet)", build_log(self._candidates, self._radius, self.pair_label))

        logger.info(f"[FILLET] Kandidat {d.index} ({d.center_source}) übernommen: R={d.r:g} "
                    f"C=({d.cp.x:.3f}, {d.cp.z:.3f})")
        return self._close(SessionState.KEPT,
                           OperationResult.ok("Fillet: candidate returned (inserted by caller).", data=line))

    def render_preview(self) -> None:
        if not self.host.map_valid:
            return

        self.host.clear_preview_only()
        for i, d in enumerate(self._candidates):
            op = HIGHLIGHT_OPACITY if i == self._cursor else BASE_OPACITY
            thickness = 1.5 if d.is_180_complement else 3.0

            pts = sample_arc_cw_from_z(d.cp, d.r, d.start_angle_cw_from_z, d.short_sweep_signed, ARC_SAMPLES)
            if len(pts) >= 2:
                self.host.draw_preview_polyline_world(pts, COLOR_FILLET_ARC, thickness, op)

            self.host.draw_preview_point_world(d.tan1, COLOR_TAN1, MARK_DIAM_PX, op)
            self.host.draw_preview_point_world(d.tan2, COLOR_TAN2, MARK_DIAM_PX, op)
            self.host.draw_preview_point_world(d.mid_short, COLOR_MID, MARK_DIAM_PX, op)
            self.host.draw_preview_point_world(d.cp, COLOR_CENTER, MARK_DIAM_PX, op)


# =============================================================================
# Run (headless Einstieg)
# =============================================================================

@dataclass
class FilletRunResult:
    accepted: bool
    segment_text: Optional[str]
    status: ResultStatus
    message: str = ""


def run_fillet(pick_a: Optional[Pick], pick_b: Optional[Pick], radius: RadiusInput = None,
               host: Optional[PreviewHost] = None,
               driver: Optional[Callable[[FilletSession], None]] = None,
               seed_radius: Optional[float] = None) -> FilletRunResult:
    """
    Kompletter Fillet-Ablauf.

    driver übernimmt die Rolle des modalen Dialogs (cycle/recompute/keep/cancel).
    Ohne driver wird der erste Kandidat übernommen. Bleibt die Session nach
    dem driver offen, wird sie abgebrochen.
    """
    session = FilletSession(pick_a, pick_b, host=host, radius=radius, seed_radius=seed_radius)
    opened = session.open()

    if opened.status == ResultStatus.INVALID_SELECTION:
        return FilletRunResult(False, None, opened.status, opened.message)

    if driver is None:
        if not opened.success:
            session.cancel()
            return FilletRunResult(False, None, opened.status, opened.message)
        session.cycle()
        final = session.keep()
    else:
        driver(session)
        final = session.cancel() if session.is_open else session.final_result

    if final is not None and final.success:
        return FilletRunResult(True, final.data, final.status, final.message)

    status = final.status if final is not None else ResultStatus.CANCELLED
    message = final.message if final is not None else "Fillet: cancelled."
    return FilletRunResult(False, None, status, message)
