"""
TurnEdit - Arc-Law (Fillet-Kandidaten-Normalisierung)
=====================================================

Reine Logik, kein Rendering:
- Eingabe: Kandidaten-Zentren (CP-Liste) und Tangentenpunkt-Funktionen
  für Element A und Element B
- Ausgabe: FilletArcData-Liste (kurzer Sweep <= 180°, optional mit
  180°-Komplement) und formatierter Log-Text

Tan1 liegt immer auf Element A, Tan2 auf Element B. Der Sweep wird so
vorzeichenbehaftet, dass das Sampling bei Tan1 beginnt
(+ = CW von +Z, - = CCW von +Z).
"""

import math
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from loguru import logger

from config.tolerances import Tolerances
from .geometry import (
    Point, TWO_PI, angle_cw_from_z_plus, dist, norm_2pi, point_cw_from_z,
)

TangentFn = Callable[[Point, float], Optional[Point]]


@dataclass
class FilletArcData:
    """Ein klassifizierter Fillet-Bogen-Kandidat."""
    cp: Point
    r: float
    tan1: Point
    tan2: Point
    mid_short: Point
    start_angle_cw_from_z: float
    short_sweep_signed: float
    is_180_complement: bool = False
    index: int = 0            # 1-basiert, für Log/Anzeige
    pair_type: str = ""       # "LINE-LINE", "LINE-ARC", "ARC-ARC"
    center_source: str = ""   # "C1", "C2"... (welches Kandidaten-Zentrum)

    @property
    def end_angle_cw_from_z(self) -> float:
        return norm_2pi(self.start_angle_cw_from_z + self.short_sweep_signed)

    @property
    def mid_angle_cw_from_z(self) -> float:
        return norm_2pi(self.start_angle_cw_from_z + 0.5 * self.short_sweep_signed)


def build_candidates(pair_label: str, r_fillet: float, centers: Sequence[Point],
                     try_tan_a: TangentFn, try_tan_b: TangentFn) -> List[FilletArcData]:
    """
    Baut klassifizierte Fillet-Bögen aus Kandidaten-Zentren.

    Zentren, für die eine der beiden Tangenten-Funktionen versagt, werden
    verworfen. Bei exakt 180° wird zusätzlich der Komplement-Bogen
    (gegenläufiger Ast) angehängt.

    Args:
        pair_label: "LINE-LINE" / "LINE-ARC" / "ARC-ARC"
        r_fillet: Fillet-Radius
        centers: Kandidaten-Zentren (bereits dedupliziert)
        try_tan_a: Tangentenpunkt auf Element A (oder None)
        try_tan_b: Tangentenpunkt auf Element B (oder None)

    Returns:
        Geordnete Liste von FilletArcData
    """
    out: List[FilletArcData] = []

    if not centers:
        return out

    if r_fillet <= Tolerances.FILLET_MIN_RADIUS:
        return out

    idx = 0
    for ci, cp in enumerate(centers):
        c_label = f"C{ci + 1}"

        tan_a = try_tan_a(cp, r_fillet)
        if tan_a is None:
            logger.debug(f"[ARC-LAW] {c_label} verworfen: kein Tangentenpunkt auf A")
            continue

        tan_b = try_tan_b(cp, r_fillet)
        if tan_b is None:
            logger.debug(f"[ARC-LAW] {c_label} verworfen: kein Tangentenpunkt auf B")
            continue

        # Beide Tangentenpunkte müssen auf dem Fillet-Kreis liegen
        err_a = abs(dist(cp, tan_a) - r_fillet)
        err_b = abs(dist(cp, tan_b) - r_fillet)
        if err_a > Tolerances.FILLET_TANGENT_CHECK or err_b > Tolerances.FILLET_TANGENT_CHECK:
            logger.debug(f"[ARC-LAW] {c_label} verworfen: Tangente nicht auf dem Kreis "
                         f"(A={err_a:.2e}, B={err_b:.2e})")
            continue

        ang_a = angle_cw_from_z_plus(cp, tan_a)
        ang_b = angle_cw_from_z_plus(cp, tan_b)

        # Delta in steigender CW-Richtung von A nach B (0..2pi)
        delta_cw = ang_b - ang_a
        if delta_cw < 0.0:
            delta_cw += TWO_PI

        # Kurzer Ast: <= 180°, sonst gegenläufig
        if delta_cw > math.pi + Tolerances.ANGLE_EPSILON:
            sweep = -(TWO_PI - delta_cw)
        else:
            sweep = delta_cw

        ang_mid = norm_2pi(ang_a + 0.5 * sweep)

        idx += 1
        out.append(FilletArcData(
            cp=cp,
            r=r_fillet,
            tan1=tan_a,
            tan2=tan_b,
            mid_short=point_cw_from_z(cp, r_fillet, ang_mid),
            start_angle_cw_from_z=ang_a,
            short_sweep_signed=sweep,
            is_180_complement=False,
            index=idx,
            pair_type=pair_label or "",
            center_source=c_label,
        ))

        # Sonderfall exakt 180°: beide Äste gleich kurz
        if abs(abs(sweep) - math.pi) <= Tolerances.ANGLE_180_FILLET:
            opp_sweep = -math.copysign(math.pi, sweep)
            ang_mid_opp = norm_2pi(ang_a + 0.5 * opp_sweep)

            idx += 1
            out.append(FilletArcData(
                cp=cp,
                r=r_fillet,
                tan1=tan_a,
                tan2=tan_b,
                mid_short=point_cw_from_z(cp, r_fillet, ang_mid_opp),
                start_angle_cw_from_z=ang_a,
                short_sweep_signed=opp_sweep,
                is_180_complement=True,
                index=idx,
                pair_type=pair_label or "",
                center_source=c_label,
            ))

    return out


def _fmt(v: float) -> str:
    # Entspricht "0.###"
    text = f"{v:.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


def _fmt_deg(rad: float) -> str:
    return _fmt(math.degrees(rad)) + "°"


def build_log(candidates: Optional[List[FilletArcData]], r: float, pair_label: str) -> str:
    """Formatierter Diagnose-Text für den optionalen Log-Viewer des Hosts."""
    lines = [
        "=== ARC LAW ===",
        f"r = {_fmt(r)}",
        f"Pair: {pair_label}",
        f"Candidates: {len(candidates) if candidates else 0}",
        "",
    ]

    if not candidates:
        lines.append("No candidates.")
        return "\n".join(lines) + "\n"

    for d in candidates:
        suffix = "   (180° complement)" if d.is_180_complement else ""
        direction = "CW" if d.short_sweep_signed >= 0.0 else "CCW"
        lines.append(f"[{d.index}] Center = ({_fmt(d.cp.x)},{_fmt(d.cp.z)})  {d.center_source}{suffix}")
        lines.append(f"     tan1(A) = ({_fmt(d.tan1.x)},{_fmt(d.tan1.z)})  "
                     f"ang(tan1) CW(Z+) = {_fmt_deg(d.start_angle_cw_from_z)}")
        lines.append(f"     tan2(B) = ({_fmt(d.tan2.x)},{_fmt(d.tan2.z)})  "
                     f"ang(tan2) CW(Z+) = {_fmt_deg(d.end_angle_cw_from_z)}")
        lines.append(f"     sweep(<=180) = {_fmt_deg(abs(d.short_sweep_signed))}  dir={direction}")
        lines.append(f"     ang(midShort) CW(Z+) = {_fmt_deg(d.mid_angle_cw_from_z)}  "
                     f"midShort=({_fmt(d.mid_short.x)},{_fmt(d.mid_short.z)})")
        lines.append("")

    return "\n".join(lines) + "\n"
