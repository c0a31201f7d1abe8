"""
TurnEdit - Segmente und Region-Input-Text
=========================================

Segment ist eine Tagged Union aus LineSeg und ArcSeg (keine Klassen-Hierarchie
mit optionalen Feldern). Dazu Pick (welches Element, welche Seite) und der
Text-Codec für die Profil-Mini-Sprache:

    LINE      x1 z1   x2 z2
    ARC3_CW   xs zs   xm zm   xe ze   cx cz
    ARC3_CCW  xs zs   xm zm   xe ze   cx cz

Zahlen sind whitespace-getrennt und kulturinvariant (Punkt als Dezimaltrenner).
"""

import math
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union

from loguru import logger

from config.tolerances import Tolerances
from .geometry import Point, dist


class SegKind(Enum):
    """Segment-Typen"""
    LINE = auto()
    ARC = auto()


class PickedEnd(Enum):
    """Welche Seite des Elements der User angeklickt hat"""
    START = auto()
    END = auto()


@dataclass(frozen=True)
class LineSeg:
    """Linie von a nach b"""
    a: Point
    b: Point

    @property
    def kind(self) -> SegKind:
        return SegKind.LINE

    @property
    def length(self) -> float:
        return dist(self.a, self.b)

    @property
    def is_degenerate(self) -> bool:
        return self.length <= Tolerances.DEGENERATE_LENGTH

    def __repr__(self):
        return f"Line({self.a} -> {self.b})"


@dataclass(frozen=True)
class ArcSeg:
    """
    Kreisbogen von a nach b.

    c ist das maßgebliche Zentrum, m ein Punkt auf dem gewünschten Sweep
    (nur zur Ast-Unterscheidung), ccw das gespeicherte Windungs-Flag.
    """
    a: Point
    b: Point
    m: Point
    c: Point
    ccw: bool = False

    @property
    def kind(self) -> SegKind:
        return SegKind.ARC

    @property
    def radius(self) -> float:
        return dist(self.a, self.c)

    @property
    def is_degenerate(self) -> bool:
        return self.radius <= Tolerances.DEGENERATE_RADIUS

    def __repr__(self):
        turn = "CCW" if self.ccw else "CW"
        return f"Arc({self.a} -> {self.b}, C={self.c}, R={self.radius:.4f}, {turn})"


Segment = Union[LineSeg, ArcSeg]


@dataclass(frozen=True)
class Pick:
    """
    Ein gewähltes Element plus angeklickte Seite.

    picked_end ist nur ein Hinweis; beide Interpretationen werden trotzdem
    ausgewertet. index ist die Position des Elements in der Host-Liste
    (-1 wenn unbekannt).
    """
    segment: Optional[Segment]
    picked_end: PickedEnd = PickedEnd.END
    picked_point: Optional[Point] = None
    index: int = -1

    @property
    def pick_start(self) -> bool:
        return self.picked_end == PickedEnd.START

    @property
    def picked_end_point(self) -> Optional[Point]:
        """Der angeklickte Endpunkt des Segments."""
        if self.segment is None:
            return None
        return self.segment.a if self.pick_start else self.segment.b


class SegmentParseError(ValueError):
    """Ungültige LINE / ARC3_* Zeile."""


# =============================================================================
# Text-Codec
# =============================================================================

def fmt_number(v: float) -> str:
    """Round-trip Formatierung (kulturinvariant)."""
    return repr(float(v))


def _pair(p: Point) -> str:
    return f"{fmt_number(p.x)} {fmt_number(p.z)}"


def format_line(p0: Point, p1: Point) -> str:
    return f"LINE {_pair(p0)}   {_pair(p1)}"


def format_arc3(start: Point, mid: Point, end: Point, center: Point, ccw: bool = True) -> str:
    tag = "ARC3_CCW" if ccw else "ARC3_CW"
    return f"{tag} {_pair(start)}   {_pair(mid)}   {_pair(end)}   {_pair(center)}"


def format_fillet_arc3(start: Point, mid: Point, end: Point, center: Point) -> str:
    """
    Fillet-Ausgabe: immer ARC3_CCW mit sechs Punkt-Paaren
    (start, mid, end, center, start->center, end->center).
    """
    v_start = Point(center.x - start.x, center.z - start.z)
    v_end = Point(center.x - end.x, center.z - end.z)
    return (
        f"ARC3_CCW {_pair(start)}   {_pair(mid)}   {_pair(end)}   {_pair(center)}"
        f"   {_pair(v_start)}   {_pair(v_end)}"
    )


def format_segment(seg: Segment) -> str:
    """Segment -> Region-Input-Zeile (ARC3_* mit gespeichertem Windungs-Flag)."""
    if isinstance(seg, LineSeg):
        return format_line(seg.a, seg.b)
    return format_arc3(seg.a, seg.m, seg.b, seg.c, ccw=seg.ccw)


def _strip_comment(line: str) -> str:
    idx = line.find(";")
    return line if idx < 0 else line[:idx]


def _parse_number(token: str) -> float:
    if "_" in token:
        raise SegmentParseError(f"Invalid number '{token}'")
    try:
        value = float(token)
    except ValueError:
        raise SegmentParseError(f"Invalid number '{token}'") from None
    if not math.isfinite(value):
        raise SegmentParseError(f"Non-finite number '{token}'")
    return value


def parse_segment(text: str) -> Segment:
    """
    Parst eine LINE / ARC3_CW / ARC3_CCW Zeile.

    Args:
        text: Region-Input-Zeile, optional mit ';'-Kommentar

    Returns:
        LineSeg oder ArcSeg

    Raises:
        SegmentParseError bei leeren, unbekannten oder unvollständigen Zeilen
    """
    raw = _strip_comment(text or "").strip()
    if not raw:
        raise SegmentParseError("Comment/blank line.")

    parts = raw.split()
    cmd = parts[0].upper()

    if cmd == "LINE":
        if len(parts) < 5:
            raise SegmentParseError("LINE requires 4 numbers: LINE x1 z1 x2 z2")
        x1, z1, x2, z2 = (_parse_number(t) for t in parts[1:5])
        return LineSeg(Point(x1, z1), Point(x2, z2))

    if cmd in ("ARC3_CW", "ARC3_CCW"):
        if len(parts) < 9:
            raise SegmentParseError("ARC3_* requires at least 8 numbers: ARC3_* xs zs xm zm xe ze cx cz")
        xs, zs, xm, zm, xe, ze, cx, cz = (_parse_number(t) for t in parts[1:9])
        if len(parts) > 9:
            logger.debug(f"[SEGMENTS] {cmd}: {len(parts) - 9} trailing values ignored")
        return ArcSeg(
            a=Point(xs, zs),
            b=Point(xe, ze),
            m=Point(xm, zm),
            c=Point(cx, cz),
            ccw=(cmd == "ARC3_CCW"),
        )

    raise SegmentParseError(f"Unsupported command '{cmd}'. Expected LINE, ARC3_CW, or ARC3_CCW.")


def seed_radius_from_segment(seg: Optional[Segment]) -> Optional[float]:
    """Radius eines Bogens als Fillet-Startwert (None für Linien/degenerierte Bögen)."""
    if not isinstance(seg, ArcSeg):
        return None
    r = seg.radius
    if r <= Tolerances.DEGENERATE_RADIUS:
        return None
    return r
