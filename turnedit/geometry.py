"""
TurnEdit - Geometrie-Kernel
===========================

Reine, zustandslose Funktionen für die Fillet/Trim-Konstruktion.
Keine Seiteneffekte, deterministisch für identische Eingaben.

Welt-Koordinaten: Point.x = X (Radius-Richtung), Point.z = Z (axial).

Degeneration (parallele Linien, konzentrische Kreise, Null-Längen) wird
lokal erkannt und liefert leere Ergebnisse statt Exceptions.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from config.tolerances import Tolerances


TWO_PI = 2.0 * math.pi


@dataclass(frozen=True)
class Point:
    """2D-Punkt in Welt-Koordinaten (X, Z)"""
    x: float = 0.0
    z: float = 0.0

    def __post_init__(self):
        # NumPy-Skalare oder Strings sofort in native Floats umwandeln
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "z", float(self.z))

    def distance_to(self, other: 'Point') -> float:
        return math.hypot(self.x - other.x, self.z - other.z)

    def offset(self, dx: float, dz: float) -> 'Point':
        return Point(self.x + dx, self.z + dz)

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.z)

    def __repr__(self):
        return f"P({self.x:.4f}, {self.z:.4f})"


def is_finite(v: float) -> bool:
    return not (math.isnan(v) or math.isinf(v))


def dist(a: Point, b: Point) -> float:
    dx = a.x - b.x
    dz = a.z - b.z
    return math.sqrt(dx * dx + dz * dz)


def dist2(a: Point, b: Point) -> float:
    dx = a.x - b.x
    dz = a.z - b.z
    return dx * dx + dz * dz


def norm_2pi(a: float) -> float:
    """Normalisiert Radians auf [0, 2pi)."""
    a = math.fmod(a, TWO_PI)
    if a < 0.0:
        a += TWO_PI
    # fmod kann für winzige negative Werte exakt 2pi liefern
    if a >= TWO_PI:
        a -= TWO_PI
    return a


def delta_ccw(a_from: float, a_to: float) -> float:
    """CCW-Delta in [0, 2pi] von a_from nach a_to."""
    d = norm_2pi(a_to) - norm_2pi(a_from)
    if d < 0.0:
        d += TWO_PI
    return d


def delta_cw(a_from: float, a_to: float) -> float:
    """CW-Delta in [0, 2pi] von a_from nach a_to."""
    d = norm_2pi(a_from) - norm_2pi(a_to)
    if d < 0.0:
        d += TWO_PI
    return d


def angle_std(center: Point, p: Point) -> float:
    """Standard-Winkel (CCW von +X) in [0, 2pi)."""
    return norm_2pi(math.atan2(p.z - center.z, p.x - center.x))


def angle_cw_from_z_plus(center: Point, p: Point) -> float:
    """
    Winkel gemessen CW von +Z:
    0° = +Z Richtung, 90° = +X Richtung.
    Gibt Radians in [0, 2pi) zurück.
    """
    dx = p.x - center.x
    dz = p.z - center.z
    return norm_2pi(math.atan2(dx, dz))


def point_cw_from_z(center: Point, r: float, angle: float) -> Point:
    """Punkt auf dem Kreis für einen CW-von-+Z Winkel."""
    return Point(center.x + r * math.sin(angle), center.z + r * math.cos(angle))


def unit_dir_and_left_normal(a: Point, b: Point) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """
    Normierter Richtungsvektor a->b und dessen linke Normale.

    Returns:
        ((dx, dz), (nx, nz)) oder None für Null-Längen
    """
    vx = b.x - a.x
    vz = b.z - a.z
    length = math.hypot(vx, vz)
    if length < Tolerances.DEGENERATE_LENGTH:
        return None

    dx = vx / length
    dz = vz / length
    return (dx, dz), (-dz, dx)


def intersect_infinite_lines(p1: Point, p2: Point, p3: Point, p4: Point) -> Optional[Point]:
    """
    Schnittpunkt der unendlichen Linien p1->p2 und p3->p4.
    None bei parallelen/identischen Linien.
    """
    dx12 = p2.x - p1.x
    dz12 = p2.z - p1.z
    dx34 = p4.x - p3.x
    dz34 = p4.z - p3.z

    denom = dx12 * dz34 - dz12 * dx34
    if abs(denom) < Tolerances.DEGENERATE_DETERMINANT:
        return None

    dx13 = p3.x - p1.x
    dz13 = p3.z - p1.z

    t = (dx13 * dz34 - dz13 * dx34) / denom
    return Point(p1.x + t * dx12, p1.z + t * dz12)


def intersect_line_circle_infinite(a: Point, b: Point, center: Point, r: float) -> List[Point]:
    """
    Schnittpunkte der UNENDLICHEN Linie durch a->b mit dem Kreis (center, r).
    Liefert 0, 1 (Tangente) oder 2 Punkte.
    """
    hits: List[Point] = []

    if r <= 0.0:
        return hits

    dx = b.x - a.x
    dz = b.z - a.z
    dd = dx * dx + dz * dz
    if dd < Tolerances.DEGENERATE_LENGTH_SQ:
        return hits

    fx = a.x - center.x
    fz = a.z - center.z

    # |f + t d|^2 = r^2
    qa = dd
    qb = 2.0 * (fx * dx + fz * dz)
    qc = (fx * fx + fz * fz) - r * r

    disc = qb * qb - 4.0 * qa * qc
    eps = Tolerances.DEGENERATE_DETERMINANT
    if disc < -eps:
        return hits

    if abs(disc) <= eps:
        t = -qb / (2.0 * qa)
        hits.append(Point(a.x + t * dx, a.z + t * dz))
        return hits

    s = math.sqrt(max(0.0, disc))
    t1 = (-qb - s) / (2.0 * qa)
    t2 = (-qb + s) / (2.0 * qa)

    hits.append(Point(a.x + t1 * dx, a.z + t1 * dz))
    hits.append(Point(a.x + t2 * dx, a.z + t2 * dz))
    return hits


def intersect_circle_circle(c1: Point, r1: float, c2: Point, r2: float) -> List[Point]:
    """
    Kreis-Kreis-Schnittpunkte über die Radikal-Linie.
    Liefert 0, 1 (Tangente) oder 2 Punkte; konzentrische Kreise liefern nichts.
    """
    hits: List[Point] = []

    if r1 <= 0.0 or r2 <= 0.0:
        return hits

    eps = Tolerances.DEGENERATE_DETERMINANT
    dx = c2.x - c1.x
    dz = c2.z - c1.z
    d = math.sqrt(dx * dx + dz * dz)

    if d < eps:
        return hits

    if d > r1 + r2 + eps:
        return hits

    if d < abs(r1 - r2) - eps:
        return hits

    # Abstand von c1 zum Sehnen-Mittelpunkt entlang c1->c2
    a = (r1 * r1 - r2 * r2 + d * d) / (2.0 * d)
    h2 = r1 * r1 - a * a

    xm = c1.x + a * (dx / d)
    zm = c1.z + a * (dz / d)

    if h2 <= eps:
        hits.append(Point(xm, zm))
        return hits

    h = math.sqrt(max(0.0, h2))
    rx = -dz / d
    rz = dx / d

    hits.append(Point(xm + h * rx, zm + h * rz))
    hits.append(Point(xm - h * rx, zm - h * rz))
    return hits


def add_unique_point(pts: List[Point], p: Point, tol: float) -> bool:
    """Hängt p nur an, wenn kein vorhandener Punkt innerhalb tol liegt."""
    if pts is None:
        return False

    for existing in pts:
        if dist(existing, p) <= tol:
            return False

    pts.append(p)
    return True


def dedup_points(pts: List[Point], tol: float) -> List[Point]:
    out: List[Point] = []
    for p in pts or []:
        add_unique_point(out, p, tol)
    return out


def sample_arc_cw_from_z(center: Point, r: float, start_angle: float,
                         sweep_signed: float, samples_even: int) -> List[Point]:
    """
    Polyline-Approximation eines Bogens (nur Preview).

    Parametrisierung CW von +Z:
        x = cx + r*sin(theta)
        z = cz + r*cos(theta)
    """
    pts: List[Point] = []

    if r <= Tolerances.DEGENERATE_RADIUS:
        return pts

    if not is_finite(sweep_signed):
        return pts

    n = max(4, samples_even)
    if n % 2 != 0:
        n += 1

    for i in range(n + 1):
        t = i / float(n)
        ang = norm_2pi(start_angle + sweep_signed * t)
        pts.append(point_cw_from_z(center, r, ang))

    return pts


def sample_arc_std(center: Point, r: float, ang_start: float,
                   sweep_signed: float, samples: int) -> List[Point]:
    """Polyline-Approximation in Standard-Winkeln (CCW von +X), nur Preview."""
    n = max(6, samples)
    pts: List[Point] = []
    for i in range(n):
        t = i / (n - 1)
        ang = ang_start + sweep_signed * t
        pts.append(Point(center.x + r * math.cos(ang), center.z + r * math.sin(ang)))
    return pts


def project_onto_line(p: Point, a: Point, b: Point) -> Optional[Point]:
    """Orthogonale Projektion von p auf die unendliche Linie a->b."""
    dx = b.x - a.x
    dz = b.z - a.z
    dd = dx * dx + dz * dz
    if dd < Tolerances.DEGENERATE_LENGTH_SQ:
        return None

    t = ((p.x - a.x) * dx + (p.z - a.z) * dz) / dd
    return Point(a.x + t * dx, a.z + t * dz)


def project_onto_circle(p: Point, center: Point, r: float) -> Optional[Point]:
    """Radiale Projektion von p auf den Kreis (center, r)."""
    if r < Tolerances.DEGENERATE_RADIUS:
        return None

    vx = p.x - center.x
    vz = p.z - center.z
    length = math.hypot(vx, vz)
    if length < Tolerances.DEGENERATE_LENGTH:
        return None

    return Point(center.x + r * vx / length, center.z + r * vz / length)


def is_on_ray_from_fixed_through_moving(ip: Point, fixed_end: Point, moving_end: Point, tol: float) -> bool:
    """ip liegt auf dem Strahl von fixed_end durch moving_end (Skalarprodukt >= -tol)."""
    dir_x = moving_end.x - fixed_end.x
    dir_z = moving_end.z - fixed_end.z
    if dir_x * dir_x + dir_z * dir_z < Tolerances.DEGENERATE_LENGTH_SQ:
        return False

    dot = (ip.x - fixed_end.x) * dir_x + (ip.z - fixed_end.z) * dir_z
    return dot >= -tol


def is_point_on_segment_interior(a: Point, b: Point, p: Point,
                                 col_tol: float, between_tol: float) -> bool:
    """p liegt kollinear und strikt zwischen a und b (nicht auf den Endpunkten)."""
    abx = b.x - a.x
    abz = b.z - a.z
    ab2 = abx * abx + abz * abz
    if ab2 < Tolerances.DEGENERATE_LENGTH_SQ:
        return False

    apx = p.x - a.x
    apz = p.z - a.z

    cross = abx * apz - abz * apx
    if abs(cross) > col_tol * math.sqrt(ab2):
        return False

    t = (apx * abx + apz * abz) / ab2
    return (t > 0.0 + between_tol) and (t < 1.0 - between_tol)
