"""
TurnEdit - Zentralisierte Toleranz-Konfiguration
=================================================

Alle Toleranzen der Fillet/Trim-Konstruktion an einem Ort.

Toleranz-Philosophie:
- Grobe Toleranzen (1e-6 .. 1e-4) für Punkt-Identität und Dedup im
  menschlichen Maßstab (Kandidatenlisten, Kreis-Zugehörigkeit)
- Enge Toleranzen (1e-9 .. 1e-18) für numerische Degeneration
  (parallele Linien, konzentrische Kreise, Null-Längen, Mini-Radien)

Verwendung:
    from config.tolerances import Tolerances

    tol = Tolerances.POINT_IDENTITY

    # Trim-Edit-Toleranz
    from config.tolerances import edit_tolerance
    tol = edit_tolerance()
"""


class Tolerances:
    """
    Zentrale Toleranz-Konstanten für TurnEdit.

    Kategorien:
    - POINT_*: Punkt-Identität und Dedup
    - DEGENERATE_*: Numerische Degeneration im Geometrie-Kernel
    - FILLET_*: Fillet-Konstruktion
    - TRIM_*: Trim-Konstruktion
    - ANGLE_*: Winkel-Klassifikation
    """

    # =========================================================================
    # Punkt-Identität
    # =========================================================================

    # Zwei Punkte/Zentren gelten als identisch
    POINT_IDENTITY = 1e-6

    # =========================================================================
    # Degeneration (Geometrie-Kernel)
    # =========================================================================

    # Determinante zweier Linien, Diskriminante, Kreisabstand
    DEGENERATE_DETERMINANT = 1e-12

    # Kleinster Radius für Bögen/Offset-Kreise
    DEGENERATE_RADIUS = 1e-9

    # Quadrierte Länge eines Richtungsvektors
    DEGENERATE_LENGTH_SQ = 1e-18

    # Minimale Länge für Einheitsvektoren
    DEGENERATE_LENGTH = 1e-12

    # =========================================================================
    # Fillet
    # =========================================================================

    # Dedup der Fillet-Zentren
    FILLET_CENTER_DEDUP = POINT_IDENTITY

    # Radius muss strikt größer sein
    FILLET_MIN_RADIUS = 1e-12

    # Tangentenpunkte müssen exakt auf dem Fillet-Kreis liegen
    FILLET_TANGENT_CHECK = 1e-6

    # =========================================================================
    # Trim
    # =========================================================================

    # Sew-Toleranz des Host-Systems; die Edit-Toleranz ist die Hälfte davon
    TRIM_SEW = 1e-3
    TRIM_EDIT = TRIM_SEW * 0.5

    # Dedup der Schnittpunkte
    TRIM_INTERSECTION_DEDUP = 1e-7

    # Dedup der Trim-Ergebnisse (IP + Endpunkte)
    TRIM_OPTION_DEDUP = 1e-8

    # Schnittpunkt liegt auf dem Vollkreis des Bogens
    TRIM_ON_CIRCLE = 1e-4

    # Parameter-Abstand zu den Endpunkten für "strikt innen"
    TRIM_BETWEEN_FACTOR = 0.01

    # =========================================================================
    # Winkel
    # =========================================================================

    # Sortierung / Sweep-Vergleiche (Radians)
    ANGLE_EPSILON = 1e-9

    # Fillet: Sweep gilt als exakt 180°
    ANGLE_180_FILLET = 1e-9

    # Trim: Anzeige-Label "180°"
    ANGLE_180_TRIM = 1e-7

    # Minimaler Trim-Sweep
    ANGLE_MIN_SWEEP = 1e-12


# =============================================================================
# Convenience-Funktionen
# =============================================================================

def edit_tolerance() -> float:
    """Gibt die Trim-Edit-Toleranz zurück (halbe Sew-Toleranz, min. 1e-12)."""
    return max(Tolerances.DEGENERATE_DETERMINANT, Tolerances.TRIM_EDIT)


# =============================================================================
# Toleranz-Validierung (für Debugging)
# =============================================================================

def validate_tolerances():
    """
    Validiert dass alle Toleranzen sinnvolle Werte haben.
    Nützlich für Tests und Debugging.
    """
    issues = []

    if not (1e-9 <= Tolerances.POINT_IDENTITY <= 1e-3):
        issues.append(f"POINT_IDENTITY außerhalb sinnvoller Grenzen: {Tolerances.POINT_IDENTITY}")

    # Degeneration muss deutlich strenger sein als Punkt-Identität
    if Tolerances.DEGENERATE_RADIUS >= Tolerances.POINT_IDENTITY:
        issues.append(
            f"DEGENERATE_RADIUS ({Tolerances.DEGENERATE_RADIUS}) nicht strenger als "
            f"POINT_IDENTITY ({Tolerances.POINT_IDENTITY})"
        )

    # Option-Dedup darf nicht gröber sein als IP-Dedup
    if Tolerances.TRIM_OPTION_DEDUP > Tolerances.TRIM_INTERSECTION_DEDUP:
        issues.append(
            f"TRIM_OPTION_DEDUP ({Tolerances.TRIM_OPTION_DEDUP}) gröber als "
            f"TRIM_INTERSECTION_DEDUP ({Tolerances.TRIM_INTERSECTION_DEDUP})"
        )

    if Tolerances.TRIM_EDIT <= 0.0:
        issues.append(f"TRIM_EDIT muss positiv sein: {Tolerances.TRIM_EDIT}")

    return issues


# Automatische Validierung beim Import (nur Warnung, kein Fehler)
_validation_issues = validate_tolerances()
if _validation_issues:
    from loguru import logger
    for issue in _validation_issues:
        logger.warning(f"Toleranz-Validierung: {issue}")
