"""
TurnEdit - Feature Flags
========================

Feature Flags ermöglichen inkrementelle Rollouts und einfaches Rollback.
Neue Verhaltensweisen werden mit Flag=False eingeführt und nach Validierung aktiviert.
"""

from typing import Dict

# Feature Flag Registry
# =====================
# Die Flags unten sind für aktives Debugging oder experimentelle Features.

FEATURE_FLAGS: Dict[str, bool] = {
    # Debug-Modi
    "turnedit_debug_logging": False,  # Arc-Law Log bei jedem Recompute (sehr verbose)

    # Fillet
    "fillet_log_on_keep": True,  # Arc-Law Log beim Keep an den Host-Log senden

    # Trim (experimentell)
    "trim_helper_target_fallback": False,  # Hilfslinie als Ziel, wenn A∩B leer ist
}


def is_enabled(flag: str) -> bool:
    """
    Prüft ob ein Feature-Flag aktiviert ist.

    Args:
        flag: Name des Feature-Flags

    Returns:
        True wenn aktiviert, False wenn nicht aktiviert oder unbekannt
    """
    return FEATURE_FLAGS.get(flag, False)


def set_flag(flag: str, value: bool) -> None:
    """
    Setzt ein Feature-Flag zur Laufzeit.
    Nützlich für Tests und Debugging.

    Args:
        flag: Name des Feature-Flags
        value: Neuer Wert
    """
    FEATURE_FLAGS[flag] = value


def get_all_flags() -> Dict[str, bool]:
    """Gibt alle Feature-Flags zurück."""
    return FEATURE_FLAGS.copy()
