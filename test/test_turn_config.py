"""
Konfiguration Tests - Toleranzen, Feature-Flags, Version
"""

from config import VERSION, Tolerances, edit_tolerance, get_all_flags, is_enabled, set_flag
from config.tolerances import validate_tolerances
import turnedit


def test_tolerances_are_consistent():
    assert validate_tolerances() == []
    assert edit_tolerance() == Tolerances.TRIM_SEW * 0.5
    assert Tolerances.FILLET_CENTER_DEDUP == Tolerances.POINT_IDENTITY


def test_default_flags():
    assert is_enabled("turnedit_debug_logging") is False
    assert is_enabled("fillet_log_on_keep") is True
    assert is_enabled("trim_helper_target_fallback") is False
    assert is_enabled("nonexistent_flag_xyz123") is False


def test_set_flag_runtime_and_copy():
    set_flag("turnedit_debug_logging", True)
    assert is_enabled("turnedit_debug_logging") is True

    flags = get_all_flags()
    flags["new_flag"] = True
    assert is_enabled("new_flag") is False


def test_package_version():
    assert turnedit.__version__ == VERSION
