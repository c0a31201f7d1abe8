"""
TurnEdit - Host-Schnittstelle
=============================

Der Host (GUI, CLI oder Test-Harness) liefert nur Preview-Zeichnung und
optionales Logging. Der Core rechnet ausschließlich in Welt-Koordinaten,
Bildschirm-Pixel kennt nur der Host.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from .geometry import Point


# Preview-Farben (Host mappt die Namen auf seine Brushes)
COLOR_FILLET_ARC = "yellow"
COLOR_TAN1 = "red"
COLOR_TAN2 = "lime"
COLOR_MID = "orange"
COLOR_CENTER = "deepskyblue"
COLOR_INTERSECTION = "red"
COLOR_ENDPOINT = "orange"
COLOR_TRIM_LINE = "yellow"
COLOR_TRIM_ARC = "magenta"


class PreviewHost(ABC):
    """
    Abstrakte Basisklasse für Preview/Log-Hosts.

    map_valid=False unterdrückt alle Preview-Aufrufe (Welt<->Screen
    Mapping noch nicht bereit), ändert aber nichts an der Berechnung.
    """

    @property
    def map_valid(self) -> bool:
        return True

    @property
    def log_window_show(self) -> bool:
        return False

    @abstractmethod
    def clear_preview_only(self) -> None:
        pass

    @abstractmethod
    def draw_preview_polyline_world(self, points: Sequence[Point], stroke: str,
                                    thickness: float, opacity: float) -> None:
        pass

    @abstractmethod
    def draw_preview_point_world(self, point: Point, fill: str,
                                 diameter_px: float, opacity: float) -> None:
        pass

    def show_log(self, title: str, text: str) -> None:
        """Optionaler Log-Viewer; Standard: ignorieren."""
        pass


class NullHost(PreviewHost):
    """Host ohne Ausgabe (headless)."""

    @property
    def map_valid(self) -> bool:
        return False

    def clear_preview_only(self) -> None:
        pass

    def draw_preview_polyline_world(self, points, stroke, thickness, opacity) -> None:
        pass

    def draw_preview_point_world(self, point, fill, diameter_px, opacity) -> None:
        pass
