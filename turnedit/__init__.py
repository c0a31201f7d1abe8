"""
TurnEdit - Fillet/Trim für 2D-Drehkonturen
==========================================

Welt-Koordinaten: X = Radius, Z = Axial.
"""

from config.version import VERSION

from .geometry import Point
from .segments import (
    ArcSeg, LineSeg, Pick, PickedEnd, SegKind, Segment, SegmentParseError,
    format_segment, parse_segment,
)
from .host import NullHost, PreviewHost
from .arc_law import FilletArcData, build_candidates, build_log
from .operations import (
    FilletRunResult, FilletSession, OperationResult, ResultStatus, SessionState,
    TrimOption, TrimRunResult, TrimSession, run_fillet, run_trim,
)

__version__ = VERSION

__all__ = [
    'Point',
    'LineSeg',
    'ArcSeg',
    'Segment',
    'SegKind',
    'Pick',
    'PickedEnd',
    'SegmentParseError',
    'parse_segment',
    'format_segment',
    'PreviewHost',
    'NullHost',
    'FilletArcData',
    'build_candidates',
    'build_log',
    'OperationResult',
    'ResultStatus',
    'SessionState',
    'FilletSession',
    'FilletRunResult',
    'run_fillet',
    'TrimSession',
    'TrimOption',
    'TrimRunResult',
    'run_trim',
]
