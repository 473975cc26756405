"""tiecalc — reproduce a notation host's tie direction and placement rules."""

from tiecalc.calculator import TieCalculator, TieGeometry, TieReport
from tiecalc.connection_code import calc_connection_code
from tiecalc.document import Document, Entry, Note
from tiecalc.tie_direction import (
    calc_default_direction,
    calc_direction,
    explain_direction,
)
from tiecalc.tie_models import (
    ConnectionCode,
    DirectionRule,
    TieDirection,
    TieMod,
    TieModDirection,
    TiePlacement,
    TiePrefs,
)
from tiecalc.tie_placement import calc_placement
from tiecalc.tie_span import tie_span

__version__ = "0.1.0"

__all__ = [
    "ConnectionCode",
    "DirectionRule",
    "Document",
    "Entry",
    "Note",
    "TieCalculator",
    "TieDirection",
    "TieGeometry",
    "TieMod",
    "TieModDirection",
    "TiePlacement",
    "TiePrefs",
    "TieReport",
    "calc_connection_code",
    "calc_default_direction",
    "calc_direction",
    "calc_placement",
    "explain_direction",
    "tie_span",
]
