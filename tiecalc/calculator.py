"""TieCalculator: full tie geometry for a note or a whole document."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tiecalc.connection_code import calc_connection_code
from tiecalc.tie_direction import explain_direction
from tiecalc.tie_models import (
    ConnectionCode,
    DirectionRule,
    TieDirection,
    TieMod,
    TiePlacement,
    TiePrefs,
)
from tiecalc.tie_placement import calc_placement
from tiecalc.views import DocumentView, NoteView

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TieGeometry:
    """Everything the host needs to draw one tie."""

    direction: TieDirection
    rule: DirectionRule
    start_placement: TiePlacement
    end_placement: TiePlacement
    start_code: ConnectionCode
    end_code: ConnectionCode


@dataclass(frozen=True)
class TieReport:
    """A tie located in a document, with its geometry."""

    staff: int
    layer: int
    measure: int
    entry_number: int
    note_index: int
    staff_position: int
    is_start_tie: bool
    geometry: TieGeometry

    def as_dict(self) -> dict[str, object]:
        return {
            "staff": self.staff,
            "layer": self.layer,
            "measure": self.measure,
            "entry": self.entry_number,
            "note": self.note_index,
            "staff_position": self.staff_position,
            "kind": "start" if self.is_start_tie else "end",
            "direction": self.geometry.direction.name.lower(),
            "rule": self.geometry.rule.value,
            "start_placement": self.geometry.start_placement.name.lower(),
            "end_placement": self.geometry.end_placement.name.lower(),
            "start_code": self.geometry.start_code.name.lower(),
            "end_code": self.geometry.end_code.name.lower(),
        }


class TieCalculator:
    """
    Calculate tie geometry with one preference snapshot.

    Build one calculator per batch of ties so that every tie in a document
    pass sees the same rules.

    Usage:

        calculator = TieCalculator(document.tie_prefs, for_page_view=True)
        for report in calculator.analyze_document(document):
            ...
    """

    def __init__(self, tie_prefs: TiePrefs | None = None, for_page_view: bool = True) -> None:
        self.tie_prefs = tie_prefs or TiePrefs()
        self.for_page_view = for_page_view

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def analyze(self, note: NoteView, tie_mod: TieMod | None = None) -> TieGeometry:
        """
        Calculate direction, placements and connection codes of one tie.

        Args:
            note:    The note the tie belongs to.
            tie_mod: Tie modification; a plain start tie when omitted.
        """
        tie_mod = tie_mod or TieMod()
        for_tie_end = not tie_mod.is_start_tie
        direction, rule = explain_direction(note, tie_mod, self.tie_prefs)
        start_placement, end_placement = calc_placement(
            note, tie_mod, self.for_page_view, direction, self.tie_prefs
        )
        start_code = calc_connection_code(
            note, start_placement, direction, False, for_tie_end,
            self.for_page_view, self.tie_prefs,
        )
        end_code = calc_connection_code(
            note, end_placement, direction, True, for_tie_end,
            self.for_page_view, self.tie_prefs,
        )
        return TieGeometry(
            direction=direction,
            rule=rule,
            start_placement=start_placement,
            end_placement=end_placement,
            start_code=start_code,
            end_code=end_code,
        )

    def analyze_document(self, document: DocumentView) -> list[TieReport]:
        """
        Calculate every tie start and tie end in a document.

        Returns:
            One TieReport per tie start and per tie end, in entry order.
        """
        reports: list[TieReport] = []
        for entry in document.entries:
            for note in entry.notes:
                for is_start_tie, has_tie in (
                    (True, note.has_tie_to_next),
                    (False, note.has_tie_from_previous),
                ):
                    if not has_tie:
                        continue
                    geometry = self.analyze(note, TieMod(is_start_tie=is_start_tie))
                    reports.append(
                        TieReport(
                            staff=entry.staff,
                            layer=entry.layer,
                            measure=entry.measure,
                            entry_number=entry.entry_number,
                            note_index=note.note_index,
                            staff_position=note.staff_position,
                            is_start_tie=is_start_tie,
                            geometry=geometry,
                        )
                    )
        logger.info("Calculated %d tie(s)", len(reports))
        return reports
