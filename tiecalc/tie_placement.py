"""Tie endpoint placement: inner, outer-note or outer-stem."""

from __future__ import annotations

import logging

from tiecalc.connection_code import calc_is_end_of_system
from tiecalc.tie_direction import calc_direction, stem_direction
from tiecalc.tie_models import (
    WHOLE_NOTE,
    OuterPlacement,
    TieDirection,
    TieMod,
    TiePlacement,
    TiePrefs,
)
from tiecalc.tie_span import TieSpan, tie_span
from tiecalc.views import NoteView

logger = logging.getLogger(__name__)


def inner_placement(direction: TieDirection) -> TiePlacement:
    if direction == TieDirection.UNDER:
        return TiePlacement.UNDER_INNER
    return TiePlacement.OVER_INNER


def outer_stem_placement(direction: TieDirection) -> TiePlacement:
    if direction == TieDirection.UNDER:
        return TiePlacement.UNDER_OUTER_STEM
    return TiePlacement.OVER_OUTER_STEM


def _use_outer(tie_mod: TieMod, tie_prefs: TiePrefs) -> bool:
    if tie_mod.outer_placement != OuterPlacement.DEFAULT:
        return tie_mod.outer_placement == OuterPlacement.ON
    return tie_prefs.use_outer_placement


def calc_placement_for_endpoint(
    note: NoteView,
    tie_mod: TieMod,
    tie_prefs: TiePrefs,
    direction: TieDirection,
    stemdir: int,
    for_endpoint: bool,
    note_slot: int | None = None,
    num_notes: int | None = None,
    upstem_2nd: bool = False,
    downstem_2nd: bool = False,
) -> TiePlacement:
    """
    Place one endpoint of a tie on ``note``.

    Only the outermost note on the tie's side (lowest going under, highest
    going over) can take an outer placement. ``note_slot`` and ``num_notes``
    stand in for the note's own chord geometry when given; the second flags
    are OR-ed with the note's own flags.
    """
    if note_slot is None:
        note_slot = note.note_index
    if num_notes is None:
        num_notes = note.entry.count
    upstem_2nd = upstem_2nd or note.is_upstem_2nd
    downstem_2nd = downstem_2nd or note.is_downstem_2nd

    outermost = (note_slot == 0 and direction == TieDirection.UNDER) or (
        note_slot == num_notes - 1 and direction == TieDirection.OVER
    )
    if not outermost or not _use_outer(tie_mod, tie_prefs):
        return inner_placement(direction)

    if note.entry.duration < WHOLE_NOTE:
        # A downstem 2nd is always outer-note and an upstem 2nd always
        # outer-stem. The start point takes the opposite view of the end point.
        if for_endpoint:
            if stemdir < 0 and direction == TieDirection.UNDER and not downstem_2nd:
                return TiePlacement.UNDER_OUTER_STEM
            if stemdir > 0 and direction == TieDirection.OVER and upstem_2nd:
                return TiePlacement.OVER_OUTER_STEM
        else:
            if stemdir > 0 and direction == TieDirection.OVER and not upstem_2nd:
                return TiePlacement.OVER_OUTER_STEM
            if stemdir < 0 and direction == TieDirection.UNDER and downstem_2nd:
                return TiePlacement.UNDER_OUTER_STEM
    if direction == TieDirection.UNDER:
        return TiePlacement.UNDER_OUTER_NOTE
    return TiePlacement.OVER_OUTER_NOTE


def _end_placement_without_target(
    note: NoteView,
    span: TieSpan,
    tie_mod: TieMod,
    tie_prefs: TiePrefs,
    direction: TieDirection,
    for_page_view: bool,
    start_placement: TiePlacement,
) -> TiePlacement:
    """
    End placement of a tie start whose tied-to note was not found.

    The host behaves as follows:
      1. Ties to rests have outer-stem placement at their end point.
      2. Ties into an adjacent empty measure are inner at both ends, unless
         the note is the last entry of its layer in the document's last
         measure.
      3. Ties to notes are inner if an under-tie meets a lower note or an
         over-tie meets a higher one.
    """
    start_note = span.start_note
    next_entry = span.layer.next(start_note.entry) if start_note is not None else None
    if next_entry is None:
        if calc_is_end_of_system(note, for_page_view):
            return outer_stem_placement(direction)
        return inner_placement(direction)

    if next_entry.is_rest or next_entry.count == 0:
        stemdir = -1 if direction == TieDirection.UNDER else 1
        return calc_placement_for_endpoint(
            note, tie_mod, tie_prefs, direction, stemdir, True,
            note.note_index, note.entry.count, False, False,
        )

    if direction == TieDirection.UNDER:
        next_note = next_entry.notes[0]
        if next_note.displacement < note.displacement:
            return TiePlacement.UNDER_INNER
        return calc_placement_for_endpoint(
            next_note, tie_mod, tie_prefs, direction, stem_direction(next_entry), True
        )

    next_note = next_entry.notes[-1]
    if next_note.displacement > note.displacement:
        return TiePlacement.OVER_INNER
    # Flaky host behavior, unchanged since the 2000 release: OR together
    # the upstem 2nd bits of the whole chord. Page view does this reliably;
    # scroll view below 130% zoom does not.
    if next_entry.calc_stem_up():
        upstem_2nd = any(check_note.is_upstem_2nd for check_note in next_entry.notes)
        stemdir = -1 if direction == TieDirection.UNDER else 1
        return calc_placement_for_endpoint(
            next_note, tie_mod, tie_prefs, direction, stemdir, True,
            next_note.note_index, next_entry.count, upstem_2nd, next_note.is_downstem_2nd,
        )
    return start_placement


def calc_placement(
    note: NoteView,
    tie_mod: TieMod,
    for_page_view: bool,
    direction: TieDirection | None = None,
    tie_prefs: TiePrefs | None = None,
) -> tuple[TiePlacement, TiePlacement]:
    """
    Calculate the placement of both endpoints of a tie.

    Args:
        note:          The note the tie belongs to.
        tie_mod:       Tie modification for the note (``is_start_tie`` selects
                       the tie leaving the note or the tie end).
        for_page_view: Page view instead of scroll view.
        direction:     Known tie direction, or None/NONE to calculate it.
        tie_prefs:     Preferences to apply. Factory defaults when omitted.

    Returns:
        (start placement, end placement). If either is inner, both are.
    """
    tie_prefs = tie_prefs or TiePrefs()
    if not direction:
        direction = calc_direction(note, tie_mod, tie_prefs)
    stemdir = stem_direction(note.entry)

    start_placement = calc_placement_for_endpoint(
        note, tie_mod, tie_prefs, direction, stemdir, False
    )
    if not tie_mod.is_start_tie:
        end_placement = calc_placement_for_endpoint(
            note, tie_mod, tie_prefs, direction, stemdir, True
        )
    else:
        span = tie_span(note, False)
        if span.end_note is not None:
            end_placement = calc_placement_for_endpoint(
                span.end_note, tie_mod, tie_prefs, direction,
                stem_direction(span.end_note.entry), True,
            )
        else:
            end_placement = _end_placement_without_target(
                note, span, tie_mod, tie_prefs,
                direction, for_page_view, start_placement,
            )

    # An inner endpoint drags the other one inside too.
    if start_placement.is_inner:
        end_placement = start_placement
    elif end_placement.is_inner:
        start_placement = end_placement

    logger.debug("Tie placement %s -> %s", start_placement.name, end_placement.name)
    return start_placement, end_placement
