"""Connection codes for activating tie start and end points."""

from __future__ import annotations

from tiecalc.tie_direction import stem_direction
from tiecalc.tie_models import (
    ConnectionCode,
    TieDirection,
    TiePlacement,
    TiePrefs,
)
from tiecalc.tie_span import tie_span
from tiecalc.views import EntryView, NoteView


def calc_is_end_of_system(note: NoteView, for_page_view: bool) -> bool:
    """
    True if a tie leaving ``note`` runs off the end of its staff system.

    That is the case for the last entry of the document's last measure and,
    in page view only, for a tie whose end note lies on a later system.
    """
    entry = note.entry
    document = entry.document
    if document.next_entry(entry) is None and entry.measure == document.end_measure:
        return True
    if for_page_view:
        span = tie_span(note, False)
        if span.start_note is not None and span.end_note is not None:
            start_system = document.system_index(span.start_note.entry.measure)
            end_system = document.system_index(span.end_note.entry.measure)
            return start_system != end_system
    return False


def has_non_aligned_2nd(entry: EntryView) -> bool:
    return any(note.is_non_aligned_2nd for note in entry.notes)


def calc_connection_code(
    note: NoteView,
    placement: TiePlacement,
    direction: TieDirection,
    for_endpoint: bool,
    for_tie_end: bool,
    for_page_view: bool,
    tie_prefs: TiePrefs | None = None,
) -> ConnectionCode:
    """
    Calculate the anchor for one endpoint of a tie.

    Args:
        note:          The note the tie belongs to.
        placement:     Placement of this endpoint (see ``calc_placement``).
        direction:     Direction of the tie.
        for_endpoint:  Calculate the end point instead of the start point.
        for_tie_end:   Calculate for the tie end instead of the tie start.
        for_page_view: Page view instead of scroll view.
        tie_prefs:     Preferences to apply. Factory defaults when omitted.

    Returns:
        One of the ConnectionCode anchors, or NONE for an unknown placement.
    """
    # ENTRY_CENTER_NOTE_TOP and ENTRY_CENTER_NOTE_BOTTOM have no use here.
    tie_prefs = tie_prefs or TiePrefs()
    if not for_endpoint and for_tie_end:
        return ConnectionCode.SYSTEM_START
    if for_endpoint and not for_tie_end and calc_is_end_of_system(note, for_page_view):
        return ConnectionCode.SYSTEM_END

    if placement.is_inner:
        entry = note.entry
        stemdir = stem_direction(entry)
        if for_endpoint:
            if tie_prefs.before_single_accidental and entry.count == 1 and note.has_accidental:
                return ConnectionCode.ACCI_LEFT_NOTE_CENTER
            if has_non_aligned_2nd(entry):
                if (
                    stemdir > 0
                    and direction != TieDirection.UNDER
                    and note.is_non_aligned_2nd
                ) or (stemdir < 0 and not note.is_non_aligned_2nd):
                    return ConnectionCode.NOTE_LEFT_NOTE_CENTER
            return ConnectionCode.ENTRY_LEFT_NOTE_CENTER

        num_dots = entry.dots
        if (tie_prefs.after_single_dot and num_dots == 1) or (
            tie_prefs.after_multiple_dots and num_dots > 1
        ):
            return ConnectionCode.DOT_RIGHT_NOTE_CENTER
        if has_non_aligned_2nd(entry):
            if (stemdir > 0 and not note.is_non_aligned_2nd) or (
                stemdir < 0
                and direction != TieDirection.OVER
                and note.is_non_aligned_2nd
            ):
                return ConnectionCode.NOTE_RIGHT_NOTE_CENTER
        return ConnectionCode.ENTRY_RIGHT_NOTE_CENTER

    if placement == TiePlacement.OVER_OUTER_NOTE:
        return ConnectionCode.NOTE_CENTER_NOTE_TOP
    if placement == TiePlacement.UNDER_OUTER_NOTE:
        return ConnectionCode.NOTE_CENTER_NOTE_BOTTOM
    if placement == TiePlacement.OVER_OUTER_STEM:
        if for_endpoint:
            return ConnectionCode.NOTE_LEFT_NOTE_TOP
        return ConnectionCode.NOTE_RIGHT_NOTE_TOP
    if placement == TiePlacement.UNDER_OUTER_STEM:
        if for_endpoint:
            return ConnectionCode.NOTE_LEFT_NOTE_BOTTOM
        return ConnectionCode.NOTE_RIGHT_NOTE_BOTTOM
    return ConnectionCode.NONE
