"""Locate the notes at both ends of a tie."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tiecalc.views import EntryView, NoteView

logger = logging.getLogger(__name__)


class EntryLayer:
    """
    An ordered window of entries from one staff layer.

    Navigation with ``next``/``previous`` stops at the edges of the window,
    not at the edges of the document.
    """

    def __init__(self, entries: list[EntryView]) -> None:
        self.entries = entries

    def __iter__(self):
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def _index(self, entry: EntryView) -> int | None:
        for index, candidate in enumerate(self.entries):
            if candidate is entry:
                return index
        return None

    def find(self, entry_number: int) -> EntryView | None:
        for entry in self.entries:
            if entry.entry_number == entry_number:
                return entry
        return None

    def next(self, entry: EntryView) -> EntryView | None:
        index = self._index(entry)
        if index is None or index + 1 >= len(self.entries):
            return None
        return self.entries[index + 1]

    def previous(self, entry: EntryView) -> EntryView | None:
        index = self._index(entry)
        if index is None or index == 0:
            return None
        return self.entries[index - 1]


@dataclass
class TieSpan:
    """
    The window a tie was searched in, with its start and end notes.

    Both notes belong to entries of ``layer``. Either may be None when the
    note's own entry is not in the window or the other end was not found.
    """

    layer: EntryLayer
    start_note: NoteView | None = None
    end_note: NoteView | None = None


def equal_note(entry: EntryView | None, target: NoteView, for_tie_end: bool) -> NoteView | None:
    """
    Return the note of ``entry`` on the same staff position as ``target``.

    With ``for_tie_end`` the match must end a tie, otherwise it must start one.

    Staff positions are compared instead of pitches, so a key change in the
    middle of a tie works but a clef change does not.
    """
    if entry is None or entry.is_rest:
        return None
    target_position = target.staff_position
    for note in entry.notes:
        if note.staff_position != target_position:
            continue
        if for_tie_end and note.has_tie_from_previous:
            return note
        if not for_tie_end and note.has_tie_to_next:
            return note
    return None


def tied_to(note: NoteView | None, layer: EntryLayer) -> NoteView | None:
    """Return the note that ``note`` ties to, searching forward in ``layer``."""
    if note is None:
        return None
    next_entry = layer.next(note.entry)
    if next_entry is None or next_entry.grace_note:
        return None
    tied_to_note = equal_note(next_entry, note, True)
    if tied_to_note is not None:
        return tied_to_note
    if next_entry.voice2_launch:
        return equal_note(layer.next(next_entry), note, True)
    return None


def tied_from(note: NoteView | None, layer: EntryLayer) -> NoteView | None:
    """
    Return the closest earlier note in ``layer`` that ties into ``note``.

    The search stops at the first grace entry it meets, as the forward
    search does.
    """
    if note is None:
        return None
    entry = layer.previous(note.entry)
    while entry is not None:
        if entry.grace_note:
            return None
        tied_from_note = equal_note(entry, note, False)
        if tied_from_note is not None:
            return tied_from_note
        entry = layer.previous(entry)
    return None


def tie_span(note: NoteView, for_tie_end: bool) -> TieSpan:
    """
    Load the two-measure window around ``note`` and find both ends of its tie.

    A tie end searches the previous measure and the note's own measure; a tie
    start searches the note's own measure and the next one.
    """
    entry = note.entry
    if for_tie_end:
        start_measure = entry.measure - 1 if entry.measure > 1 else entry.measure
        end_measure = entry.measure
    else:
        start_measure = entry.measure
        end_measure = entry.measure + 1
    layer = EntryLayer(
        entry.document.layer_entries(entry.staff, entry.layer, start_measure, end_measure)
    )
    same_entry = layer.find(entry.entry_number)
    if same_entry is None or note.note_index >= same_entry.count:
        logger.debug("Entry %d is not in its own tie window", entry.entry_number)
        return TieSpan(layer)
    layer_note = same_entry.notes[note.note_index]
    if for_tie_end:
        return TieSpan(layer, tied_from(layer_note, layer), layer_note)
    return TieSpan(layer, layer_note, tied_to(layer_note, layer))
