"""Build documents from music21 scores (MusicXML, MIDI and friends)."""

from __future__ import annotations

import logging
from typing import Any

from tiecalc.document import Document, Entry, Note
from tiecalc.tie_models import QUARTER_NOTE

logger = logging.getLogger(__name__)

# music21 diatonic note numbers: C4 = 29, E4 (treble bottom line) = 31.
MIDDLE_C_DIATONIC = 29
TREBLE_LOWEST_LINE = 31
STAFF_SPAN = 8  # steps from the bottom line to the top line of five lines

_TIE_STARTS = {"start", "continue"}
_TIE_STOPS = {"stop", "continue"}


def _top_line(clef: Any | None) -> int:
    lowest_line = getattr(clef, "lowestLine", None)
    if not isinstance(lowest_line, int):
        lowest_line = TREBLE_LOWEST_LINE
    return lowest_line + STAFF_SPAN


def _stem_up(element: Any) -> bool | None:
    direction = getattr(element, "stemDirection", None)
    if direction == "up":
        return True
    if direction == "down":
        return False
    return None


def _has_accidental(pitch: Any) -> bool:
    accidental = pitch.accidental
    if accidental is None:
        return False
    return accidental.displayStatus is not False


def _tie_type(note: Any, element: Any) -> str | None:
    tie = getattr(note, "tie", None) or getattr(element, "tie", None)
    return tie.type if tie is not None else None


def _note_from_m21(note: Any, element: Any, top_line: int) -> Note:
    diatonic = note.pitch.diatonicNoteNum
    tie_type = _tie_type(note, element)
    return Note(
        staff_position=diatonic - top_line,
        tie=tie_type in _TIE_STARTS,
        tie_backwards=tie_type in _TIE_STOPS,
        accidental=_has_accidental(note.pitch),
        displacement=diatonic - MIDDLE_C_DIATONIC,
    )


def _entry_from_m21(element: Any, measure: int, staff: int, layer: int, top_line: int) -> Entry:
    duration = element.duration
    common = dict(
        measure=measure,
        staff=staff,
        layer=layer,
        duration=int(round(float(duration.quarterLength) * QUARTER_NOTE)),
        dots=int(duration.dots or 0),
        grace_note=bool(duration.isGrace),
        visible=not getattr(element.style, "hideObjectOnPrint", False),
    )
    if element.isRest:
        return Entry(notes=[], is_rest=True, **common)
    members = list(element.notes) if element.isChord else [element]
    notes = [_note_from_m21(member, element, top_line) for member in members]
    return Entry(notes=notes, stem_up=_stem_up(element), **common)


def _layers(measure: Any) -> list[Any]:
    voices = list(measure.voices)
    return voices if voices else [measure]


def _starts_system(measure: Any) -> bool:
    from music21 import layout

    return any(
        system_layout.isNew
        for system_layout in measure.getElementsByClass(layout.SystemLayout)
    )


def score_to_document(score: Any) -> Document:
    """
    Convert a music21 score into a Document.

    Parts become staves (numbered from 1) and voices become layers. Staff
    positions are measured from the top line of the clef in effect; without
    a clef, treble is assumed. System breaks of the first part define the
    staff systems.

    Measures are numbered by their position in the part, starting at 1, so a
    pickup measure numbered 0 stays distinct from the first full measure.
    """
    entries: list[Entry] = []
    systems: list[int] = [1]
    for staff, part in enumerate(score.parts, start=1):
        clef = None
        for number, measure in enumerate(part.getElementsByClass("Measure"), start=1):
            if measure.clef is not None:
                clef = measure.clef
            if staff == 1 and number > 1 and _starts_system(measure):
                systems.append(number)
            top_line = _top_line(clef)
            for layer, voice in enumerate(_layers(measure), start=1):
                for element in voice.notesAndRests:
                    entries.append(_entry_from_m21(element, number, staff, layer, top_line))

    logger.info("Imported %d entries on %d system(s)", len(entries), len(systems))
    return Document(entries, systems=systems)


def load_score(path: str) -> Document:
    """
    Parse a score file with music21 and convert it.

    Raises:
        ValueError: If music21 cannot parse the file.
    """
    from music21 import converter

    try:
        score = converter.parse(path)
    except Exception as exc:
        raise ValueError(f"music21 could not parse '{path}': {exc}") from exc
    if not hasattr(score, "parts"):
        raise ValueError(f"'{path}' does not contain a score.")
    return score_to_document(score)
