"""In-memory notation document implementing the read-only views."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from tiecalc.tie_models import (
    MAX_LAYERS,
    QUARTER_NOTE,
    LayerPrefs,
    StaffSpec,
    TiePrefs,
)
from tiecalc.views import DocumentView


def second_offsets(positions: list[int], stem_up: bool) -> list[bool]:
    """
    Return which notes of a chord are pushed to the other side of the stem.

    ``positions`` must be sorted ascending. With the stem up, the upper note of
    each second moves right, scanning from the bottom; with the stem down, the
    lower note of each second moves left, scanning from the top. A note that
    already moved never pushes its neighbour.
    """
    offsets = [False] * len(positions)
    if stem_up:
        for i in range(1, len(positions)):
            if positions[i] - positions[i - 1] == 1 and not offsets[i - 1]:
                offsets[i] = True
    else:
        for i in range(len(positions) - 2, -1, -1):
            if positions[i + 1] - positions[i] == 1 and not offsets[i + 1]:
                offsets[i] = True
    return offsets


@dataclass(eq=False)
class Note:
    """
    A single note of an Entry.

    Attributes:
        staff_position: Steps from the top staff line (0 = top line, -4 = middle
                        line of a five-line staff, negative going down).
        tie:            The note starts a tie to the next entry.
        tie_backwards:  The note ends a tie from the previous entry.
        accidental:     An accidental is displayed before the note.
        upstem_split:   In a split-stem entry, the note belongs to the upstem group.
        displacement:   Diatonic steps from middle C. Defaults to staff_position.
    """

    staff_position: int
    tie: bool = False
    tie_backwards: bool = False
    accidental: bool = False
    upstem_split: bool = False
    displacement: int | None = None
    entry: Entry = field(init=False, repr=False)
    note_index: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.displacement is None:
            self.displacement = self.staff_position

    @property
    def has_tie_to_next(self) -> bool:
        return self.tie

    @property
    def has_tie_from_previous(self) -> bool:
        return self.tie_backwards

    @property
    def has_accidental(self) -> bool:
        return self.accidental

    def _neighbour_position(self, offset: int) -> bool:
        target = self.staff_position + offset
        return any(other.staff_position == target for other in self.entry.notes)

    @property
    def is_upper_2nd(self) -> bool:
        """The note sits a second above another note of the chord."""
        return self._neighbour_position(-1)

    @property
    def is_lower_2nd(self) -> bool:
        """The note sits a second below another note of the chord."""
        return self._neighbour_position(1)

    @property
    def is_non_aligned_2nd(self) -> bool:
        """The note is drawn on the other side of the stem."""
        stem_up = self.entry.calc_stem_up()
        positions = [n.staff_position for n in self.entry.notes]
        return second_offsets(positions, stem_up)[self.note_index]

    @property
    def is_upstem_2nd(self) -> bool:
        return self.is_non_aligned_2nd and self.entry.calc_stem_up()

    @property
    def is_downstem_2nd(self) -> bool:
        return self.is_non_aligned_2nd and not self.entry.calc_stem_up()


@dataclass(eq=False)
class Entry:
    """
    A note, chord or rest in one staff layer.

    Notes are sorted ascending by staff position on construction.

    Attributes:
        notes:          Chord members (empty for rests).
        measure:        1-based measure number.
        staff:          1-based staff number.
        layer:          1-based layer number.
        duration:       Length in EDUs (quarter = 1024, whole = 4096).
        dots:           Number of augmentation dots.
        stem_up:        Explicit stem direction, or None to calculate it from the
                        staff's stem reversal position.
        entry_number:   Document-wide identifier. 0 means "assign on add".
    """

    notes: list[Note]
    measure: int
    staff: int = 1
    layer: int = 1
    duration: int = QUARTER_NOTE
    dots: int = 0
    stem_up: bool | None = None
    is_rest: bool = False
    grace_note: bool = False
    voice2: bool = False
    voice2_launch: bool = False
    split_stem: bool = False
    flip_tie: bool = False
    freeze_stem: bool = False
    visible: bool = True
    entry_number: int = 0
    document: Document | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.notes = sorted(self.notes, key=lambda n: n.staff_position)
        for index, note in enumerate(self.notes):
            note.entry = self
            note.note_index = index

    @property
    def count(self) -> int:
        return len(self.notes)

    def calc_stem_up(self) -> bool:
        """
        Return the stem direction.

        Without an explicit direction the stem points away from the note that
        lies furthest from the stem reversal position; a tie goes down.
        """
        if self.stem_up is not None:
            return self.stem_up
        if not self.notes:
            return True
        if self.document is not None:
            reversal = self.document.staff_spec(self.staff).stem_reversal_position
        else:
            reversal = StaffSpec().stem_reversal_position
        above = self.notes[-1].staff_position - reversal
        below = reversal - self.notes[0].staff_position
        return below > above


class Document(DocumentView):
    """
    A set of entries together with the preferences and system layout they use.

    Args:
        entries:     Entries in score order within each staff layer.
        tie_prefs:   Tie preference snapshot (defaults to factory settings).
        staves:      StaffSpec per staff number.
        layers:      LayerPrefs per layer number.
        systems:     First measure number of every staff system.
        end_measure: Last measure of the document. Defaults to the highest
                     measure that holds an entry.
    """

    def __init__(
        self,
        entries: list[Entry] | None = None,
        *,
        tie_prefs: TiePrefs | None = None,
        staves: dict[int, StaffSpec] | None = None,
        layers: dict[int, LayerPrefs] | None = None,
        systems: list[int] | None = None,
        end_measure: int | None = None,
    ) -> None:
        self._tie_prefs = tie_prefs or TiePrefs()
        self._staves = dict(staves or {})
        self._layers = dict(layers or {})
        self._system_starts = sorted(systems or [1])
        self._end_measure = end_measure
        self._entries: list[Entry] = []
        self._sequences: dict[tuple[int, int], list[Entry]] = {}
        self._measures: dict[tuple[int, int], list[int]] = {}
        self._positions: dict[int, int] = {}
        for entry in entries or []:
            self.add_entry(entry)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def add_entry(self, entry: Entry) -> Entry:
        """Attach an entry, numbering it if it has no entry number yet."""
        if entry.entry_number == 0:
            entry.entry_number = len(self._entries) + 1
        entry.document = self
        self._entries.append(entry)
        self._sequences.clear()
        self._measures.clear()
        self._positions.clear()
        return entry

    @property
    def entries(self) -> list[Entry]:
        return list(self._entries)

    # ------------------------------------------------------------------
    # DocumentView
    # ------------------------------------------------------------------

    @property
    def tie_prefs(self) -> TiePrefs:
        return self._tie_prefs

    @property
    def end_measure(self) -> int:
        if self._end_measure is not None:
            return self._end_measure
        return max((entry.measure for entry in self._entries), default=1)

    def _layer_sequence(self, staff: int, layer: int) -> list[Entry]:
        key = (staff, layer)
        sequence = self._sequences.get(key)
        if sequence is None:
            entries = [e for e in self._entries if e.staff == staff and e.layer == layer]
            # sorted() is stable, so entries keep their order inside a measure
            sequence = sorted(entries, key=lambda e: e.measure)
            self._sequences[key] = sequence
            self._measures[key] = [e.measure for e in sequence]
            self._positions.update((id(e), index) for index, e in enumerate(sequence))
        return sequence

    def layer_entries(
        self, staff: int, layer: int, start_measure: int, end_measure: int
    ) -> list[Entry]:
        sequence = self._layer_sequence(staff, layer)
        measures = self._measures[(staff, layer)]
        start = bisect.bisect_left(measures, start_measure)
        end = bisect.bisect_right(measures, end_measure)
        return sequence[start:end]

    def next_entry(self, entry: Entry) -> Entry | None:
        sequence = self._layer_sequence(entry.staff, entry.layer)
        index = self._positions.get(id(entry))
        if index is None or index >= len(sequence) or sequence[index] is not entry:
            return None
        return sequence[index + 1] if index + 1 < len(sequence) else None

    def system_index(self, measure: int) -> int:
        return max(bisect.bisect_right(self._system_starts, measure) - 1, 0)

    def layer_prefs(self, layer: int) -> LayerPrefs | None:
        if not 1 <= layer <= MAX_LAYERS:
            return None
        return self._layers.get(layer, LayerPrefs())

    def staff_spec(self, staff: int) -> StaffSpec:
        return self._staves.get(staff, StaffSpec())
