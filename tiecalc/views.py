"""Read-only views of the notation document consumed by the tie calculators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, Sequence

from tiecalc.tie_models import LayerPrefs, StaffSpec, TiePrefs


class NoteView(Protocol):
    """One note of an entry."""

    @property
    def entry(self) -> EntryView: ...

    @property
    def note_index(self) -> int: ...

    @property
    def staff_position(self) -> int: ...

    @property
    def displacement(self) -> int: ...

    @property
    def has_tie_to_next(self) -> bool: ...

    @property
    def has_tie_from_previous(self) -> bool: ...

    @property
    def is_upper_2nd(self) -> bool: ...

    @property
    def is_lower_2nd(self) -> bool: ...

    @property
    def is_non_aligned_2nd(self) -> bool: ...

    @property
    def is_upstem_2nd(self) -> bool: ...

    @property
    def is_downstem_2nd(self) -> bool: ...

    @property
    def upstem_split(self) -> bool: ...

    @property
    def has_accidental(self) -> bool: ...


class EntryView(Protocol):
    """
    A note, chord or rest at one rhythmic position of a staff layer.

    ``notes`` must be ordered from the lowest to the highest staff position.
    """

    @property
    def notes(self) -> Sequence[NoteView]: ...

    @property
    def count(self) -> int: ...

    @property
    def document(self) -> DocumentView: ...

    measure: int
    staff: int
    layer: int
    entry_number: int
    duration: int
    dots: int
    is_rest: bool
    grace_note: bool
    voice2: bool
    voice2_launch: bool
    split_stem: bool
    flip_tie: bool
    freeze_stem: bool
    visible: bool

    def calc_stem_up(self) -> bool: ...


class DocumentView(ABC):
    """Queries against the document that owns a set of entries."""

    @property
    @abstractmethod
    def tie_prefs(self) -> TiePrefs:
        """The document's tie preference snapshot."""

    @property
    @abstractmethod
    def entries(self) -> list[EntryView]:
        """Every entry of the document in score order."""

    @property
    @abstractmethod
    def end_measure(self) -> int:
        """Number of the last measure in the document."""

    @abstractmethod
    def layer_entries(
        self, staff: int, layer: int, start_measure: int, end_measure: int
    ) -> list[EntryView]:
        """Entries of one staff layer within a measure range, in score order."""

    @abstractmethod
    def next_entry(self, entry: EntryView) -> EntryView | None:
        """The entry following ``entry`` in its staff layer, anywhere in the document."""

    @abstractmethod
    def system_index(self, measure: int) -> int:
        """Index of the staff system that contains ``measure``."""

    @abstractmethod
    def layer_prefs(self, layer: int) -> LayerPrefs | None:
        """Preferences of a layer, or None if the layer does not exist."""

    @abstractmethod
    def staff_spec(self, staff: int) -> StaffSpec:
        """Settings of a staff."""

    def is_multi_layered_cell(self, entry: EntryView) -> bool:
        """True if another layer of the same staff has entries in this measure."""
        prefs_layer = 1
        while self.layer_prefs(prefs_layer) is not None:
            if prefs_layer != entry.layer and self.layer_entries(
                entry.staff, prefs_layer, entry.measure, entry.measure
            ):
                return True
            prefs_layer += 1
        return False
