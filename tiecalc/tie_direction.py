"""
Tie direction rules.

``calc_default_direction`` reproduces the direction the host picks from chord
geometry and stem directions alone. ``calc_direction`` layers the split-stem,
layer, voice-two, flip-tie and explicit overrides on top of it.
"""

from __future__ import annotations

import logging

from tiecalc.tie_models import (
    MAX_LAYERS,
    ChordDirectionType,
    DirectionRule,
    LayerPrefs,
    MixedStemDirectionType,
    StaffSpec,
    TieDirection,
    TieMod,
    TieModDirection,
    TiePrefs,
)
from tiecalc.tie_span import tie_span
from tiecalc.views import EntryView, NoteView

logger = logging.getLogger(__name__)


def stem_direction(entry: EntryView) -> int:
    """Return +1 for an up stem and -1 for a down stem."""
    return 1 if entry.calc_stem_up() else -1


def stem_side(stemdir: int) -> TieDirection:
    """Direction on the notehead side: stem up curves under, stem down over."""
    return TieDirection.UNDER if stemdir > 0 else TieDirection.OVER


def stem_follow(entry: EntryView) -> TieDirection:
    """Direction on the stem side, used by voice-two and flipped ties."""
    return TieDirection.OVER if entry.calc_stem_up() else TieDirection.UNDER


# ── Default direction ────────────────────────────────────────────────────────

def _chord_direction(
    note: NoteView, stemdir: int, tie_prefs: TiePrefs
) -> tuple[TieDirection, DirectionRule]:
    entry = note.entry
    count = entry.count
    index = note.note_index

    # Outer notes ignore the preferences entirely.
    if index == 0:
        return TieDirection.UNDER, DirectionRule.OUTER_NOTE
    if index == count - 1:
        return TieDirection.OVER, DirectionRule.OUTER_NOTE

    policy = tie_prefs.chord_direction_type
    inner_default = TieDirection.NONE
    rule = DirectionRule.INNER_CHORD
    if policy != ChordDirectionType.STEM_REVERSAL:
        if index < count // 2:
            inner_default = TieDirection.UNDER
        if index >= (count + 1) // 2:
            inner_default = TieDirection.OVER
        if policy == ChordDirectionType.OUTSIDE_INSIDE:
            inner_default = TieDirection.UNDER if stemdir > 0 else TieDirection.OVER
    if inner_default == TieDirection.NONE or policy == ChordDirectionType.STEM_REVERSAL:
        reversal = entry.document.staff_spec(entry.staff).stem_reversal_position
        if note.staff_position < reversal:
            inner_default = TieDirection.UNDER
        else:
            inner_default = TieDirection.OVER
        rule = DirectionRule.STEM_REVERSAL

    if tie_prefs.chord_direction_opposing_seconds:
        if inner_default == TieDirection.OVER and not note.is_upper_2nd and note.is_lower_2nd:
            return TieDirection.UNDER, DirectionRule.OPPOSING_SECONDS
        if inner_default == TieDirection.UNDER and note.is_upper_2nd and not note.is_lower_2nd:
            return TieDirection.OVER, DirectionRule.OPPOSING_SECONDS
    return inner_default, rule


def _adjacent_stem_direction(note: NoteView, for_tie_end: bool, stemdir: int) -> int:
    """
    Stem direction of the entry a single note's tie connects with, or 0.

    A tie end reads the entry immediately before the note, whoever started
    the tie. The host does the same.

    A tie start reads the tied-to entry. Without one, it looks ahead:
      1. A rest leaves the direction undetermined.
      2. A note uses its own stem, frozen or not.
      3. A floating stem that agrees with ours, but launches voice two, defers
         to the launched entry.
    """
    span = tie_span(note, for_tie_end)
    if for_tie_end:
        if span.end_note is not None:
            start_entry = span.layer.previous(span.end_note.entry)
            if start_entry is not None:
                return stem_direction(start_entry)
        return 0

    adjacent_stemdir = 0
    if span.end_note is not None:
        adjacent_stemdir = stem_direction(span.end_note.entry)
    if adjacent_stemdir == 0 and span.start_note is not None:
        next_entry = span.layer.next(span.start_note.entry)
        if next_entry is not None and not next_entry.is_rest:
            adjacent_stemdir = stem_direction(next_entry)
            if (
                not next_entry.freeze_stem
                and next_entry.voice2_launch
                and adjacent_stemdir == stemdir
            ):
                next_entry = span.layer.next(next_entry)
                if next_entry is not None:
                    adjacent_stemdir = stem_direction(next_entry)
    return adjacent_stemdir


def explain_default_direction(
    note: NoteView, for_tie_end: bool, tie_prefs: TiePrefs | None = None
) -> tuple[TieDirection, DirectionRule]:
    """Same as ``calc_default_direction`` but also names the deciding rule."""
    if for_tie_end:
        if not note.has_tie_from_previous:
            return TieDirection.NONE, DirectionRule.NO_TIE
    elif not note.has_tie_to_next:
        return TieDirection.NONE, DirectionRule.NO_TIE

    tie_prefs = tie_prefs or TiePrefs()
    stemdir = stem_direction(note.entry)

    if note.entry.count > 1:
        return _chord_direction(note, stemdir, tie_prefs)

    adjacent_stemdir = _adjacent_stem_direction(note, for_tie_end, stemdir)
    if adjacent_stemdir != 0 and adjacent_stemdir != stemdir:
        if tie_prefs.mixed_stem_direction_type == MixedStemDirectionType.OVER:
            return TieDirection.OVER, DirectionRule.MIXED_STEM
        if tie_prefs.mixed_stem_direction_type == MixedStemDirectionType.UNDER:
            return TieDirection.UNDER, DirectionRule.MIXED_STEM

    return stem_side(stemdir), DirectionRule.STEM_SIDE


def calc_default_direction(
    note: NoteView, for_tie_end: bool, tie_prefs: TiePrefs | None = None
) -> TieDirection:
    """
    Calculate the direction of a tie from context and TiePrefs alone.

    Layer and voice overrides and explicit TieMod directions are ignored; use
    ``calc_direction`` for the direction actually drawn.

    Args:
        note:        The note whose tie is examined.
        for_tie_end: Examine the tie ending on the note instead of the one
                     leaving it.
        tie_prefs:   Preferences to apply. Factory defaults when omitted.

    Returns:
        OVER or UNDER, or NONE if the note has no applicable tie.
    """
    direction, rule = explain_default_direction(note, for_tie_end, tie_prefs)
    logger.debug("Default tie direction %s by rule %s", direction.name, rule.value)
    return direction


# ── Layer overrides ──────────────────────────────────────────────────────────

def _layer_is_visible(staff_spec: StaffSpec, layer: int) -> bool:
    if layer != staff_spec.alt_notation_layer:
        return staff_spec.alt_show_other_notes
    return not staff_spec.alt_notation_style.hides_layer


def _other_layers_visible(entry: EntryView) -> bool:
    document = entry.document
    staff_spec = document.staff_spec(entry.staff)
    for layer in range(1, MAX_LAYERS + 1):
        if layer == entry.layer or not _layer_is_visible(staff_spec, layer):
            continue
        layer_prefs = document.layer_prefs(layer)
        if layer_prefs is None or layer_prefs.hide_when_inactive:
            continue
        layer_entries = document.layer_entries(entry.staff, layer, entry.measure, entry.measure)
        if any(layer_entry.visible for layer_entry in layer_entries):
            return True
    return False


def _layer_stem_direction(layer_prefs: LayerPrefs, entry: EntryView) -> int:
    if not layer_prefs.use_freeze_stems_ties:
        return 0
    # use_rest_offset_in_multiple gates far more than rests.
    if layer_prefs.use_rest_offset_in_multiple:
        if not entry.document.is_multi_layered_cell(entry):
            return 0
        if layer_prefs.ignore_hidden_notes and not _other_layers_visible(entry):
            return 0
    return 1 if layer_prefs.freeze_stems_up else -1


def layer_tie_direction(entry: EntryView) -> TieDirection:
    """Direction frozen by the entry's layer, or NONE if the layer does not freeze ties."""
    layer_prefs = entry.document.layer_prefs(entry.layer)
    if layer_prefs is None:
        return TieDirection.NONE
    layer_stemdir = _layer_stem_direction(layer_prefs, entry)
    if layer_stemdir != 0 and layer_prefs.freeze_ties_same_direction:
        return TieDirection.OVER if layer_stemdir > 0 else TieDirection.UNDER
    return TieDirection.NONE


# ── Effective direction ──────────────────────────────────────────────────────

def explain_direction(
    note: NoteView, tie_mod: TieMod, tie_prefs: TiePrefs | None = None
) -> tuple[TieDirection, DirectionRule]:
    """Same as ``calc_direction`` but also names the deciding rule."""
    # Most of these rules apply whether or not the note has a tie yet.
    if tie_mod.direction != TieModDirection.AUTOMATIC:
        return TieDirection(tie_mod.direction), DirectionRule.EXPLICIT_OVERRIDE
    entry = note.entry
    if entry.split_stem:
        split = TieDirection.OVER if note.upstem_split else TieDirection.UNDER
        return split, DirectionRule.SPLIT_STEM
    layer_direction = layer_tie_direction(entry)
    if layer_direction != TieDirection.NONE:
        return layer_direction, DirectionRule.LAYER_FREEZE
    if entry.voice2_launch or entry.voice2:
        return stem_follow(entry), DirectionRule.VOICE_TWO
    if entry.flip_tie:
        return stem_follow(entry), DirectionRule.FLIP_TIE
    return explain_default_direction(note, not tie_mod.is_start_tie, tie_prefs)


def calc_direction(
    note: NoteView, tie_mod: TieMod, tie_prefs: TiePrefs | None = None
) -> TieDirection:
    """
    Calculate the direction a tie is actually drawn in.

    Precedence, first match wins: explicit TieMod direction, split stem,
    layer-frozen ties, voice two, flipped tie, default direction.

    Returns:
        OVER or UNDER, or NONE if the rules fall through to the default
        direction and the note has no applicable tie.
    """
    direction, rule = explain_direction(note, tie_mod, tie_prefs)
    logger.debug("Tie direction %s by rule %s", direction.name, rule.value)
    return direction
