"""Unit tests for the default and effective tie direction rules."""

import pytest

from tiecalc.document import Document, Entry, Note
from tiecalc.tie_direction import (
    calc_default_direction,
    calc_direction,
    explain_default_direction,
    explain_direction,
    layer_tie_direction,
)
from tiecalc.tie_models import (
    ChordDirectionType,
    DirectionRule,
    LayerPrefs,
    MixedStemDirectionType,
    TieDirection,
    TieMod,
    TieModDirection,
    TiePrefs,
)


def _chord(positions: list[int], stem_up: bool = True, measure: int = 1) -> Entry:
    return Entry([Note(p, tie=True) for p in positions], measure=measure, stem_up=stem_up)


def _prefs(**kwargs) -> TiePrefs:
    return TiePrefs(**kwargs)


def _tied_pair(first_stem_up: bool, second_stem_up: bool) -> tuple[Note, Note]:
    first = Note(-6, tie=True)
    second = Note(-6, tie_backwards=True)
    Document([
        Entry([first], measure=1, stem_up=first_stem_up),
        Entry([second], measure=2, stem_up=second_stem_up),
    ])
    return first, second


# ── Chords ───────────────────────────────────────────────────────────────────

@pytest.mark.parametrize("policy", list(ChordDirectionType))
@pytest.mark.parametrize("stem_up", [True, False])
def test_outer_chord_notes_ignore_preferences(policy: ChordDirectionType, stem_up: bool) -> None:
    entry = _chord([-8, -4, 0], stem_up=stem_up)
    Document([entry])
    prefs = _prefs(chord_direction_type=policy)

    assert calc_default_direction(entry.notes[0], False, prefs) == TieDirection.UNDER
    assert calc_default_direction(entry.notes[-1], False, prefs) == TieDirection.OVER


def test_two_note_chord_splits_under_and_over() -> None:
    entry = _chord([-8, -4])
    Document([entry])
    prefs = _prefs(chord_direction_type=ChordDirectionType.SPLIT_BY_HALF)

    assert explain_default_direction(entry.notes[0], False, prefs) == (
        TieDirection.UNDER,
        DirectionRule.OUTER_NOTE,
    )
    assert explain_default_direction(entry.notes[1], False, prefs) == (
        TieDirection.OVER,
        DirectionRule.OUTER_NOTE,
    )


def test_split_by_half_inner_notes() -> None:
    entry = _chord([-10, -8, -6, -2])
    Document([entry])
    prefs = _prefs(
        chord_direction_type=ChordDirectionType.SPLIT_BY_HALF,
        chord_direction_opposing_seconds=False,
    )

    assert calc_default_direction(entry.notes[1], False, prefs) == TieDirection.UNDER
    assert calc_default_direction(entry.notes[2], False, prefs) == TieDirection.OVER


def test_split_by_half_middle_note_falls_back_to_stem_reversal() -> None:
    low = _chord([-8, -6, -2])
    high = _chord([-8, -2, 0])
    Document([low, high])
    prefs = _prefs(chord_direction_type=ChordDirectionType.SPLIT_BY_HALF)

    assert explain_default_direction(low.notes[1], False, prefs) == (
        TieDirection.UNDER,
        DirectionRule.STEM_REVERSAL,
    )
    assert explain_default_direction(high.notes[1], False, prefs) == (
        TieDirection.OVER,
        DirectionRule.STEM_REVERSAL,
    )


def test_outside_inside_follows_stem() -> None:
    up = _chord([-8, -6, -2], stem_up=True)
    down = _chord([-8, -6, -2], stem_up=False)
    Document([up, down])
    prefs = _prefs(chord_direction_type=ChordDirectionType.OUTSIDE_INSIDE)

    assert calc_default_direction(up.notes[1], False, prefs) == TieDirection.UNDER
    assert calc_default_direction(down.notes[1], False, prefs) == TieDirection.OVER


def test_stem_reversal_policy_uses_staff_position() -> None:
    entry = _chord([-8, -2, 0, 2])
    Document([entry])

    split = _prefs(chord_direction_type=ChordDirectionType.SPLIT_BY_HALF)
    reversal = _prefs(chord_direction_type=ChordDirectionType.STEM_REVERSAL)

    assert calc_default_direction(entry.notes[1], False, split) == TieDirection.UNDER
    assert calc_default_direction(entry.notes[1], False, reversal) == TieDirection.OVER


def test_opposing_seconds_flip_inner_direction() -> None:
    entry = _chord([-8, -5, -4, 0], stem_up=False)
    Document([entry])
    prefs = _prefs(
        chord_direction_type=ChordDirectionType.OUTSIDE_INSIDE,
        chord_direction_opposing_seconds=True,
    )

    assert explain_default_direction(entry.notes[1], False, prefs) == (
        TieDirection.UNDER,
        DirectionRule.OPPOSING_SECONDS,
    )
    assert calc_default_direction(entry.notes[2], False, prefs) == TieDirection.OVER


def test_opposing_seconds_disabled() -> None:
    entry = _chord([-8, -5, -4, 0], stem_up=False)
    Document([entry])
    prefs = _prefs(
        chord_direction_type=ChordDirectionType.OUTSIDE_INSIDE,
        chord_direction_opposing_seconds=False,
    )

    assert calc_default_direction(entry.notes[1], False, prefs) == TieDirection.OVER


# ── Single notes ─────────────────────────────────────────────────────────────

def test_note_without_tie_has_no_direction() -> None:
    note = Note(-6)
    Document([Entry([note], measure=1)])

    assert calc_default_direction(note, False) == TieDirection.NONE
    assert calc_default_direction(note, True) == TieDirection.NONE


def test_single_note_stem_up_ties_under() -> None:
    first, _ = _tied_pair(True, True)

    assert explain_default_direction(first, False) == (
        TieDirection.UNDER,
        DirectionRule.STEM_SIDE,
    )


def test_single_note_stem_down_ties_over() -> None:
    first, _ = _tied_pair(False, False)

    assert calc_default_direction(first, False) == TieDirection.OVER


@pytest.mark.parametrize(
    ("policy", "expected"),
    [
        (MixedStemDirectionType.OVER, TieDirection.OVER),
        (MixedStemDirectionType.UNDER, TieDirection.UNDER),
        (MixedStemDirectionType.OPPOSITE_FIRST_STEM, TieDirection.UNDER),
    ],
)
def test_mixed_stems_follow_policy(policy: MixedStemDirectionType, expected: TieDirection) -> None:
    first, _ = _tied_pair(True, False)

    assert calc_default_direction(first, False, _prefs(mixed_stem_direction_type=policy)) == expected


def test_tie_end_reads_preceding_entry_stem() -> None:
    _, second = _tied_pair(False, True)
    prefs = _prefs(mixed_stem_direction_type=MixedStemDirectionType.OVER)

    assert explain_default_direction(second, True, prefs) == (
        TieDirection.OVER,
        DirectionRule.MIXED_STEM,
    )


def test_tie_end_reads_entry_before_it_even_if_not_tie_start() -> None:
    start = Note(-6, tie=True)
    end = Note(-6, tie_backwards=True)
    Document([
        Entry([start], measure=1, stem_up=True),
        Entry([Note(-1)], measure=1, stem_up=False),
        Entry([end], measure=2, stem_up=True),
    ])
    prefs = _prefs(mixed_stem_direction_type=MixedStemDirectionType.OVER)

    assert calc_default_direction(end, True, prefs) == TieDirection.OVER


def test_rest_after_tie_stops_lookahead() -> None:
    note = Note(-6, tie=True)
    Document([
        Entry([note], measure=1, stem_up=True),
        Entry([], measure=2, is_rest=True),
        Entry([Note(-2)], measure=2, stem_up=False),
    ])
    prefs = _prefs(mixed_stem_direction_type=MixedStemDirectionType.OVER)

    assert explain_default_direction(note, False, prefs) == (
        TieDirection.UNDER,
        DirectionRule.STEM_SIDE,
    )


def test_lookahead_uses_next_note_without_tie() -> None:
    note = Note(-6, tie=True)
    Document([
        Entry([note], measure=1, stem_up=True),
        Entry([Note(-2)], measure=2, stem_up=False),
    ])
    prefs = _prefs(mixed_stem_direction_type=MixedStemDirectionType.OVER)

    assert calc_default_direction(note, False, prefs) == TieDirection.OVER


@pytest.mark.parametrize(("frozen", "expected"), [(False, TieDirection.OVER), (True, TieDirection.UNDER)])
def test_lookahead_follows_voice_two_launch(frozen: bool, expected: TieDirection) -> None:
    note = Note(-6, tie=True)
    Document([
        Entry([note], measure=1, stem_up=True),
        Entry([Note(-2)], measure=2, stem_up=True, voice2_launch=True, freeze_stem=frozen),
        Entry([Note(-8)], measure=2, stem_up=False, voice2=True),
    ])
    prefs = _prefs(mixed_stem_direction_type=MixedStemDirectionType.OVER)

    assert calc_default_direction(note, False, prefs) == expected


# ── Effective direction ──────────────────────────────────────────────────────

@pytest.mark.parametrize("override", [TieModDirection.OVER, TieModDirection.UNDER])
def test_explicit_override_wins(override: TieModDirection) -> None:
    entry = _chord([-8, -4, 0])
    entry.split_stem = True
    entry.flip_tie = True
    Document([entry])
    tie_mod = TieMod(direction=override)

    for note in entry.notes:
        assert calc_direction(note, tie_mod) == TieDirection(override)


def test_split_stem_uses_note_group() -> None:
    upper = Note(-2, tie=True, upstem_split=True)
    lower = Note(-8, tie=True)
    Document([Entry([upper, lower], measure=1, split_stem=True)])

    assert explain_direction(upper, TieMod()) == (TieDirection.OVER, DirectionRule.SPLIT_STEM)
    assert calc_direction(lower, TieMod()) == TieDirection.UNDER


def test_layer_freeze_sets_direction() -> None:
    note = Note(-6, tie=True)
    layers = {
        1: LayerPrefs(
            use_freeze_stems_ties=True,
            freeze_stems_up=False,
            freeze_ties_same_direction=True,
            use_rest_offset_in_multiple=False,
        )
    }
    Document([Entry([note], measure=1, stem_up=True)], layers=layers)

    assert explain_direction(note, TieMod()) == (TieDirection.UNDER, DirectionRule.LAYER_FREEZE)


def test_layer_freeze_needs_frozen_stems() -> None:
    note = Note(-6, tie=True)
    layers = {1: LayerPrefs(use_freeze_stems_ties=False, freeze_ties_same_direction=True)}
    Document([Entry([note], measure=1, stem_up=True)], layers=layers)

    assert layer_tie_direction(note.entry) == TieDirection.NONE


def test_layer_freeze_only_in_multi_layer_cells() -> None:
    note = Note(-6, tie=True)
    layers = {
        1: LayerPrefs(
            use_freeze_stems_ties=True,
            freeze_stems_up=True,
            freeze_ties_same_direction=True,
            use_rest_offset_in_multiple=True,
        )
    }
    document = Document([Entry([note], measure=1, stem_up=False)], layers=layers)

    assert layer_tie_direction(note.entry) == TieDirection.NONE

    document.add_entry(Entry([Note(-9)], measure=1, layer=2))

    assert layer_tie_direction(note.entry) == TieDirection.OVER


def test_layer_freeze_ignores_hidden_other_layers() -> None:
    note = Note(-6, tie=True)
    layers = {
        1: LayerPrefs(
            use_freeze_stems_ties=True,
            freeze_stems_up=True,
            freeze_ties_same_direction=True,
            use_rest_offset_in_multiple=True,
            ignore_hidden_notes=True,
        )
    }
    document = Document(
        [Entry([note], measure=1), Entry([Note(-9)], measure=1, layer=2, visible=False)],
        layers=layers,
    )

    assert layer_tie_direction(note.entry) == TieDirection.NONE

    document.add_entry(Entry([Note(-10)], measure=1, layer=3))

    assert layer_tie_direction(note.entry) == TieDirection.OVER


def test_voice_two_follows_stem() -> None:
    note = Note(-6, tie=True)
    Document([Entry([note], measure=1, stem_up=False, voice2=True)])

    assert explain_direction(note, TieMod()) == (TieDirection.UNDER, DirectionRule.VOICE_TWO)


def test_flip_tie_follows_stem() -> None:
    note = Note(-6, tie=True)
    Document([Entry([note], measure=1, stem_up=True, flip_tie=True)])

    assert explain_direction(note, TieMod()) == (TieDirection.OVER, DirectionRule.FLIP_TIE)


def test_falls_back_to_default_for_tie_end() -> None:
    _, second = _tied_pair(True, True)

    assert calc_direction(second, TieMod(is_start_tie=False)) == TieDirection.UNDER
    assert calc_direction(second, TieMod(is_start_tie=True)) == TieDirection.NONE


def test_calc_direction_is_repeatable() -> None:
    first, _ = _tied_pair(True, False)
    tie_mod = TieMod()
    prefs = TiePrefs()

    assert calc_direction(first, tie_mod, prefs) == calc_direction(first, tie_mod, prefs)
