"""Unit tests for the tie-span locator."""

from tiecalc.document import Document, Entry, Note
from tiecalc.tie_span import EntryLayer, equal_note, tie_span


def _note(position: int, tie: bool = False, back: bool = False) -> Note:
    return Note(staff_position=position, tie=tie, tie_backwards=back)


def test_tie_start_finds_note_in_next_measure() -> None:
    first = _note(-3, tie=True)
    second = _note(-3, back=True)
    Document([Entry([first], measure=1), Entry([second], measure=2)])

    span = tie_span(first, False)

    assert span.start_note is first
    assert span.end_note is second


def test_tie_start_matches_staff_position_only() -> None:
    first = _note(-3, tie=True)
    Document([
        Entry([first], measure=1),
        Entry([_note(-5, back=True), _note(-2, back=True)], measure=2),
    ])

    assert tie_span(first, False).end_note is None


def test_tie_start_needs_backward_tie_on_target() -> None:
    first = _note(-3, tie=True)
    Document([Entry([first], measure=1), Entry([_note(-3)], measure=2)])

    assert tie_span(first, False).end_note is None


def test_tie_start_into_rest_has_no_match() -> None:
    first = _note(-3, tie=True)
    Document([
        Entry([first], measure=1),
        Entry([], measure=2, is_rest=True),
        Entry([_note(-3, back=True)], measure=2),
    ])

    assert tie_span(first, False).end_note is None


def test_tie_start_into_grace_note_has_no_match() -> None:
    first = _note(-3, tie=True)
    Document([
        Entry([first], measure=1),
        Entry([_note(-3, back=True)], measure=2, grace_note=True),
    ])

    assert tie_span(first, False).end_note is None


def test_tie_start_searches_voice_two_after_launch() -> None:
    first = _note(-3, tie=True)
    target = _note(-3, back=True)
    Document([
        Entry([first], measure=1),
        Entry([_note(-1)], measure=2, voice2_launch=True),
        Entry([target], measure=2, voice2=True),
    ])

    assert tie_span(first, False).end_note is target


def test_tie_start_without_next_entry() -> None:
    first = _note(-3, tie=True)
    Document([Entry([first], measure=1)])

    span = tie_span(first, False)

    assert span.start_note is first
    assert span.end_note is None


def test_tie_start_window_ends_after_next_measure() -> None:
    first = _note(-3, tie=True)
    Document([
        Entry([first], measure=1),
        Entry([_note(-3, back=True)], measure=3),
    ])

    span = tie_span(first, False)

    assert len(span.layer) == 1
    assert span.end_note is None


def test_tie_end_walks_back_to_tie_start() -> None:
    start = _note(-3, tie=True)
    end = _note(-3, back=True)
    Document([
        Entry([start], measure=1),
        Entry([_note(-6)], measure=1),
        Entry([end], measure=2),
    ])

    span = tie_span(end, True)

    assert span.start_note is start
    assert span.end_note is end


def test_tie_end_stops_at_grace_note() -> None:
    start = _note(-3, tie=True)
    end = _note(-3, back=True)
    Document([
        Entry([start], measure=1),
        Entry([_note(-3, tie=True)], measure=2, grace_note=True),
        Entry([end], measure=2),
    ])

    span = tie_span(end, True)

    assert span.start_note is None
    assert span.end_note is end


def test_tie_end_in_first_measure_uses_one_measure_window() -> None:
    end = _note(-3, back=True)
    Document([Entry([end], measure=1), Entry([_note(-3)], measure=2)])

    span = tie_span(end, True)

    assert len(span.layer) == 1
    assert span.start_note is None
    assert span.end_note is end


def test_window_is_limited_to_the_note_layer() -> None:
    first = _note(-3, tie=True)
    Document([
        Entry([first], measure=1, layer=1),
        Entry([_note(-3, back=True)], measure=2, layer=2),
    ])

    assert tie_span(first, False).end_note is None


def test_entry_layer_navigation_stops_at_edges() -> None:
    entries = [Entry([_note(-3)], measure=1), Entry([_note(-2)], measure=1)]
    layer = EntryLayer(entries)

    assert layer.next(entries[0]) is entries[1]
    assert layer.next(entries[1]) is None
    assert layer.previous(entries[0]) is None
    assert layer.previous(entries[1]) is entries[0]


def test_equal_note_ignores_rests() -> None:
    target = _note(-3, tie=True)
    Entry([target], measure=1)

    assert equal_note(Entry([], measure=2, is_rest=True), target, True) is None
    assert equal_note(None, target, True) is None
