"""Enumerations and preference records shared by the tie calculators."""

from dataclasses import dataclass
from enum import Enum, IntEnum

# ── Duration constants (EDUs) ────────────────────────────────────────────────
QUARTER_NOTE = 1024
WHOLE_NOTE = 4096

# Middle line of a five-line staff, counted in steps from the top line.
DEFAULT_STEM_REVERSAL_POSITION = -4

MAX_LAYERS = 4


class TieDirection(IntEnum):
    """Resolved side of a tie. NONE means the note has no applicable tie."""

    NONE = 0
    OVER = 1
    UNDER = 2


class TieModDirection(IntEnum):
    """Direction override stored in a tie modification."""

    AUTOMATIC = 0
    OVER = 1
    UNDER = 2


class OuterPlacement(IntEnum):
    """Outer-placement override stored in a tie modification."""

    DEFAULT = 0
    ON = 1
    OFF = 2


class TiePlacement(IntEnum):
    """Where one endpoint of a tie sits relative to its note."""

    OVER_INNER = 1
    UNDER_INNER = 2
    OVER_OUTER_NOTE = 3
    UNDER_OUTER_NOTE = 4
    OVER_OUTER_STEM = 5
    UNDER_OUTER_STEM = 6

    @property
    def is_inner(self) -> bool:
        return self in (TiePlacement.OVER_INNER, TiePlacement.UNDER_INNER)


class ConnectionCode(IntEnum):
    """Anchor used by the host when a tie endpoint is activated."""

    NONE = 0
    SYSTEM_START = 1
    SYSTEM_END = 2
    ACCI_LEFT_NOTE_CENTER = 3
    NOTE_LEFT_NOTE_CENTER = 4
    ENTRY_LEFT_NOTE_CENTER = 5
    DOT_RIGHT_NOTE_CENTER = 6
    NOTE_RIGHT_NOTE_CENTER = 7
    ENTRY_RIGHT_NOTE_CENTER = 8
    NOTE_CENTER_NOTE_TOP = 9
    NOTE_CENTER_NOTE_BOTTOM = 10
    NOTE_LEFT_NOTE_TOP = 11
    NOTE_RIGHT_NOTE_TOP = 12
    NOTE_LEFT_NOTE_BOTTOM = 13
    NOTE_RIGHT_NOTE_BOTTOM = 14
    # Never produced; kept so host values round-trip.
    ENTRY_CENTER_NOTE_TOP = 15
    ENTRY_CENTER_NOTE_BOTTOM = 16


class ChordDirectionType(str, Enum):
    """How inner notes of a chord choose their tie direction."""

    STEM_REVERSAL = "stem_reversal"
    SPLIT_BY_HALF = "split_by_half"
    OUTSIDE_INSIDE = "outside_inside"


class MixedStemDirectionType(str, Enum):
    """Tie direction between single notes whose stems point different ways."""

    OVER = "over"
    UNDER = "under"
    OPPOSITE_FIRST_STEM = "opposite_first_stem"


class AltNotationStyle(str, Enum):
    """Alternate notation styles a staff can apply to one of its layers."""

    NORMAL = "normal"
    SLASH = "slash"
    RHYTHMIC = "rhythmic"
    SLASH_BEATS = "slash_beats"
    BLANK_NOTATION = "blank_notation"
    BLANK_NOTATION_RESTS = "blank_notation_rests"
    ONE_BAR_REPEAT = "one_bar_repeat"
    TWO_BAR_REPEAT = "two_bar_repeat"

    @property
    def hides_layer(self) -> bool:
        return self in (
            AltNotationStyle.BLANK_NOTATION,
            AltNotationStyle.SLASH_BEATS,
            AltNotationStyle.ONE_BAR_REPEAT,
            AltNotationStyle.TWO_BAR_REPEAT,
            AltNotationStyle.BLANK_NOTATION_RESTS,
        )


class DirectionRule(str, Enum):
    """Name of the rule that decided a tie direction."""

    NO_TIE = "no_tie"
    EXPLICIT_OVERRIDE = "explicit_override"
    SPLIT_STEM = "split_stem"
    LAYER_FREEZE = "layer_freeze"
    VOICE_TWO = "voice_two"
    FLIP_TIE = "flip_tie"
    OUTER_NOTE = "outer_note"
    INNER_CHORD = "inner_chord"
    STEM_REVERSAL = "stem_reversal"
    OPPOSING_SECONDS = "opposing_seconds"
    MIXED_STEM = "mixed_stem"
    STEM_SIDE = "stem_side"


@dataclass(frozen=True)
class TieMod:
    """
    Per-tie override record owned by the caller.

    Attributes:
        direction:       Explicit direction, or AUTOMATIC to let the rules decide.
        outer_placement: Explicit outer placement, or DEFAULT to follow TiePrefs.
        is_start_tie:    True for the tie leaving a note, False for a tie end
                         (the continuation drawn at the start of a system).
    """

    direction: TieModDirection = TieModDirection.AUTOMATIC
    outer_placement: OuterPlacement = OuterPlacement.DEFAULT
    is_start_tie: bool = True


@dataclass(frozen=True)
class TiePrefs:
    """Document-level tie preferences. Load once per batch and pass it down."""

    chord_direction_type: ChordDirectionType = ChordDirectionType.OUTSIDE_INSIDE
    mixed_stem_direction_type: MixedStemDirectionType = MixedStemDirectionType.OVER
    chord_direction_opposing_seconds: bool = True
    use_outer_placement: bool = True
    before_single_accidental: bool = True
    after_single_dot: bool = True
    after_multiple_dots: bool = True


@dataclass(frozen=True)
class LayerPrefs:
    """Per-layer stem and tie freezing options."""

    use_freeze_stems_ties: bool = False
    freeze_stems_up: bool = True
    freeze_ties_same_direction: bool = False
    ignore_hidden_notes: bool = False
    use_rest_offset_in_multiple: bool = True
    hide_when_inactive: bool = False


@dataclass(frozen=True)
class StaffSpec:
    """The staff settings the tie rules read."""

    stem_reversal_position: int = DEFAULT_STEM_REVERSAL_POSITION
    alt_notation_layer: int = 1
    alt_notation_style: AltNotationStyle = AltNotationStyle.NORMAL
    alt_show_other_notes: bool = True
