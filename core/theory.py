"""
Scales and chords for the scales and chords view modes.

A scale is a set of pitch classes above a root and can be shown in any of
its modes. A chord is a stack of intervals voiced from a root in one
octave, optionally inverted.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from core.constants import DEFAULT_OCTAVE, pitch_class_from_name, pitch_class_name

logger = logging.getLogger(__name__)

# Inversions are limited to six (root position plus five)
MAX_CHORD_INVERSIONS = 6

_DEGREE_NAMES = ["1", "♭2", "2", "♭3", "3", "4", "♭5", "5", "♭6", "6", "♭7", "7"]


@dataclass(frozen=True)
class Scale:
    """
    Scale as semitone steps from its root.

    Attributes:
        name: Display name, also the lookup key
        intervals: Ascending steps within one octave, starting at 0
        mode_names: Names of the modes, in step order (optional)
    """
    name: str
    intervals: Tuple[int, ...]
    mode_names: Tuple[str, ...] = ()

    @classmethod
    def get(cls, name: str) -> "Scale":
        """
        Look up a scale by name.

        Raises:
            ValueError: If the scale is unknown
        """
        try:
            return SCALES[name]
        except KeyError:
            raise ValueError(f"Unknown scale: {name}") from None

    def __len__(self) -> int:
        return len(self.intervals)

    def contains_pitch_class(self, root_pc: int, pitch_class: int) -> bool:
        return (pitch_class - root_pc) % 12 in self.intervals

    def mode_intervals(self, mode_index: int) -> List[int]:
        """
        Steps of a mode, measured from the mode's own root.

        Example:
            >>> Scale.get("Major").mode_intervals(1)   # Dorian
            [0, 2, 3, 5, 7, 9, 10]
        """
        if mode_index == 0:
            return list(self.intervals)
        mode = mode_index % len(self)
        offset = self.intervals[mode]
        return sorted((self.intervals[(i + mode) % len(self)] - offset) % 12 for i in range(len(self)))

    def mode_name(self, mode_index: int) -> str:
        if mode_index < len(self.mode_names):
            return self.mode_names[mode_index]
        return f"Mode {mode_index + 1}"

    def mode_root(self, root: str, mode_index: int, prefer_flats: bool = False) -> str:
        """Pitch-class name of the root of a mode built on `root`."""
        offset = self.intervals[mode_index % len(self)]
        return pitch_class_name((pitch_class_from_name(root) + offset) % 12, prefer_flats)

    @property
    def degrees(self) -> List[str]:
        return [_DEGREE_NAMES[i] for i in self.intervals]

    def __str__(self) -> str:
        return self.name


class ChordInversion(Enum):
    """Which chord tone is in the bass."""
    ROOT = 0
    FIRST = 1
    SECOND = 2
    THIRD = 3
    FOURTH = 4
    FIFTH = 5

    @property
    def display_name(self) -> str:
        if self is ChordInversion.ROOT:
            return "Root Position"
        return f"{self.name.capitalize()} Inversion"


@dataclass(frozen=True)
class Chord:
    """
    Chord type.

    Attributes:
        type: Lookup key ("major", "minor7" ...)
        symbol: Suffix after the root name ("m7" in "Am7")
        display_name: Human-readable name
        intervals: Semitones above the root, may exceed an octave
        category: Grouping for menus
    """
    type: str
    symbol: str
    display_name: str
    intervals: Tuple[int, ...]
    category: str

    @classmethod
    def get(cls, chord_type: str) -> "Chord":
        """
        Look up a chord by type.

        Raises:
            ValueError: If the chord type is unknown
        """
        try:
            return CHORDS[chord_type]
        except KeyError:
            raise ValueError(f"Unknown chord type: {chord_type}") from None

    @staticmethod
    def by_category() -> Dict[str, List["Chord"]]:
        result: Dict[str, List[Chord]] = {}
        for chord in CHORDS.values():
            result.setdefault(chord.category, []).append(chord)
        return result

    def symbol_for(self, root: str) -> str:
        return f"{root}{self.symbol}"

    @property
    def available_inversions(self) -> List[ChordInversion]:
        count = max(1, min(len(self.intervals), MAX_CHORD_INVERSIONS))
        return list(ChordInversion)[:count]

    def build_voicing(self, root_midi: int, inversion: ChordInversion = ChordInversion.ROOT) -> List[int]:
        """
        MIDI notes of the chord voiced upward from root_midi.

        An inversion moves the lowest tones up an octave: first inversion
        of a triad is 3rd, 5th, root + 12. An inversion the chord does not
        have falls back to root position.
        """
        index = inversion.value
        if index == 0 or index >= len(self.intervals):
            return [root_midi + i for i in self.intervals]
        upper = [root_midi + i for i in self.intervals[index:]]
        moved = [root_midi + i + 12 for i in self.intervals[:index]]
        return upper + moved

    def __str__(self) -> str:
        return self.display_name


def scale_highlight_map(root: str,
                        scale_name: str,
                        mode_index: int,
                        octaves: Iterable[int],
                        default_octave: int = DEFAULT_OCTAVE) -> Dict[int, int]:
    """
    Pitches of a scale mode in every selected octave, mapped to their
    interval from the mode root in the lowest octave.

    An empty octave set shows default_octave.
    """
    scale = Scale.get(scale_name)
    octave_set = set(octaves) or {default_octave}
    lowest = min(octave_set)

    mode_root_pc = pitch_class_from_name(scale.mode_root(root, mode_index))
    steps = scale.mode_intervals(mode_index)

    highlights = {}
    for octave in octave_set:
        for step in steps:
            pitch = (octave + 1) * 12 + (mode_root_pc + step) % 12
            highlights[pitch] = step + (octave - lowest) * 12
    return highlights


def chord_highlight_map(root: str,
                        chord_type: str,
                        inversion: ChordInversion,
                        octaves: Iterable[int],
                        default_octave: int = DEFAULT_OCTAVE) -> Dict[int, int]:
    """
    Voiced chord pitches mapped to their extended interval from the root.

    The chord is voiced from the root in the lowest selected octave.
    """
    chord = Chord.get(chord_type)
    octave_set = set(octaves)
    octave = min(octave_set) if octave_set else default_octave
    root_pc = pitch_class_from_name(root)
    root_midi = (octave + 1) * 12 + root_pc

    highlights = {}
    for pitch in chord.build_voicing(root_midi, inversion):
        octave_diff = (pitch - root_midi) // 12
        highlights[pitch] = (pitch % 12 - root_pc) % 12 + octave_diff * 12
    logger.debug("%s voicing (%s): %s", chord.symbol_for(root), inversion.display_name, sorted(highlights))
    return highlights


def _scale(name: str, intervals: Tuple[int, ...], mode_names: Optional[Tuple[str, ...]] = None) -> Scale:
    return Scale(name, intervals, mode_names or ())


SCALES: Dict[str, Scale] = {s.name: s for s in (
    _scale("Chromatic", (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11)),
    _scale("Major", (0, 2, 4, 5, 7, 9, 11),
           ("Ionian", "Dorian", "Phrygian", "Lydian", "Mixolydian", "Aeolian", "Locrian")),
    _scale("Natural Minor", (0, 2, 3, 5, 7, 8, 10),
           ("Natural Minor", "Locrian", "Ionian", "Dorian", "Phrygian", "Lydian", "Mixolydian")),
    _scale("Harmonic Minor", (0, 2, 3, 5, 7, 8, 11),
           ("Harmonic Minor", "Locrian ♯6", "Ionian ♯5", "Dorian ♯4",
            "Phrygian Dominant", "Lydian ♯9", "Altered Dominant")),
    _scale("Melodic Minor", (0, 2, 3, 5, 7, 9, 11),
           ("Melodic Minor", "Dorian ♭2", "Lydian Augmented", "Lydian Dominant",
            "Mixolydian ♭6", "Locrian ♯2", "Altered")),
    _scale("Major Pentatonic", (0, 2, 4, 7, 9)),
    _scale("Minor Pentatonic", (0, 3, 5, 7, 10)),
    _scale("Blues", (0, 3, 5, 6, 7, 10)),
    _scale("Dorian", (0, 2, 3, 5, 7, 9, 10)),
    _scale("Phrygian", (0, 1, 3, 5, 7, 8, 10)),
    _scale("Lydian", (0, 2, 4, 6, 7, 9, 11)),
    _scale("Mixolydian", (0, 2, 4, 5, 7, 9, 10)),
    _scale("Aeolian", (0, 2, 3, 5, 7, 8, 10)),
    _scale("Locrian", (0, 1, 3, 5, 6, 8, 10)),
    _scale("Bebop Dominant", (0, 2, 4, 5, 7, 9, 10, 11)),
    _scale("Bebop Major", (0, 2, 4, 5, 7, 8, 9, 11)),
    _scale("Altered", (0, 1, 3, 4, 6, 8, 10)),
    _scale("Whole Tone", (0, 2, 4, 6, 8, 10)),
    _scale("Diminished", (0, 2, 3, 5, 6, 8, 9, 11)),
    _scale("Hungarian Minor", (0, 2, 3, 6, 7, 8, 11)),
    _scale("Japanese", (0, 1, 5, 7, 8)),
    _scale("Arabic", (0, 1, 4, 5, 7, 8, 11)),
    _scale("Gypsy", (0, 1, 4, 5, 7, 8, 10)),
    _scale("Enigmatic", (0, 1, 4, 6, 8, 10, 11)),
    _scale("Double Harmonic", (0, 1, 4, 5, 7, 8, 11)),
    _scale("Neapolitan Major", (0, 1, 3, 5, 7, 9, 11)),
    _scale("Neapolitan Minor", (0, 1, 3, 5, 7, 8, 11)),
)}

CHORDS: Dict[str, Chord] = {c.type: c for c in (
    # Triads
    Chord("major", "", "Major", (0, 4, 7), "Basic Triads"),
    Chord("minor", "m", "Minor", (0, 3, 7), "Basic Triads"),
    Chord("diminished", "°", "Diminished", (0, 3, 6), "Basic Triads"),
    Chord("augmented", "+", "Augmented", (0, 4, 8), "Basic Triads"),
    # Suspended
    Chord("sus2", "sus2", "Suspended 2nd", (0, 2, 7), "Suspended"),
    Chord("sus4", "sus4", "Suspended 4th", (0, 5, 7), "Suspended"),
    Chord("7sus2", "7sus2", "7 Suspended 2nd", (0, 2, 7, 10), "Suspended"),
    Chord("7sus4", "7sus4", "7 Suspended 4th", (0, 5, 7, 10), "Suspended"),
    # Sevenths
    Chord("major7", "maj7", "Major 7th", (0, 4, 7, 11), "Seventh Chords"),
    Chord("minor7", "m7", "Minor 7th", (0, 3, 7, 10), "Seventh Chords"),
    Chord("dominant7", "7", "Dominant 7th", (0, 4, 7, 10), "Seventh Chords"),
    Chord("diminished7", "°7", "Diminished 7th", (0, 3, 6, 9), "Seventh Chords"),
    Chord("half-diminished7", "ø7", "Half Diminished 7th", (0, 3, 6, 10), "Seventh Chords"),
    Chord("augmented7", "+7", "Augmented 7th", (0, 4, 8, 10), "Seventh Chords"),
    Chord("augmented-major7", "+maj7", "Augmented Major 7th", (0, 4, 8, 11), "Seventh Chords"),
    Chord("minor-major7", "m(maj7)", "Minor Major 7th", (0, 3, 7, 11), "Seventh Chords"),
    # Sixths
    Chord("major6", "6", "Major 6th", (0, 4, 7, 9), "Sixth Chords"),
    Chord("minor6", "m6", "Minor 6th", (0, 3, 7, 9), "Sixth Chords"),
    Chord("6/9", "6/9", "6/9", (0, 4, 7, 9, 14), "Sixth Chords"),
    Chord("m6/9", "m6/9", "Minor 6/9", (0, 3, 7, 9, 14), "Sixth Chords"),
    # Added tones
    Chord("add9", "add9", "Add 9th", (0, 4, 7, 14), "Add Chords"),
    Chord("add11", "add11", "Add 11th", (0, 4, 7, 17), "Add Chords"),
    Chord("add13", "add13", "Add 13th", (0, 4, 7, 21), "Add Chords"),
    Chord("madd9", "m(add9)", "Minor Add 9th", (0, 3, 7, 14), "Add Chords"),
    Chord("madd11", "m(add11)", "Minor Add 11th", (0, 3, 7, 17), "Add Chords"),
    Chord("add4", "add4", "Add 4th", (0, 4, 5, 7), "Add Chords"),
    # Extended
    Chord("major9", "maj9", "Major 9th", (0, 4, 7, 11, 14), "Extended (9ths)"),
    Chord("minor9", "m9", "Minor 9th", (0, 3, 7, 10, 14), "Extended (9ths)"),
    Chord("dominant9", "9", "Dominant 9th", (0, 4, 7, 10, 14), "Extended (9ths)"),
    Chord("9sus4", "9sus4", "9 Suspended 4th", (0, 5, 7, 10, 14), "Extended (9ths)"),
    Chord("7b9", "7♭9", "7 Flat 9", (0, 4, 7, 10, 13), "Extended (9ths)"),
    Chord("7#9", "7♯9", "7 Sharp 9", (0, 4, 7, 10, 15), "Extended (9ths)"),
    Chord("major11", "maj11", "Major 11th", (0, 4, 7, 11, 14, 17), "Extended (11ths)"),
    Chord("minor11", "m11", "Minor 11th", (0, 3, 7, 10, 14, 17), "Extended (11ths)"),
    Chord("dominant11", "11", "Dominant 11th", (0, 4, 7, 10, 14, 17), "Extended (11ths)"),
    Chord("7#11", "7♯11", "7 Sharp 11", (0, 4, 7, 10, 18), "Extended (11ths)"),
    Chord("major13", "maj13", "Major 13th", (0, 4, 7, 11, 14, 17, 21), "Extended (13ths)"),
    Chord("minor13", "m13", "Minor 13th", (0, 3, 7, 10, 14, 17, 21), "Extended (13ths)"),
    Chord("dominant13", "13", "Dominant 13th", (0, 4, 7, 10, 14, 17, 21), "Extended (13ths)"),
    # Power chords
    Chord("power-chord", "5", "Power Chord (5th)", (0, 7), "Power Chords"),
    Chord("power-chord-octave", "5(8)", "Power Chord + Octave", (0, 7, 12), "Power Chords"),
    Chord("power-sus4", "5sus4", "Power Sus4", (0, 5, 7), "Power Chords"),
)}

DEFAULT_SCALE = "Major"
DEFAULT_CHORD = "major"
