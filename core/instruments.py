"""
Instrument geometry: which pitch sits under a fret or key.

The UI hands us tap coordinates (string/fret or key index); these classes
turn them into absolute pitches for the interval editor and map the
highlighted pitches of the current view mode back to positions.
"""
from typing import Dict, List, Mapping, Tuple

import numpy as np

from core.interval_editor import highlight_map
from core.models import (
    AbsolutePitch,
    InstrumentInstance,
    IntervalOffset,
    Note,
    Tuning,
    ViewMode,
)
from core.theory import chord_highlight_map, scale_highlight_map

# Pitch classes of the black keys (C♯, D♯, F♯, G♯, A♯)
BLACK_KEY_PITCH_CLASSES = frozenset({1, 3, 6, 8, 10})


class Fretboard:
    """
    Fretted instrument with a fixed tuning.

    The pitch grid is a (strings, frets + 1) int array; column 0 holds the
    open strings.
    """

    def __init__(self, tuning: Tuning, fret_count: int = 24):
        """
        Args:
            tuning: Open-string tuning, lowest string first
            fret_count: Highest playable fret
        """
        if fret_count < 0:
            raise ValueError(f"Fret count must be non-negative, got {fret_count}")
        self.tuning = tuning
        self.fret_count = fret_count

        open_strings = np.array(tuning.string_midis, dtype=np.int16)
        frets = np.arange(fret_count + 1, dtype=np.int16)
        self.pitch_grid: np.ndarray = open_strings[:, np.newaxis] + frets[np.newaxis, :]

    @classmethod
    def from_instance(cls, instance: InstrumentInstance) -> "Fretboard":
        return cls(instance.tuning, instance.fret_count)

    @property
    def string_count(self) -> int:
        return self.tuning.string_count

    @property
    def lowest_pitch(self) -> AbsolutePitch:
        return AbsolutePitch(int(self.pitch_grid.min()))

    @property
    def highest_pitch(self) -> AbsolutePitch:
        return AbsolutePitch(int(self.pitch_grid.max()))

    def pitch_at(self, string_index: int, fret: int) -> AbsolutePitch:
        """
        Pitch under a fret.

        Raises:
            IndexError: If the position is off the board
        """
        if not 0 <= string_index < self.string_count:
            raise IndexError(f"String index {string_index} out of range")
        if not 0 <= fret <= self.fret_count:
            raise IndexError(f"Fret {fret} out of range (0-{self.fret_count})")
        return AbsolutePitch(int(self.pitch_grid[string_index, fret]))

    def note_at(self, string_index: int, fret: int, prefer_flats: bool = False) -> Note:
        return Note.from_midi(self.pitch_at(string_index, fret), prefer_flats=prefer_flats)

    def positions_for(self, pitch: int) -> List[Tuple[int, int]]:
        """All (string, fret) positions that sound this pitch."""
        strings, frets = np.nonzero(self.pitch_grid == pitch)
        return [(int(s), int(f)) for s, f in zip(strings, frets)]

    def highlight_positions(self, highlights: Mapping[int, int]) -> Dict[Tuple[int, int], IntervalOffset]:
        """Map every board position of a highlighted pitch to its interval."""
        positions = {}
        for pitch, interval in highlights.items():
            for position in self.positions_for(pitch):
                positions[position] = interval
        return positions


class Keyboard:
    """Piano keyboard starting at a given note."""

    def __init__(self, start_note: str = "C2", key_count: int = 61):
        """
        Args:
            start_note: Name of the lowest key (e.g. "A0", "C2")
            key_count: Number of keys
        """
        if key_count <= 0:
            raise ValueError(f"Key count must be positive, got {key_count}")
        self.start_note = Note.from_string(start_note)
        self.key_count = key_count

    @classmethod
    def from_instance(cls, instance: InstrumentInstance) -> "Keyboard":
        return cls(instance.start_note, instance.key_count)

    @property
    def lowest_pitch(self) -> AbsolutePitch:
        return self.start_note.midi

    @property
    def highest_pitch(self) -> AbsolutePitch:
        return AbsolutePitch(self.start_note.midi + self.key_count - 1)

    def pitch_at(self, key_index: int) -> AbsolutePitch:
        """
        Pitch of the key at an index (0 = lowest key).

        Raises:
            IndexError: If the index is off the keyboard
        """
        if not 0 <= key_index < self.key_count:
            raise IndexError(f"Key index {key_index} out of range (0-{self.key_count - 1})")
        return AbsolutePitch(self.start_note.midi + key_index)

    def key_index_for(self, pitch: int) -> int:
        """
        Index of the key sounding a pitch.

        Raises:
            IndexError: If the pitch is outside the keyboard range
        """
        if not self.lowest_pitch <= pitch <= self.highest_pitch:
            raise IndexError(f"Pitch {pitch} outside keyboard range "
                             f"({self.lowest_pitch}-{self.highest_pitch})")
        return pitch - self.lowest_pitch

    def contains(self, pitch: int) -> bool:
        return self.lowest_pitch <= pitch <= self.highest_pitch

    @staticmethod
    def is_black_key(pitch: int) -> bool:
        return pitch % 12 in BLACK_KEY_PITCH_CLASSES

    def white_key_count(self) -> int:
        pitches = np.arange(self.lowest_pitch, self.highest_pitch + 1)
        return int(np.count_nonzero(~np.isin(pitches % 12, list(BLACK_KEY_PITCH_CLASSES))))

    def highlight_keys(self, highlights: Mapping[int, int]) -> Dict[int, IntervalOffset]:
        """Map key indices of highlighted pitches on this keyboard to their intervals."""
        return {
            self.key_index_for(pitch): interval
            for pitch, interval in highlights.items()
            if self.contains(pitch)
        }


def pitch_for_tap(instance: InstrumentInstance, *coordinates: int) -> AbsolutePitch:
    """
    Translate tap coordinates on an instance into a pitch.

    Fretboards take (string_index, fret), keyboards take (key_index,).
    """
    if instance.kind == "fretboard":
        string_index, fret = coordinates
        return Fretboard.from_instance(instance).pitch_at(string_index, fret)
    (key_index,) = coordinates
    return Keyboard.from_instance(instance).pitch_at(key_index)


def highlight_map_for(instance: InstrumentInstance) -> Dict[int, int]:
    """
    Highlighted pitches of an instance in its current view mode, mapped to
    their interval from the root.
    """
    default_octave = instance.selection.default_octave
    if instance.view_mode == ViewMode.SCALES:
        return scale_highlight_map(instance.root, instance.scale, instance.mode_index,
                                   instance.octaves, default_octave)
    if instance.view_mode == ViewMode.CHORDS:
        return chord_highlight_map(instance.root, instance.chord_type, instance.chord_inversion,
                                   instance.octaves, default_octave)
    return dict(highlight_map(instance.selection))
