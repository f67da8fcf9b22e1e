"""
Musical constants and utilities.

Note names (sharp and flat spellings), interval labels, standard tunings
and MIDI/frequency conversions.
"""
import math
import re
from typing import Dict, List

# Pitch-class spellings, indexed 0-11 from C
SHARP_NOTE_NAMES = [
    "C", "C♯", "D", "D♯", "E", "F", "F♯", "G", "G♯", "A", "A♯", "B"
]
FLAT_NOTE_NAMES = [
    "C", "D♭", "D", "E♭", "E", "F", "G♭", "G", "A♭", "A", "B♭", "B"
]

# Roots that are conventionally spelled with flats
FLAT_ROOTS = frozenset({"F", "Bb", "Eb", "Ab", "Db", "Gb", "Cb"})

# Every accepted spelling (after unicode normalisation) -> pitch class
PITCH_CLASSES: Dict[str, int] = {
    "C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11,
    "C#": 1, "D#": 3, "F#": 6, "G#": 8, "A#": 10,
    "Db": 1, "Eb": 3, "Gb": 6, "Ab": 8, "Bb": 10,
    "Cb": 11, "Fb": 4, "E#": 5, "B#": 0,
}

INTERVAL_LABELS = [
    "R", "♭2", "2", "♭3", "3", "4", "♭5", "5", "♭6", "6", "♭7", "7"
]

INTERVAL_NAMES = [
    "Unison",
    "Minor 2nd",
    "Major 2nd",
    "Minor 3rd",
    "Major 3rd",
    "Perfect 4th",
    "Tritone",
    "Perfect 5th",
    "Minor 6th",
    "Major 6th",
    "Minor 7th",
    "Major 7th",
]

# Open-string notes, lowest string first
STANDARD_TUNINGS: Dict[str, List[str]] = {
    "Guitar (6-string)": ["E2", "A2", "D3", "G3", "B3", "E4"],
    "Guitar (7-string)": ["B1", "E2", "A2", "D3", "G3", "B3", "E4"],
    "Guitar (8-string)": ["F#1", "B1", "E2", "A2", "D3", "G3", "B3", "E4"],
    "Bass (4-string)": ["E1", "A1", "D2", "G2"],
    "Bass (5-string)": ["B0", "E1", "A1", "D2", "G2"],
    "Bass (6-string)": ["B0", "E1", "A1", "D2", "G2", "C3"],
    "Ukulele": ["G4", "C4", "E4", "A4"],
    "Mandolin": ["G3", "D4", "A4", "E5"],
    "Banjo (5-string)": ["G4", "D3", "G3", "B3", "D4"],
    "Drop D": ["D2", "A2", "D3", "G3", "B3", "E4"],
    "Drop C": ["C2", "G2", "C3", "F3", "A3", "D4"],
    "Drop B": ["B1", "F#2", "B2", "E3", "G#3", "C#4"],
    "Open G": ["D2", "G2", "D3", "G3", "B3", "D4"],
    "Open D": ["D2", "A2", "D3", "F#3", "A3", "D4"],
    "Open E": ["E2", "B2", "E3", "G#3", "B3", "E4"],
    "DADGAD": ["D2", "A2", "D3", "G3", "A3", "D4"],
    "Nashville": ["E3", "A3", "D4", "G3", "B3", "E4"],
}
DEFAULT_TUNING = "Guitar (6-string)"

# MIDI reference points
A4_MIDI = 69
A4_FREQUENCY = 440.0
MIDI_MIN = 0
MIDI_MAX = 127

# Octave used when no octave is given or selected
DEFAULT_OCTAVE = 3

_NOTE_PATTERN = re.compile(r"^([A-Ga-g][#b]?)(-?\d+)?$")


def normalize_note_name(name: str) -> str:
    """
    Normalise a pitch-class spelling.

    Unicode accidentals become ASCII and the letter is upper-cased.

    Example:
        >>> normalize_note_name("b♭")
        'Bb'
    """
    normalized = name.strip().replace("♭", "b").replace("♯", "#")
    if normalized:
        normalized = normalized[0].upper() + normalized[1:]
    return normalized


def pitch_class_from_name(name: str) -> int:
    """
    Convert a pitch-class name to its index (0-11).

    Raises:
        ValueError: If the name is not a recognised spelling
    """
    normalized = normalize_note_name(name)
    if normalized not in PITCH_CLASSES:
        raise ValueError(f"Invalid note name: {name!r}")
    return PITCH_CLASSES[normalized]


def pitch_class_name(pitch_class: int, prefer_flats: bool = False) -> str:
    """Name of a pitch class using sharp or flat spelling."""
    names = FLAT_NOTE_NAMES if prefer_flats else SHARP_NOTE_NAMES
    return names[pitch_class % 12]


def split_note_name(note_name: str):
    """
    Split "Bb3" into ("Bb", 3). The octave is None when omitted.

    Raises:
        ValueError: If note name is invalid
    """
    cleaned = normalize_note_name(note_name)
    match = _NOTE_PATTERN.match(cleaned)
    if match is None:
        raise ValueError(f"Invalid note name format: {note_name!r}")
    octave = match.group(2)
    return match.group(1), (int(octave) if octave is not None else None)


def midi_note_to_name(note_number: int, prefer_flats: bool = False) -> str:
    """
    Convert MIDI note number to name with octave.

    Args:
        note_number: MIDI note (0-127)
        prefer_flats: Spell accidentals as flats

    Returns:
        Note name (e.g., "C4", "A♯3")

    Example:
        >>> midi_note_to_name(60)
        'C4'
        >>> midi_note_to_name(70, prefer_flats=True)
        'B♭4'
    """
    if not MIDI_MIN <= note_number <= MIDI_MAX:
        raise ValueError(f"MIDI note must be 0-127, got {note_number}")
    octave = (note_number // 12) - 1
    return f"{pitch_class_name(note_number % 12, prefer_flats)}{octave}"


def name_to_midi_note(note_name: str) -> int:
    """
    Convert note name to MIDI number.

    Args:
        note_name: Note name (e.g., "C4", "Bb3", "F♯2")

    Returns:
        MIDI note number (0-127)

    Raises:
        ValueError: If note name is invalid or out of range

    Example:
        >>> name_to_midi_note("C4")
        60
        >>> name_to_midi_note("Bb3")
        58
    """
    name, octave = split_note_name(note_name)
    if octave is None:
        octave = DEFAULT_OCTAVE

    midi_note = (octave + 1) * 12 + pitch_class_from_name(name)

    if not MIDI_MIN <= midi_note <= MIDI_MAX:
        raise ValueError(f"Note {note_name} is out of MIDI range (0-127)")

    return midi_note


def frequency_to_midi(frequency: float) -> int:
    """
    Convert frequency in Hz to nearest MIDI note number.

    Example:
        >>> frequency_to_midi(440.0)  # A4
        69
    """
    if frequency <= 0:
        raise ValueError(f"Frequency must be positive, got {frequency}")

    # Formula: note = 69 + 12 * log2(frequency / 440)
    midi_note = round(A4_MIDI + 12 * math.log2(frequency / A4_FREQUENCY))

    return max(MIDI_MIN, min(MIDI_MAX, midi_note))


def midi_to_frequency(note_number: int) -> float:
    """
    Convert MIDI note number to frequency in Hz.

    Example:
        >>> midi_to_frequency(69)  # A4
        440.0
    """
    # Formula: frequency = 440 * 2^((note - 69) / 12)
    return A4_FREQUENCY * math.pow(2.0, (note_number - A4_MIDI) / 12.0)
