"""
Immutable data models for Theorie.

All models are frozen dataclasses to support:
- Pure state transitions (each tap returns a new selection)
- Easy undo/redo via command pattern
- Independent copies per fretboard/keyboard instance
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Tuple, Optional, Dict, Any, FrozenSet, NewType, List

from core.constants import (
    DEFAULT_OCTAVE,
    DEFAULT_TUNING,
    FLAT_ROOTS,
    INTERVAL_LABELS,
    INTERVAL_NAMES,
    STANDARD_TUNINGS,
    midi_to_frequency,
    pitch_class_from_name,
    pitch_class_name,
    split_note_name,
)
from core.theory import DEFAULT_CHORD, DEFAULT_SCALE, Chord, ChordInversion, Scale

# Distinct integer units. A MIDI number, a semitone offset from the root
# and an octave number are all ints but must not be mixed up.
AbsolutePitch = NewType("AbsolutePitch", int)
IntervalOffset = NewType("IntervalOffset", int)
Octave = NewType("Octave", int)


@dataclass(frozen=True)
class Note:
    """
    Pitch class plus octave.

    Equality ignores prefer_flats: C♯4 and D♭4 are the same note.

    Attributes:
        pitch_class: 0-11, C = 0
        octave: Scientific octave number (C4 = MIDI 60)
        prefer_flats: Spell accidentals as flats when naming
    """
    pitch_class: int
    octave: int
    prefer_flats: bool = field(default=False, compare=False)

    def __post_init__(self):
        """Validate pitch class."""
        if not 0 <= self.pitch_class <= 11:
            raise ValueError(f"Pitch class must be 0-11, got {self.pitch_class}")

    @classmethod
    def from_string(cls, note_string: str) -> "Note":
        """
        Parse "C4", "Bb3", "F♯2" or a bare "Eb" (octave 3).

        Raises:
            ValueError: If the string is not a note name
        """
        name, octave = split_note_name(note_string)
        return cls(
            pitch_class=pitch_class_from_name(name),
            octave=DEFAULT_OCTAVE if octave is None else octave,
            prefer_flats=name in FLAT_ROOTS,
        )

    @classmethod
    def from_midi(cls, midi: int, prefer_flats: bool = False) -> "Note":
        """Create a Note from a MIDI number."""
        return cls(pitch_class=midi % 12, octave=(midi // 12) - 1, prefer_flats=prefer_flats)

    @property
    def name(self) -> str:
        """Pitch-class name without octave."""
        return pitch_class_name(self.pitch_class, self.prefer_flats)

    @property
    def full_name(self) -> str:
        return f"{self.name}{self.octave}"

    @property
    def midi(self) -> AbsolutePitch:
        return AbsolutePitch((self.octave + 1) * 12 + self.pitch_class)

    @property
    def frequency(self) -> float:
        """Frequency in Hz (A4 = 440Hz)."""
        return midi_to_frequency(self.midi)

    def transpose(self, semitones: int) -> "Note":
        return Note.from_midi(self.midi + semitones, prefer_flats=self.prefer_flats)

    @property
    def enharmonic(self) -> "Note":
        """Same pitch with the other accidental spelling."""
        return replace(self, prefer_flats=not self.prefer_flats)

    def interval_to(self, other: "Note") -> int:
        """Distance to another note in semitones (unsigned)."""
        return abs(other.midi - self.midi)

    def __str__(self) -> str:
        return self.full_name


@dataclass(frozen=True)
class Interval:
    """
    Interval measured in semitones. Compound intervals (>= 12) are
    labelled as extensions (9, 11, 13 ...).
    """
    semitones: int

    @property
    def name(self) -> str:
        if self.semitones < 0:
            return f"{Interval(-self.semitones).name} below"
        simple = self.semitones % 12
        octaves = self.semitones // 12

        if octaves == 0:
            return INTERVAL_NAMES[simple]
        if octaves == 1 and simple == 0:
            return "Octave"
        return f"{INTERVAL_NAMES[simple]} + {octaves}oct"

    @property
    def label(self) -> str:
        """Short display label: R, ♭3, 5, 9, ♭13, O1 ..."""
        if self.semitones < 0:
            return f"-{Interval(-self.semitones).label}"
        simple = self.semitones % 12
        octaves = self.semitones // 12

        if octaves == 0:
            return INTERVAL_LABELS[simple]
        if simple == 0:
            return f"O{octaves}"

        raw = INTERVAL_LABELS[simple]
        accidental = raw[:-1]
        degree = int(raw[-1])
        return f"{accidental}{degree + octaves * 7}"

    @property
    def is_perfect(self) -> bool:
        return self.semitones % 12 in (0, 5, 7)

    @property
    def is_consonant(self) -> bool:
        return self.semitones % 12 in (0, 3, 4, 5, 7, 8, 9)

    @property
    def inverted(self) -> "Interval":
        """Inversion within an octave."""
        return Interval(12 - self.semitones % 12)

    def __str__(self) -> str:
        return f"{self.name} ({self.semitones} semitones)"


class ViewMode(Enum):
    """What an instrument instance is currently displaying."""
    SCALES = "scales"
    CHORDS = "chords"
    INTERVALS = "intervals"


@dataclass(frozen=True)
class IntervalSelectionState:
    """
    Notes selected in interval mode, expressed relative to a single root.

    The absolute pitch of each selected note is
    root@reference_octave + interval, where reference_octave is the lowest
    selected octave.

    Attributes:
        root: Root pitch-class name, None when nothing is selected
        selected_intervals: Signed semitone offsets from the root
        selected_octaves: Octaves spanned by the selected notes
        prefer_flats: Spell a reassigned root with flats
        default_octave: Reference octave while no octave is selected
    """
    root: Optional[str] = None
    selected_intervals: FrozenSet[int] = frozenset()
    selected_octaves: FrozenSet[int] = frozenset()
    prefer_flats: bool = False
    default_octave: int = DEFAULT_OCTAVE

    def __post_init__(self):
        """Validate selection."""
        # Accept any iterable for the sets
        object.__setattr__(self, "selected_intervals", frozenset(self.selected_intervals))
        object.__setattr__(self, "selected_octaves", frozenset(self.selected_octaves))

        if self.root is not None:
            pitch_class_from_name(self.root)
        elif self.selected_intervals:
            raise ValueError("A selection with intervals needs a root")

    @classmethod
    def empty(cls, prefer_flats: bool = False, default_octave: int = DEFAULT_OCTAVE) -> "IntervalSelectionState":
        return cls(prefer_flats=prefer_flats, default_octave=default_octave)

    @property
    def is_empty(self) -> bool:
        return not self.selected_intervals

    @property
    def reference_octave(self) -> Octave:
        if not self.selected_octaves:
            return Octave(self.default_octave)
        return Octave(min(self.selected_octaves))

    @property
    def reference_pitch(self) -> Optional[AbsolutePitch]:
        """MIDI number of the root in the reference octave."""
        if self.root is None:
            return None
        return AbsolutePitch((self.reference_octave + 1) * 12 + pitch_class_from_name(self.root))

    def absolute_pitches(self) -> Tuple[AbsolutePitch, ...]:
        """Selected notes as sorted MIDI numbers."""
        reference = self.reference_pitch
        if reference is None:
            return ()
        return tuple(sorted(AbsolutePitch(reference + i) for i in self.selected_intervals))

    def notes(self) -> List[Note]:
        return [Note.from_midi(p, prefer_flats=self.prefer_flats) for p in self.absolute_pitches()]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "root": self.root,
            "selected_intervals": sorted(self.selected_intervals),
            "selected_octaves": sorted(self.selected_octaves),
            "prefer_flats": self.prefer_flats,
            "default_octave": self.default_octave,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntervalSelectionState":
        """Create IntervalSelectionState from dictionary."""
        return cls(
            root=data.get("root"),
            selected_intervals=frozenset(data.get("selected_intervals", [])),
            selected_octaves=frozenset(data.get("selected_octaves", [])),
            prefer_flats=data.get("prefer_flats", False),
            default_octave=data.get("default_octave", DEFAULT_OCTAVE),
        )


@dataclass(frozen=True)
class Tuning:
    """
    Instrument tuning.

    Attributes:
        name: Display name (e.g. "Drop D")
        strings: Open-string note names, lowest string first
    """
    name: str
    strings: Tuple[str, ...]

    def __post_init__(self):
        """Validate tuning."""
        object.__setattr__(self, "strings", tuple(self.strings))
        if not self.strings:
            raise ValueError("Tuning needs at least one string")
        for s in self.strings:
            Note.from_string(s)

    @classmethod
    def standard(cls, name: str = DEFAULT_TUNING) -> "Tuning":
        """Look up a tuning from the standard table."""
        if name not in STANDARD_TUNINGS:
            raise ValueError(f"Unknown tuning: {name}. Available tunings: {list(STANDARD_TUNINGS.keys())}")
        return cls(name=name, strings=tuple(STANDARD_TUNINGS[name]))

    @property
    def string_count(self) -> int:
        return len(self.strings)

    @property
    def string_notes(self) -> List[Note]:
        return [Note.from_string(s) for s in self.strings]

    @property
    def string_midis(self) -> List[int]:
        return [n.midi for n in self.string_notes]

    @property
    def lowest_note(self) -> Note:
        return min(self.string_notes, key=lambda n: n.midi)

    @property
    def highest_note(self) -> Note:
        return max(self.string_notes, key=lambda n: n.midi)

    @property
    def range(self) -> int:
        return self.highest_note.midi - self.lowest_note.midi

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "strings": list(self.strings)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tuning":
        return cls(name=data.get("name", "Custom"), strings=tuple(data["strings"]))


@dataclass(frozen=True)
class InstrumentInstance:
    """
    One fretboard or keyboard on screen.

    Several instances can be open at once; each owns its selection and its
    scale/chord settings.

    Attributes:
        id: Unique instance id
        kind: "fretboard" or "keyboard"
        view_mode: Current ViewMode
        selection: Interval-mode selection
        tuning: Fretboard tuning (fretboard only)
        fret_count: Highest fret (fretboard only)
        start_note: Lowest key name (keyboard only)
        key_count: Number of keys (keyboard only)
        root: Root name for scales and chords modes
        scale: Scale name (scales mode)
        mode_index: Mode of the scale, 0 = the scale itself
        chord_type: Chord type key (chords mode)
        chord_inversion: Chord inversion (chords mode)
        octaves: Octaves shown in scales and chords modes
    """
    id: str
    kind: str = "fretboard"
    view_mode: ViewMode = ViewMode.INTERVALS
    selection: IntervalSelectionState = field(default_factory=IntervalSelectionState)
    tuning: Tuning = field(default_factory=Tuning.standard)
    fret_count: int = 24
    start_note: str = "C2"
    key_count: int = 61
    root: str = "C"
    scale: str = DEFAULT_SCALE
    mode_index: int = 0
    chord_type: str = DEFAULT_CHORD
    chord_inversion: ChordInversion = ChordInversion.ROOT
    octaves: FrozenSet[int] = frozenset({DEFAULT_OCTAVE})

    def __post_init__(self):
        """Validate instance."""
        object.__setattr__(self, "octaves", frozenset(self.octaves))

        if self.kind not in ("fretboard", "keyboard"):
            raise ValueError(f"Invalid instrument kind: {self.kind}")
        if self.fret_count < 0:
            raise ValueError(f"Fret count must be non-negative, got {self.fret_count}")
        if self.key_count <= 0:
            raise ValueError(f"Key count must be positive, got {self.key_count}")
        if self.mode_index < 0:
            raise ValueError(f"Mode index must be non-negative, got {self.mode_index}")
        Note.from_string(self.start_note)
        pitch_class_from_name(self.root)
        Scale.get(self.scale)
        Chord.get(self.chord_type)

    @property
    def is_interval_mode(self) -> bool:
        return self.view_mode == ViewMode.INTERVALS

    def with_view_mode(self, view_mode: ViewMode) -> "InstrumentInstance":
        """Switch view mode. Leaving interval mode drops the selection."""
        if self.is_interval_mode and view_mode != ViewMode.INTERVALS:
            selection = IntervalSelectionState.empty(self.selection.prefer_flats, self.selection.default_octave)
            return replace(self, view_mode=view_mode, selection=selection)
        return replace(self, view_mode=view_mode)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "kind": self.kind,
            "view_mode": self.view_mode.value,
            "selection": self.selection.to_dict(),
            "tuning": self.tuning.to_dict(),
            "fret_count": self.fret_count,
            "start_note": self.start_note,
            "key_count": self.key_count,
            "root": self.root,
            "scale": self.scale,
            "mode_index": self.mode_index,
            "chord_type": self.chord_type,
            "chord_inversion": self.chord_inversion.value,
            "octaves": sorted(self.octaves),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstrumentInstance":
        """Create InstrumentInstance from dictionary."""
        tuning = Tuning.from_dict(data["tuning"]) if "tuning" in data else Tuning.standard()
        return cls(
            id=data["id"],
            kind=data.get("kind", "fretboard"),
            view_mode=ViewMode(data.get("view_mode", ViewMode.INTERVALS.value)),
            selection=IntervalSelectionState.from_dict(data.get("selection", {})),
            tuning=tuning,
            fret_count=data.get("fret_count", 24),
            start_note=data.get("start_note", "C2"),
            key_count=data.get("key_count", 61),
            root=data.get("root", "C"),
            scale=data.get("scale", DEFAULT_SCALE),
            mode_index=data.get("mode_index", 0),
            chord_type=data.get("chord_type", DEFAULT_CHORD),
            chord_inversion=ChordInversion(data.get("chord_inversion", 0)),
            octaves=frozenset(data.get("octaves", [DEFAULT_OCTAVE])),
        )


@dataclass(frozen=True)
class Workspace:
    """
    Saved set of instrument instances.

    Attributes:
        name: Workspace name
        instances: Instrument instances in display order
        file_path: Path to saved file (None if unsaved)
    """
    name: str
    instances: Tuple[InstrumentInstance, ...] = field(default_factory=tuple)
    file_path: Optional[str] = None

    def __post_init__(self):
        """Validate workspace."""
        object.__setattr__(self, "instances", tuple(self.instances))
        ids = [inst.id for inst in self.instances]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate instance ids: {ids}")

    def get(self, instance_id: str) -> Optional[InstrumentInstance]:
        for inst in self.instances:
            if inst.id == instance_id:
                return inst
        return None

    def with_instance(self, instance: InstrumentInstance) -> "Workspace":
        """Replace the instance with the same id, or append it."""
        instances = list(self.instances)
        for i, inst in enumerate(instances):
            if inst.id == instance.id:
                instances[i] = instance
                break
        else:
            instances.append(instance)
        return replace(self, instances=tuple(instances))

    def without_instance(self, instance_id: str) -> "Workspace":
        return replace(self, instances=tuple(i for i in self.instances if i.id != instance_id))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": "1.0.0",
            "name": self.name,
            "instances": [i.to_dict() for i in self.instances],
            "file_path": self.file_path,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Workspace":
        """Create Workspace from dictionary."""
        return cls(
            name=data.get("name", "Untitled"),
            instances=tuple(InstrumentInstance.from_dict(i) for i in data.get("instances", [])),
            file_path=data.get("file_path"),
        )


class AppState:
    """
    Global application state.

    Manages:
    - Current workspace (instrument instances and their selections)
    - Which instance receives taps from MIDI input
    - Unsaved-changes flag
    """

    def __init__(self, workspace: Optional[Workspace] = None):
        """Initialize state, empty unless a workspace is given."""
        self._workspace: Workspace = workspace if workspace is not None else Workspace(name="Untitled")
        self._active_instance: Optional[str] = None
        self._is_dirty: bool = False

    def get_workspace(self) -> Workspace:
        return self._workspace

    def set_workspace(self, workspace: Workspace):
        """Set current workspace."""
        self._workspace = workspace
        if self._active_instance is not None and workspace.get(self._active_instance) is None:
            self._active_instance = None

    def get_instance(self, instance_id: str) -> InstrumentInstance:
        """
        Look up an instance by id.

        Raises:
            ValueError: If no instance has that id
        """
        instance = self._workspace.get(instance_id)
        if instance is None:
            raise ValueError(f"Unknown instrument instance: {instance_id}")
        return instance

    def set_instance(self, instance: InstrumentInstance):
        self._workspace = self._workspace.with_instance(instance)

    def get_active_instance(self) -> Optional[str]:
        """Id of the instance that receives MIDI taps."""
        return self._active_instance

    def set_active_instance(self, instance_id: Optional[str]):
        if instance_id is not None:
            self.get_instance(instance_id)
        self._active_instance = instance_id

    def is_dirty(self) -> bool:
        """Check if workspace has unsaved changes."""
        return self._is_dirty

    def mark_dirty(self):
        self._is_dirty = True

    def mark_clean(self):
        self._is_dirty = False
