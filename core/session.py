"""
Session controller.

Ties settings, app state and command history together and is the single
entry point the front end (UI or MIDI input) calls when the user taps a
note, edits octaves, switches view mode, undoes or saves.
"""
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

from core.commands import (
    AddInstrumentCommand,
    ChangeOctavesCommand,
    ClearSelectionCommand,
    CommandHistory,
    RemoveInstrumentCommand,
    SetChordCommand,
    SetScaleCommand,
    SetViewModeCommand,
    TapNoteCommand,
)
from core.instruments import highlight_map_for, pitch_for_tap
from core.models import (
    AppState,
    InstrumentInstance,
    IntervalSelectionState,
    Interval,
    Note,
    Tuning,
    ViewMode,
    Workspace,
)
from core.persistence import WorkspaceFile
from core.settings import Settings
from core.theory import ChordInversion

logger = logging.getLogger(__name__)


def describe_selection(selection: IntervalSelectionState) -> str:
    """
    One-line summary for logs and status bars.

    Example:
        "C: C4 (R), E4 (3), G4 (5)"
    """
    if selection.is_empty:
        return "(no selection)"
    reference = selection.reference_pitch
    parts = []
    for pitch in selection.absolute_pitches():
        note = Note.from_midi(pitch, prefer_flats=selection.prefer_flats)
        parts.append(f"{note.full_name} ({Interval(pitch - reference).label})")
    return f"{selection.root}: " + ", ".join(parts)


class Session:
    """
    Interactive session over a workspace.

    Each instance keeps its own selection; every edit goes through the
    command history so it can be undone.
    """

    def __init__(self, settings: Settings, workspace: Optional[Workspace] = None):
        self.settings = settings
        self.app_state = AppState(workspace if workspace is not None else self.default_workspace(settings))
        self.history = CommandHistory(self.app_state, max_history=settings.get("general", "undo_limit"))

        instances = self.app_state.get_workspace().instances
        if instances:
            self.app_state.set_active_instance(instances[0].id)

    @staticmethod
    def default_workspace(settings: Settings) -> Workspace:
        """A fretboard and a keyboard configured from settings."""
        prefer_flats = settings.get("general", "prefer_flats")
        default_octave = settings.get("general", "default_octave")
        selection = IntervalSelectionState.empty(prefer_flats, default_octave)
        octaves = frozenset({default_octave})
        fretboard = InstrumentInstance(
            id="fretboard-1",
            kind="fretboard",
            selection=selection,
            tuning=Tuning.standard(settings.get("fretboard", "tuning")),
            fret_count=settings.get("fretboard", "fret_count"),
            octaves=octaves,
        )
        keyboard = InstrumentInstance(
            id="keyboard-1",
            kind="keyboard",
            selection=selection,
            start_note=settings.get("keyboard", "start_note"),
            key_count=settings.get("keyboard", "key_count"),
            octaves=octaves,
        )
        return Workspace(name="Untitled", instances=(fretboard, keyboard))

    def instance(self, instance_id: Optional[str] = None) -> InstrumentInstance:
        """
        Look up an instance, the active one by default.

        Raises:
            ValueError: If there is no such instance
        """
        instance_id = instance_id or self.app_state.get_active_instance()
        if instance_id is None:
            raise ValueError("No active instrument instance")
        return self.app_state.get_instance(instance_id)

    def selection(self, instance_id: Optional[str] = None) -> IntervalSelectionState:
        return self.instance(instance_id).selection

    def tap_pitch(self, pitch: int, instance_id: Optional[str] = None) -> IntervalSelectionState:
        """
        Toggle a note by MIDI number (scale strip, MIDI keyboard).

        Outside interval mode the tap is ignored and nothing is recorded.
        """
        instance = self.instance(instance_id)
        if not instance.is_interval_mode:
            logger.debug("%s is in %s mode, ignoring tap %d", instance.id, instance.view_mode.value, pitch)
            return instance.selection
        self.history.execute(TapNoteCommand(instance.id, pitch))
        selection = self.selection(instance.id)
        logger.debug("%s tap %d -> %s", instance.id, pitch, describe_selection(selection))
        return selection

    def tap_position(self, instance_id: str, *coordinates: int) -> IntervalSelectionState:
        """
        Toggle the note under a fret (string, fret) or key (key_index).

        Raises:
            IndexError: If the position is off the instrument
        """
        pitch = pitch_for_tap(self.instance(instance_id), *coordinates)
        return self.tap_pitch(pitch, instance_id)

    def change_octaves(self, octaves: Iterable[int], instance_id: Optional[str] = None) -> IntervalSelectionState:
        instance = self.instance(instance_id)
        self.history.execute(ChangeOctavesCommand(instance.id, octaves))
        return self.selection(instance.id)

    def set_view_mode(self, view_mode: ViewMode, instance_id: Optional[str] = None):
        instance = self.instance(instance_id)
        self.history.execute(SetViewModeCommand(instance.id, view_mode))

    def clear_selection(self, instance_id: Optional[str] = None):
        instance = self.instance(instance_id)
        self.history.execute(ClearSelectionCommand(instance.id))

    def set_scale(self, root: Optional[str] = None, scale: Optional[str] = None,
                  mode_index: Optional[int] = None, instance_id: Optional[str] = None):
        """
        Raises:
            ValueError: If the root or scale name is unknown
        """
        instance = self.instance(instance_id)
        self.history.execute(SetScaleCommand(instance.id, root, scale, mode_index))

    def set_chord(self, root: Optional[str] = None, chord_type: Optional[str] = None,
                  inversion: Optional[ChordInversion] = None, instance_id: Optional[str] = None):
        """
        Raises:
            ValueError: If the root or chord type is unknown
        """
        instance = self.instance(instance_id)
        self.history.execute(SetChordCommand(instance.id, root, chord_type, inversion))

    def highlights(self, instance_id: Optional[str] = None) -> Dict[int, int]:
        """Pitches lit up on an instance in its current view mode."""
        return highlight_map_for(self.instance(instance_id))

    def add_instrument(self, instance: InstrumentInstance):
        self.history.execute(AddInstrumentCommand(instance))

    def remove_instrument(self, instance_id: str):
        self.history.execute(RemoveInstrumentCommand(instance_id))

    def undo(self) -> bool:
        return self.history.undo()

    def redo(self) -> bool:
        return self.history.redo()

    def save(self, path: Union[str, Path]) -> Path:
        """
        Save the workspace and mark it clean.

        Raises:
            IOError: If save fails
        """
        written = WorkspaceFile.save(self.app_state.get_workspace(), path)
        workspace = self.app_state.get_workspace()
        self.app_state.set_workspace(Workspace(workspace.name, workspace.instances, str(written)))
        self.app_state.mark_clean()
        return written

    def load(self, path: Union[str, Path]):
        """
        Replace the workspace with one loaded from disk.

        History is cleared; the first instance becomes active.

        Raises:
            IOError: If load fails
            ValueError: If the file version is incompatible
        """
        workspace = WorkspaceFile.load(path)
        self.app_state.set_workspace(workspace)
        self.app_state.set_active_instance(workspace.instances[0].id if workspace.instances else None)
        self.app_state.mark_clean()
        self.history.clear()
