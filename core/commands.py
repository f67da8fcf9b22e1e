"""
Command pattern for undo/redo support.

All state modifications go through commands to enable:
- Full undo/redo history
- Descriptions for the Edit menu
"""
from abc import ABC, abstractmethod
from typing import Iterable, Optional, List
from dataclasses import replace

from core import interval_editor
from core.models import AppState, InstrumentInstance, ViewMode, Workspace
from core.theory import ChordInversion


class Command(ABC):
    """Base class for all commands."""

    @abstractmethod
    def execute(self, state: AppState) -> AppState:
        """
        Execute command and return new state.

        Args:
            state: Current app state

        Returns:
            New app state after command execution
        """
        raise NotImplementedError()

    @abstractmethod
    def undo(self, state: AppState) -> AppState:
        """
        Undo command and return previous state.

        Args:
            state: Current app state

        Returns:
            App state before command execution
        """
        raise NotImplementedError()

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable command description for UI."""
        raise NotImplementedError()


class InstanceCommand(Command):
    """
    Command that replaces a single instrument instance.

    Subclasses implement transform(); the instance before execution is kept
    for undo.
    """

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        self._previous: Optional[InstrumentInstance] = None

    @abstractmethod
    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        raise NotImplementedError()

    def execute(self, state: AppState) -> AppState:
        instance = state.get_instance(self.instance_id)

        # Store previous instance for undo
        self._previous = instance

        state.set_instance(self.transform(instance))
        state.mark_dirty()

        return state

    def undo(self, state: AppState) -> AppState:
        if self._previous is None:
            raise ValueError("Command has not been executed yet")

        state.set_instance(self._previous)
        state.mark_dirty()

        return state


class TapNoteCommand(InstanceCommand):
    """Toggle a tapped note in an instance's interval selection."""

    def __init__(self, instance_id: str, pitch: int):
        """
        Args:
            instance_id: Instance that was tapped
            pitch: MIDI number of the tapped note
        """
        super().__init__(instance_id)
        self.pitch = pitch

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        # Taps only edit the selection in interval mode
        if not instance.is_interval_mode:
            return instance
        return replace(instance, selection=interval_editor.apply_tap(instance.selection, self.pitch))

    @property
    def description(self) -> str:
        return "Toggle Note"


class ChangeOctavesCommand(InstanceCommand):
    """
    Replace the octaves an instance shows.

    In interval mode the selected pitches are kept; in scales and chords
    mode the scale or chord is redrawn in the new octaves.
    """

    def __init__(self, instance_id: str, octaves: Iterable[int]):
        super().__init__(instance_id)
        self.octaves = frozenset(octaves)

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        if instance.is_interval_mode:
            return replace(instance, selection=interval_editor.change_octaves(instance.selection, self.octaves))
        return replace(instance, octaves=self.octaves or {instance.selection.default_octave})

    @property
    def description(self) -> str:
        return "Change Octaves"


class SetViewModeCommand(InstanceCommand):
    """Switch an instance between scales, chords and intervals."""

    def __init__(self, instance_id: str, view_mode: ViewMode):
        super().__init__(instance_id)
        self.view_mode = view_mode

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        return instance.with_view_mode(self.view_mode)

    @property
    def description(self) -> str:
        return f"View {self.view_mode.value.capitalize()}"


class ClearSelectionCommand(InstanceCommand):
    """Drop every selected note."""

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        selection = instance.selection
        return replace(instance, selection=interval_editor.clear(selection.prefer_flats, selection.default_octave))

    @property
    def description(self) -> str:
        return "Clear Selection"


class SetScaleCommand(InstanceCommand):
    """Change the root, scale or mode shown in scales mode."""

    def __init__(self, instance_id: str, root: Optional[str] = None,
                 scale: Optional[str] = None, mode_index: Optional[int] = None):
        """
        Args:
            instance_id: Instance to change
            root: New root name (None = keep)
            scale: New scale name (None = keep)
            mode_index: New mode (None = keep, reset to 0 when the scale changes)
        """
        super().__init__(instance_id)
        self.root = root
        self.scale = scale
        self.mode_index = mode_index

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        changes = {}
        if self.root is not None:
            changes["root"] = self.root
        if self.scale is not None and self.scale != instance.scale:
            changes["scale"] = self.scale
            changes["mode_index"] = 0
        if self.mode_index is not None:
            changes["mode_index"] = self.mode_index
        return replace(instance, **changes)

    @property
    def description(self) -> str:
        return "Change Scale"


class SetChordCommand(InstanceCommand):
    """Change the root, chord type or inversion shown in chords mode."""

    def __init__(self, instance_id: str, root: Optional[str] = None,
                 chord_type: Optional[str] = None, inversion: Optional[ChordInversion] = None):
        super().__init__(instance_id)
        self.root = root
        self.chord_type = chord_type
        self.inversion = inversion

    def transform(self, instance: InstrumentInstance) -> InstrumentInstance:
        changes = {}
        if self.root is not None:
            changes["root"] = self.root
        if self.chord_type is not None and self.chord_type != instance.chord_type:
            changes["chord_type"] = self.chord_type
            changes["chord_inversion"] = ChordInversion.ROOT
        if self.inversion is not None:
            changes["chord_inversion"] = self.inversion
        return replace(instance, **changes)

    @property
    def description(self) -> str:
        return "Change Chord"


class AddInstrumentCommand(Command):
    """Command to add a fretboard or keyboard to the workspace."""

    def __init__(self, instance: InstrumentInstance):
        self.instance = instance
        self._previous_workspace: Optional[Workspace] = None

    def execute(self, state: AppState) -> AppState:
        """Add instance to workspace."""
        workspace = state.get_workspace()
        if workspace.get(self.instance.id) is not None:
            raise ValueError(f"Instance {self.instance.id} already exists")

        self._previous_workspace = workspace
        state.set_workspace(workspace.with_instance(self.instance))
        state.mark_dirty()

        return state

    def undo(self, state: AppState) -> AppState:
        """Remove added instance."""
        if self._previous_workspace is None:
            raise ValueError("Command has not been executed yet")

        state.set_workspace(self._previous_workspace)
        state.mark_dirty()

        return state

    @property
    def description(self) -> str:
        return f"Add {self.instance.kind.capitalize()}"


class RemoveInstrumentCommand(Command):
    """Command to remove an instance from the workspace."""

    def __init__(self, instance_id: str):
        self.instance_id = instance_id
        self._previous_workspace: Optional[Workspace] = None

    def execute(self, state: AppState) -> AppState:
        """Remove instance from workspace."""
        state.get_instance(self.instance_id)

        workspace = state.get_workspace()
        self._previous_workspace = workspace
        state.set_workspace(workspace.without_instance(self.instance_id))
        state.mark_dirty()

        return state

    def undo(self, state: AppState) -> AppState:
        """Re-add removed instance in its original position."""
        if self._previous_workspace is None:
            raise ValueError("Command has not been executed yet")

        state.set_workspace(self._previous_workspace)
        state.mark_dirty()

        return state

    @property
    def description(self) -> str:
        return "Remove Instrument"


class CommandHistory:
    """Manages undo/redo command history."""

    def __init__(self, app_state: AppState, max_history: int = 100):
        """
        Args:
            app_state: Application state to operate on
            max_history: Maximum number of commands to keep
        """
        self.app_state = app_state
        self.max_history = max_history
        self._undo_stack: List[Command] = []
        self._redo_stack: List[Command] = []

    def execute(self, command: Command):
        """Execute command and add to history."""
        command.execute(self.app_state)

        self._undo_stack.append(command)

        # Limit history size
        if len(self._undo_stack) > self.max_history:
            self._undo_stack.pop(0)

        # New command invalidates redo
        self._redo_stack.clear()

    def undo(self) -> bool:
        """Undo last command. Returns True if successful."""
        if not self.can_undo():
            return False

        command = self._undo_stack.pop()
        command.undo(self.app_state)
        self._redo_stack.append(command)

        return True

    def redo(self) -> bool:
        """Redo last undone command. Returns True if successful."""
        if not self.can_redo():
            return False

        command = self._redo_stack.pop()
        command.execute(self.app_state)
        self._undo_stack.append(command)

        return True

    def can_undo(self) -> bool:
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self._redo_stack) > 0

    def clear(self):
        """Clear all command history."""
        self._undo_stack.clear()
        self._redo_stack.clear()

    def get_undo_description(self) -> Optional[str]:
        """Get description of command that would be undone."""
        if self.can_undo():
            return self._undo_stack[-1].description
        return None

    def get_redo_description(self) -> Optional[str]:
        """Get description of command that would be redone."""
        if self.can_redo():
            return self._redo_stack[-1].description
        return None
