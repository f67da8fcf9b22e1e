"""
Interval-mode selection editing.

Tapping a note on a fretboard, keyboard or scale strip toggles it in an
IntervalSelectionState. Every function here is pure: it takes a state and
returns a new one.

The selection is always expressed relative to one root pitch class,
anchored at the lowest selected octave:
- removing the root promotes the lowest remaining note to root
- a lone remaining non-root note is promoted to root
- adding a note below the reference octave lowers the reference octave
  and shifts the existing intervals up to match
"""
import logging
from dataclasses import replace
from typing import Dict, Iterable

from core.constants import DEFAULT_OCTAVE, pitch_class_from_name
from core.models import (
    AbsolutePitch,
    IntervalOffset,
    IntervalSelectionState,
    Interval,
    Note,
    Octave,
)

logger = logging.getLogger(__name__)


def _root_pitch(root: str, octave: int) -> AbsolutePitch:
    return AbsolutePitch((octave + 1) * 12 + pitch_class_from_name(root))


def _octave_of(pitch: int) -> Octave:
    return Octave(pitch // 12 - 1)


def clear(prefer_flats: bool = False, default_octave: int = DEFAULT_OCTAVE) -> IntervalSelectionState:
    """Empty selection (no root)."""
    return IntervalSelectionState.empty(prefer_flats, default_octave)


def apply_tap(state: IntervalSelectionState, tapped_pitch: AbsolutePitch) -> IntervalSelectionState:
    """
    Toggle a tapped note in the selection.

    Args:
        state: Current selection
        tapped_pitch: MIDI number of the tapped note

    Returns:
        New selection. Never raises for a well-formed state.

    Example:
        >>> s = apply_tap(IntervalSelectionState(), 60)   # C4
        >>> s = apply_tap(s, 64)                           # E4
        >>> s.root, sorted(s.selected_intervals)
        ('C', [0, 4])
    """
    prefer_flats = state.prefer_flats
    tapped_octave = _octave_of(tapped_pitch)

    if state.is_empty:
        root = Note.from_midi(tapped_pitch, prefer_flats=prefer_flats).name
        logger.debug("Empty selection, %s becomes root", root)
        return replace(
            state,
            root=root,
            selected_intervals=frozenset({0}),
            selected_octaves=frozenset({tapped_octave}),
        )

    reference_octave = state.reference_octave
    reference = _root_pitch(state.root, reference_octave)
    extended = IntervalOffset(tapped_pitch - reference)

    if extended in state.selected_intervals:
        return _remove_interval(state, reference, extended)

    if extended >= 0:
        logger.debug("Added interval %d", extended)
        return replace(
            state,
            selected_intervals=state.selected_intervals | {extended},
            selected_octaves=state.selected_octaves | {tapped_octave},
        )

    # Below the reference octave: move the reference down and re-express
    # the existing intervals against it
    octaves_down = (-extended - 1) // 12 + 1
    new_reference_octave = reference_octave - octaves_down
    shift = octaves_down * 12

    octaves = set(state.selected_octaves)
    octaves.update(range(new_reference_octave, reference_octave))

    intervals = {i + shift for i in state.selected_intervals}
    intervals.add(tapped_pitch - _root_pitch(state.root, new_reference_octave))

    logger.debug("Added note below root, extended %d octave(s) down, root now at interval %d",
                 octaves_down, shift)
    return replace(state, selected_intervals=frozenset(intervals), selected_octaves=frozenset(octaves))


def _remove_interval(state: IntervalSelectionState, reference: AbsolutePitch,
                     removed: IntervalOffset) -> IntervalSelectionState:
    prefer_flats = state.prefer_flats
    remaining = state.selected_intervals - {removed}

    if not remaining:
        logger.debug("All intervals removed, selection empty")
        return clear(prefer_flats, state.default_octave)

    if removed == 0:
        # Lowest remaining note becomes the root. Its actual octave is the
        # new reference even when the interval was negative.
        lowest = min(remaining)
        new_root_pitch = reference + lowest
        new_root = Note.from_midi(new_root_pitch, prefer_flats=prefer_flats).name
        intervals = frozenset(i - lowest for i in remaining)
        octaves = frozenset(_octave_of(new_root_pitch + i) for i in intervals)
        logger.debug("Root removed, new root %s", new_root)
        return replace(state, root=new_root, selected_intervals=intervals, selected_octaves=octaves)

    if len(remaining) == 1:
        (single,) = remaining
        if single != 0:
            promoted = reference + single
            new_root = Note.from_midi(promoted, prefer_flats=prefer_flats).name
            logger.debug("Single interval %d becomes new root %s", single, new_root)
            return replace(
                state,
                root=new_root,
                selected_intervals=frozenset({0}),
                selected_octaves=frozenset({_octave_of(promoted)}),
            )

    logger.debug("Removed interval %d", removed)
    return replace(state, selected_intervals=remaining)


def change_octaves(state: IntervalSelectionState, new_octaves: Iterable[int]) -> IntervalSelectionState:
    """
    Replace the selected octave set.

    When the lowest octave changes, intervals are re-expressed against the
    new reference so the same absolute pitches stay selected.

    Example:
        C major {0, 4, 7} in octave {4} changed to {3, 4} becomes
        {12, 16, 19} against C3. An empty octave set falls back to the
        state's default octave.
    """
    octaves = frozenset(new_octaves) or frozenset({state.default_octave})
    new_reference_octave = min(octaves)

    if state.is_empty or new_reference_octave == state.reference_octave:
        return replace(state, selected_octaves=octaves)

    old_reference = _root_pitch(state.root, state.reference_octave)
    new_reference = _root_pitch(state.root, new_reference_octave)
    intervals = frozenset(old_reference + i - new_reference for i in state.selected_intervals)

    logger.debug("Octave change: reference %s%d -> %s%d, intervals %s -> %s",
                 state.root, state.reference_octave, state.root, new_reference_octave,
                 sorted(state.selected_intervals), sorted(intervals))
    return replace(state, selected_intervals=intervals, selected_octaves=octaves)


def highlight_map(state: IntervalSelectionState) -> Dict[AbsolutePitch, IntervalOffset]:
    """
    Pitches to highlight, mapped to their interval from the root.

    Only pitches whose octave is selected are included.
    """
    reference = state.reference_pitch
    if reference is None:
        return {}

    highlights = {}
    for interval in state.selected_intervals:
        pitch = AbsolutePitch(reference + interval)
        if _octave_of(pitch) in state.selected_octaves:
            highlights[pitch] = interval
    return highlights


def interval_label(semitones: int) -> str:
    """Display label for an interval (R, ♭3, 9 ...)."""
    return Interval(semitones).label
