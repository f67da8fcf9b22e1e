"""
Audible preview of a selection.

Selected notes are rendered either together (harmony) or one after
another from the lowest note up (melody), for playback by audio.player.
"""
from typing import Iterable

import numpy as np

from audio.dsp import (
    additive_tone,
    apply_adsr_envelope,
    clip_audio,
    db_to_linear,
    stereo_from_mono,
)
from core.constants import midi_to_frequency

PREVIEW_MODES = ("harmony", "melody")


def render_note(pitch: int, duration: float, sample_rate: int) -> np.ndarray:
    """Render one enveloped note as a float32 mono buffer."""
    num_samples = int(duration * sample_rate)
    tone = additive_tone(midi_to_frequency(pitch), num_samples, sample_rate)
    return apply_adsr_envelope(tone, 0.01, 0.15, 0.6, min(0.2, duration / 2), sample_rate)


def render_selection(pitches: Iterable[int],
                     mode: str = "harmony",
                     note_duration: float = 0.8,
                     sample_rate: int = 44100,
                     volume_db: float = -12.0) -> np.ndarray:
    """
    Render selected pitches as a stereo buffer.

    Args:
        pitches: MIDI note numbers to render
        mode: "harmony" (all at once) or "melody" (ascending sequence)
        note_duration: Length of each note in seconds
        sample_rate: Audio sample rate
        volume_db: Output level

    Returns:
        float32 array of shape (frames, 2); zero frames when nothing is
        selected
    """
    if mode not in PREVIEW_MODES:
        raise ValueError(f"Invalid preview mode: {mode}")
    if note_duration <= 0:
        raise ValueError(f"Note duration must be positive, got {note_duration}")

    ordered = sorted(set(pitches))
    if not ordered:
        return np.zeros((0, 2), dtype=np.float32)

    notes = [render_note(p, note_duration, sample_rate) for p in ordered]

    if mode == "harmony":
        # Scale by voice count so chords don't clip
        mono = np.sum(notes, axis=0) / len(notes)
    else:
        mono = np.concatenate(notes)

    mono = clip_audio(mono * db_to_linear(volume_db))
    return stereo_from_mono(mono.astype(np.float32))

