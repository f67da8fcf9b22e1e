"""
DSP utilities for note previews.

Oscillators, envelopes and level helpers used to render a selection.
"""
import numpy as np
from numba import jit

# Relative amplitudes of the first harmonics; a soft, piano-ish tone
DEFAULT_PARTIALS = (1.0, 0.5, 0.25, 0.12)


def additive_tone(frequency: float, num_samples: int, sample_rate: int,
                  partials=DEFAULT_PARTIALS) -> np.ndarray:
    """
    Render a tone as a sum of harmonic sine partials.

    Partials above Nyquist are skipped. The result is normalised to a peak
    of 1.0.

    Args:
        frequency: Fundamental in Hz
        num_samples: Length of the buffer
        sample_rate: Audio sample rate
        partials: Amplitude of harmonic 1, 2, 3 ...

    Returns:
        float32 mono buffer
    """
    t = np.arange(num_samples, dtype=np.float64) / sample_rate
    output = np.zeros(num_samples, dtype=np.float64)

    for harmonic, amplitude in enumerate(partials, start=1):
        partial_freq = frequency * harmonic
        if partial_freq >= sample_rate / 2:
            break
        output += amplitude * np.sin(2.0 * np.pi * partial_freq * t)

    peak = np.max(np.abs(output)) if num_samples else 0.0
    if peak > 0.0:
        output /= peak
    return output.astype(np.float32)


@jit(nopython=True)
def apply_adsr_envelope(buffer: np.ndarray,
                        attack: float,
                        decay: float,
                        sustain: float,
                        release: float,
                        sample_rate: int) -> np.ndarray:
    """
    Apply ADSR envelope to a fixed-length note (JIT-compiled for speed).

    The release stage occupies the last `release` seconds of the buffer.

    Args:
        buffer: Audio buffer to process
        attack: Attack time (seconds)
        decay: Decay time (seconds)
        sustain: Sustain level (0.0-1.0)
        release: Release time (seconds)
        sample_rate: Audio sample rate

    Returns:
        Enveloped audio
    """
    output = np.zeros_like(buffer)
    num_samples = len(buffer)

    attack_samples = int(attack * sample_rate)
    decay_samples = int(decay * sample_rate)
    release_samples = min(int(release * sample_rate), num_samples)
    release_start = num_samples - release_samples

    level = 0.0
    for i in range(num_samples):
        if i < attack_samples:
            level = i / max(1, attack_samples)
        elif i < attack_samples + decay_samples:
            progress = (i - attack_samples) / max(1, decay_samples)
            level = 1.0 - progress * (1.0 - sustain)
        else:
            level = sustain

        if i >= release_start:
            level *= 1.0 - (i - release_start) / max(1, release_samples)

        output[i] = buffer[i] * level

    return output


def db_to_linear(db: float) -> float:
    """
    Convert decibels to linear gain.

    Example:
        >>> db_to_linear(0.0)
        1.0
    """
    return 10.0 ** (db / 20.0)


def peak_level(buffer: np.ndarray) -> float:
    """Absolute peak of a buffer (0.0 for an empty buffer)."""
    if buffer.size == 0:
        return 0.0
    return float(np.max(np.abs(buffer)))


def stereo_from_mono(buffer_mono: np.ndarray) -> np.ndarray:
    """
    Convert mono buffer to stereo by duplicating channels.

    Returns:
        Stereo audio buffer (frames x 2)
    """
    return np.stack([buffer_mono, buffer_mono], axis=-1)


def clip_audio(buffer: np.ndarray, threshold: float = 1.0) -> np.ndarray:
    """Hard clip audio to prevent overflow."""
    return np.clip(buffer, -threshold, threshold)
