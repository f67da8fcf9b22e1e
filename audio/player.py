"""
Audio output for previews, through sounddevice.
"""
import logging
from typing import Optional

import numpy as np
import sounddevice as sd

logger = logging.getLogger(__name__)


class PreviewPlayer:
    """Plays rendered previews on an output device."""

    def __init__(self, sample_rate: int = 44100, device: Optional[str] = None):
        """
        Args:
            sample_rate: Audio sample rate
            device: Output device name (None or "Default" = system default)
        """
        self.sample_rate = sample_rate
        self.device = None if device in (None, "Default") else device

    def play(self, buffer: np.ndarray, blocking: bool = False) -> bool:
        """
        Play a stereo buffer, stopping any preview still sounding.

        Returns:
            True if playback started
        """
        if buffer.size == 0:
            return False
        try:
            sd.stop()
            sd.play(buffer, samplerate=self.sample_rate, device=self.device, blocking=blocking)
        except sd.PortAudioError as e:
            logger.warning("Audio preview failed: %s", e)
            return False
        return True

    def stop(self):
        try:
            sd.stop()
        except sd.PortAudioError as e:
            logger.warning("Error stopping audio preview: %s", e)
