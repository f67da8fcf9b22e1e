"""
MIDI keyboard input.

Uses python-rtmidi for cross-platform MIDI support. Notes played on a
hardware keyboard are applied as taps on the active instrument instance.
"""
from typing import Iterable, List, Optional
import logging
import queue

import rtmidi

logger = logging.getLogger(__name__)


class MIDIHandler:
    """
    Handles MIDI input for note taps.

    Features:
    - Device listing and selection by name
    - Thread-safe queue communication (rtmidi thread -> UI thread)
    - Optional channel filter
    - Graceful handling when no devices available
    """

    def __init__(self, channels: Optional[Iterable[int]] = None):
        """
        Args:
            channels: MIDI channels (0-15) to accept, None = omni
        """
        self.midi_in: Optional[rtmidi.MidiIn] = None
        self.channels = frozenset(channels) if channels is not None else None

        # Bounded so a stalled UI cannot grow memory without limit
        self.note_on_queue: queue.Queue = queue.Queue(maxsize=256)

    @property
    def input_opened(self) -> bool:
        """Check if MIDI input is currently open."""
        return self.midi_in is not None

    @staticmethod
    def list_input_devices() -> List[str]:
        """
        Get list of available MIDI input devices.

        Returns:
            List of device names
        """
        midi_in = rtmidi.MidiIn()
        ports = midi_in.get_ports()
        midi_in.delete()
        return ports

    def open_input(self, device_name: Optional[str] = None) -> bool:
        """
        Open MIDI input device.

        Args:
            device_name: Name of MIDI input device (uses first device if None)

        Returns:
            True if a device was opened
        """
        self.close()
        try:
            self.midi_in = rtmidi.MidiIn()
            ports = self.midi_in.get_ports()

            if not ports:
                logger.info("No MIDI input devices available")
                self.midi_in.delete()
                self.midi_in = None
                return False

            if device_name is None or device_name == "None":
                port_index = 0
            elif device_name in ports:
                port_index = ports.index(device_name)
            else:
                logger.warning("MIDI device %r not found, using first device", device_name)
                port_index = 0

            self.midi_in.open_port(port_index)
            self.midi_in.set_callback(self._midi_input_callback)

            logger.info("Opened MIDI input: %s", ports[port_index])
            return True

        except rtmidi.RtMidiError as e:
            logger.warning("Error opening MIDI input: %s", e)
            if self.midi_in is not None:
                self.midi_in.delete()
                self.midi_in = None
            return False

    def _midi_input_callback(self, message_data, data=None):
        """
        Internal callback for incoming MIDI messages.

        Runs in rtmidi's own thread. Note-ons are queued for the UI thread.

        Args:
            message_data: Tuple of (message, timestamp)
            data: Optional user data (unused)
        """
        message, _timestamp = message_data

        parsed = parse_midi_message(message)
        if parsed["type"] != "note_on":
            return
        if self.channels is not None and parsed["channel"] not in self.channels:
            return

        try:
            self.note_on_queue.put_nowait(parsed["note"])
        except queue.Full:
            logger.warning("Note queue full, dropping note %d", parsed["note"])

    def poll_note_ons(self) -> List[int]:
        """
        Drain pending note-on pitches (non-blocking).

        Returns:
            MIDI note numbers in arrival order
        """
        notes = []
        while True:
            try:
                notes.append(self.note_on_queue.get_nowait())
            except queue.Empty:
                break
        return notes

    def close(self):
        """Close the MIDI input if open."""
        if self.midi_in is None:
            return
        try:
            self.midi_in.close_port()
            self.midi_in.delete()
        except rtmidi.RtMidiError as e:
            logger.warning("Error closing MIDI input: %s", e)
        finally:
            self.midi_in = None
        logger.info("MIDI input closed")


def parse_midi_message(message: List[int]) -> dict:
    """
    Parse a MIDI note message into structured format.

    Args:
        message: MIDI message bytes

    Returns:
        Dictionary with parsed message info:
        - type: "note_on", "note_off" or "unknown"
        - channel, note, velocity for note messages
        - data: raw bytes for anything else

    Example:
        >>> parse_midi_message([0x90, 60, 100])
        {'type': 'note_on', 'channel': 0, 'note': 60, 'velocity': 100}

        >>> parse_midi_message([0x90, 60, 0])
        {'type': 'note_off', 'channel': 0, 'note': 60, 'velocity': 0}
    """
    if not message:
        return {'type': 'unknown'}

    status = message[0]
    message_type = status & 0xF0
    channel = status & 0x0F

    if message_type in (0x80, 0x90) and len(message) >= 3:
        note, velocity = message[1], message[2]
        # Note On with velocity 0 is Note Off
        if message_type == 0x90 and velocity > 0:
            return {'type': 'note_on', 'channel': channel, 'note': note, 'velocity': velocity}
        return {'type': 'note_off', 'channel': channel, 'note': note, 'velocity': velocity}

    return {'type': 'unknown', 'data': list(message)}
