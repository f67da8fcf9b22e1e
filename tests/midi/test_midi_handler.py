"""
Tests for midi.handler.

No device is opened; the rtmidi callback is driven directly.
"""
import pytest

pytest.importorskip("rtmidi")

from midi.handler import MIDIHandler, parse_midi_message  # noqa: E402


class TestParseMidiMessage:

    def test_note_on(self):
        assert parse_midi_message([0x91, 60, 100]) == {
            "type": "note_on", "channel": 1, "note": 60, "velocity": 100,
        }

    def test_note_on_zero_velocity_is_note_off(self):
        assert parse_midi_message([0x90, 60, 0])["type"] == "note_off"

    def test_note_off(self):
        assert parse_midi_message([0x80, 64, 40])["type"] == "note_off"

    @pytest.mark.parametrize("message", [
        [], [0xF8], [0xF0, 1, 2, 0xF7], [0x90, 60], [0xB0, 64, 127], [0xE0, 0x00, 0x40], [0x3C, 100],
    ])
    def test_non_note_messages_are_unknown(self, message):
        assert parse_midi_message(message)["type"] == "unknown"

    def test_unknown_keeps_raw_bytes(self):
        assert parse_midi_message([0xB0, 64, 127]) == {"type": "unknown", "data": [0xB0, 64, 127]}


class TestMIDIHandler:

    def test_note_ons_are_queued_in_order(self):
        handler = MIDIHandler()
        handler._midi_input_callback(([0x90, 60, 100], 0.0))
        handler._midi_input_callback(([0x80, 60, 0], 0.1))
        handler._midi_input_callback(([0x90, 64, 90], 0.2))
        handler._midi_input_callback(([0xB0, 1, 10], 0.3))
        assert handler.poll_note_ons() == [60, 64]
        assert handler.poll_note_ons() == []

    def test_channel_filter(self):
        handler = MIDIHandler(channels=[1])
        handler._midi_input_callback(([0x90, 60, 100], 0.0))
        handler._midi_input_callback(([0x91, 62, 100], 0.0))
        assert handler.poll_note_ons() == [62]

    def test_full_queue_drops_notes(self):
        handler = MIDIHandler()
        for _ in range(handler.note_on_queue.maxsize + 10):
            handler._midi_input_callback(([0x90, 60, 100], 0.0))
        assert len(handler.poll_note_ons()) == handler.note_on_queue.maxsize

    def test_close_without_input(self):
        handler = MIDIHandler()
        assert not handler.input_opened
        handler.close()
        assert not handler.input_opened
