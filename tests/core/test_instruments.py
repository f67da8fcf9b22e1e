"""
Tests for core.instruments (fretboard and keyboard geometry).
"""
import pytest

from core.interval_editor import apply_tap, highlight_map
from core.instruments import Fretboard, Keyboard, highlight_map_for, pitch_for_tap
from core.models import InstrumentInstance, IntervalSelectionState, Tuning, ViewMode
from core.theory import ChordInversion


@pytest.fixture
def guitar():
    return Fretboard(Tuning.standard(), fret_count=12)


class TestFretboard:

    def test_grid_shape(self, guitar):
        assert guitar.pitch_grid.shape == (6, 13)

    def test_pitch_at(self, guitar):
        assert guitar.pitch_at(0, 0) == 40    # open low E
        assert guitar.pitch_at(1, 3) == 48    # C3 on the A string
        assert guitar.pitch_at(5, 12) == 76

    def test_pitch_at_returns_int(self, guitar):
        assert type(guitar.pitch_at(2, 2)) is int

    @pytest.mark.parametrize("string,fret", [(-1, 0), (6, 0), (0, 13), (0, -1)])
    def test_off_board(self, guitar, string, fret):
        with pytest.raises(IndexError):
            guitar.pitch_at(string, fret)

    def test_note_at(self, guitar):
        assert guitar.note_at(4, 1).full_name == "C4"

    def test_positions_for(self, guitar):
        # E4 within 12 frets: open high E, B string 5th fret, G string 9th
        positions = guitar.positions_for(64)
        assert len(positions) == 3
        assert (5, 0) in positions
        assert (4, 5) in positions
        assert (3, 9) in positions
        assert all(guitar.pitch_at(s, f) == 64 for s, f in positions)

    def test_range(self, guitar):
        assert guitar.lowest_pitch == 40
        assert guitar.highest_pitch == 76

    def test_highlight_positions(self, guitar):
        selection = IntervalSelectionState()
        for pitch in (48, 52, 55):  # C3 E3 G3
            selection = apply_tap(selection, pitch)
        highlights = guitar.highlight_positions(highlight_map(selection))
        assert highlights[(1, 3)] == 0
        assert highlights[(2, 2)] == 4
        assert highlights[(3, 0)] == 7
        assert set(highlights.values()) == {0, 4, 7}


class TestKeyboard:

    def test_range(self):
        kb = Keyboard("A0", 88)
        assert kb.lowest_pitch == 21
        assert kb.highest_pitch == 108

    def test_pitch_at(self):
        kb = Keyboard("C2", 61)
        assert kb.pitch_at(0) == 36
        assert kb.pitch_at(24) == 60

    def test_pitch_at_out_of_range(self):
        with pytest.raises(IndexError):
            Keyboard("C2", 61).pitch_at(61)

    def test_key_index_for(self):
        kb = Keyboard("C2", 61)
        assert kb.key_index_for(60) == 24
        with pytest.raises(IndexError):
            kb.key_index_for(35)

    def test_black_keys(self):
        assert Keyboard.is_black_key(61)
        assert not Keyboard.is_black_key(64)

    def test_white_key_count(self):
        assert Keyboard("A0", 88).white_key_count() == 52
        assert Keyboard("C2", 61).white_key_count() == 36

    def test_highlight_keys_skips_pitches_off_keyboard(self):
        kb = Keyboard("C4", 12)
        selection = IntervalSelectionState("C", {0, 4, 16}, {4, 5})
        assert kb.highlight_keys(highlight_map(selection)) == {0: 0, 4: 4}

    def test_invalid_key_count(self):
        with pytest.raises(ValueError):
            Keyboard("C2", 0)


class TestPitchForTap:

    def test_fretboard(self):
        inst = InstrumentInstance(id="f", kind="fretboard")
        assert pitch_for_tap(inst, 1, 3) == 48

    def test_keyboard(self):
        inst = InstrumentInstance(id="k", kind="keyboard", start_note="C3", key_count=25)
        assert pitch_for_tap(inst, 12) == 60


class TestHighlightMapFor:

    def test_interval_mode_uses_selection(self):
        selection = IntervalSelectionState("C", {0, 4, 7}, {4})
        inst = InstrumentInstance(id="f", selection=selection)
        assert highlight_map_for(inst) == {60: 0, 64: 4, 67: 7}

    def test_scales_mode(self):
        inst = InstrumentInstance(id="f", view_mode=ViewMode.SCALES, root="A",
                                  scale="Minor Pentatonic", octaves={3})
        # A C D E G in octave 3
        assert highlight_map_for(inst) == {57: 0, 48: 3, 50: 5, 52: 7, 55: 10}

    def test_chords_mode(self):
        inst = InstrumentInstance(id="f", view_mode=ViewMode.CHORDS, root="G",
                                  chord_type="dominant7", octaves={2, 3})
        assert highlight_map_for(inst) == {43: 0, 47: 4, 50: 7, 53: 10}

    def test_chords_mode_inverted(self):
        inst = InstrumentInstance(id="f", view_mode=ViewMode.CHORDS, root="C",
                                  chord_type="major", chord_inversion=ChordInversion.FIRST)
        assert highlight_map_for(inst) == {52: 4, 55: 7, 60: 12}

    def test_scale_highlights_on_fretboard(self):
        guitar = Fretboard(Tuning.standard(), fret_count=3)
        inst = InstrumentInstance(id="f", view_mode=ViewMode.SCALES, root="E",
                                  scale="Minor Pentatonic", octaves={2})
        positions = guitar.highlight_positions(highlight_map_for(inst))
        # Low E string: open E and fret 3 (G)
        assert positions[(0, 0)] == 0
        assert positions[(0, 3)] == 3
        assert (0, 1) not in positions
