"""
Theorie - interval explorer
Main entry point

Plays notes on a MIDI keyboard into the active instrument's interval
selection, logging each new selection and previewing it through the
audio output.
"""
import logging
import time

from audio.player import PreviewPlayer
from audio.preview import render_selection
from core.persistence import WorkspaceFile
from core.session import Session, describe_selection
from core.settings import Settings
from midi.handler import MIDIHandler

logger = logging.getLogger("theorie")

POLL_INTERVAL = 0.01  # seconds


def main():
    """Launch the MIDI interval explorer."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    logger.info("=== Theorie ===")
    settings = Settings.load()
    session = Session(settings)

    midi_handler = MIDIHandler()
    if not midi_handler.open_input(settings.get("midi", "input_device")):
        logger.error("No MIDI input available, nothing to do")
        return

    player = None
    if settings.get("audio", "enabled"):
        player = PreviewPlayer(settings.get("audio", "sample_rate"), settings.get("audio", "output_device"))

    logger.info("Ready! Play notes to toggle them (Ctrl+C to quit)")

    try:
        while True:
            for pitch in midi_handler.poll_note_ons():
                selection = session.tap_pitch(pitch)
                logger.info("%s", describe_selection(selection))

                if player is not None:
                    player.play(render_selection(
                        selection.absolute_pitches(),
                        mode="harmony",
                        note_duration=settings.get("audio", "note_duration"),
                        sample_rate=settings.get("audio", "sample_rate"),
                        volume_db=settings.get("audio", "volume_db"),
                    ))
            time.sleep(POLL_INTERVAL)
    except KeyboardInterrupt:
        pass
    finally:
        midi_handler.close()
        if player is not None:
            player.stop()
        if settings.get("general", "auto_save_enabled") and session.app_state.is_dirty():
            WorkspaceFile.auto_save(session.app_state.get_workspace())

    logger.info("Theorie closed.")


if __name__ == "__main__":
    main()
