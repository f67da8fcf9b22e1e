"""
MIDI input layer for Theorie.

Modules:
- handler: Hardware keyboard input via python-rtmidi
"""
