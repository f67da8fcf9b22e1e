"""
Audio layer for Theorie.

Modules:
- dsp: Oscillators, envelopes and level helpers
- preview: Render a selection as harmony or melody
- player: Play rendered previews through sounddevice
"""
