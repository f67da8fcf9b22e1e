"""
Core data structures and state management for Theorie.

Modules:
- models: Immutable data structures (Note, IntervalSelectionState, etc.)
- interval_editor: Pure tap/octave transitions of interval selections
- theory: Scales, modes, chords and their highlight maps
- instruments: Fretboard and keyboard geometry
- commands: Command pattern for undo/redo
- persistence: Workspace file I/O (.theorie format)
- settings: User settings (~/.theorie/settings.json)
- session: Session controller over settings, state and history
- constants: Musical constants (note names, interval labels, tunings)
"""
