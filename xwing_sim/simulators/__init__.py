"""Combat, match and trial simulators."""
