"""Extract BWF cue markers into Audacity label files."""

__version__ = "1.0.0"
