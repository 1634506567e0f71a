"""Audio device and MIDI management over pluggable backends, block-accurate MIDI timing and a small sine synth."""

__version__ = "0.1.0"