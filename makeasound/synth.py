"""A monophonic sine synth driven by MIDI, and the processor that runs it."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import numpy as np

from .device_info import AudioCallbackInfo, StreamConfig, StreamParameters
from .device_manager import DeviceManager
from .midi import ControlChange, Event, NoteOff, NoteOn
from .midi_block_sync import MidiBlockSync
from .midi_manager import MidiManager

TWO_PI = 2.0 * math.pi

CC_CHANNEL_VOLUME = 7
CC_ALL_NOTES_OFF = 123

MidiAppliedCallback = Callable[[Event], None]


def midi_note_to_frequency(note: int) -> float:
    """Equal-tempered frequency of a MIDI note, with A4 (69) at 440 Hz."""
    return 440.0 * 2.0 ** ((note - 69) / 12.0)


@dataclass
class AudioControls:
    """A snapshot of the synth state for display."""

    playing: bool = False
    gain: float = 0.0
    note: int = -1
    frequency: float = 0.0
    velocity: float = 0.0


@dataclass
class SineVoice:
    """A sine oscillator whose phase stays within one period."""

    phase: float = 0.0

    def render_sample(self, increment: float) -> float:
        value = math.sin(self.phase)
        self.phase += increment
        if self.phase >= TWO_PI:
            self.phase -= TWO_PI
        return value


@dataclass
class Synth:
    """One sine voice that plays the most recently held note."""

    note: int = -1
    velocity: float = 0.0
    gain: float = 0.5
    voice: SineVoice = field(default_factory=SineVoice)
    held_notes: List[int] = field(default_factory=list)

    def reset(self) -> None:
        self.voice.phase = 0.0

    def render(self, info: AudioCallbackInfo, start_sample: int, end_sample: int) -> None:
        """Write samples ``[start_sample, end_sample)`` to every output channel."""
        if start_sample >= end_sample or info.num_outputs <= 0:
            return

        note = self.note
        first = info.get_output(0)
        count = end_sample - start_sample

        if note < 0:
            first[start_sample:end_sample] = 0.0
        else:
            increment = TWO_PI * midi_note_to_frequency(note) / info.sample_rate
            amplitude = self.gain * self.velocity
            samples = np.fromiter(
                (self.voice.render_sample(increment) for _ in range(count)),
                dtype=np.float64,
                count=count,
            )
            first[start_sample:end_sample] = samples * amplitude

        for channel in range(1, info.num_outputs):
            info.get_output(channel)[start_sample:end_sample] = first[
                start_sample:end_sample
            ]

    def apply_midi_event(self, event: Event) -> None:
        """Update the synth from a typed MIDI event; other kinds are ignored."""
        match event.payload:
            case NoteOn(pitch=pitch, velocity=velocity):
                self.note_on(pitch, velocity)
            case NoteOff(pitch=pitch):
                self.note_off(pitch)
            case ControlChange(controller=controller, value=value):
                if controller == CC_ALL_NOTES_OFF:
                    self.release_all_notes()
                elif controller == CC_CHANNEL_VOLUME:
                    self.gain = value

    def note_on(self, note: int, velocity: float) -> None:
        self.held_notes = [held for held in self.held_notes if held != note]
        self.held_notes.append(note)
        self.note = note
        self.velocity = velocity

    def note_off(self, note: int) -> None:
        self.held_notes = [held for held in self.held_notes if held != note]
        if self.held_notes:
            self.note = self.held_notes[-1]
        else:
            self.note = -1
            self.velocity = 0.0

    def release_all_notes(self) -> None:
        self.held_notes.clear()
        self.note = -1
        self.velocity = 0.0

    def set_gain(self, gain: float) -> None:
        self.gain = gain

    def make_controls(self) -> AudioControls:
        note = self.note
        playing = note >= 0
        return AudioControls(
            playing=playing,
            gain=float(self.gain),
            note=note,
            frequency=midi_note_to_frequency(note) if playing else 0.0,
            velocity=float(self.velocity),
        )


class AudioProcessor:
    """Runs a Synth on an output-only stream, fed by queued MIDI input."""

    def __init__(
        self,
        manager: Optional[DeviceManager] = None,
        midi: Optional[MidiManager] = None,
        midi_sync: Optional[MidiBlockSync] = None,
    ) -> None:
        self.synth = Synth()
        self.manager = manager if manager is not None else DeviceManager()
        self.midi = midi if midi is not None else MidiManager()
        self.midi_sync = midi_sync if midi_sync is not None else MidiBlockSync()
        self._midi_applied: Optional[MidiAppliedCallback] = None

        self.config: StreamConfig = self.manager.get_default_config()
        self.config.input = None
        self.manager.start(self.config, self.audio_callback)

    def set_midi_applied_callback(self, callback: Optional[MidiAppliedCallback]) -> None:
        """Register a function called with each MIDI event once applied."""
        self._midi_applied = callback

    def apply_sample_rate(self, rate: int) -> None:
        self.config.sample_rate = rate
        self.manager.set_config(self.config)

    def apply_block_size(self, size: int) -> None:
        self.config.max_block_size = size
        self.manager.set_config(self.config)

    def apply_device(self, device_id: int) -> bool:
        """Switch output to ``device_id``; False if it has no outputs or is absent."""
        for device in self.manager.get_devices():
            if device.id != device_id or device.output_channels == 0:
                continue

            self.config.output = StreamParameters.for_device(device, False)
            if device.sample_rates and self.config.sample_rate not in device.sample_rates:
                self.config.sample_rate = device.sample_rates[0]

            self.manager.set_config(self.config)
            return True
        return False

    def apply_midi_port_toggle(self, port_id: int, on: bool) -> None:
        if on:
            self.midi.open_input(port_id)
        else:
            self.midi.close_input(port_id)
            self.synth.release_all_notes()

    def audio_callback(self, info: AudioCallbackInfo) -> None:
        """Render one block, applying MIDI events at their sample offsets."""
        if info.dirty:
            self.synth.reset()
            self.midi_sync.reset()

        self.midi_sync.drain_for_block(self.midi, info.num_samples, info.sample_rate)

        cursor = 0
        for item in self.midi_sync.events():
            offset = item.event.sample_offset
            self.synth.render(info, cursor, offset)
            self.apply_midi_on_audio_thread(item.event)
            cursor = offset

        self.synth.render(info, cursor, info.num_samples)

    def apply_midi_on_audio_thread(self, event: Event) -> None:
        self.synth.apply_midi_event(event)
        if self._midi_applied is not None:
            self._midi_applied(event)