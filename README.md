# makeasound

Building blocks for audio and MIDI applications:

- describing audio devices and stream configurations, and picking a sample
  rate that both an input and an output device support;
- decoding raw MIDI bytes into typed events and rendering them as text;
- queueing MIDI input and placing it at sample offsets inside an audio block;
- building dropdown and toggle-list data for device, rate, block-size and
  MIDI-port pickers;
- a small monophonic sine synth and an `AudioProcessor` that runs it.

Device and port access goes through two backend classes, `AudioBackend` and
`MidiBackend`.

## Installation

```
pip install makeasound
```

To run the test suite:

```
pip install "makeasound[test]"
pytest
```

## Modules

- `makeasound.midi`: payload types `NoteOn`, `NoteOff`, `ControlChange`,
  `PitchBend`, `ChannelAftertouch`, `PolyAftertouch`, `ProgramChange` and
  `SysEx` (at most 16 bytes), wrapped in `Event`; `Buffer`, `convert_midi` and
  `to_string`.
- `makeasound.algorithms`: `stable_insertion_sort`.
- `makeasound.device_info`: `DeviceInfo`, `StreamParameters`, `StreamConfig`,
  `StreamOptions`, `Flags`, `AudioCallbackStatus`, `AudioCallbackInfo`,
  `get_default_num_channels`, `device_supports_sample_rate`,
  `pick_compatible_sample_rate`, `get_num_channels` and
  `get_supported_block_sizes`.
- `makeasound.midi_info`: `MidiPortInfo`, `MidiMessage`, `MidiInputEvent` and
  `format_message`.
- `makeasound.dropdown`: `DropdownItem`, `DropdownInfo`, `ToggleListItem`,
  `ToggleListInfo` and the `make_*` builders.
- `makeasound.midi_manager`: `MidiBackend`, `InputPort` and `MidiManager`.
- `makeasound.midi_block_sync`: `MidiBlockSync`.
- `makeasound.device_manager`: `AudioBackend`, `DeviceManager`, `Error`,
  `AudioError`, `StreamFlag`, `stream_flags` and `make_callback_info`.
- `makeasound.ui_managers`: `UIDeviceManager` and `UIMidiManager`.
- `makeasound.synth`: `Synth`, `SineVoice`, `AudioControls`, `AudioProcessor`
  and `midi_note_to_frequency`.

## Decoding MIDI

```python
from makeasound.midi import NoteOn, convert_midi, to_string

event = convert_midi(bytes([0x90, 60, 127]), 0)
assert event.is_note_on()
note = event.as_(NoteOn)
print(note.pitch, note.velocity)   # 60 1.0
print(to_string(event))            # NoteOn ch=0 pitch=60 vel=1.000 @0
```

A note-on with velocity 0 decodes as a note-off. Messages that have no typed
form, such as system messages or messages that are too short, give `None`.
`Event.sys_ex` raises `ValueError` for payloads longer than 16 bytes.

## Sorting events in a block

```python
from makeasound.midi import Buffer, Event

buffer = Buffer()
buffer.append(Event.note_on(0, 64, 0.5, 32))
buffer.append(Event.note_off(0, 60, 0.0, 0))
buffer.sort_by_offset()   # stable: events at the same offset keep their order
```

## Formatting raw messages

```python
from makeasound.midi_info import MidiMessage, format_message

print(format_message(MidiMessage(timestamp=0.0, data=bytes([0x90, 60, 100]))))
# Note On     ch:1 note:60 vel:100  [90 3c 64]
```

## Picking a sample rate

```python
from makeasound.device_info import DeviceInfo, pick_compatible_sample_rate

out = DeviceInfo(id=1, name="Out", output_channels=2, sample_rates=[44100, 48000])
inp = DeviceInfo(id=2, name="In", input_channels=2, sample_rates=[48000])
print(pick_compatible_sample_rate(out, inp))  # 48000
```

## Running a stream

`DeviceManager` opens one stream on an `AudioBackend` and calls your function
once per block with an `AudioCallbackInfo`. Output buffers are
non-interleaved float32 arrays; `get_output(channel)` gives a writable view of
one channel. `info.dirty` is true on the first block and whenever channel
counts, sample rate or block size change.

```python
from makeasound.device_info import DeviceInfo
from makeasound.device_manager import AudioBackend, DeviceManager

device = DeviceInfo(
    id=1, name="Speakers", output_channels=2, input_channels=2,
    is_default_output=True, is_default_input=True,
    sample_rates=[44100, 48000], preferred_sample_rate=48000,
)
backend = AudioBackend([device])

def render(info):
    for channel in range(info.num_outputs):
        info.get_output(channel)[:] = 0.25

with DeviceManager(backend) as manager:
    manager.start(manager.get_default_config(), render)
    block = backend.process()   # 2 channels x 512 samples
```

The default configuration opens at most two channels in each direction, a
block size of 512 and the rate chosen by `pick_compatible_sample_rate`.

## MIDI input and output

An input opened without a callback queues decoded events until
`drain_messages` collects them; with a callback, each raw `MidiMessage` is
passed to it straight away.

```python
from makeasound.midi_manager import MidiBackend, MidiManager

backend = MidiBackend(input_ports=["Keyboard"], output_ports=["Synth"])
with MidiManager(backend) as midi:
    midi.open_input(0)
    backend.inject(0, [0x90, 60, 100])
    events = midi.drain_messages()
    assert events[0].event.is_note_on()

    midi.open_output(0)
    midi.send_message(bytes([0x80, 60, 0]))
    print(backend.sent)   # [(0, b'\x80<\x00')]
```

`MidiBlockSync.drain_for_block(midi, num_samples, sample_rate)` drains the
queue and sets each event's `sample_offset` from its arrival time: events that
arrived since the previous call are spread over `[0, num_samples)`, and on the
first call (or after `reset()`) all offsets are 0.

## The synth

`AudioProcessor` builds an output-only stream from the default configuration
and renders a `Synth` into it, applying queued MIDI at its sample offsets.
Note-on and note-off change the playing note (the most recently held one
wins), CC 7 sets the gain and CC 123 releases all notes.

```python
from makeasound.device_manager import DeviceManager
from makeasound.midi_manager import MidiBackend, MidiManager
from makeasound.synth import AudioProcessor

midi_backend = MidiBackend(input_ports=["Keyboard"])
processor = AudioProcessor(DeviceManager(backend), MidiManager(midi_backend))
processor.apply_midi_port_toggle(0, True)
midi_backend.inject(0, [0x90, 69, 127])
block = backend.process()
print(processor.synth.make_controls().frequency)   # 440.0
```

## What this package does not do

The `AudioBackend` and `MidiBackend` classes shipped here run in-process: audio
blocks are driven by calling `AudioBackend.process()`, MIDI input is fed with
`MidiBackend.inject()`, and sent MIDI is recorded in `MidiBackend.sent`. There
is no connection to a sound card or MIDI hardware; to use real devices, write
a subclass that implements the same methods over your audio or MIDI system.
`get_supported_block_sizes` does not query the device and always returns the
powers of two from 64 to 2048. The package provides no command-line program
and no graphical interface; the dropdown and toggle-list builders only produce
data for one.