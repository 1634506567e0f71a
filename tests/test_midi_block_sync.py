from makeasound.midi import Event
from makeasound.midi_block_sync import MidiBlockSync
from makeasound.midi_info import MidiInputEvent
from makeasound.midi_manager import MidiBackend, MidiManager


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class FakeMidi:
    def __init__(self):
        self.pending = []

    def push(self, arrival, pitch=60):
        self.pending.append(
            MidiInputEvent(0, Event.note_on(0, pitch, 1.0, sample_offset=99), arrival)
        )

    def drain_messages(self, out):
        out.extend(self.pending)
        self.pending = []
        return out


def test_first_block_places_everything_at_zero():
    clock = FakeClock(10.0)
    sync = MidiBlockSync(clock)
    midi = FakeMidi()
    midi.push(9.0)
    midi.push(9.5)
    sync.drain_for_block(midi, 256, 48000)
    assert [e.event.sample_offset for e in sync.events()] == [0, 0]
    assert not sync.empty()


def test_offsets_follow_arrival_and_are_clamped():
    clock = FakeClock(10.0)
    sync = MidiBlockSync(clock)
    midi = FakeMidi()
    sync.drain_for_block(midi, 512, 1000)
    assert sync.empty()

    clock.now = 11.0
    midi.push(9.0)
    midi.push(10.25)
    midi.push(20.0)
    sync.drain_for_block(midi, 512, 1000)
    offsets = [e.event.sample_offset for e in sync.events()]
    assert offsets == [0, 250, 511]


def test_window_moves_to_latest_block_start():
    clock = FakeClock(1.0)
    sync = MidiBlockSync(clock)
    midi = FakeMidi()
    sync.drain_for_block(midi, 100, 1000)
    clock.now = 2.0
    sync.drain_for_block(midi, 100, 1000)
    clock.now = 3.0
    midi.push(2.0)
    sync.drain_for_block(midi, 100, 1000)
    assert sync.events()[0].event.sample_offset == 0


def test_invalid_block_clears_and_skips_draining():
    sync = MidiBlockSync(FakeClock())
    midi = FakeMidi()
    midi.push(0.0)
    sync.drain_for_block(midi, 64, 48000)
    assert len(sync.events()) == 1

    midi.push(0.0)
    sync.drain_for_block(midi, 0, 48000)
    assert sync.empty()
    assert len(midi.pending) == 1

    sync.drain_for_block(midi, 64, 0)
    assert sync.empty()


def test_reset_forgets_previous_block():
    clock = FakeClock(1.0)
    sync = MidiBlockSync(clock)
    midi = FakeMidi()
    sync.drain_for_block(midi, 64, 1000)
    midi.push(1.05)
    sync.reset()
    assert sync.empty()

    clock.now = 2.0
    sync.drain_for_block(midi, 64, 1000)
    assert sync.events()[0].event.sample_offset == 0


def test_offsets_stay_within_block_with_real_manager():
    clock = FakeClock(0.0)
    backend = MidiBackend(input_ports=["Keys"])
    manager = MidiManager(backend, clock=clock)
    manager.open_input(0)
    sync = MidiBlockSync(clock)
    sync.drain_for_block(manager, 128, 44100)

    for arrival in (0.0001, 0.001, 0.002, 5.0):
        clock.now = arrival
        backend.inject(0, [0x90, 60, 100])
    clock.now = 6.0
    sync.drain_for_block(manager, 128, 44100)

    offsets = [e.event.sample_offset for e in sync.events()]
    assert len(offsets) == 4
    assert offsets == sorted(offsets)
    assert all(0 <= o <= 127 for o in offsets)
    assert offsets[-1] == 127