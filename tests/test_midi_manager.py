import pytest

from makeasound.midi import NoteOn
from makeasound.midi_info import MidiMessage, MidiPortInfo
from makeasound.midi_manager import InputPort, MidiBackend, MidiManager


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def backend():
    return MidiBackend(input_ports=["Keys", "Pads"], output_ports=["Synth"])


def test_ports_are_numbered_in_order(backend):
    manager = MidiManager(backend)
    assert manager.get_input_ports() == [MidiPortInfo(0, "Keys"), MidiPortInfo(1, "Pads")]
    assert manager.get_output_ports() == [MidiPortInfo(0, "Synth")]


def test_queue_mode_collects_typed_events(backend):
    clock = FakeClock(5.0)
    manager = MidiManager(backend, clock=clock)
    manager.open_input(1)
    backend.inject(1, [0x90, 60, 127])

    events = manager.drain_messages()
    assert len(events) == 1
    assert events[0].port_id == 1
    assert events[0].arrival == 5.0
    assert events[0].event.as_(NoteOn) == NoteOn(60, 1.0)
    assert manager.drain_messages() == []


def test_drain_appends_to_given_list(backend):
    manager = MidiManager(backend)
    manager.open_input(0)
    backend.inject(0, [0x80, 64, 0])
    out = []
    result = manager.drain_messages(out)
    assert result is out
    assert out[0].event.is_note_off()


def test_unconvertible_messages_are_dropped(backend):
    manager = MidiManager(backend)
    manager.open_input(0)
    backend.inject(0, [0xF0, 0x7E, 0xF7])
    assert manager.drain_messages() == []


def test_callback_mode_bypasses_queue(backend):
    received = []
    manager = MidiManager(backend)
    manager.open_input(0, received.append)
    backend.inject(0, [0xB0, 7, 100], timestamp=1.5)

    assert received == [MidiMessage(1.5, bytes([0xB0, 7, 100]))]
    assert manager.drain_messages() == []


def test_open_close_bookkeeping(backend):
    manager = MidiManager(backend)
    manager.open_input(1)
    manager.open_input(0)
    manager.open_input(1)
    assert manager.get_open_input_ports() == [0, 1]
    assert manager.is_input_open(1)

    manager.close_input(1)
    assert not manager.is_input_open(1)
    backend.inject(1, [0x90, 60, 100])
    assert manager.drain_messages() == []

    manager.close_all_inputs()
    assert manager.get_open_input_ports() == []


def test_invalid_input_port_raises(backend):
    manager = MidiManager(backend)
    with pytest.raises(ValueError):
        manager.open_input(7)
    assert not manager.is_input_open(7)


def test_output_send_and_close(backend):
    manager = MidiManager(backend)
    assert not manager.is_output_open()
    manager.open_output(0)
    assert manager.is_output_open()

    manager.send_message(MidiMessage(0.0, b"\x90\x3c\x64"))
    manager.send_message(b"\xb0\x07\x7f")
    manager.send_message(MidiMessage())
    assert backend.sent == [(0, b"\x90\x3c\x64"), (0, b"\xb0\x07\x7f")]

    manager.close_output()
    assert not manager.is_output_open()
    with pytest.raises(RuntimeError):
        manager.send_message(b"\x90\x3c\x64")


def test_invalid_output_port_raises(backend):
    manager = MidiManager(backend)
    with pytest.raises(ValueError):
        manager.open_output(3)


def test_context_manager_closes_everything(backend):
    with MidiManager(backend) as manager:
        manager.open_input(0)
        manager.open_output(0)
    assert manager.get_open_input_ports() == []
    assert not backend.is_output_open()


def test_input_port_deliver_queues_with_arrival():
    port = InputPort(3, clock=FakeClock(2.25))
    port.deliver(0.0, [0xC0, 5])
    assert len(port.queue) == 1
    assert port.queue[0].port_id == 3
    assert port.queue[0].arrival == 2.25
    assert port.queue[0].event.is_program_change()