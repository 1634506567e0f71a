from makeasound.midi import Event
from makeasound.midi_info import (
    MidiInputEvent,
    MidiMessage,
    MidiPortInfo,
    format_message,
)


def test_port_info_equality():
    assert MidiPortInfo(1, "Keys") == MidiPortInfo(1, "Keys")
    assert not (MidiPortInfo(1, "Keys") == MidiPortInfo(2, "Keys"))


def test_message_accepts_list_of_ints():
    message = MidiMessage(timestamp=0.5, data=[0x90, 60, 100])
    assert message.data == bytes([0x90, 60, 100])
    assert message.timestamp == 0.5


def test_input_event_defaults():
    event = MidiInputEvent()
    assert event.port_id == 0
    assert event.arrival == 0.0
    assert event.event.is_note_on()


def test_input_event_holds_given_event():
    typed = Event.control_change(3, 7, 0.5, 12)
    queued = MidiInputEvent(port_id=2, event=typed, arrival=1.25)
    assert queued.event is typed
    assert queued.port_id == 2


def test_empty_message():
    assert format_message(MidiMessage()) == "(empty)"


def test_note_on_line():
    text = format_message(MidiMessage(data=bytes([0x90, 0x3C, 0x64])))
    assert text == "Note On     ch:1 note:60 vel:100  [90 3c 64]"


def test_note_on_zero_velocity_is_note_off():
    text = format_message(MidiMessage(data=bytes([0x91, 0x3C, 0x00])))
    assert text.startswith("Note Off    ch:2")
    assert text.endswith("[91 3c 00]")
    assert "vel:" not in text


def test_note_off_line():
    text = format_message(MidiMessage(data=bytes([0x8F, 0x40, 0x20])))
    assert text == "Note Off    ch:16 note:64 vel:32  [8f 40 20]"


def test_cc_line():
    text = format_message(MidiMessage(data=bytes([0xB0, 7, 127])))
    assert text.startswith("CC          ch:1 cc:7 val:127")


def test_pitch_bend_combines_data_bytes():
    text = format_message(MidiMessage(data=bytes([0xE0, 0x00, 0x40])))
    assert text.startswith("Pitch Bend  ch:1 val:8192")


def test_program_with_missing_data_bytes():
    text = format_message(MidiMessage(data=bytes([0xC2])))
    assert text.startswith("Program     ch:3 prog:0")
    assert text.endswith("[c2]")


def test_system_message():
    text = format_message(MidiMessage(data=bytes([0xF0, 0x7E, 0xF7])))
    assert text == "System      [f0 7e f7]"


def test_every_line_ends_with_hex_dump():
    for status in (0x80, 0x90, 0xA0, 0xB0, 0xC0, 0xD0, 0xE0, 0xF8):
        data = bytes([status, 1, 2])
        text = format_message(MidiMessage(data=data))
        assert text.endswith("[" + " ".join(f"{b:02x}" for b in data) + "]")