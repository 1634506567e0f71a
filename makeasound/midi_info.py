"""MIDI port descriptions, raw messages and their textual rendering."""

from __future__ import annotations

from dataclasses import dataclass, field

from .midi import Event

# Arrival timestamps are seconds from time.monotonic().
MidiTimePoint = float


@dataclass(frozen=True)
class MidiPortInfo:
    id: int = 0
    name: str = ""


@dataclass
class MidiMessage:
    """A raw MIDI message with the backend's timestamp."""

    timestamp: float = 0.0
    data: bytes = b""

    def __post_init__(self) -> None:
        self.data = bytes(self.data)


@dataclass
class MidiInputEvent:
    """A queued typed event with its port and wall-clock arrival time."""

    port_id: int = 0
    event: Event = field(default_factory=Event)
    arrival: MidiTimePoint = 0.0


def _hex_dump(data: bytes) -> str:
    return "[" + " ".join(f"{byte:02x}" for byte in data) + "]"


def format_message(message: MidiMessage) -> str:
    """Render a message as a decoded line followed by a hex dump.

    Channels are shown 1-based.
    """
    data = message.data
    if not data:
        return "(empty)"

    dump = _hex_dump(data)
    status = data[0] & 0xF0
    channel = (data[0] & 0x0F) + 1
    data1 = data[1] if len(data) > 1 else 0
    data2 = data[2] if len(data) > 2 else 0

    def line(label: str, body: str) -> str:
        return f"{label:<12}ch:{channel}{body}"

    if status == 0x80:
        return line("Note Off", f" note:{data1} vel:{data2}  {dump}")
    if status == 0x90 and data2 == 0:
        return line("Note Off", f" note:{data1}        {dump}")
    if status == 0x90:
        return line("Note On", f" note:{data1} vel:{data2}  {dump}")
    if status == 0xA0:
        return line("Polytouch", f" note:{data1} val:{data2}  {dump}")
    if status == 0xB0:
        return line("CC", f" cc:{data1} val:{data2}    {dump}")
    if status == 0xC0:
        return line("Program", f" prog:{data1}{' ' * 13}{dump}")
    if status == 0xD0:
        return line("ChanPress", f" val:{data1}{' ' * 14}{dump}")
    if status == 0xE0:
        return line("Pitch Bend", f" val:{(data2 << 7) | data1}     {dump}")
    return f"{'System':<12}{dump}"