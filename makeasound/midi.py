"""Typed MIDI 1.0 channel messages, short SysEx and raw-byte decoding."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterable, Optional, Type, TypeVar, Union

from .algorithms import stable_insertion_sort


@dataclass(frozen=True)
class NoteOn:
    """Note start; pitch 0..127, velocity normalised to 0..1."""

    pitch: int = 0
    velocity: float = 0.0


@dataclass(frozen=True)
class NoteOff:
    """Note end; pitch 0..127, release velocity normalised to 0..1."""

    pitch: int = 0
    velocity: float = 0.0


@dataclass(frozen=True)
class ControlChange:
    """Controller 0..127 with a value normalised to 0..1."""

    controller: int = 0
    value: float = 0.0


@dataclass(frozen=True)
class PitchBend:
    """Pitch wheel position in -1..+1."""

    value: float = 0.0


@dataclass(frozen=True)
class ChannelAftertouch:
    """Channel pressure normalised to 0..1."""

    pressure: float = 0.0


@dataclass(frozen=True)
class PolyAftertouch:
    """Per-note pressure normalised to 0..1."""

    pitch: int = 0
    pressure: float = 0.0


@dataclass(frozen=True)
class ProgramChange:
    """Program number 0..127."""

    program: int = 0


@dataclass(frozen=True)
class SysEx:
    """A short system-exclusive payload of at most ``MAX_BYTES`` bytes."""

    MAX_BYTES: ClassVar[int] = 16

    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        if len(self.data) > self.MAX_BYTES:
            raise ValueError(
                f"SysEx payload of {len(self.data)} bytes exceeds "
                f"the maximum of {self.MAX_BYTES}"
            )

    @property
    def size(self) -> int:
        return len(self.data)


Payload = Union[
    NoteOn,
    NoteOff,
    ControlChange,
    PitchBend,
    ChannelAftertouch,
    PolyAftertouch,
    ProgramChange,
    SysEx,
]

P = TypeVar(
    "P",
    NoteOn,
    NoteOff,
    ControlChange,
    PitchBend,
    ChannelAftertouch,
    PolyAftertouch,
    ProgramChange,
    SysEx,
)


@dataclass
class Event:
    """A timed MIDI event carrying one typed payload.

    ``channel`` is 0..15 for channel messages and -1 where a channel has
    no meaning (SysEx). Events order by ``sample_offset`` only.
    """

    sample_offset: int = 0
    channel: int = 0
    payload: Payload = field(default_factory=NoteOn)

    def __lt__(self, other: "Event") -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.sample_offset < other.sample_offset

    # --- factories -----------------------------------------------------

    @classmethod
    def note_on(
        cls, channel: int, pitch: int, velocity: float, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, NoteOn(pitch, velocity))

    @classmethod
    def note_off(
        cls, channel: int, pitch: int, velocity: float, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, NoteOff(pitch, velocity))

    @classmethod
    def control_change(
        cls, channel: int, controller: int, value: float, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, ControlChange(controller, value))

    @classmethod
    def pitch_bend(cls, channel: int, value: float, sample_offset: int = 0) -> "Event":
        return cls(sample_offset, channel, PitchBend(value))

    @classmethod
    def channel_aftertouch(
        cls, channel: int, pressure: float, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, ChannelAftertouch(pressure))

    @classmethod
    def poly_aftertouch(
        cls, channel: int, pitch: int, pressure: float, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, PolyAftertouch(pitch, pressure))

    @classmethod
    def program_change(
        cls, channel: int, program: int, sample_offset: int = 0
    ) -> "Event":
        return cls(sample_offset, channel, ProgramChange(program))

    @classmethod
    def sys_ex(cls, data: bytes | Iterable[int], sample_offset: int = 0) -> "Event":
        """Build a SysEx event; raises ValueError if ``data`` is too long."""
        return cls(sample_offset, -1, SysEx(bytes(data)))

    # --- queries -------------------------------------------------------

    def is_note_on(self) -> bool:
        return isinstance(self.payload, NoteOn)

    def is_note_off(self) -> bool:
        return isinstance(self.payload, NoteOff)

    def is_control_change(self) -> bool:
        return isinstance(self.payload, ControlChange)

    def is_pitch_bend(self) -> bool:
        return isinstance(self.payload, PitchBend)

    def is_channel_aftertouch(self) -> bool:
        return isinstance(self.payload, ChannelAftertouch)

    def is_poly_aftertouch(self) -> bool:
        return isinstance(self.payload, PolyAftertouch)

    def is_program_change(self) -> bool:
        return isinstance(self.payload, ProgramChange)

    def is_sys_ex(self) -> bool:
        return isinstance(self.payload, SysEx)

    def as_(self, kind: Type[P]) -> Optional[P]:
        """Return the payload if it is of type ``kind``, else None."""
        return self.payload if isinstance(self.payload, kind) else None


class Buffer(list):
    """A list of events with time-ordering helpers."""

    def add_from(self, other: Iterable[Event]) -> None:
        self.extend(other)

    def sort_by_offset(self) -> None:
        """Stable in-place sort by ``sample_offset``."""
        stable_insertion_sort(self)


def convert_midi(data: bytes | Iterable[int], sample_offset: int = 0) -> Optional[Event]:
    """Decode raw MIDI bytes into an Event.

    Returns None for messages that do not map to a channel event
    (SysEx, system messages, undersized payloads, empty input).
    """
    raw = bytes(data)
    if not raw:
        return None

    status = raw[0] & 0xF0
    channel = raw[0] & 0x0F
    size = len(raw)

    if status == 0x90 and size >= 3:
        velocity = raw[2]
        if velocity == 0:
            return Event.note_off(channel, raw[1], 0.0, sample_offset)
        return Event.note_on(channel, raw[1], velocity / 127.0, sample_offset)
    if status == 0x80 and size >= 3:
        return Event.note_off(channel, raw[1], raw[2] / 127.0, sample_offset)
    if status == 0xB0 and size >= 3:
        return Event.control_change(channel, raw[1], raw[2] / 127.0, sample_offset)
    if status == 0xE0 and size >= 3:
        value = (raw[2] << 7) | raw[1]
        return Event.pitch_bend(channel, (value - 8192.0) / 8192.0, sample_offset)
    if status == 0xD0 and size >= 2:
        return Event.channel_aftertouch(channel, raw[1] / 127.0, sample_offset)
    if status == 0xA0 and size >= 3:
        return Event.poly_aftertouch(channel, raw[1], raw[2] / 127.0, sample_offset)
    if status == 0xC0 and size >= 2:
        return Event.program_change(channel, raw[1], sample_offset)

    return None


def to_string(event: Event) -> str:
    """Render an event as a single human-readable line."""
    ch = f" ch={event.channel}" if event.channel >= 0 else ""
    at = f" @{event.sample_offset}"

    match event.payload:
        case NoteOn(pitch=pitch, velocity=velocity):
            return f"NoteOn{ch} pitch={pitch} vel={velocity:.3f}{at}"
        case NoteOff(pitch=pitch, velocity=velocity):
            return f"NoteOff{ch} pitch={pitch} vel={velocity:.3f}{at}"
        case ControlChange(controller=controller, value=value):
            return f"CC{ch} #{controller} value={value:.3f}{at}"
        case PitchBend(value=value):
            return f"PitchBend{ch} value={value:.3f}{at}"
        case ChannelAftertouch(pressure=pressure):
            return f"ChannelAftertouch{ch} pressure={pressure:.3f}{at}"
        case PolyAftertouch(pitch=pitch, pressure=pressure):
            return f"PolyAftertouch{ch} pitch={pitch} pressure={pressure:.3f}{at}"
        case ProgramChange(program=program):
            return f"ProgramChange{ch} program={program}{at}"
        case SysEx(data=payload):
            hex_bytes = " ".join(f"{byte:02X}" for byte in payload)
            return f"SysEx [{hex_bytes}]{at}"
    raise TypeError(f"unknown MIDI payload: {event.payload!r}")