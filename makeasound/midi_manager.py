"""MIDI port enumeration, input queues and output sending."""

from __future__ import annotations

import threading
import time
from typing import Callable, Dict, Iterable, List, Optional, Union

from .midi import convert_midi
from .midi_info import MidiInputEvent, MidiMessage, MidiPortInfo

MidiInputCallback = Callable[[MidiMessage], None]
Clock = Callable[[], float]

QUEUE_RESERVE = 256


class InputPort:
    """One open input port.

    With a callback, every incoming message is handed to it straight away.
    Without one, messages are decoded into typed events and queued until
    they are drained.
    """

    def __init__(
        self,
        port_id: int,
        callback: Optional[MidiInputCallback] = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.port_id = port_id
        self.callback = callback
        self.lock = threading.Lock()
        self.queue: List[MidiInputEvent] = []
        self._clock = clock

    def deliver(self, timestamp: float, data: Union[bytes, Iterable[int]]) -> None:
        """Accept one message from the backend."""
        arrival = self._clock()
        raw = bytes(data)

        if self.callback is not None:
            self.callback(MidiMessage(timestamp=timestamp, data=raw))
            return

        typed = convert_midi(raw)
        if typed is None:
            return

        event = MidiInputEvent(port_id=self.port_id, event=typed, arrival=arrival)
        with self.lock:
            self.queue.append(event)

    def _take(self) -> List[MidiInputEvent]:
        """Take all queued events, or none if the queue is busy."""
        if not self.lock.acquire(blocking=False):
            return []
        try:
            taken = self.queue
            self.queue = []
            return taken
        finally:
            self.lock.release()


class MidiBackend:
    """An in-process MIDI backend with named ports.

    Incoming messages are fed with :meth:`inject`; messages sent to the
    open output are recorded in :attr:`sent` as ``(port_id, bytes)``.
    Subclasses connect the same interface to real MIDI hardware.
    """

    def __init__(
        self, input_ports: Iterable[str] = (), output_ports: Iterable[str] = ()
    ) -> None:
        self.input_port_names: List[str] = list(input_ports)
        self.output_port_names: List[str] = list(output_ports)
        self.sent: List[tuple[int, bytes]] = []
        self._listeners: Dict[int, List[InputPort]] = {}
        self._output: Optional[int] = None
        self._lock = threading.Lock()

    def input_ports(self) -> List[MidiPortInfo]:
        return [MidiPortInfo(i, name) for i, name in enumerate(self.input_port_names)]

    def output_ports(self) -> List[MidiPortInfo]:
        return [MidiPortInfo(i, name) for i, name in enumerate(self.output_port_names)]

    def connect_input(self, port_id: int, port: InputPort) -> None:
        if not 0 <= port_id < len(self.input_port_names):
            raise ValueError(f"no MIDI input port {port_id}")
        with self._lock:
            self._listeners.setdefault(port_id, []).append(port)

    def disconnect_input(self, port: InputPort) -> None:
        with self._lock:
            listeners = self._listeners.get(port.port_id, [])
            if port in listeners:
                listeners.remove(port)

    def inject(
        self, port_id: int, data: Union[bytes, Iterable[int]], timestamp: float = 0.0
    ) -> None:
        """Deliver a message as if it had arrived on input ``port_id``."""
        with self._lock:
            listeners = list(self._listeners.get(port_id, []))
        raw = bytes(data)
        for port in listeners:
            port.deliver(timestamp, raw)

    def open_output(self, port_id: int) -> None:
        if not 0 <= port_id < len(self.output_port_names):
            raise ValueError(f"no MIDI output port {port_id}")
        self._output = port_id

    def close_output(self) -> None:
        self._output = None

    def is_output_open(self) -> bool:
        return self._output is not None

    def send(self, data: bytes) -> None:
        if self._output is None:
            raise RuntimeError("no MIDI output port is open")
        self.sent.append((self._output, bytes(data)))


class MidiManager:
    """Opens MIDI inputs and one output on a backend."""

    def __init__(
        self, backend: Optional[MidiBackend] = None, clock: Clock = time.monotonic
    ) -> None:
        self.backend = backend if backend is not None else MidiBackend()
        self._clock = clock
        self._inputs: List[InputPort] = []

    def __enter__(self) -> "MidiManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_input_ports(self) -> List[MidiPortInfo]:
        return self.backend.input_ports()

    def get_output_ports(self) -> List[MidiPortInfo]:
        return self.backend.output_ports()

    def open_input(
        self, port_id: int, callback: Optional[MidiInputCallback] = None
    ) -> None:
        """Open an input, replacing any earlier opening of the same port.

        Without a callback the port runs in queue mode and its events are
        collected by :meth:`drain_messages`.
        """
        self.close_input(port_id)
        port = InputPort(port_id, callback, self._clock)
        self.backend.connect_input(port_id, port)
        self._inputs.append(port)

    def close_input(self, port_id: int) -> None:
        for port in [p for p in self._inputs if p.port_id == port_id]:
            self.backend.disconnect_input(port)
            self._inputs.remove(port)

    def close_all_inputs(self) -> None:
        for port in self._inputs:
            self.backend.disconnect_input(port)
        self._inputs.clear()

    def is_input_open(self, port_id: int) -> bool:
        return any(p.port_id == port_id for p in self._inputs)

    def get_open_input_ports(self) -> List[int]:
        return [p.port_id for p in self._inputs]

    def drain_messages(
        self, out: Optional[List[MidiInputEvent]] = None
    ) -> List[MidiInputEvent]:
        """Collect queued events from queue-mode inputs.

        Events are appended to ``out`` (a new list if omitted), which is
        returned. A port whose queue is busy is skipped until the next call.
        """
        if out is None:
            out = []
        for port in tuple(self._inputs):
            if port.callback is not None:
                continue
            out.extend(port._take())
        return out

    def open_output(self, port_id: int) -> None:
        self.close_output()
        self.backend.open_output(port_id)

    def close_output(self) -> None:
        if self.backend.is_output_open():
            self.backend.close_output()

    def is_output_open(self) -> bool:
        return self.backend.is_output_open()

    def send_message(self, message: Union[MidiMessage, bytes, Iterable[int]]) -> None:
        """Send a message or raw bytes; an empty MidiMessage is ignored."""
        if isinstance(message, MidiMessage):
            if not message.data:
                return
            self.backend.send(message.data)
            return
        self.backend.send(bytes(message))

    def close(self) -> None:
        self.close_all_inputs()
        self.close_output()