"""Places queued MIDI events at sample offsets inside an audio block."""

from __future__ import annotations

import time
from typing import Callable, List

from .midi_info import MidiInputEvent


class MidiBlockSync:
    """Maps MIDI arrival times onto sample offsets of the current block.

    Events that arrive during one block are placed in the next: the window
    from the previous call's start to now is mapped onto
    ``[0, num_samples)``. The very first block puts everything at 0.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._buffer: List[MidiInputEvent] = []
        self._prev_block_start = 0.0
        self._has_prev_block = False

    def drain_for_block(self, midi, num_samples: int, sample_rate: int) -> None:
        """Pull queued events from ``midi`` and assign their offsets."""
        self._buffer.clear()

        if num_samples <= 0 or sample_rate <= 0:
            return

        now = self._clock()
        midi.drain_messages(self._buffer)

        if not self._has_prev_block:
            self._prev_block_start = now
            self._has_prev_block = True
            for item in self._buffer:
                item.event.sample_offset = 0
            return

        max_offset = num_samples - 1
        for item in self._buffer:
            delta = item.arrival - self._prev_block_start
            offset = int(delta * sample_rate)
            item.event.sample_offset = min(max(offset, 0), max_offset)

        self._prev_block_start = now

    def reset(self) -> None:
        """Forget the previous block start, e.g. after a stream restart."""
        self._buffer.clear()
        self._has_prev_block = False

    def events(self) -> List[MidiInputEvent]:
        return self._buffer

    def empty(self) -> bool:
        return not self._buffer