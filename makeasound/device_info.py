"""Audio device descriptions, stream configuration and callback data."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

FALLBACK_SAMPLE_RATE = 44100
MIN_BLOCK_SIZE = 64
MAX_BLOCK_SIZE = 2048


@dataclass
class DeviceInfo:
    """What the audio backend reports about one device."""

    id: int = 0
    name: str = ""
    output_channels: int = 0
    input_channels: int = 0
    duplex_channels: int = 0
    is_default_output: bool = False
    is_default_input: bool = False
    sample_rates: List[int] = field(default_factory=list)
    current_sample_rate: int = 0
    preferred_sample_rate: int = 0


def get_default_num_channels(info: DeviceInfo, is_input: bool) -> int:
    """Channel count to open by default: at most stereo."""
    channels = info.input_channels if is_input else info.output_channels
    return min(2, channels)


def device_supports_sample_rate(device: DeviceInfo, rate: int) -> bool:
    return rate in device.sample_rates


def pick_compatible_sample_rate(output: DeviceInfo, input_device: DeviceInfo) -> int:
    """Pick a sample rate both devices can drive.

    Prefers the output's preferred rate, then the input's preferred rate,
    then the highest rate both support, and falls back to what the output
    alone offers when the two have nothing in common.
    """

    def is_common(rate: int) -> bool:
        return device_supports_sample_rate(output, rate) and device_supports_sample_rate(
            input_device, rate
        )

    if output.preferred_sample_rate > 0 and is_common(output.preferred_sample_rate):
        return output.preferred_sample_rate

    if input_device.preferred_sample_rate > 0 and is_common(
        input_device.preferred_sample_rate
    ):
        return input_device.preferred_sample_rate

    common = [rate for rate in output.sample_rates if rate > 0 and is_common(rate)]
    if common:
        return max(common)

    if output.preferred_sample_rate > 0:
        return output.preferred_sample_rate

    if output.sample_rates:
        return output.sample_rates[0]

    return FALLBACK_SAMPLE_RATE


@dataclass
class StreamParameters:
    """One direction of a stream: which device and which channels."""

    device: DeviceInfo = field(default_factory=DeviceInfo)
    n_channels: int = 0
    first_channel: int = 0

    @classmethod
    def for_device(
        cls, device: DeviceInfo, is_input: bool = False, num_channels: int = -1
    ) -> "StreamParameters":
        """Parameters for ``device``; a negative count picks the default."""
        if num_channels < 0:
            num_channels = get_default_num_channels(device, is_input)
        return cls(device=device, n_channels=num_channels)


@dataclass
class Flags:
    non_interleaved: bool = True
    minimize_latency: bool = False
    hog_device: bool = False
    schedule_real_time: bool = False
    alsa_use_default: bool = False
    jack_dont_connect: bool = False


@dataclass
class StreamOptions:
    flags: Flags = field(default_factory=Flags)
    number_of_buffers: int = 0
    stream_name: str = ""
    priority: int = 0


class AudioCallbackStatus(enum.Enum):
    OK = "ok"
    INPUT_OVERFLOW = "input_overflow"
    OUTPUT_UNDERFLOW = "output_underflow"


def get_num_channels(params: Optional[StreamParameters]) -> int:
    """Channel count of an optional stream direction; 0 when absent."""
    return params.n_channels if params is not None else 0


@dataclass
class StreamConfig:
    """Everything needed to open a stream."""

    input: Optional[StreamParameters] = None
    output: Optional[StreamParameters] = None
    sample_rate: int = 0
    max_block_size: int = 0
    options: Optional[StreamOptions] = None

    def input_channels(self) -> int:
        return get_num_channels(self.input)

    def output_channels(self) -> int:
        return get_num_channels(self.output)


@dataclass(eq=False)
class AudioCallbackInfo:
    """Data handed to the audio callback for one block.

    Buffers are non-interleaved float arrays: channel ``c`` occupies
    ``num_samples`` consecutive samples starting at ``c * num_samples``.
    """

    num_inputs: int = 0
    num_outputs: int = 0
    output_buffer: Optional[np.ndarray] = None
    input_buffer: Optional[np.ndarray] = None
    num_samples: int = 0
    stream_time: float = 0.0
    status: AudioCallbackStatus = AudioCallbackStatus.OK
    sample_rate: int = 0
    max_block_size: int = 0
    latency: int = 0
    dirty: bool = False
    error_code: int = 0

    def _channel(
        self, buffer: Optional[np.ndarray], count: int, channel: int, kind: str
    ) -> np.ndarray:
        if buffer is None:
            raise ValueError(f"no {kind} buffer attached")
        if not 0 <= channel < count:
            raise IndexError(f"{kind} channel {channel} out of range 0..{count - 1}")
        start = channel * self.num_samples
        return buffer[start : start + self.num_samples]

    def get_input(self, channel: int) -> np.ndarray:
        """Read-only view of one input channel."""
        view = self._channel(self.input_buffer, self.num_inputs, channel, "input")
        view.flags.writeable = False
        return view

    def get_output(self, channel: int) -> np.ndarray:
        """Writable view of one output channel."""
        return self._channel(self.output_buffer, self.num_outputs, channel, "output")

    def interleaved_inputs(self) -> np.ndarray:
        """Read-only view of all input samples."""
        if self.input_buffer is None:
            raise ValueError("no input buffer attached")
        view = self.input_buffer[: self.num_inputs * self.num_samples]
        view.flags.writeable = False
        return view

    def interleaved_outputs(self) -> np.ndarray:
        """Writable view of all output samples."""
        if self.output_buffer is None:
            raise ValueError("no output buffer attached")
        return self.output_buffer[: self.num_outputs * self.num_samples]

    def same_format(self, other: "AudioCallbackInfo") -> bool:
        """True when channel counts, sample rate and block size all match."""
        return (
            self.num_inputs == other.num_inputs
            and self.num_outputs == other.num_outputs
            and self.sample_rate == other.sample_rate
            and self.max_block_size == other.max_block_size
        )


def get_supported_block_sizes(device_id: int) -> List[int]:
    """Block sizes a device can run: powers of two from 64 to 2048."""
    del device_id  # no per-device query is available here
    sizes = []
    size = MIN_BLOCK_SIZE
    while size <= MAX_BLOCK_SIZE:
        sizes.append(size)
        size *= 2
    return sizes