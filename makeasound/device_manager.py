"""Audio device enumeration and stream management."""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional

import numpy as np

from .device_info import (
    AudioCallbackInfo,
    AudioCallbackStatus,
    DeviceInfo,
    Flags,
    StreamConfig,
    StreamOptions,
    StreamParameters,
    pick_compatible_sample_rate,
)

DEFAULT_MAX_BLOCK_SIZE = 512

# Raw stream status bits reported by a backend for one block.
INPUT_OVERFLOW = 0x1
OUTPUT_UNDERFLOW = 0x2

Callback = Callable[[AudioCallbackInfo], None]
BackendCallback = Callable[
    [Optional[np.ndarray], Optional[np.ndarray], int, float, int], int
]


class Error(enum.Enum):
    """Kinds of failure an audio backend can report."""

    NO_ERROR = "no_error"
    WARNING = "warning"
    UNKNOWN_ERROR = "unknown_error"
    NO_DEVICES_FOUND = "no_devices_found"
    INVALID_DEVICE = "invalid_device"
    DEVICE_DISCONNECT = "device_disconnect"
    MEMORY_ERROR = "memory_error"
    INVALID_PARAMETER = "invalid_parameter"
    INVALID_USE = "invalid_use"
    DRIVER_ERROR = "driver_error"
    SYSTEM_ERROR = "system_error"
    THREAD_ERROR = "thread_error"


class AudioError(RuntimeError):
    """Raised when the audio backend reports an error."""

    def __init__(self, error: Error, message: str) -> None:
        super().__init__(message)
        self.error = error


class StreamFlag(enum.IntFlag):
    NONE = 0
    NON_INTERLEAVED = 0x1
    MINIMIZE_LATENCY = 0x2
    HOG_DEVICE = 0x4
    SCHEDULE_REAL_TIME = 0x8
    ALSA_USE_DEFAULT = 0x10
    JACK_DONT_CONNECT = 0x20


def stream_flags(flags: Flags) -> StreamFlag:
    """Combine the enabled options of ``flags`` into a bit set."""
    pairs = (
        (flags.non_interleaved, StreamFlag.NON_INTERLEAVED),
        (flags.minimize_latency, StreamFlag.MINIMIZE_LATENCY),
        (flags.hog_device, StreamFlag.HOG_DEVICE),
        (flags.schedule_real_time, StreamFlag.SCHEDULE_REAL_TIME),
        (flags.alsa_use_default, StreamFlag.ALSA_USE_DEFAULT),
        (flags.jack_dont_connect, StreamFlag.JACK_DONT_CONNECT),
    )
    result = StreamFlag.NONE
    for enabled, flag in pairs:
        if enabled:
            result |= flag
    return result


def _callback_status(status: int) -> AudioCallbackStatus:
    if status == OUTPUT_UNDERFLOW:
        return AudioCallbackStatus.OUTPUT_UNDERFLOW
    if status == INPUT_OVERFLOW:
        return AudioCallbackStatus.INPUT_OVERFLOW
    return AudioCallbackStatus.OK


def make_callback_info(
    output_buffer: Optional[np.ndarray],
    input_buffer: Optional[np.ndarray],
    num_samples: int,
    stream_time: float,
    status: int,
    sample_rate: int,
    latency: int,
    config: StreamConfig,
) -> AudioCallbackInfo:
    """Describe one block handed over by the backend."""
    return AudioCallbackInfo(
        num_inputs=config.input_channels(),
        num_outputs=config.output_channels(),
        output_buffer=output_buffer,
        input_buffer=input_buffer,
        num_samples=int(num_samples),
        stream_time=stream_time,
        status=_callback_status(status),
        sample_rate=int(sample_rate),
        max_block_size=config.max_block_size,
        latency=int(latency),
    )


@dataclass
class _Stream:
    output: Optional[StreamParameters]
    input: Optional[StreamParameters]
    sample_rate: int
    frames: int
    callback: BackendCallback


class AudioBackend:
    """An in-process audio backend over a fixed list of devices.

    Blocks are driven explicitly with :meth:`process`, which calls the
    stream callback with freshly zeroed non-interleaved float32 buffers.
    Subclasses connect the same interface to a real audio system.
    """

    DEFAULT_FRAMES = 256

    def __init__(self, devices: Iterable[DeviceInfo] = (), latency: int = 0) -> None:
        self.devices: List[DeviceInfo] = list(devices)
        self.latency = latency
        self.open_flags = StreamFlag.NONE
        self._stream: Optional[_Stream] = None
        self._running = False

    def get_devices(self) -> List[DeviceInfo]:
        return list(self.devices)

    def device_info(self, device_id: int) -> DeviceInfo:
        for device in self.devices:
            if device.id == device_id:
                return device
        raise AudioError(Error.INVALID_DEVICE, f"no audio device with id {device_id}")

    def _default_device(self, flag: str, channels: str) -> DeviceInfo:
        for device in self.devices:
            if getattr(device, flag):
                return device
        for device in self.devices:
            if getattr(device, channels) > 0:
                return device
        raise AudioError(Error.NO_DEVICES_FOUND, "no suitable audio device found")

    def default_input_device(self) -> DeviceInfo:
        return self._default_device("is_default_input", "input_channels")

    def default_output_device(self) -> DeviceInfo:
        return self._default_device("is_default_output", "output_channels")

    def _check_params(
        self, params: StreamParameters, is_input: bool, sample_rate: int
    ) -> None:
        device = self.device_info(params.device.id)
        kind = "input" if is_input else "output"
        available = device.input_channels if is_input else device.output_channels
        if (
            params.n_channels < 1
            or params.first_channel < 0
            or params.first_channel + params.n_channels > available
        ):
            raise AudioError(
                Error.INVALID_PARAMETER,
                f"device {device.id} cannot open {params.n_channels} {kind} "
                f"channel(s) from channel {params.first_channel}",
            )
        if device.sample_rates and sample_rate not in device.sample_rates:
            raise AudioError(
                Error.INVALID_PARAMETER,
                f"device {device.id} does not support {sample_rate} Hz",
            )

    def open_stream(
        self,
        output: Optional[StreamParameters],
        input_params: Optional[StreamParameters],
        sample_rate: int,
        frames: int,
        callback: BackendCallback,
        options: Optional[StreamOptions] = None,
    ) -> int:
        """Open a stream and return the block size actually used."""
        if self._stream is not None:
            raise AudioError(Error.INVALID_USE, "a stream is already open")
        if output is None and input_params is None:
            raise AudioError(Error.INVALID_USE, "neither input nor output was given")
        if output is not None:
            self._check_params(output, False, sample_rate)
        if input_params is not None:
            self._check_params(input_params, True, sample_rate)

        frames = frames if frames > 0 else self.DEFAULT_FRAMES
        self.open_flags = stream_flags(options.flags) if options else StreamFlag.NONE
        self._stream = _Stream(output, input_params, sample_rate, frames, callback)
        return frames

    def start_stream(self) -> None:
        if self._stream is None:
            raise AudioError(Error.INVALID_USE, "no stream is open")
        self._running = True

    def stop_stream(self) -> None:
        self._running = False

    def close_stream(self) -> None:
        self._running = False
        self._stream = None

    def is_stream_open(self) -> bool:
        return self._stream is not None

    def is_stream_running(self) -> bool:
        return self._running

    def stream_sample_rate(self) -> int:
        return self._stream.sample_rate if self._stream is not None else 0

    def stream_latency(self) -> int:
        return self.latency if self._stream is not None else 0

    def process(
        self,
        stream_time: float = 0.0,
        status: int = 0,
        input_data: Optional[Iterable[float]] = None,
    ) -> Optional[np.ndarray]:
        """Run one block through the callback and return the output buffer.

        A callback result of 1 or 2 stops the stream.
        """
        stream = self._stream
        if stream is None or not self._running:
            raise AudioError(Error.INVALID_USE, "the stream is not running")

        frames = stream.frames
        output = None
        if stream.output is not None:
            output = np.zeros(stream.output.n_channels * frames, dtype=np.float32)

        inputs = None
        if stream.input is not None:
            expected = stream.input.n_channels * frames
            if input_data is None:
                inputs = np.zeros(expected, dtype=np.float32)
            else:
                inputs = np.array(input_data, dtype=np.float32).ravel()
                if inputs.size != expected:
                    raise ValueError(
                        f"expected {expected} input samples, got {inputs.size}"
                    )

        code = stream.callback(output, inputs, frames, stream_time, status)
        if code in (1, 2):
            self._running = False
        return output


class DeviceManager:
    """Lists audio devices and runs one stream with a block callback."""

    def __init__(self, backend: Optional[AudioBackend] = None) -> None:
        self.backend = backend if backend is not None else AudioBackend()
        self._callback: Optional[Callback] = None
        self._config = StreamConfig()
        self._stream_config = StreamConfig()
        self._prev_info = AudioCallbackInfo()
        self._cached_sample_rate = 0
        self._cached_latency = 0

    def __enter__(self) -> "DeviceManager":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def config(self) -> StreamConfig:
        return self._config

    def get_devices(self) -> List[DeviceInfo]:
        return self.backend.get_devices()

    def get_default_input_device(self) -> DeviceInfo:
        return self.backend.default_input_device()

    def get_default_output_device(self) -> DeviceInfo:
        return self.backend.default_output_device()

    def get_default_config(self) -> StreamConfig:
        """Stereo-at-most default devices at a rate both support."""
        input_device = self.get_default_input_device()
        output_device = self.get_default_output_device()
        return StreamConfig(
            input=StreamParameters.for_device(input_device, True),
            output=StreamParameters.for_device(output_device, False),
            sample_rate=pick_compatible_sample_rate(output_device, input_device),
            max_block_size=DEFAULT_MAX_BLOCK_SIZE,
            options=StreamOptions(),
        )

    def set_config(self, config: StreamConfig) -> None:
        """Restart the stream with ``config``."""
        self.stop()
        self._config = config
        self._open_stream()

    def start(self, config: StreamConfig, callback: Callback) -> None:
        self._callback = callback
        self.set_config(config)

    def stop(self) -> None:
        if self.backend.is_stream_running():
            self.backend.stop_stream()
        if self.backend.is_stream_open():
            self.backend.close_stream()

    def get_stream_latency(self) -> int:
        return self.backend.stream_latency()

    def get_stream_sample_rate(self) -> int:
        return self.backend.stream_sample_rate()

    def close(self) -> None:
        self.stop()

    def _open_stream(self) -> int:
        if self._callback is None:
            raise RuntimeError("cannot open a stream without a callback")

        config = self._config
        frames = self.backend.open_stream(
            config.output,
            config.input,
            config.sample_rate,
            config.max_block_size,
            self._on_block,
            config.options,
        )
        self._stream_config = replace(config, max_block_size=frames)
        self._cached_sample_rate = self.backend.stream_sample_rate()
        self._cached_latency = self.backend.stream_latency()
        self.backend.start_stream()
        return frames

    def _on_block(
        self,
        output: Optional[np.ndarray],
        inputs: Optional[np.ndarray],
        frames: int,
        stream_time: float,
        status: int,
    ) -> int:
        info = make_callback_info(
            output,
            inputs,
            frames,
            stream_time,
            status,
            self._cached_sample_rate,
            self._cached_latency,
            self._stream_config,
        )
        if not info.same_format(self._prev_info):
            self._prev_info = replace(info)
            info.dirty = True

        assert self._callback is not None
        self._callback(info)
        return info.error_code