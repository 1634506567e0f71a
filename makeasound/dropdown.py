"""Plain data for device, rate, block-size and MIDI-port pickers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .device_info import DeviceInfo
from .midi_info import MidiPortInfo


@dataclass
class DropdownItem:
    id: int = 0
    label: str = ""


@dataclass
class DropdownInfo:
    items: List[DropdownItem] = field(default_factory=list)
    current_id: int = 0


@dataclass
class ToggleListItem:
    id: int = 0
    label: str = ""
    selected: bool = False


@dataclass
class ToggleListInfo:
    items: List[ToggleListItem] = field(default_factory=list)


def _device_dropdown(
    devices: Iterable[DeviceInfo], current_id: int, want_output: bool
) -> DropdownInfo:
    items = [
        DropdownItem(device.id, device.name)
        for device in devices
        if (device.output_channels if want_output else device.input_channels) != 0
    ]
    return DropdownInfo(items=items, current_id=current_id)


def make_output_device_dropdown(
    devices: Iterable[DeviceInfo], current_id: int
) -> DropdownInfo:
    """Devices that have output channels."""
    return _device_dropdown(devices, current_id, True)


def make_input_device_dropdown(
    devices: Iterable[DeviceInfo], current_id: int
) -> DropdownInfo:
    """Devices that have input channels."""
    return _device_dropdown(devices, current_id, False)


def make_sample_rate_dropdown(device: DeviceInfo, current_rate: int) -> DropdownInfo:
    items = [DropdownItem(rate, f"{rate} Hz") for rate in device.sample_rates]
    return DropdownInfo(items=items, current_id=current_rate)


def make_block_size_dropdown(sizes: Iterable[int], current_size: int) -> DropdownInfo:
    items = [DropdownItem(size, str(size)) for size in sizes]
    return DropdownInfo(items=items, current_id=current_size)


def make_midi_port_toggle_list(
    ports: Iterable[MidiPortInfo], open_port_ids: Iterable[int]
) -> ToggleListInfo:
    """One toggle per port, selected where the port is open."""
    open_ids = set(open_port_ids)
    items = [ToggleListItem(port.id, port.name, port.id in open_ids) for port in ports]
    return ToggleListInfo(items=items)