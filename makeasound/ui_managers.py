"""Picker data built from live device and MIDI managers."""

from __future__ import annotations

from .device_info import get_supported_block_sizes
from .device_manager import DeviceManager
from .dropdown import (
    DropdownInfo,
    ToggleListInfo,
    make_block_size_dropdown,
    make_input_device_dropdown,
    make_midi_port_toggle_list,
    make_output_device_dropdown,
    make_sample_rate_dropdown,
)
from .midi_manager import MidiManager


class UIDeviceManager:
    """Builds dropdowns from the devices a DeviceManager reports."""

    def __init__(self, manager: DeviceManager) -> None:
        self._manager = manager

    def make_output_device_dropdown(self, current_id: int) -> DropdownInfo:
        return make_output_device_dropdown(self._manager.get_devices(), current_id)

    def make_input_device_dropdown(self, current_id: int) -> DropdownInfo:
        return make_input_device_dropdown(self._manager.get_devices(), current_id)

    def make_sample_rate_dropdown(
        self, current_device_id: int, current_rate: int
    ) -> DropdownInfo:
        """Rates of the given device; empty if the device is not present."""
        for device in self._manager.get_devices():
            if device.id == current_device_id:
                return make_sample_rate_dropdown(device, current_rate)
        return DropdownInfo(current_id=current_rate)

    def make_block_size_dropdown(
        self, current_device_id: int, current_size: int
    ) -> DropdownInfo:
        return make_block_size_dropdown(
            get_supported_block_sizes(current_device_id), current_size
        )


class UIMidiManager:
    """Builds the MIDI input toggle list from a MidiManager."""

    def __init__(self, manager: MidiManager) -> None:
        self._manager = manager

    def make_input_port_toggle_list(self) -> ToggleListInfo:
        return make_midi_port_toggle_list(
            self._manager.get_input_ports(), self._manager.get_open_input_ports()
        )