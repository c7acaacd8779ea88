"""Centralized audio device management.

This module provides a DeviceManager class that handles device
enumeration, name-to-index mapping and default device resolution.
"""

from typing import List, Dict, Optional, Tuple, Union
import sounddevice as sd


class DeviceManager:
    """Manages audio device lookups."""

    def __init__(self):
        """Initialize the device manager."""
        self._refresh_cache()

    def _refresh_cache(self):
        """Refresh the internal device cache."""
        self._devices = sd.query_devices()
        self._all_devices = []
        self._input_devices = []
        self._output_devices = []

        for i, dev in enumerate(self._devices):
            device_info = {
                "index": i,
                "name": dev.get("name", f"Device {i}"),
                "max_input_channels": dev.get("max_input_channels", 0),
                "max_output_channels": dev.get("max_output_channels", 0),
                "default_samplerate": dev.get("default_samplerate"),
                "hostapi": dev.get("hostapi"),
            }
            self._all_devices.append(device_info)

            if dev.get("max_input_channels", 0) > 0:
                self._input_devices.append(device_info)

            if dev.get("max_output_channels", 0) > 0:
                self._output_devices.append(device_info)

    def get_all_devices(self) -> List[Dict]:
        return self._all_devices.copy()

    def get_input_devices(self) -> List[Dict]:
        return self._input_devices.copy()

    def get_output_devices(self) -> List[Dict]:
        return self._output_devices.copy()

    def get_device_by_name(self, name: str, kind: str = "output") -> Optional[Dict]:
        """Get device info by name.

        Args:
            name: Device name to search for
            kind: 'input' or 'output'

        Returns:
            Device info dict or None if not found
        """
        devices = self._input_devices if kind == "input" else self._output_devices
        for dev in devices:
            if dev["name"] == name:
                return dev.copy()
        return None

    def get_device_index_by_name(
        self, name: str, kind: str = "output"
    ) -> Optional[int]:
        device = self.get_device_by_name(name, kind)
        return device["index"] if device else None

    def get_device_name_by_index(self, index: int) -> Optional[str]:
        for dev in self._all_devices:
            if dev["index"] == index:
                return dev["name"]
        return None

    def resolve_device(
        self, device: Optional[Union[int, str]], kind: str = "output"
    ) -> Optional[int]:
        """Turn a device given on the command line into an index.

        Args:
            device: Index, numeric string, device name or None
            kind: 'input' or 'output'

        Returns:
            Device index, or None for the system default

        Raises:
            ValueError: If it names no known device
        """
        if device is None:
            return None
        if isinstance(device, int):
            index = device
        elif device.strip().isdigit():
            index = int(device)
        else:
            index = self.get_device_index_by_name(device, kind)
            if index is None:
                raise ValueError(f"Unknown {kind} device: {device}")
            return index

        if self.get_device_name_by_index(index) is None:
            raise ValueError(f"Unknown {kind} device index: {index}")
        return index

    def get_default_device_indices(self) -> Tuple[Optional[int], Optional[int]]:
        """Get system default (input_idx, output_idx).

        sd.default.device holds -1 when no default was chosen. In that
        case PortAudio is asked for its default device of each kind and
        the result is matched against the device cache by name.

        Returns:
            Tuple of (input_index, output_index), may contain None values
        """
        in_idx: Optional[int] = None
        out_idx: Optional[int] = None
        try:
            default = sd.default.device
            if isinstance(default, (list, tuple)) and len(default) == 2:
                if default[0] is not None and default[0] >= 0:
                    in_idx = default[0]
                if default[1] is not None and default[1] >= 0:
                    out_idx = default[1]
        except (RuntimeError, AttributeError, TypeError):
            pass

        if in_idx is None:
            in_idx = self._query_default_index("input")
        if out_idx is None:
            out_idx = self._query_default_index("output")
        return in_idx, out_idx

    def _query_default_index(self, kind: str) -> Optional[int]:
        try:
            info = sd.query_devices(kind=kind)
        except (sd.PortAudioError, ValueError):
            return None
        name = info.get("name") if isinstance(info, dict) else None
        if name is None:
            return None
        return self.get_device_index_by_name(name, kind)

    @staticmethod
    def format_device_label(device: Dict) -> str:
        """Create a compact label like "3: Scarlett 2i2 (in=2, out=2)"."""
        idx = device.get("index", -1)
        name = device.get("name", f"Device {idx}")
        in_ch = device.get("max_input_channels", 0) or 0
        out_ch = device.get("max_output_channels", 0) or 0
        return f"{idx}: {name} (in={in_ch}, out={out_ch})"

    def describe_devices(self) -> List[str]:
        """Labels for every device, defaults marked with '*'."""
        in_idx, out_idx = self.get_default_device_indices()
        labels = []
        for dev in self._all_devices:
            marker = "*" if dev["index"] in (in_idx, out_idx) else " "
            labels.append(f"{marker} {self.format_device_label(dev)}")
        return labels


# Global instance for convenience
_device_manager = None


def get_device_manager() -> DeviceManager:
    """Get the global DeviceManager instance."""
    global _device_manager
    if _device_manager is None:
        _device_manager = DeviceManager()
    return _device_manager
