"""Overriding the Bluetooth adapter's host address and name from configuration."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from .address import BluetoothAddress


class PropertyKind(Enum):
    NAME = "name"
    ADDRESS = "address"


@dataclass(frozen=True)
class AdapterProperty:
    """A property written to the Bluetooth adapter.

    ``legacy`` selects the older property interface of the driver.
    """

    kind: PropertyKind
    data: bytes
    legacy: bool = False

    @property
    def size(self) -> int:
        return len(self.data)


class Adapter(Protocol):
    def set_property(self, prop: AdapterProperty) -> None: ...


def override_host_address(adapter: Adapter, address: BluetoothAddress, legacy: bool = False) -> AdapterProperty:
    """Set the adapter's host address; errors from the adapter propagate."""
    prop = AdapterProperty(PropertyKind.ADDRESS, bytes(address), legacy)
    adapter.set_property(prop)
    return prop


def override_host_name(adapter: Adapter, name: str, legacy: bool = False) -> AdapterProperty:
    """Set the adapter's host name; errors from the adapter propagate."""
    prop = AdapterProperty(PropertyKind.NAME, name.encode("utf-8"), legacy)
    adapter.set_property(prop)
    return prop


def apply_host_overrides(adapter: Adapter, config: Any, legacy: bool = False) -> list[AdapterProperty]:
    """Apply the configured host address and name, skipping unset ones.

    An all-zero address and an empty name count as unset. Returns the
    properties written, address first.
    """
    applied = []
    bluetooth = config.bluetooth
    address = getattr(bluetooth, "host_address", None)
    if address is not None:
        if not isinstance(address, BluetoothAddress):
            address = BluetoothAddress(bytes(address))
        if not address.is_null():
            applied.append(override_host_address(adapter, address, legacy))
    name = getattr(bluetooth, "host_name", "") or ""
    if name:
        applied.append(override_host_name(adapter, name, legacy))
    return applied