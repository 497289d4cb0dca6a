"""Input mapping for Bluetooth controllers emulated as Switch Pro controllers, with configuration, address, CRC-8, process monitoring, host override and service helpers."""

__version__ = "0.1.0"