"""The Mission Control query service: version information and raw HCI access."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from typing import Protocol

from .address import BluetoothAddress

VERSION_STRING_SIZE = 64
DATE_STRING_SIZE = 32

_TAG_PATTERN = re.compile(r"v(\d+).(\d+).(\d+)")


def encode_version(tag: str) -> int:
    """Encode a release tag such as ``v1.2.3`` as 0xMMmmpp.

    Raises ValueError when the tag does not start with ``v`` and three
    numbers, or when a number does not fit in a byte.
    """
    match = _TAG_PATTERN.match(tag)
    if match is None:
        raise ValueError(f"not a release tag: {tag!r}")
    major, minor, patch = (int(part) for part in match.groups())
    for part in (major, minor, patch):
        if part > 0xFF:
            raise ValueError(f"version component does not fit in a byte: {part}")
    return (major << 16) | (minor << 8) | patch


@dataclass(frozen=True)
class BuildInfo:
    """Version number, build name and build date of the running module."""

    version: int
    build_name: str
    build_date: str

    @classmethod
    def from_tag(cls, tag: str, branch: str, commit: str, build_date: str) -> BuildInfo:
        """Build the information the way a release is stamped: tag-branch-commit."""
        safe_branch = re.sub(r"[^a-zA-Z0-9_-]", "_", branch)
        name = f"{tag.removeprefix('v')}-{safe_branch}-{commit}"
        return cls(encode_version(tag), name, build_date)


@dataclass(frozen=True)
class CustomEventInfo:
    """Reply to a custom Bluetooth driver request."""

    status: int = 0
    handle: int = 0
    data: bytes = field(default=b"")


class HciCommandError(OSError):
    """The controller answered a custom request with a failure status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"HCI request failed with status {status:#04x}")
        self.status = status


class CustomEventBackend(Protocol):
    """Issues custom requests to the Bluetooth driver and waits for their replies."""

    def request_hci_handle(self, address: BluetoothAddress) -> None: ...

    def request_hci_command(self, opcode: int, payload: bytes) -> None: ...

    def wait_custom_event(self) -> CustomEventInfo: ...


def _fixed_string(text: str, size: int) -> str:
    return text.encode("utf-8")[:size].decode("utf-8", errors="ignore")


class MissionControlService:
    """Answers queries about the module and forwards raw HCI requests."""

    def __init__(self, build: BuildInfo, backend: CustomEventBackend) -> None:
        self._build = build
        self._backend = backend
        self._lock = threading.Lock()

    def get_version(self) -> int:
        return self._build.version

    def get_build_version_string(self) -> str:
        """The build name, cut to the service's 64-byte field."""
        return _fixed_string(self._build.build_name, VERSION_STRING_SIZE)

    def get_build_date_string(self) -> str:
        """The build date, cut to the service's 32-byte field."""
        return _fixed_string(self._build.build_date, DATE_STRING_SIZE)

    def _wait_reply(self) -> CustomEventInfo:
        info = self._backend.wait_custom_event()
        if info.status != 0:
            raise HciCommandError(info.status)
        return info

    def get_hci_handle(self, address: BluetoothAddress) -> int:
        """Return the HCI connection handle of a connected device."""
        with self._lock:
            self._backend.request_hci_handle(address)
            return self._wait_reply().handle

    def send_hci_command(self, opcode: int, payload: bytes = b"") -> bytes:
        """Send a raw HCI command and return the data of its response."""
        if not 0 <= opcode <= 0xFFFF:
            raise ValueError(f"HCI opcode must fit in 16 bits: {opcode:#x}")
        with self._lock:
            self._backend.request_hci_command(opcode, bytes(payload))
            return bytes(self._wait_reply().data)