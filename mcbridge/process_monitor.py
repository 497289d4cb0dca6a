"""Tracking of which application is currently running."""

from __future__ import annotations

import threading
from collections.abc import Callable

INVALID_PROGRAM_ID = 0
HOME_MENU_PROGRAM_ID = 0x0100000000001000


class ProcessNotFoundError(LookupError):
    """Raised by a query when no application process is running."""


class ProcessMonitor:
    """Notices when the running application changes.

    ``query`` returns the program id of the running application, or raises
    ProcessNotFoundError when none runs, which counts as the home menu.
    """

    def __init__(self, query: Callable[[], int]) -> None:
        self._query = query
        self._current = INVALID_PROGRAM_ID
        self._lock = threading.Lock()
        self._switched = threading.Event()

    @property
    def current_program_id(self) -> int:
        with self._lock:
            return self._current

    def _current_application(self) -> int:
        try:
            return self._query()
        except ProcessNotFoundError:
            return HOME_MENU_PROGRAM_ID

    def check_for_process_switch(self) -> bool:
        """Query the running application; return True and signal if it changed.

        Any other failure of the query leaves the state untouched.
        """
        try:
            program_id = self._current_application()
        except Exception:
            return False
        with self._lock:
            if program_id == self._current:
                return False
            self._current = program_id
        self._switched.set()
        return True

    def wait_for_switch(self, timeout: float | None = None) -> bool:
        """Wait for a switch signal and consume it; False on timeout."""
        signalled = self._switched.wait(timeout)
        if signalled:
            self._switched.clear()
        return signalled