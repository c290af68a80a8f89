"""Timer-driven unlock flow for the private vault.

This is a cosmetic gate: no credential is checked. The gate moves from
idle to scanning on open, to success after ``scan_seconds`` and back to
idle (emitting the unlock event) after a further ``success_seconds``.
The clock is injectable so the flow can be driven without sleeping.
"""

from __future__ import annotations

import time
from typing import Callable

VAULT_IDLE = "idle"
VAULT_SCANNING = "scanning"
VAULT_SUCCESS = "success"

VAULT_STATES = (VAULT_IDLE, VAULT_SCANNING, VAULT_SUCCESS)


class VaultGate:
    def __init__(
        self,
        scan_seconds: float = 2.0,
        success_seconds: float = 0.8,
        clock: Callable[[], float] = time.time,
    ):
        self.scan_seconds = scan_seconds
        self.success_seconds = success_seconds
        self.clock = clock
        self.status = VAULT_IDLE
        self.entered_at: float | None = None
        self._unlock_listeners: list[Callable[[], None]] = []
        self._cancel_listeners: list[Callable[[], None]] = []

    def on_unlock(self, callback: Callable[[], None]) -> None:
        self._unlock_listeners.append(callback)

    def on_cancel(self, callback: Callable[[], None]) -> None:
        self._cancel_listeners.append(callback)

    def _enter(self, status: str, at: float | None) -> None:
        self.status = status
        self.entered_at = at

    def open(self) -> str:
        if self.status == VAULT_IDLE:
            self._enter(VAULT_SCANNING, self.clock())
        return self.status

    def poll(self) -> str:
        now = self.clock()
        if self.status == VAULT_SCANNING:
            scan_done = self.entered_at + self.scan_seconds
            if now < scan_done:
                return self.status
            self._enter(VAULT_SUCCESS, scan_done)

        if self.status == VAULT_SUCCESS:
            if now < self.entered_at + self.success_seconds:
                return self.status
            self._enter(VAULT_IDLE, None)
            for callback in self._unlock_listeners:
                callback()

        return self.status

    def cancel(self) -> str:
        self._enter(VAULT_IDLE, None)
        for callback in self._cancel_listeners:
            callback()
        return self.status

    def to_dict(self) -> dict:
        return {"status": self.status, "entered_at": self.entered_at}

    def restore(self, payload: dict | None) -> "VaultGate":
        payload = payload or {}
        status = payload.get("status")
        entered_at = payload.get("entered_at")
        if status not in VAULT_STATES or status == VAULT_IDLE or entered_at is None:
            self._enter(VAULT_IDLE, None)
        else:
            self._enter(status, float(entered_at))
        return self
