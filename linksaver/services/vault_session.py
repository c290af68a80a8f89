"""Keeps the vault gate and the unlocked flag in the Flask session."""

from __future__ import annotations

from flask import current_app, session

from linksaver.services.vault import VaultGate

GATE_KEY = "vault_gate"
UNLOCKED_KEY = "vault_unlocked"


def vault_unlocked() -> bool:
    return bool(session.get(UNLOCKED_KEY))


def lock_vault() -> None:
    session.pop(UNLOCKED_KEY, None)
    session.pop(GATE_KEY, None)


def _unlock() -> None:
    session[UNLOCKED_KEY] = True
    current_app.logger.info("Vault unlocked for this session")


def load_gate() -> VaultGate:
    gate = VaultGate(
        scan_seconds=float(current_app.config["VAULT_SCAN_SECONDS"]),
        success_seconds=float(current_app.config["VAULT_SUCCESS_SECONDS"]),
    )
    gate.restore(session.get(GATE_KEY))
    gate.on_unlock(_unlock)
    return gate


def save_gate(gate: VaultGate) -> None:
    session[GATE_KEY] = gate.to_dict()


def open_vault() -> str:
    gate = load_gate()
    gate.open()
    status = gate.poll()
    save_gate(gate)
    return status


def poll_vault() -> str:
    gate = load_gate()
    status = gate.poll()
    save_gate(gate)
    return status


def cancel_vault() -> str:
    gate = load_gate()
    status = gate.cancel()
    save_gate(gate)
    return status
