"""Per-instruction input state and read-only snapshots of it."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from .idl import IdlDocument


@dataclass
class InstructionState:
    """Live form values for one instruction."""

    arg_values: dict[str, Any] = field(default_factory=dict)
    accounts: dict[str, str] = field(default_factory=dict)
    signer_keypairs: dict[str, Any] = field(default_factory=dict)


def _frozen(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType(copy.deepcopy(dict(mapping)))


@dataclass(frozen=True)
class InstructionSnapshot:
    """Read-only view of one instruction. Signer entries are copied by reference."""

    arg_values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    accounts: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    signer_keypairs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def of(
        cls,
        arg_values: Mapping[str, Any] | None = None,
        accounts: Mapping[str, str] | None = None,
        signer_keypairs: Mapping[str, Any] | None = None,
    ) -> "InstructionSnapshot":
        return cls(
            arg_values=_frozen(arg_values or {}),
            accounts=_frozen(accounts or {}),
            signer_keypairs=MappingProxyType(dict(signer_keypairs or {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "argValues": copy.deepcopy(dict(self.arg_values)),
            "accounts": dict(self.accounts),
            "signerKeypairs": dict(self.signer_keypairs),
        }


@dataclass(frozen=True)
class StateSnapshot:
    """Point-in-time copy of every instruction's state.

    Nothing here aliases the store it came from, so a snapshot handed to the
    share codec stays valid however the store changes afterwards.
    """

    instructions: Mapping[str, InstructionSnapshot] = field(default_factory=lambda: MappingProxyType({}))
    active_instruction: str | None = None
    idl: IdlDocument | None = None
    cluster: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeInstruction": self.active_instruction,
            "instructions": {name: ix.to_dict() for name, ix in self.instructions.items()},
        }


class InstructionStore:
    """Session-owned accumulator of instruction inputs.

    All upserts create the instruction's state on first use. Nothing is
    validated here; instruction names are opaque strings.
    """

    def __init__(self, idl: IdlDocument | None = None, cluster: str | None = None) -> None:
        self._states: dict[str, InstructionState] = {}
        self.active_instruction: str | None = None
        self.idl = idl
        self.cluster = cluster

    def _ensure(self, name: str) -> InstructionState:
        state = self._states.get(name)
        if state is None:
            state = InstructionState()
            self._states[name] = state
        return state

    def set_idl(self, idl: IdlDocument | None) -> None:
        self.idl = idl

    def set_cluster(self, cluster: str | None) -> None:
        self.cluster = cluster

    def set_active_instruction(self, name: str) -> None:
        self._ensure(name)
        self.active_instruction = name

    def set_arg_value(self, instruction: str, arg_name: str, value: Any) -> None:
        self._ensure(instruction).arg_values[arg_name] = value

    def set_account(self, instruction: str, account_name: str, address: str) -> None:
        self._ensure(instruction).accounts[account_name] = address

    def set_signer_keypair(self, instruction: str, signer_name: str, key_material: Any) -> None:
        self._ensure(instruction).signer_keypairs[signer_name] = key_material

    def get_instruction_state(self, name: str) -> InstructionState:
        """Return a copy of the named state, or an empty one. Never creates state."""
        state = self._states.get(name)
        if state is None:
            return InstructionState()
        return InstructionState(
            arg_values=copy.deepcopy(state.arg_values),
            accounts=dict(state.accounts),
            signer_keypairs=dict(state.signer_keypairs),
        )

    def instruction_names(self) -> list[str]:
        return list(self._states)

    def clear_instruction(self, name: str) -> None:
        self._states.pop(name, None)
        if self.active_instruction == name:
            self.active_instruction = None

    def clear_all(self) -> None:
        self._states.clear()
        self.active_instruction = None

    def snapshot(self) -> StateSnapshot:
        return StateSnapshot(
            instructions=MappingProxyType(
                {
                    name: InstructionSnapshot.of(s.arg_values, s.accounts, s.signer_keypairs)
                    for name, s in self._states.items()
                }
            ),
            active_instruction=self.active_instruction,
            idl=self.idl,
            cluster=self.cluster,
        )

    def apply_snapshot(self, snapshot: StateSnapshot) -> None:
        """Replace the store contents with a (usually decoded) snapshot.

        Signer key material is never restored; every instruction starts with
        an empty signer map and must be re-prompted.
        """
        self._states = {
            name: InstructionState(
                arg_values=copy.deepcopy(dict(ix.arg_values)),
                accounts=dict(ix.accounts),
            )
            for name, ix in snapshot.instructions.items()
        }
        if snapshot.idl is not None:
            self.idl = snapshot.idl
        if snapshot.cluster:
            self.cluster = snapshot.cluster
        self.active_instruction = None
        if snapshot.active_instruction:
            self.set_active_instruction(snapshot.active_instruction)


def build_execute_request(program_id: str, instruction: str, state: InstructionState) -> dict[str, Any]:
    """Shape an instruction's state as an execute request body.

    Signer material stays out of the body; the caller signs separately.
    """
    return {
        "programId": program_id,
        "instruction": instruction,
        "accounts": dict(state.accounts),
        "data": copy.deepcopy(state.arg_values),
    }
