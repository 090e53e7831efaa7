"""Gate registry using the Singleton pattern."""

from __future__ import annotations

from .errors import UnknownGateKind
from .gates import (
    GateDefinition, GateKind, _const,
    X_MATRIX, H_MATRIX, CNOT_MATRIX,
    rx_matrix, ry_matrix, rz_matrix, pswap_matrix,
)


class GateRegistry:
    """Singleton registry mapping gate kinds to GateDefinition objects."""

    _instance: GateRegistry | None = None

    def __init__(self):
        self._gates: dict[GateKind, GateDefinition] = {}

    @classmethod
    def instance(cls) -> GateRegistry:
        if cls._instance is None:
            cls._instance = cls()
            cls._instance._register_builtins()
        return cls._instance

    def _register_builtins(self):
        # Single-qubit rotations
        self.register(GateDefinition(
            kind=GateKind.RX, num_qubits=1, num_params=1, matrix_func=rx_matrix))
        self.register(GateDefinition(
            kind=GateKind.RY, num_qubits=1, num_params=1, matrix_func=ry_matrix))
        self.register(GateDefinition(
            kind=GateKind.RZ, num_qubits=1, num_params=1, matrix_func=rz_matrix))

        # Single-qubit fixed gates
        self.register(GateDefinition(
            kind=GateKind.X, num_qubits=1, num_params=0,
            matrix_func=_const(X_MATRIX)))
        self.register(GateDefinition(
            kind=GateKind.H, num_qubits=1, num_params=0,
            matrix_func=_const(H_MATRIX)))

        # Two-qubit gates
        self.register(GateDefinition(
            kind=GateKind.CNOT, num_qubits=2, num_params=0,
            matrix_func=_const(CNOT_MATRIX)))
        self.register(GateDefinition(
            kind=GateKind.PSWAP, num_qubits=2, num_params=1,
            matrix_func=pswap_matrix))

    def register(self, gate_def: GateDefinition):
        self._gates[gate_def.kind] = gate_def

    def get(self, kind: GateKind | str) -> GateDefinition:
        kind = GateKind.parse(kind)
        if kind not in self._gates:
            raise UnknownGateKind(f"Gate '{kind.value}' not found in registry")
        return self._gates[kind]
