"""Simulator facade - the operations callers use on a StateRegister."""

from __future__ import annotations

import logging

import numpy as np

from .errors import UnknownGateKind
from .expectation import ExpectationEstimator, ExpectationValues
from .gate_registry import GateRegistry
from .gates import Gate, GateKind
from .measurement import MeasurementOutcome, RandomSource
from .register import StateRegister

logger = logging.getLogger(__name__)


class Simulator:
    """Creates registers and applies gates, measurements and estimators to them.

    The simulator keeps no state of its own besides the gate registry, the
    qubit ceiling for new registers and a default random generator. A
    register must only be driven from one thread of control at a time.
    """

    def __init__(self, max_qubits: int = StateRegister.DEFAULT_MAX_QUBITS,
                 seed: int | None = None,
                 rng: RandomSource | None = None):
        """
        Args:
            max_qubits: Ceiling for registers created by ``create_register``.
            seed: Seed for the default generator (ignored if ``rng`` given).
            rng: Random source used by measurements unless one is passed
                per call.
        """
        self._gate_registry = GateRegistry.instance()
        self._max_qubits = max_qubits
        self._rng = rng if rng is not None else np.random.default_rng(seed)

    @property
    def gate_registry(self) -> GateRegistry:
        return self._gate_registry

    def create_register(self) -> StateRegister:
        return StateRegister(max_qubits=self._max_qubits)

    def insert_qubit(self, register: StateRegister) -> int:
        return register.insert_qubit()

    # ---- Gates -----------------------------------------------------------

    def _resolve(self, gate: Gate | GateKind | str, arity: int) -> np.ndarray:
        if not isinstance(gate, Gate):
            gate = Gate(gate)
        gate_def = self._gate_registry.get(gate.kind)
        if gate_def.num_qubits != arity:
            raise UnknownGateKind(
                f"{gate.kind.value} is a {gate_def.num_qubits}-qubit gate, "
                f"not a {arity}-qubit gate")
        return gate.matrix(self._gate_registry)

    def apply_gate(self, register: StateRegister, qubit: int,
                   gate: Gate | GateKind | str):
        """Applies a one-qubit gate at a physical position."""
        matrix = self._resolve(gate, 1)
        register.apply_gate(qubit, matrix)
        logger.debug("Applied %r to qubit %s", gate, qubit)

    def apply_two_qubit_gate(self, register: StateRegister, qubit1: int, qubit2: int,
                             gate: Gate | GateKind | str):
        """Applies a two-qubit gate; ``qubit1`` is the high bit of the matrix basis."""
        matrix = self._resolve(gate, 2)
        register.apply_two_qubit_gate(qubit1, qubit2, matrix)
        logger.debug("Applied %r to qubits (%s, %s)", gate, qubit1, qubit2)

    def rx(self, register: StateRegister, qubit: int, theta: float):
        self.apply_gate(register, qubit, Gate(GateKind.RX, theta))

    def ry(self, register: StateRegister, qubit: int, theta: float):
        self.apply_gate(register, qubit, Gate(GateKind.RY, theta))

    def rz(self, register: StateRegister, qubit: int, theta: float):
        self.apply_gate(register, qubit, Gate(GateKind.RZ, theta))

    def x(self, register: StateRegister, qubit: int):
        self.apply_gate(register, qubit, Gate(GateKind.X))

    def h(self, register: StateRegister, qubit: int):
        self.apply_gate(register, qubit, Gate(GateKind.H))

    def cnot(self, register: StateRegister, control: int, target: int):
        self.apply_two_qubit_gate(register, control, target, Gate(GateKind.CNOT))

    def pswap(self, register: StateRegister, qubit1: int, qubit2: int, theta: float):
        self.apply_two_qubit_gate(register, qubit1, qubit2, Gate(GateKind.PSWAP, theta))

    # ---- Measurement and readout -----------------------------------------

    def measure_and_remove_qubit(self, register: StateRegister, qubit: int,
                                 rng: RandomSource | None = None) -> MeasurementOutcome:
        """Measures and removes a qubit.

        Every physical index above ``qubit`` drops by one afterwards; callers
        holding logical-to-physical tables must update them
        (see ``QubitIndexMap.on_removed``).
        """
        return register.measure_and_remove_qubit(qubit, rng or self._rng)

    def calculate_expectation_values(self, register: StateRegister) -> list[ExpectationValues]:
        return ExpectationEstimator.calculate(register, self._gate_registry)

    def get_statevector_snapshot(self, register: StateRegister) -> tuple[complex, ...]:
        return register.snapshot()
