"""Per-qubit Pauli expectation values by basis rotation.

<Z> is read directly from the amplitudes. <X> and <Y> are read the same
way from disposable copies of the register rotated by Ry(-pi/2) and
Rx(+pi/2) on every qubit, so a single signed-probability sum serves all
three observables.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .complex_math import squared_magnitude
from .errors import InvalidQubitIndex
from .gate_registry import GateRegistry
from .measurement import MeasurementBasis, bit_position
from .register import StateRegister


@dataclass(frozen=True)
class ExpectationValues:
    """<X>, <Y>, <Z> for one qubit, each in [-1, 1]."""
    x: float
    y: float
    z: float

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "z": self.z}


class ExpectationEstimator:
    """Static methods computing expectation values of a StateRegister."""

    @staticmethod
    def signed_sums(data: np.ndarray, num_qubits: int) -> np.ndarray:
        """sum_i (+1 if bit_q(i) == 0 else -1) * |amp_i|^2 for every qubit q."""
        probs = squared_magnitude(data)
        indices = np.arange(len(data))
        result = np.zeros(num_qubits, dtype=np.float64)
        for qubit in range(num_qubits):
            bits = (indices >> bit_position(num_qubits, qubit)) & 1
            result[qubit] = float(np.sum(np.where(bits == 0, probs, -probs)))
        return result

    @staticmethod
    def basis_expectations(register: StateRegister, basis: MeasurementBasis,
                           registry: GateRegistry | None = None) -> np.ndarray:
        """Expectation of every qubit along one basis; never mutates ``register``."""
        rotation = basis.rotation
        if rotation is None:
            return ExpectationEstimator.signed_sums(register.data, register.num_qubits)

        matrix = rotation.matrix(registry)
        rotated = register.copy()
        for qubit in range(rotated.num_qubits):
            rotated.apply_gate(qubit, matrix)
        return ExpectationEstimator.signed_sums(rotated.data, rotated.num_qubits)

    @staticmethod
    def calculate(register: StateRegister,
                  registry: GateRegistry | None = None) -> list[ExpectationValues]:
        """Expectation values for all qubits, indexed by physical position.

        Returns an empty list for a register without qubits.
        """
        if register.num_qubits == 0:
            return []
        z = ExpectationEstimator.basis_expectations(register, MeasurementBasis.Z, registry)
        x = ExpectationEstimator.basis_expectations(register, MeasurementBasis.X, registry)
        y = ExpectationEstimator.basis_expectations(register, MeasurementBasis.Y, registry)
        return [ExpectationValues(x=float(x[q]), y=float(y[q]), z=float(z[q]))
                for q in range(register.num_qubits)]

    @staticmethod
    def bloch_vector(register: StateRegister, qubit: int) -> tuple[float, float, float]:
        """(x, y, z) for a single qubit."""
        if isinstance(qubit, bool) or not isinstance(qubit, (int, np.integer)) \
                or not 0 <= qubit < register.num_qubits:
            raise InvalidQubitIndex(
                f"Qubit {qubit!r} out of range [0, {register.num_qubits})")
        return ExpectationEstimator.calculate(register)[int(qubit)].as_tuple()
