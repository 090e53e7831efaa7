"""Dense statevector register that grows by insertion and shrinks by measurement."""

from __future__ import annotations

import logging
import math
from numbers import Integral
from typing import Sequence

import numpy as np

from .complex_math import add, multiply, squared_magnitude
from .errors import (
    EmptyRegister, InvalidQubitIndex, QubitLimitExceeded,
)
from .measurement import (
    MeasurementOutcome, RandomSource, bit_position, probability_of_zero,
)

logger = logging.getLogger(__name__)

# Below this post-measurement norm the register falls back to |0...0>
DEGENERATE_NORM = 1e-10


class StateRegister:
    """Holds n qubits as a complex numpy array of length 2^n.

    Index bit (n-1-q) carries qubit q, so qubit 0 is the most significant
    bit. A register with no qubits stores the single amplitude 1.

    Every operation validates its arguments before touching the
    amplitudes, so a failed call leaves the register as it was.
    """

    DEFAULT_MAX_QUBITS = 20
    HARD_MAX_QUBITS = 24

    def __init__(self, max_qubits: int = DEFAULT_MAX_QUBITS):
        if not 1 <= max_qubits <= self.HARD_MAX_QUBITS:
            raise ValueError(
                f"max_qubits must be 1-{self.HARD_MAX_QUBITS}, got {max_qubits}")
        self._max_qubits = max_qubits
        self._num_qubits = 0
        self._data = np.ones(1, dtype=np.complex128)

    @property
    def num_qubits(self) -> int:
        return self._num_qubits

    @property
    def max_qubits(self) -> int:
        return self._max_qubits

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def probabilities(self) -> np.ndarray:
        """Returns |amplitude|^2 for each basis state."""
        return squared_magnitude(self._data)

    def norm(self) -> float:
        return float(np.sum(self.probabilities))

    def snapshot(self) -> tuple[complex, ...]:
        """Copy of the amplitudes as plain Python complex numbers."""
        return tuple(complex(a) for a in self._data)

    # ---- Validation ------------------------------------------------------

    def _check_qubit(self, qubit) -> int:
        if isinstance(qubit, bool) or not isinstance(qubit, Integral):
            raise InvalidQubitIndex(f"Qubit index must be an integer, got {qubit!r}")
        qubit = int(qubit)
        if qubit < 0 or qubit >= self._num_qubits:
            raise InvalidQubitIndex(
                f"Qubit {qubit} out of range [0, {self._num_qubits})")
        return qubit

    @staticmethod
    def _check_matrix(matrix: np.ndarray, dim: int) -> np.ndarray:
        matrix = np.asarray(matrix, dtype=np.complex128)
        if matrix.shape != (dim, dim):
            raise ValueError(f"Expected a {dim}x{dim} matrix, got shape {matrix.shape}")
        if not np.all(np.isfinite(matrix)):
            raise ValueError("Gate matrix contains non-finite entries")
        return matrix

    # ---- Growth ----------------------------------------------------------

    def insert_qubit(self) -> int:
        """Appends a qubit in |0> as the new least significant bit.

        Each old amplitude i moves to 2i; the odd slots (new qubit in |1>)
        are zero. Returns the new qubit's index.
        """
        if self._num_qubits >= self._max_qubits:
            raise QubitLimitExceeded(
                f"Register is full ({self._max_qubits} qubits)")
        new_data = np.zeros(2 * len(self._data), dtype=np.complex128)
        new_data[::2] = self._data
        self._data = new_data
        self._num_qubits += 1
        logger.debug("Inserted qubit %d", self._num_qubits - 1)
        return self._num_qubits - 1

    # ---- Gates -----------------------------------------------------------

    def apply_gate(self, qubit: int, matrix: np.ndarray):
        """Applies a 2x2 matrix to one qubit.

        Amplitudes are processed in pairs (i0, i1) that differ only in the
        qubit's bit; i0 ranges over indices with that bit clear so each
        pair is visited once.
        """
        qubit = self._check_qubit(qubit)
        matrix = self._check_matrix(matrix, 2)

        mask = 1 << bit_position(self._num_qubits, qubit)
        indices = np.arange(len(self._data))
        i0 = indices[(indices & mask) == 0]
        i1 = i0 | mask
        a0 = self._data[i0]
        a1 = self._data[i1]

        new_data = np.empty_like(self._data)
        new_data[i0] = add(multiply(matrix[0, 0], a0), multiply(matrix[0, 1], a1))
        new_data[i1] = add(multiply(matrix[1, 0], a0), multiply(matrix[1, 1], a1))
        self._data = new_data

    def apply_two_qubit_gate(self, qubit1: int, qubit2: int, matrix: np.ndarray):
        """Applies a 4x4 matrix to (qubit1, qubit2).

        Matrix rows/columns are ordered 00, 01, 10, 11 with qubit1 as the
        high bit. Each input index scatters into the four outputs that
        share its other bits; contributions landing on the same output
        index are summed.
        """
        qubit1 = self._check_qubit(qubit1)
        qubit2 = self._check_qubit(qubit2)
        if qubit1 == qubit2:
            raise InvalidQubitIndex(f"Two-qubit gate needs distinct qubits, got {qubit1} twice")
        matrix = self._check_matrix(matrix, 4)

        pos1 = bit_position(self._num_qubits, qubit1)
        pos2 = bit_position(self._num_qubits, qubit2)
        indices = np.arange(len(self._data))
        input_states = ((indices >> pos1) & 1) * 2 + ((indices >> pos2) & 1)
        cleared = indices & ~((1 << pos1) | (1 << pos2))

        new_data = np.zeros_like(self._data)
        for in_state in range(4):
            selected = input_states == in_state
            amps = self._data[selected]
            base = cleared[selected]
            for out_state in range(4):
                element = matrix[out_state, in_state]
                if element == 0:
                    continue
                out_indices = (base | (((out_state >> 1) & 1) << pos1)
                               | ((out_state & 1) << pos2))
                new_data[out_indices] = add(new_data[out_indices],
                                            multiply(element, amps))
        self._data = new_data

    # ---- Measurement -----------------------------------------------------

    def measure_and_remove_qubit(self, qubit: int,
                                 rng: RandomSource | None = None) -> MeasurementOutcome:
        """Measures ``qubit`` in Z, collapses, and splices it out.

        Qubits above the removed one shift down by one index. If the
        chosen branch has (numerically) zero weight the register resets to
        |0...0> of the smaller size instead of dividing by ~0.
        """
        if self._num_qubits == 0:
            raise EmptyRegister("Cannot measure: register has no qubits")
        qubit = self._check_qubit(qubit)

        rng = rng or np.random.default_rng()
        n = self._num_qubits
        prob0 = min(probability_of_zero(self._data, n, qubit), 1.0)
        prob1 = 1.0 - prob0

        outcome = 0 if rng.random() < prob0 else 1

        pos = bit_position(n, qubit)
        indices = np.arange(len(self._data))
        kept = indices[((indices >> pos) & 1) == outcome]
        # Weight of the kept branch itself; 1 - prob0 can carry rounding
        # residue when the branch is empty.
        norm = math.sqrt(float(np.sum(squared_magnitude(self._data[kept]))))
        # Drop bit `pos`: higher bits shift down, lower bits stay
        new_indices = ((kept >> (pos + 1)) << pos) | (kept & ((1 << pos) - 1))

        new_data = np.zeros(len(self._data) // 2, dtype=np.complex128)
        if norm < DEGENERATE_NORM:
            logger.warning(
                "Degenerate norm %.3e measuring qubit %d (outcome %d); "
                "resetting to |0...0>", norm, qubit, outcome)
            new_data[0] = 1.0
        elif n == 1:
            new_data[0] = 1.0  # vacuum amplitude, global phase dropped
        else:
            new_data[new_indices] = self._data[kept] / norm

        self._data = new_data
        self._num_qubits = n - 1
        logger.debug("Measured qubit %d -> %d (p0=%.6f, p1=%.6f)",
                     qubit, outcome, prob0, prob1)
        return MeasurementOutcome(outcome=outcome, prob0=prob0, prob1=prob1)

    # ---- Construction helpers --------------------------------------------

    def copy(self) -> StateRegister:
        """Deep copy of this register."""
        reg = StateRegister.__new__(StateRegister)
        reg._max_qubits = self._max_qubits
        reg._num_qubits = self._num_qubits
        reg._data = self._data.copy()
        return reg

    @classmethod
    def from_amplitudes(cls, amplitudes: Sequence[complex] | np.ndarray,
                        max_qubits: int = DEFAULT_MAX_QUBITS) -> StateRegister:
        """Builds a register from a length-2^n amplitude vector (renormalized)."""
        data = np.asarray(amplitudes, dtype=np.complex128).reshape(-1)
        size = len(data)
        if size == 0 or size & (size - 1):
            raise ValueError(f"Amplitude count must be a power of two, got {size}")
        num_qubits = size.bit_length() - 1
        if num_qubits > max_qubits:
            raise QubitLimitExceeded(
                f"{num_qubits} qubits exceed the limit of {max_qubits}")
        norm = math.sqrt(float(np.sum(squared_magnitude(data))))
        if norm < DEGENERATE_NORM:
            raise ValueError("Amplitude vector has zero norm")
        reg = cls(max_qubits=max_qubits)
        reg._num_qubits = num_qubits
        reg._data = data / norm
        return reg

    def __repr__(self) -> str:
        return f"StateRegister(num_qubits={self._num_qubits})"
