"""Measurement records, bases and probability helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import numpy as np

from .complex_math import squared_magnitude
from .gates import Gate, GateKind


class RandomSource(Protocol):
    """Anything with a uniform ``random()`` in [0, 1).

    ``np.random.Generator`` and ``random.Random`` both qualify.
    """

    def random(self) -> float: ...


class MeasurementBasis(Enum):
    """Measurement basis selection."""
    Z = "Z"  # computational basis
    X = "X"  # Ry(-pi/2) on every qubit before reading Z
    Y = "Y"  # Rx(+pi/2) on every qubit before reading Z

    @property
    def rotation(self) -> Gate | None:
        """Gate that maps this basis onto the computational basis."""
        if self is MeasurementBasis.X:
            return Gate(GateKind.RY, -math.pi / 2)
        if self is MeasurementBasis.Y:
            return Gate(GateKind.RX, math.pi / 2)
        return None


@dataclass(frozen=True)
class MeasurementOutcome:
    """Result of a single projective measurement.

    ``prob0`` and ``prob1`` are the pre-measurement probabilities.
    """
    outcome: int
    prob0: float
    prob1: float

    def to_dict(self) -> dict:
        return {"outcome": self.outcome, "prob0": self.prob0, "prob1": self.prob1}


def bit_position(num_qubits: int, qubit: int) -> int:
    """Index bit holding ``qubit`` (qubit 0 is the most significant bit)."""
    return num_qubits - 1 - qubit


def probability_of_zero(data: np.ndarray, num_qubits: int, qubit: int) -> float:
    """Sum of |amp|^2 over basis states where ``qubit`` reads 0."""
    mask = 1 << bit_position(num_qubits, qubit)
    indices = np.arange(len(data))
    probs = squared_magnitude(data)
    return float(np.sum(probs[(indices & mask) == 0]))
