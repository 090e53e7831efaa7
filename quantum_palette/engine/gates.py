"""Gate matrix definitions, GateDefinition and the Gate descriptor."""

from __future__ import annotations

import math

import numpy as np
from dataclasses import dataclass
from typing import Callable, TYPE_CHECKING
from enum import Enum

from .errors import UnknownGateKind

if TYPE_CHECKING:
    from .gate_registry import GateRegistry


class GateKind(Enum):
    RX = "Rx"
    RY = "Ry"
    RZ = "Rz"
    X = "X"
    H = "H"
    CNOT = "CNOT"
    PSWAP = "PSWAP"

    @classmethod
    def parse(cls, value: GateKind | str) -> GateKind:
        """Accepts a GateKind or its name in any case ('ry', 'PSwap', ...)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for kind in cls:
                if kind.value.lower() == wanted:
                    return kind
        raise UnknownGateKind(f"Unknown gate kind: {value!r}")


@dataclass(frozen=True)
class GateDefinition:
    """Immutable definition of a gate kind."""
    kind: GateKind
    num_qubits: int
    num_params: int
    matrix_func: Callable[..., np.ndarray]


# --- Fixed single-qubit gate matrices ---

X_MATRIX = np.array([[0, 1],
                      [1, 0]], dtype=np.complex128)

H_MATRIX = np.array([[1, 1],
                      [1, -1]], dtype=np.complex128) / np.sqrt(2)


# --- Parameterized single-qubit gate functions ---

def rx_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -1j * s],
                      [-1j * s, c]], dtype=np.complex128)


def ry_matrix(theta: float) -> np.ndarray:
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([[c, -s],
                      [s, c]], dtype=np.complex128)


def rz_matrix(theta: float) -> np.ndarray:
    return np.array([[np.exp(-1j * theta / 2), 0],
                      [0, np.exp(1j * theta / 2)]], dtype=np.complex128)


# --- Two-qubit gate matrices (basis order 00, 01, 10, 11; first qubit is the high bit) ---

CNOT_MATRIX = np.array([
    [1, 0, 0, 0],
    [0, 1, 0, 0],
    [0, 0, 0, 1],
    [0, 0, 1, 0]], dtype=np.complex128)


def pswap_matrix(theta: float) -> np.ndarray:
    """Parametric swap: identity on |00>, |11>; mixes |01> and |10>.

    theta=0 is the identity and theta=pi a full swap (with an i phase).
    """
    c, s = np.cos(theta / 2), np.sin(theta / 2)
    return np.array([
        [1, 0, 0, 0],
        [0, c, 1j * s, 0],
        [0, 1j * s, c, 0],
        [0, 0, 0, 1]], dtype=np.complex128)


def _const(matrix: np.ndarray) -> Callable[[], np.ndarray]:
    """Returns a no-arg callable that returns a copy of the given matrix."""
    def _fn() -> np.ndarray:
        return matrix.copy()
    return _fn


@dataclass(frozen=True)
class Gate:
    """A gate kind plus its angle; resolves to a unitary through the registry."""
    kind: GateKind
    theta: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "kind", GateKind.parse(self.kind))
        theta = float(self.theta)
        if not math.isfinite(theta):
            raise ValueError(f"Gate angle must be finite, got {theta}")
        object.__setattr__(self, "theta", theta)

    @property
    def num_qubits(self) -> int:
        return 2 if self.kind in (GateKind.CNOT, GateKind.PSWAP) else 1

    def matrix(self, registry: GateRegistry | None = None) -> np.ndarray:
        if registry is None:
            from .gate_registry import GateRegistry
            registry = GateRegistry.instance()
        gate_def = registry.get(self.kind)
        if gate_def.num_params:
            return gate_def.matrix_func(self.theta)
        return gate_def.matrix_func()

    def __repr__(self) -> str:
        if self.kind in (GateKind.RX, GateKind.RY, GateKind.RZ, GateKind.PSWAP):
            return f"Gate({self.kind.value}, theta={self.theta:.6g})"
        return f"Gate({self.kind.value})"
