"""Exception hierarchy for the statevector engine."""

from __future__ import annotations


class SimulatorError(Exception):
    """Base class for all engine errors."""


class InvalidQubitIndex(SimulatorError, ValueError):
    """Qubit index out of range, not an integer, or a repeated two-qubit target."""


class EmptyRegister(SimulatorError):
    """Operation needs at least one qubit but the register holds none."""


class UnknownGateKind(SimulatorError, KeyError):
    """Gate tag not present in the registry, or used with the wrong arity."""

    def __str__(self) -> str:
        # KeyError would repr() the message
        return str(self.args[0]) if self.args else ""


class QubitLimitExceeded(SimulatorError):
    """Register is already at its maximum qubit count."""


class AllocatorExhausted(SimulatorError):
    """No logical qubit ids left in the allocation pool."""
