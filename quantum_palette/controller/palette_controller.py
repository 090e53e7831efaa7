"""Palette controller connecting colors to qubits in one shared register.

Each color on the palette owns a logical qubit id from the allocator. The
id is bound to a physical register position, which moves down whenever a
lower qubit is measured out. Mixing two colors entangles their qubits with
a parametric swap, and every change re-derives all displayed colors from
the register's expectation values.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, replace

from quantum_palette.core.color import HSL, expectation_to_hsl, hsl_to_angles
from quantum_palette.core.config import PaletteConfig
from quantum_palette.engine.allocator import QubitAllocator, QubitIndexMap
from quantum_palette.engine.expectation import ExpectationValues
from quantum_palette.engine.measurement import MeasurementOutcome, RandomSource
from quantum_palette.engine.simulator import Simulator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorQubit:
    """A color on the palette.

    Attributes:
        id: Stable identifier of the color.
        color: Current (h, s, l), refreshed after every register change.
        qubit: Logical qubit id from the allocator.
        x, y: Position on the canvas, clamped to [0, 1].
    """
    id: str
    color: HSL
    qubit: int
    x: float
    y: float


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


class PaletteController:
    """Owns the register, the allocator and the palette of colors."""

    def __init__(self, config: PaletteConfig | None = None,
                 simulator: Simulator | None = None,
                 rng: RandomSource | None = None):
        self._config = config or PaletteConfig()
        self._config.validate()
        self._simulator = simulator or Simulator(
            max_qubits=self._config.max_register_qubits,
            seed=self._config.seed, rng=rng)
        self._rng = rng
        self._register = self._simulator.create_register()
        self._allocator = QubitAllocator(capacity=self._config.max_qubits)
        self._index_map = QubitIndexMap()
        self._colors: dict[str, ColorQubit] = {}
        self._ids = itertools.count(1)

    # ---- Accessors -------------------------------------------------------

    @property
    def config(self) -> PaletteConfig:
        return self._config

    @property
    def register(self):
        return self._register

    @property
    def allocator(self) -> QubitAllocator:
        return self._allocator

    @property
    def index_map(self) -> QubitIndexMap:
        return self._index_map

    @property
    def colors(self) -> list[ColorQubit]:
        return list(self._colors.values())

    def get(self, color_id: str) -> ColorQubit:
        if color_id not in self._colors:
            raise KeyError(f"Unknown color id: {color_id!r}")
        return self._colors[color_id]

    def palette(self) -> dict[str, HSL]:
        return {c.id: c.color for c in self._colors.values()}

    def physical_index(self, color_id: str) -> int:
        return self._index_map.physical(self.get(color_id).qubit)

    def expectations(self) -> dict[str, ExpectationValues]:
        values = self._simulator.calculate_expectation_values(self._register)
        return {c.id: values[self._index_map.physical(c.qubit)]
                for c in self._colors.values()}

    # ---- Operations ------------------------------------------------------

    def create_color(self, hsl: HSL,
                     position: tuple[float, float] = (0.5, 0.5)) -> ColorQubit | None:
        """Adds a color; returns None when the qubit pool is exhausted.

        A saturation of None takes ``config.default_saturation``.
        """
        logical_id = self._allocator.request()
        if logical_id is None:
            return None

        try:
            physical = self._simulator.insert_qubit(self._register)
        except Exception:
            self._allocator.release(logical_id)
            raise
        self._index_map.bind(logical_id, physical)

        ry_angle, rz_angle = hsl_to_angles(hsl)
        self._simulator.ry(self._register, physical, ry_angle)
        self._simulator.rz(self._register, physical, rz_angle)

        h, s, l = hsl
        if s is None:
            s = self._config.default_saturation
        color = ColorQubit(
            id=f"cor-{next(self._ids)}",
            color=(h, s, l),
            qubit=logical_id,
            x=_clamp01(position[0]),
            y=_clamp01(position[1]),
        )
        self._colors[color.id] = color
        logger.info("Created %s on logical qubit %d (physical %d)",
                    color.id, logical_id, physical)
        self.refresh()
        return self._colors[color.id]

    def mix(self, color_a: str, color_b: str, theta: float | None = None):
        """Entangles two colors with PSWAP(theta), default ``config.mix_angle``."""
        if theta is None:
            theta = self._config.mix_angle
        qubit_a = self.physical_index(color_a)
        qubit_b = self.physical_index(color_b)
        self._simulator.pswap(self._register, qubit_a, qubit_b, theta)
        logger.info("Mixed %s and %s (theta=%.4f)", color_a, color_b, theta)
        self.refresh()

    def measure(self, color_id: str) -> MeasurementOutcome:
        """Measures a color's qubit out of the register and drops the color."""
        color = self.get(color_id)
        physical = self._index_map.physical(color.qubit)
        result = self._simulator.measure_and_remove_qubit(
            self._register, physical, self._rng)
        self._index_map.on_removed(physical)
        self._allocator.release(color.qubit)
        del self._colors[color_id]
        logger.info("Measured %s -> %d (p0=%.4f)", color_id, result.outcome, result.prob0)
        self.refresh()
        return result

    def remove(self, color_id: str):
        """Drops a color from the palette; its qubit stays in the register."""
        self.get(color_id)
        del self._colors[color_id]

    def move(self, color_id: str, x: float, y: float) -> ColorQubit:
        color = replace(self.get(color_id), x=_clamp01(x), y=_clamp01(y))
        self._colors[color_id] = color
        return color

    def refresh(self):
        """Recomputes every color from its qubit's expectation values."""
        if not self._colors:
            return
        values = self._simulator.calculate_expectation_values(self._register)
        for color_id, color in list(self._colors.items()):
            ev = values[self._index_map.physical(color.qubit)]
            hsl = expectation_to_hsl(ev.x, ev.y, ev.z, color.color[1])
            self._colors[color_id] = replace(color, color=hsl)
            logger.debug("Color %s -> %s", color_id, hsl)
