"""Palette configuration management."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from numbers import Integral, Real
from pathlib import Path

from quantum_palette.engine.register import StateRegister

logger = logging.getLogger(__name__)


@dataclass
class PaletteConfig:
    """Persistent palette configuration."""
    max_qubits: int = 4                 # logical pool capacity
    max_register_qubits: int = StateRegister.DEFAULT_MAX_QUBITS
    mix_angle: float = math.pi / 10     # PSWAP angle used by a single mix
    default_saturation: float = 0.7
    seed: int | None = None

    _config_dir: Path = field(
        default_factory=lambda: Path.home() / ".quantum_palette",
        repr=False)

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def validate(self):
        # Values loaded from a hand-edited file arrive untyped
        for name in ("max_qubits", "max_register_qubits"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Integral):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        for name in ("mix_angle", "default_saturation"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, Real):
                raise ValueError(f"{name} must be a number, got {value!r}")
        if self.seed is not None and (
                isinstance(self.seed, bool) or not isinstance(self.seed, Integral)):
            raise ValueError(f"seed must be an integer or null, got {self.seed!r}")
        if self.max_register_qubits < 1 or self.max_register_qubits > StateRegister.HARD_MAX_QUBITS:
            raise ValueError(
                f"max_register_qubits must be 1-{StateRegister.HARD_MAX_QUBITS}, "
                f"got {self.max_register_qubits}")
        if self.max_qubits < 1 or self.max_qubits > self.max_register_qubits:
            raise ValueError(
                f"max_qubits must be 1-{self.max_register_qubits}, got {self.max_qubits}")
        if not 0.0 <= self.default_saturation <= 1.0:
            raise ValueError(
                f"default_saturation must be in [0, 1], got {self.default_saturation}")
        if not math.isfinite(self.mix_angle):
            raise ValueError(f"mix_angle must be finite, got {self.mix_angle}")

    def to_dict(self) -> dict:
        return {
            "max_qubits": self.max_qubits,
            "max_register_qubits": self.max_register_qubits,
            "mix_angle": self.mix_angle,
            "default_saturation": self.default_saturation,
            "seed": self.seed,
        }

    def save(self):
        self._config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, config_dir: Path | str | None = None) -> PaletteConfig:
        config = cls() if config_dir is None else cls(_config_dir=Path(config_dir))
        if config.config_path.exists():
            try:
                with open(config.config_path, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                for key, value in data.items():
                    if hasattr(config, key) and not key.startswith('_'):
                        setattr(config, key, value)
            except (json.JSONDecodeError, OSError, AttributeError):
                logger.warning("Unreadable config at %s; using defaults",
                               config.config_path)
                config = cls(_config_dir=config._config_dir)
        return config
