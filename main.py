"""Quantum Palette - command line entry point.

Usage:
    python main.py "#ff0000" "#0000ff" --mix 3 --seed 7
    python main.py "#ff0000" "#00ff00" "#0000ff" --mix 5 --measure 1 -v
"""

from __future__ import annotations

import argparse
import logging
import sys

from quantum_palette.controller.palette_controller import PaletteController
from quantum_palette.core.color import hex_to_hsl, hsl_to_hex
from quantum_palette.core.config import PaletteConfig

logger = logging.getLogger(__name__)


def _print_palette(controller: PaletteController):
    expectations = controller.expectations()
    print(f"{'id':<8}{'qubit':>6}{'color':>10}   {'<X>':>7}{'<Y>':>8}{'<Z>':>8}")
    for color in controller.colors:
        ev = expectations[color.id]
        print(f"{color.id:<8}{controller.physical_index(color.id):>6}"
              f"{hsl_to_hex(color.color):>10}   "
              f"{ev.x:>7.3f}{ev.y:>8.3f}{ev.z:>8.3f}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Mix colors encoded as qubits in a shared statevector.")
    parser.add_argument("colors", nargs="+", help="Hex colors, e.g. '#ff0000'")
    parser.add_argument("--mix", type=int, default=1,
                        help="How many times to mix the first two colors")
    parser.add_argument("--angle", type=float, default=None,
                        help="PSWAP angle per mix (default from config)")
    parser.add_argument("--measure", type=int, default=None,
                        help="Measure the color at this palette position at the end")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config-dir", default=None,
                        help="Directory holding config.json")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s")

    config = PaletteConfig.load(args.config_dir)
    if args.seed is not None:
        config.seed = args.seed
    try:
        controller = PaletteController(config)
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    for hex_color in args.colors:
        hsl = hex_to_hsl(hex_color)
        if controller.create_color(hsl) is None:
            print(f"Skipping {hex_color}: {controller.allocator.last_error}",
                  file=sys.stderr)

    print("Initial palette:")
    _print_palette(controller)

    colors = controller.colors
    if len(colors) >= 2 and args.mix > 0:
        for _ in range(args.mix):
            controller.mix(colors[0].id, colors[1].id, args.angle)
        print(f"\nAfter {args.mix} mix(es) of {colors[0].id} and {colors[1].id}:")
        _print_palette(controller)

    if args.measure is not None:
        colors = controller.colors
        if not 0 <= args.measure < len(colors):
            print(f"No color at position {args.measure}", file=sys.stderr)
            return 1
        target = colors[args.measure].id
        result = controller.measure(target)
        print(f"\nMeasured {target}: outcome={result.outcome} "
              f"(p0={result.prob0:.4f}, p1={result.prob1:.4f})")
        _print_palette(controller)

    return 0


if __name__ == '__main__':
    sys.exit(main())
