"""PSWAP angle sweep -- Z expectations of a |1>,|0> pair vs mixing angle.

Usage:
    python scripts/mix_sweep.py --steps 17
    python scripts/mix_sweep.py --max-theta 6.2832 --output sweep.json --plot sweep.png
"""

from __future__ import annotations

import argparse
import json
import math
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import numpy as np

from quantum_palette.engine.simulator import Simulator


def run_sweep(thetas: np.ndarray) -> list[dict]:
    sim = Simulator()
    results = []
    for theta in thetas:
        reg = sim.create_register()
        sim.insert_qubit(reg)
        sim.insert_qubit(reg)
        sim.ry(reg, 0, math.pi)          # |10>
        sim.pswap(reg, 0, 1, float(theta))
        values = sim.calculate_expectation_values(reg)
        results.append({
            "theta": float(theta),
            "q0": values[0].to_dict(),
            "q1": values[1].to_dict(),
            "expected_q0_z": -math.cos(float(theta)),
        })
    return results


def plot_sweep(results: list[dict], path: str):
    from matplotlib.figure import Figure

    thetas = [r["theta"] for r in results]
    fig = Figure(figsize=(6, 3), dpi=100)
    ax = fig.add_subplot(111)
    ax.plot(thetas, [r["q0"]["z"] for r in results], label="<Z> qubit 0")
    ax.plot(thetas, [r["q1"]["z"] for r in results], label="<Z> qubit 1")
    ax.plot(thetas, [r["expected_q0_z"] for r in results], "k:", label="-cos(theta)")
    ax.set_xlabel("PSWAP angle (rad)")
    ax.set_ylabel("Expectation")
    ax.legend(loc="best")
    fig.tight_layout()
    fig.savefig(path)


def main():
    parser = argparse.ArgumentParser(description="Parametric swap angle sweep")
    parser.add_argument("--min-theta", type=float, default=0.0)
    parser.add_argument("--max-theta", type=float, default=math.pi)
    parser.add_argument("--steps", type=int, default=9)
    parser.add_argument("--output", type=str, default=None)
    parser.add_argument("--plot", type=str, default=None,
                        help="Write a matplotlib plot to this image file")
    args = parser.parse_args()

    thetas = np.linspace(args.min_theta, args.max_theta, args.steps)
    results = run_sweep(thetas)

    output = {
        "experiment": "mix_sweep",
        "steps": args.steps,
        "results": results,
    }

    if args.output:
        with open(args.output, "w") as f:
            json.dump(output, f, indent=2)
        print(f"Results saved to {args.output}")
    else:
        print(json.dumps(output, indent=2))

    if args.plot:
        plot_sweep(results, args.plot)
        print(f"Plot saved to {args.plot}")


if __name__ == "__main__":
    main()
