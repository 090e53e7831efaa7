"""Bell-pair measurement statistics.

Prepares H(q0), CNOT(q0, q1), measures and removes q0, and records the
outcome together with the remaining qubit's <Z>.

Usage:
    python scripts/bell_statistics.py --trials 1000 --seed 42
"""

from __future__ import annotations

import argparse
import json
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import numpy as np

from quantum_palette.engine.simulator import Simulator


def run_trials(n_trials: int, seed: int) -> dict:
    rng = np.random.default_rng(seed)
    sim = Simulator(rng=rng)
    counts = [0, 0]
    z_sums = [0.0, 0.0]

    for _ in range(n_trials):
        reg = sim.create_register()
        sim.insert_qubit(reg)
        sim.insert_qubit(reg)
        sim.h(reg, 0)
        sim.cnot(reg, 0, 1)
        result = sim.measure_and_remove_qubit(reg, 0)
        remaining_z = sim.calculate_expectation_values(reg)[0].z
        counts[result.outcome] += 1
        z_sums[result.outcome] += remaining_z

    return {
        "trials": n_trials,
        "seed": seed,
        "outcome_0": counts[0],
        "outcome_1": counts[1],
        "mean_z_given_0": z_sums[0] / counts[0] if counts[0] else None,
        "mean_z_given_1": z_sums[1] / counts[1] if counts[1] else None,
    }


def main():
    parser = argparse.ArgumentParser(description="Bell-pair measure-and-remove statistics")
    parser.add_argument("--trials", type=int, default=1000)
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args()

    print(json.dumps(run_trials(args.trials, args.seed), indent=2))


if __name__ == "__main__":
    main()
