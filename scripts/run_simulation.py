"""
Script to run the antibody response of a single host

    python scripts/run_simulation.py --config_file <config_file> [--parallel_run_idx <idx>] [--verbose]

<config_file> is a json or yaml file with the parameters to update from the
defaults in malaria_antibody.parameters.Parameters, see configs/ for examples.
The history, parameters and final antibody states are written to a timestamped
directory inside `experiment_dir`.
"""

import logging
import time

from tap import tapify

from malaria_antibody.simulation import Simulation


def run(config_file: str, parallel_run_idx: int = 0, verbose: bool = False) -> None:
    """Run a simulation of the antibody response of a single host.

    Args:
        config_file: json or yaml file with updated parameters.
        parallel_run_idx: Index appended to the name of the output directory.
        verbose: Log progress of every simulated day.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    tic = time.time()
    sim = Simulation(config_file, parallel_run_idx=parallel_run_idx)
    sim.run()
    toc = time.time()
    print(f"Ran simulation in {toc - tic:.1f}s, "
          f"{Simulation.total_time():.1f}s in timesteps")
    print(sim.data_dir)


if __name__ == "__main__":
    tapify(run)
