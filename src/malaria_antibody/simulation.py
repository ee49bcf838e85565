r"""
Simulation class
================
The `Simulation` class runs the antibody response of a single host. The `run()`
function updates every antibody of the host for `simulation_time` days and saves a
history.pkl file containing the capacity, concentration and detected antigen of
each antibody, and the cytokine signal of the host, each day of the simulation.

Antigen is detected according to the `exposures` schedule and antibody
concentrations can be boosted externally (e.g. by vaccination) according to the
`boosts` schedule. In each time step, `run_timestep()` is called, in which each
antibody goes through

    reset_counters -> increase_antigen_count -> decay -> update_capacity -> update_concentration

Anti-CSP capacity grows at the explicit rate `csp_capacity_growth_rate` on days
with antigen, all other families follow the capacity law of their family.
"""
import datetime
import logging
import os
import time
from pathlib import Path
from typing import Any

import numpy as np

from . import utils
from .antibody import Antibody
from .factory import create_antibody
from .parameters import Parameters
from .utils import AntibodyType


logger = logging.getLogger(__name__)


class Simulation(Parameters):
    """Class for running the simulation, inherits from Parameters, so all
    simulation parameters are available as attributes.

    Attributes:
        antibodies_list (list[Antibody]): Antibodies of the host, in the order
            of the `antibodies` parameter.
        boost_steps (dict[int, list[tuple]]): Boosts to apply, keyed by timestep index.
        cytokines (float): Cytokine signal of the host in the current timestep.
        history: Dict containing the history of the simulation. See reset_history.
    """

    def __init__(self, updated_params_file: str | Path | None = None, parallel_run_idx: int = 0):
        """Initialize attributes.

        All the default parameters from Parameters are included. If updated_params_file is
        passed, then the parameters specified in the file are updated from the file.

        Raises:
            ValueError: if the parameters or schedules are invalid.
            KeyError: if an antibody has an unknown type name.
        """
        super().__init__()
        self.update_parameters_from_file(updated_params_file)
        self.check_schedules()

        self.parallel_run_idx = parallel_run_idx
        self.current_time = 0.
        self.timestep_idx = 0
        self.cytokines = 0.
        self.create_antibodies()
        self.set_boost_steps()
        self.create_file_paths()
        self.reset_history()

    def check_schedules(self) -> None:
        """Check that antibody definitions, exposures and boosts are well formed."""
        for antibody in self.antibodies:
            if len(antibody) != 4:
                raise ValueError(
                    f"Antibody {antibody} should be (type name, variant, capacity, concentration)"
                )

        for exposure in self.exposures:
            if len(exposure) != 4:
                raise ValueError(
                    f"Exposure {exposure} should be (start day, end day, antibody index, antigen count)"
                )
            start_day, end_day, antibody_idx, _ = exposure
            if end_day < start_day:
                raise ValueError(f"Exposure {exposure} ends before it starts")
            self.check_antibody_idx(antibody_idx)
            self.check_day(start_day, f"Exposure {exposure}")

        for boost in self.boosts:
            if len(boost) != 3:
                raise ValueError(f"Boost {boost} should be (day, antibody index, concentration)")
            self.check_antibody_idx(boost[1])
            self.check_day(boost[0], f"Boost {boost}")

    def get_step(self, day: float) -> int:
        """Index of the timestep closest to the given day."""
        return int(round(day / self.dt))

    def check_day(self, day: float, description: str) -> None:
        """Days in schedules must fall on a timestep of the simulation."""
        if not 0 <= day < self.simulation_time or self.get_step(day) >= self.n_timesteps:
            raise ValueError(
                f"{description} starts on day {day}, outside of the simulation "
                f"(0 to {self.simulation_time} days)"
            )

    def check_antibody_idx(self, antibody_idx: int) -> None:
        if not 0 <= antibody_idx < self.n_antibodies:
            raise ValueError(
                f"Antibody index {antibody_idx} out of range for {self.n_antibodies} antibodies"
            )

    def create_antibodies(self) -> None:
        """Create an Antibody for each entry of the `antibodies` parameter."""
        self.antibodies_list: list[Antibody] = [
            create_antibody(type_name, int(variant), float(capacity), float(concentration))
            for type_name, variant, capacity, concentration in self.antibodies
        ]

    def set_boost_steps(self) -> None:
        """Map each boost to the timestep closest to the day of the boost."""
        self.boost_steps: dict[int, list[tuple]] = {}
        for day, antibody_idx, concentration in self.boosts:
            self.boost_steps.setdefault(self.get_step(day), []).append(
                (int(antibody_idx), float(concentration))
            )

    def create_file_paths(self) -> None:
        """Build timestamped file-path attributes for simulation outputs.

        The sub-directory name is the current wall-clock time
        (`YYYY_MM_DD_HH_MM_SS`) followed by ``parallel_run_idx``. The
        directory itself is created when the output files are written.
        """
        date_time = datetime.datetime.now().strftime('%Y_%m_%d_%H_%M_%S')
        self.data_dir = Path(self.experiment_dir) / f'{date_time}_{self.parallel_run_idx}'

        self.history_path = self.data_dir / self.history_file_name
        self.parameter_json_path = self.data_dir / self.param_file_name
        self.antibody_json_path = self.data_dir / self.antibody_file_name

    def reset_history(self) -> None:
        """(Re)initialize the ``history`` attribute.

        * ``'times'`` (np.ndarray, shape ``(n_history_timepoints,)``):
            Days at which history is recorded. Row 0 holds the initial state and
            the row at day t holds the state at the end of the timestep ending at t.
        * ``'capacity'`` (np.ndarray, shape ``(n_history_timepoints, n_antibodies)``):
            Capacity of each antibody.
        * ``'concentration'`` (np.ndarray, shape ``(n_history_timepoints, n_antibodies)``):
            Concentration of each antibody.
        * ``'antigen_count'`` (np.ndarray, shape ``(n_history_timepoints, n_antibodies)``):
            Antigen detected by each antibody.
        * ``'cytokines'`` (np.ndarray, shape ``(n_history_timepoints,)``):
            Cytokine signal summed over antibodies.
        """
        shape = (self.n_history_timepoints, self.n_antibodies)
        self.history = {
            'times': np.array(self.history_times),
            'capacity': np.zeros(shape),
            'concentration': np.zeros(shape),
            'antigen_count': np.zeros(shape, dtype=np.int64),
            'cytokines': np.zeros(self.n_history_timepoints),
        }

    def check_overwrite(self, data: Any, file_path: Path) -> None:
        """Write file depending on if file exists and if overwriting is allowed.

        Args:
            data: the data to write to file.
            file_path: the path to the file.
        """
        write_fn, file_type = {
            '.pkl': (utils.write_pickle, 'pickle'),
            '.json': (utils.write_json, 'json'),
        }[file_path.suffix]

        if file_path.exists():
            if self.overwrite:
                logger.warning(f'{file_type} file {file_path} already exists. Overwriting.')
                write_fn(data, file_path)
            else:
                logger.warning(f'{file_type} file {file_path} already exists. Not overwriting.')
        else:
            write_fn(data, file_path)

    def expose(self) -> None:
        """Antigen detected by each antibody in the current timestep."""
        for start_day, end_day, antibody_idx, antigen_count in self.exposures:
            if start_day <= self.current_time < end_day:
                self.antibodies_list[int(antibody_idx)].increase_antigen_count(int(antigen_count))

    def boost(self) -> None:
        """Set the concentrations boosted in the current timestep."""
        for antibody_idx, concentration in self.boost_steps.get(self.timestep_idx, []):
            logger.debug(
                f'Boosting antibody {antibody_idx} to {concentration} at t={self.current_time:.2f}'
            )
            self.antibodies_list[antibody_idx].concentration = concentration

    def update_antibody(self, antibody: Antibody) -> None:
        """Decay, then grow capacity, then release antibodies."""
        antibody.decay(self.dt, self)
        if antibody.antibody_type == AntibodyType.CSP:
            if antibody.antigen_present:
                antibody.update_capacity_with_rate(self.dt, self.csp_capacity_growth_rate)
        else:
            antibody.update_capacity(self.dt, self, self.inv_microliters_blood)
        antibody.update_concentration(self.dt, self)

    def update_history(self) -> None:
        """Update the history at the current timepoint, if it is one."""
        time_diff = np.abs(np.array(self.history_times) - self.current_time)
        if time_diff.min() < 1e-5:
            history_idx = np.argmin(time_diff)
        else:
            return

        for antibody_idx, antibody in enumerate(self.antibodies_list):
            self.history['capacity'][history_idx, antibody_idx] = antibody.capacity
            self.history['concentration'][history_idx, antibody_idx] = antibody.concentration
            self.history['antigen_count'][history_idx, antibody_idx] = antibody.antigen_count
        self.history['cytokines'][history_idx] = self.cytokines

    @utils.timing_decorator
    def run_timestep(self) -> None:
        """Run a single timestep.

        Reset the antigen counters and record new exposures. Apply boosts,
        then update each antibody. Compute the cytokine signal from the
        updated concentrations.
        """
        for antibody in self.antibodies_list:
            antibody.reset_counters()
        self.expose()
        self.boost()

        for antibody in self.antibodies_list:
            self.update_antibody(antibody)

        self.cytokines = sum(
            antibody.stimulate_cytokines(self.dt, self.inv_microliters_blood)
            for antibody in self.antibodies_list
        )

    def run(self) -> None:
        """Run the simulation.

        Record the initial state, then run dynamics for all timesteps, saving
        results in ``self.history`` every `tspan_dt` days. Exposures and boosts of
        timestep k happen at day k * dt, and its outcome is recorded at day
        (k + 1) * dt. Then write out the history pickle file, the parameter json
        file and the final antibody states.
        """
        logger.info(
            f'Running {self.n_antibodies} antibodies for {self.simulation_time} days '
            f'(dt={self.dt})'
        )
        start_time = time.perf_counter()

        self.current_time = 0.
        self.update_history()

        for timestep_idx in range(self.n_timesteps):
            self.timestep_idx = timestep_idx
            self.current_time = self.timestep_idx * self.dt

            if np.isclose(self.current_time, round(self.current_time)):
                elapsed_time = time.perf_counter() - start_time
                logger.debug(f'Sim time: {self.current_time:.2f}, Wall time: {elapsed_time:.1f}')
            self.run_timestep()

            self.current_time = (self.timestep_idx + 1) * self.dt
            self.update_history()

        os.makedirs(self.data_dir, exist_ok=True)
        self.check_overwrite(utils.compress(self.history), self.history_path)
        self.check_overwrite(self.get_parameter_dict(), self.parameter_json_path)
        self.check_overwrite(
            [antibody.to_dict() for antibody in self.antibodies_list], self.antibody_json_path
        )
        logger.info(f'SIMULATION COMPLETE. Output in {self.data_dir}')

    @staticmethod
    def read_history(file_path: str | Path) -> dict:
        """Read a history pickle file written by `run`."""
        return utils.expand(utils.read_pickle(file_path))

    @staticmethod
    def read_antibodies(file_path: str | Path) -> list[Antibody]:
        """Read the antibody states written by `run`."""
        return [Antibody.from_dict(data) for data in utils.read_json(file_path)]
