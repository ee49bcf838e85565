import dataclasses
import typing
from pathlib import Path

import numpy as np

from . import utils


@dataclasses.dataclass
class Parameters():
    """
    Base dataclass that contains the antibody model and simulation parameters.

    Inherited classes will have access to all these parameters. Schedules are
    stored as tuples so that they can be written to a json file and compared
    against parameters read back from one.

    The update laws only ever read from this bundle.
    """

    updated_params_file: str | None = None
    """
    File (json or yaml) with updated parameters. If None, then use defaults.
    """

    experiment_dir: str = 'experiments'
    """
    Directory for containing the experiment data.
    """

    history_file_name: str = 'history.pkl'
    """
    File name for writing the history pickle file.
    """

    param_file_name: str = 'parameters.json'
    """
    File name for writing the parameters of an experiment.
    """

    antibody_file_name: str = 'antibodies.json'
    """
    File name for writing the final antibody states.
    """

    overwrite: bool = True
    """
    Whether to overwrite existing files.
    """

    dt: float = 1.0
    """
    The time step for simulations, in days.
    """

    simulation_time: float = 365
    """
    Number of days to run simulation for.
    """

    tspan_dt: float = 1.0
    """
    Timestep to save results in history (days). Must be a whole multiple of dt.
    """

    memory_level: float = 0.2
    """
    Long-term memory plateau. Antibody capacity above this level relaxes
    back towards it.
    """

    hyperimmune_decay_rate: float = 0.0167
    """
    Rate at which antibody capacity relaxes to memory_level (day-1).
    Capacity drops from 1.0 to below 0.4 in ~120 days with the default
    memory level.
    """

    msp1_antibody_growth_rate: float = 0.02
    """
    Maximum growth rate of anti-MSP1 antibody capacity (day-1).
    """

    antibody_stimulation_c50: float = 30.
    """
    Antigen density (per microliter of blood) giving half-maximal stimulation
    of antibody capacity growth.
    """

    antibody_csp_decay_days: float = 90.
    """
    Decay time constant (days) of anti-CSP concentration above capacity,
    e.g. after a vaccine boost.
    """

    antibody_capacity_growth_rate: float = 0.09
    """
    Maximum growth rate of anti-PfEMP1 antibody capacity (day-1).
    """

    non_specific_growth: float = 0.5
    """
    Scaling of the capacity growth rate for minor (non-specific) PfEMP1 epitopes.
    """

    minimum_adapted_response: float = 0.02
    """
    Baseline stimulation of PfEMP1 capacity growth, as a fraction of
    antibody_stimulation_c50.
    """

    inv_microliters_blood: float = 2e-7
    """
    Inverse of the blood volume in microliters (adult with 5 L of blood).
    Converts antigen counts to antigen densities.
    """

    csp_capacity_growth_rate: float = 0.1
    """
    Growth rate of anti-CSP capacity on days with sporozoite antigen (day-1).
    """

    antibodies: tuple = ()
    """
    Antibodies of the host, as (type name, variant, capacity, concentration).
    Type names are those of utils.AntibodyType, e.g. 'PFEMP1_MAJOR'.
    """

    exposures: tuple = ()
    """
    Antigen exposures, as (start day, end day, antibody index, antigen count).
    The antigen count is detected on every timestep in [start day, end day).
    """

    boosts: tuple = ()
    """
    Externally boosted antibody concentrations, as (day, antibody index, concentration).
    """

    ################################################################
    # Properties are not included when calling dataclasses.fields.
    # They are not included in the parameters.json file.
    ################################################################
    @property
    def n_timesteps(self) -> int:
        """Number of timesteps for this simulation."""
        return int(round(self.simulation_time / self.dt))

    @property
    def history_times(self) -> tuple:
        """Timepoints to save results in history (days), from the initial state
        at 0 up to simulation_time."""
        return tuple(np.arange(0, self.simulation_time + self.tspan_dt / 2, self.tspan_dt))

    @property
    def n_history_timepoints(self) -> int:
        """Number of history timepoints."""
        return len(self.history_times)

    @property
    def n_antibodies(self) -> int:
        """Number of antibodies tracked for the host."""
        return len(self.antibodies)

    ################################################################
    # Methods.
    ################################################################

    total_time = classmethod(utils.total_time)
    """Make total_time a class method to return _total_time."""

    reset_total_time = classmethod(utils.reset_total_time)
    """Make reset_total_time a class method."""

    def update_parameters_from_file(self, file_path: str | Path | None = None) -> None:
        """Update parameter from default by reading file, if file is not None.

        Args:
            file_path: path to the json or yaml file containing new parameters.
        """
        self.updated_params_file = str(file_path) if file_path else None
        if self.updated_params_file:
            updated_params = self.read_parameter_file(self.updated_params_file)
            field_types = {
                field.name: field.type for field in dataclasses.fields(Parameters)
            }
            for key, value in updated_params.items():
                #check that parameter is in attributes
                if key not in field_types:
                    raise AttributeError(f"The parameter '{key}' is not a valid attribute of the Parameters class.")
                setattr(self, key, self.cast_parameter(key, value, field_types[key]))
        self.validate()

    @staticmethod
    def read_parameter_file(file_path: str) -> dict:
        """Read a parameter file based on its suffix."""
        suffix = Path(file_path).suffix
        if suffix == '.json':
            updated_params = utils.read_json(file_path)
        elif suffix in ('.yaml', '.yml'):
            updated_params = utils.read_yaml(file_path)
        else:
            raise ValueError(f"Unsupported parameter file type '{suffix}' for {file_path}")
        if updated_params is None:
            return {}
        if not isinstance(updated_params, dict):
            raise ValueError(f"Parameter file {file_path} must contain a mapping.")
        return updated_params

    @staticmethod
    def cast_parameter(key: str, value: typing.Any, expected_type: typing.Any) -> typing.Any:
        """Cast value read from file to the annotated type of the parameter."""
        if expected_type is tuple or typing.get_origin(expected_type) is tuple:
            if not isinstance(value, (list, tuple)):
                raise TypeError(f"Cannot cast value '{value}' to tuple for attribute '{key}'")
            return utils.convert_list_to_tuple(value)
        if expected_type in (float, int, str, bool):
            if expected_type is not bool and isinstance(value, bool):
                raise TypeError(f"Cannot cast boolean '{value}' to type {expected_type} for attribute '{key}'")
            try:
                # Attempt to cast the value to the expected type
                return expected_type(value)
            except (TypeError, ValueError) as e:
                raise TypeError(f"Cannot cast value '{value}' to type {expected_type} for attribute '{key}': {e}")
        return value

    def validate(self) -> None:
        """Fail fast on a parameter bundle that would silently produce wrong dynamics.

        Raises:
            ValueError: if any rate constant is negative, a time constant or
                antibody_stimulation_c50 is not positive, memory_level is outside
                of [0, 1], or tspan_dt is not a whole multiple of dt.
        """
        non_negative = [
            'hyperimmune_decay_rate',
            'msp1_antibody_growth_rate',
            'antibody_capacity_growth_rate',
            'non_specific_growth',
            'minimum_adapted_response',
            'inv_microliters_blood',
            'csp_capacity_growth_rate',
        ]
        for name in non_negative:
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")

        for name in [
            'antibody_stimulation_c50', 'antibody_csp_decay_days', 'dt', 'simulation_time', 'tspan_dt'
        ]:
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        if not 0 <= self.memory_level <= 1:
            raise ValueError(f"memory_level must be in [0, 1], got {self.memory_level}")

        # history is only recorded at the end of whole timesteps
        steps_per_record = self.tspan_dt / self.dt
        if not np.isclose(steps_per_record, round(steps_per_record)) or round(steps_per_record) < 1:
            raise ValueError(
                f"tspan_dt ({self.tspan_dt}) must be a whole multiple of dt ({self.dt})"
            )

    def get_parameter_dict(self) -> dict:
        """Parameters as a dict, e.g. to write to json.

        Properties from Parameter class are not included.
        """
        return {
            field.name: getattr(self, field.name)
            for field in dataclasses.fields(Parameters)
        }
