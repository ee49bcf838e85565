"""Tests for reading and validating parameters."""

import pytest

from malaria_antibody import Parameters, utils


def test_defaults_are_valid():
    params = Parameters()
    params.validate()
    assert params.n_timesteps == 365
    assert params.n_history_timepoints == 366
    assert params.n_antibodies == 0


def test_update_from_yaml(tmp_path):
    file_path = tmp_path / 'params.yaml'
    utils.write_yaml({
        'memory_level': 0.3,
        'simulation_time': 10,
        'antibodies': [['CSP', 0, 0.1, 0.0], ['MSP1', 1, 0.2, 0.0]],
    }, file_path)

    params = Parameters()
    params.update_parameters_from_file(file_path)
    assert params.updated_params_file == str(file_path)
    assert params.memory_level == 0.3
    assert isinstance(params.simulation_time, float)
    assert params.antibodies == (('CSP', 0, 0.1, 0.0), ('MSP1', 1, 0.2, 0.0))
    assert params.n_antibodies == 2


def test_update_from_json(tmp_path):
    file_path = tmp_path / 'params.json'
    utils.write_json({'antibody_csp_decay_days': 30, 'overwrite': False}, file_path)

    params = Parameters()
    params.update_parameters_from_file(file_path)
    assert params.antibody_csp_decay_days == 30.
    assert params.overwrite is False


def test_no_file_keeps_defaults():
    params = Parameters()
    params.update_parameters_from_file(None)
    assert params == Parameters()


def test_unknown_parameter(tmp_path):
    file_path = tmp_path / 'params.json'
    utils.write_json({'not_a_parameter': 1}, file_path)
    with pytest.raises(AttributeError):
        Parameters().update_parameters_from_file(file_path)


def test_uncastable_parameter(tmp_path):
    file_path = tmp_path / 'params.json'
    utils.write_json({'dt': 'one day'}, file_path)
    with pytest.raises(TypeError):
        Parameters().update_parameters_from_file(file_path)


def test_unsupported_file_type(tmp_path):
    file_path = tmp_path / 'params.txt'
    file_path.write_text('dt: 1')
    with pytest.raises(ValueError):
        Parameters().update_parameters_from_file(file_path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        Parameters().update_parameters_from_file(tmp_path / 'missing.yaml')


@pytest.mark.parametrize('name, value', [
    ('hyperimmune_decay_rate', -0.1),
    ('msp1_antibody_growth_rate', -1.),
    ('antibody_stimulation_c50', -30.),
    ('antibody_stimulation_c50', 0.),
    ('minimum_adapted_response', -0.02),
    ('antibody_csp_decay_days', 0.),
    ('dt', 0.),
    ('tspan_dt', 0.),
    ('simulation_time', -1.),
    ('memory_level', 1.5),
])
def test_invalid_parameters(name, value):
    params = Parameters(**{name: value})
    with pytest.raises(ValueError):
        params.validate()


@pytest.mark.parametrize('dt, tspan_dt', [
    (0.3, 1.0),
    (1.0, 0.5),
    (2.0, 3.0),
])
def test_tspan_dt_not_multiple_of_dt(dt, tspan_dt):
    with pytest.raises(ValueError):
        Parameters(dt=dt, tspan_dt=tspan_dt).validate()


def test_tspan_dt_multiple_of_dt():
    params = Parameters(dt=0.1, tspan_dt=1.0, simulation_time=3)
    params.validate()
    assert params.n_timesteps == 30
    assert params.history_times == pytest.approx((0., 1., 2., 3.))


def test_invalid_parameter_in_file(tmp_path):
    file_path = tmp_path / 'params.yaml'
    utils.write_yaml({'non_specific_growth': -0.5}, file_path)
    with pytest.raises(ValueError):
        Parameters().update_parameters_from_file(file_path)


def test_parameter_dict_round_trips(tmp_path):
    params = Parameters(exposures=((1, 2, 0, 100),), memory_level=0.25)
    file_path = tmp_path / 'parameters.json'
    parameter_dict = params.get_parameter_dict()
    assert 'n_timesteps' not in parameter_dict
    parameter_dict.pop('updated_params_file')
    utils.write_json(parameter_dict, file_path)

    restored = Parameters()
    restored.update_parameters_from_file(file_path)
    assert restored.exposures == params.exposures
    assert restored.memory_level == params.memory_level
