"""Tests for the antibody update laws of each antigen family."""

import pytest

from malaria_antibody import update_laws, utils
from malaria_antibody.factory import (
    create_antibody,
    create_csp_antibody,
    create_msp_antibody,
    create_pfemp1_minor_antibody,
    create_pfemp1_major_antibody,
)
from malaria_antibody.parameters import Parameters
from malaria_antibody.utils import AntibodyType


@pytest.fixture
def params():
    return Parameters()


def test_basic_sigmoid():
    assert utils.basic_sigmoid(30., 30.) == pytest.approx(0.5)
    assert utils.basic_sigmoid(30., 0.) == 0.
    assert utils.basic_sigmoid(30., -5.) == 0.
    assert 0.99 < utils.basic_sigmoid(30., 1e6) < 1.
    assert utils.basic_sigmoid(30., 10.) < utils.basic_sigmoid(30., 20.)


def test_update_laws_cover_all_families():
    assert set(update_laws.UPDATE_LAWS) == set(AntibodyType)


# Decay

def test_decay_concentration_and_capacity(params):
    antibody = create_msp_antibody(0, capacity=0.8, concentration=0.5)
    antibody.decay(1., params)
    assert antibody.concentration == pytest.approx(0.5 - 0.5 * 0.05)
    assert antibody.capacity == pytest.approx(
        0.8 - (0.8 - params.memory_level) * params.hyperimmune_decay_rate
    )


def test_decay_skips_negligible_concentration(params):
    antibody = create_msp_antibody(0, capacity=0.8, concentration=1e-8)
    antibody.decay(1., params)
    assert antibody.concentration == 1e-8


def test_decay_capacity_at_memory_level(params):
    antibody = create_pfemp1_major_antibody(3, capacity=params.memory_level, concentration=0.1)
    antibody.decay(1., params)
    assert antibody.capacity == params.memory_level
    assert antibody.concentration == pytest.approx(0.095)


def test_csp_decay_above_capacity():
    params = Parameters(antibody_csp_decay_days=30.)
    antibody = create_csp_antibody(0, capacity=1.0, concentration=1.2)
    antibody.decay(1., params)
    assert antibody.concentration == pytest.approx(1.2 - 1.2 / 30)
    assert antibody.capacity == 1.0


def test_csp_decay_below_capacity_uses_base_law(params):
    csp = create_csp_antibody(0, capacity=0.8, concentration=0.5)
    msp = create_msp_antibody(0, capacity=0.8, concentration=0.5)
    csp.decay(1., params)
    msp.decay(1., params)
    assert csp.concentration == msp.concentration
    assert csp.capacity == msp.capacity


# Capacity growth

def test_msp_capacity_and_concentration_scenario():
    params = Parameters(msp1_antibody_growth_rate=0.01, antibody_stimulation_c50=0.5)
    antibody = create_msp_antibody(0, capacity=0.5, concentration=0.2)
    antibody.increase_antigen_count(1000)

    antibody.update_capacity(1., params, 0.001)
    capacity = 0.5 + 0.01 * 0.5 * (1. / 1.5)
    capacity += (1 - capacity) * 0.33
    assert antibody.capacity == pytest.approx(capacity)
    assert antibody.capacity <= 1.

    antibody.update_concentration(1., params)
    assert 0.2 < antibody.concentration <= antibody.capacity


def test_msp_capacity_below_proliferation_threshold():
    params = Parameters(msp1_antibody_growth_rate=0.02, antibody_stimulation_c50=30.)
    antibody = create_msp_antibody(0, capacity=0.1)
    antibody.increase_antigen_count(30)
    antibody.update_capacity(0.5, params, 1.)
    assert antibody.capacity == pytest.approx(0.1 + 0.02 * 0.5 * 0.9 * 0.5)


def test_csp_uses_base_capacity_law(params):
    csp = create_csp_antibody(0, capacity=0.5)
    msp = create_msp_antibody(0, capacity=0.5)
    for antibody in (csp, msp):
        antibody.increase_antigen_count(10 ** 9)
        antibody.update_capacity(1., params, params.inv_microliters_blood)
    assert csp.capacity == msp.capacity


def test_capacity_with_rate():
    antibody = create_csp_antibody(0, capacity=0.5)
    antibody.update_capacity_with_rate(1., 0.1)
    assert antibody.capacity == pytest.approx(0.55)

    antibody.update_capacity_with_rate(1., 5.)
    assert antibody.capacity == 1.


def test_pfemp1_minor_baseline_stimulation(params):
    antibody = create_pfemp1_minor_antibody(1, capacity=0.1)
    antibody.update_capacity(1., params, params.inv_microliters_blood)
    min_stimulation = params.antibody_stimulation_c50 * params.minimum_adapted_response
    sigmoid = min_stimulation / (params.antibody_stimulation_c50 + min_stimulation)
    growth_rate = params.antibody_capacity_growth_rate * params.non_specific_growth
    assert antibody.capacity == pytest.approx(0.1 + growth_rate * 0.9 * sigmoid)


def test_pfemp1_major_growth_rate(params):
    minor = create_pfemp1_minor_antibody(1, capacity=0.1)
    major = create_pfemp1_major_antibody(1, capacity=0.1)
    for antibody in (minor, major):
        antibody.increase_antigen_count(10 ** 8)
        antibody.update_capacity(1., params, params.inv_microliters_blood)
    assert major.capacity - 0.1 == pytest.approx((minor.capacity - 0.1) / params.non_specific_growth)


@pytest.mark.parametrize('antibody_type', [AntibodyType.PFEMP1_MINOR, AntibodyType.PFEMP1_MAJOR])
def test_pfemp1_above_threshold_only_proliferates(params, antibody_type):
    antibody = create_antibody(antibody_type, 7, capacity=0.41)
    antibody.increase_antigen_count(10 ** 9)
    antibody.update_capacity(1., params, params.inv_microliters_blood)
    assert antibody.capacity == pytest.approx(0.41 + 0.59 * 0.33)


def test_pfemp1_major_clamps_antigen_driven_growth():
    params = Parameters(antibody_capacity_growth_rate=100.)
    antibody = create_pfemp1_major_antibody(0, capacity=0.4)
    antibody.increase_antigen_count(10 ** 12)
    antibody.update_capacity(1., params, params.inv_microliters_blood)
    assert antibody.capacity == 1.


def test_pfemp1_major_proliferation_is_not_clamped(params):
    major = create_pfemp1_major_antibody(0, capacity=0.9)
    minor = create_pfemp1_minor_antibody(0, capacity=0.9)
    for antibody in (major, minor):
        antibody.update_capacity(5., params, params.inv_microliters_blood)
    assert major.capacity == pytest.approx(0.9 + 0.1 * 0.33 * 5)
    assert minor.capacity == 1.


@pytest.mark.parametrize('antibody_type', list(AntibodyType))
@pytest.mark.parametrize('capacity', [0., 0.2, 0.4, 0.41, 0.7, 0.99, 1.])
@pytest.mark.parametrize('dt', [0.1, 1.])
def test_capacity_stays_in_unit_interval(params, antibody_type, capacity, dt):
    antibody = create_antibody(antibody_type, 0, capacity)
    antibody.increase_antigen_count(10 ** 10)
    antibody.update_capacity(dt, params, params.inv_microliters_blood)
    assert 0. <= antibody.capacity <= 1.


# Concentration

@pytest.mark.parametrize('capacity, concentration', [
    (0.2, 0.1), (0.31, 0.), (0.5, 0.2), (0.9, 0.9), (1., 0.3),
])
@pytest.mark.parametrize('dt', [0.05, 0.5, 1.])
def test_release_bounded_by_capacity(params, capacity, concentration, dt):
    antibody = create_msp_antibody(0, capacity, concentration)
    antibody.update_concentration(dt, params)
    assert antibody.concentration <= antibody.capacity
    if capacity > 0.3:
        assert antibody.concentration >= concentration
    else:
        assert antibody.concentration == concentration


def test_release_rate(params):
    antibody = create_pfemp1_minor_antibody(0, capacity=0.8, concentration=0.4)
    antibody.update_concentration(0.1, params)
    assert antibody.concentration == pytest.approx(0.4 + 0.4 * 4 * 0.1)


def test_concentration_clamped_to_capacity(params):
    antibody = create_msp_antibody(0, capacity=0.2, concentration=0.5)
    antibody.update_concentration(1., params)
    assert antibody.concentration == 0.2


def test_csp_concentration_above_capacity_decays():
    params = Parameters(antibody_csp_decay_days=30.)
    antibody = create_csp_antibody(0, capacity=1.0, concentration=1.2)
    antibody.update_concentration(1., params)
    assert antibody.concentration == pytest.approx(1.2 - 1.2 / 30)
    assert antibody.concentration > antibody.capacity


def test_csp_decay_does_not_cross_zero():
    params = Parameters(antibody_csp_decay_days=30.)
    antibody = create_csp_antibody(0, capacity=0., concentration=1.5)
    for _ in range(200):
        previous = antibody.concentration
        antibody.decay(1., params)
        antibody.update_concentration(1., params)
        assert 0. < antibody.concentration < previous


def test_csp_concentration_below_capacity_released(params):
    antibody = create_csp_antibody(0, capacity=0.8, concentration=0.4)
    antibody.update_concentration(0.1, params)
    assert antibody.concentration == pytest.approx(0.56)


# Zero timestep

@pytest.mark.parametrize('antibody_type', list(AntibodyType))
@pytest.mark.parametrize('capacity, concentration', [(0.1, 0.05), (0.35, 0.2), (0.6, 0.5), (1., 1.)])
def test_zero_timestep_is_noop(params, antibody_type, capacity, concentration):
    antibody = create_antibody(antibody_type, 0, capacity, concentration)
    antibody.increase_antigen_count(10 ** 9)
    antibody.decay(0., params)
    antibody.update_capacity(0., params, params.inv_microliters_blood)
    antibody.update_capacity_with_rate(0., 0.5)
    antibody.update_concentration(0., params)
    assert antibody.capacity == capacity
    assert antibody.concentration == concentration


def test_zero_timestep_boosted_csp(params):
    antibody = create_csp_antibody(0, capacity=0.5, concentration=1.3)
    antibody.decay(0., params)
    antibody.update_concentration(0., params)
    assert antibody.concentration == 1.3
    assert antibody.capacity == 0.5


# Cytokines

def test_stimulate_cytokines():
    antibody = create_pfemp1_major_antibody(0, capacity=0.5, concentration=0.25)
    antibody.increase_antigen_count(1000)
    assert antibody.stimulate_cytokines(1., 0.001) == pytest.approx(0.75)
    assert antibody.stimulate_cytokines(0., 0.001) == antibody.stimulate_cytokines(5., 0.001)
    assert antibody.concentration == 0.25
    assert antibody.antigen_count == 1000


def test_no_cytokines_without_antigen():
    antibody = create_msp_antibody(0, capacity=0.5)
    assert antibody.stimulate_cytokines(1., 0.001) == 0.
