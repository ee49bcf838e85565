r"""
Antibody update laws
====================

Capacity :math:`c` and concentration :math:`a` of an antibody are updated by
forward Euler steps of length `dt` (days). Each antigen family has its own set of
laws. Families share the base (MSP1) laws except where they override them:

| **Family**       | **Decay** | **Capacity growth** | **Concentration** |
|------------------|-----------|---------------------|-------------------|
| `CSP`            | CSP       | base                | CSP               |
| `MSP1`           | base      | base                | base              |
| `PFEMP1_MINOR`   | base      | PfEMP1 minor        | base              |
| `PFEMP1_MAJOR`   | base      | PfEMP1 major        | base              |

Capacity growth is driven by the antigen density
:math:`s = n_{Ag} / V_{blood}` through a saturating response
:math:`\sigma(s) = s / (c_{50} + s)`. Above a capacity of 0.4, B cells
proliferate rapidly:

.. math::
    \frac{dc}{dt} = 0.33 (1 - c)

Antibodies are released once capacity passes 0.3 and relax towards capacity:

.. math::
    \frac{da}{dt} = 4 (c - a)

Every function mutates the antibody in place and reads the parameter bundle only.
"""
import dataclasses
from typing import Callable

from . import utils
from .parameters import Parameters
from .utils import AntibodyType


NON_TRIVIAL_ANTIBODY_THRESHOLD = 1e-7
TWENTY_DAY_DECAY_CONSTANT = 0.05
B_CELL_PROLIFERATION_THRESHOLD = 0.4
B_CELL_PROLIFERATION_CONSTANT = 0.33
ANTIBODY_RELEASE_THRESHOLD = 0.3
ANTIBODY_RELEASE_FACTOR = 4
MAX_ANTIBODY_CAPACITY = 1.0


def decay(antibody, dt: float, params: Parameters) -> None:
    """Decay concentration with a twenty day time constant and relax capacity
    towards the memory level. The two updates are independent."""
    # skip negligible concentrations
    if antibody.concentration > NON_TRIVIAL_ANTIBODY_THRESHOLD:
        antibody.concentration -= antibody.concentration * TWENTY_DAY_DECAY_CONSTANT * dt

    if antibody.capacity > params.memory_level:
        antibody.capacity -= (
            (antibody.capacity - params.memory_level) * params.hyperimmune_decay_rate * dt
        )


def decay_csp_above_capacity(antibody, dt: float, params: Parameters) -> None:
    """Decay of anti-CSP concentration boosted above capacity."""
    antibody.concentration -= antibody.concentration * dt / params.antibody_csp_decay_days


def decay_csp(antibody, dt: float, params: Parameters) -> None:
    """Boosted concentrations decay with antibody_csp_decay_days, skipping the
    base decay (including capacity relaxation) for this step."""
    if antibody.concentration > antibody.capacity:
        decay_csp_above_capacity(antibody, dt, params)
    else:
        decay(antibody, dt, params)


def get_stimulation(antibody, inv_microliters_blood: float) -> float:
    """Antigen density per microliter of blood."""
    return antibody.antigen_count * inv_microliters_blood


def clamp_capacity(antibody) -> None:
    if antibody.capacity > MAX_ANTIBODY_CAPACITY:
        antibody.capacity = MAX_ANTIBODY_CAPACITY


def proliferate(antibody, dt: float) -> None:
    """Rapid B cell proliferation."""
    antibody.capacity += (1 - antibody.capacity) * B_CELL_PROLIFERATION_CONSTANT * dt


def update_capacity(
    antibody, dt: float, params: Parameters, inv_microliters_blood: float
) -> None:
    """Base (MSP1) capacity growth.

    Antigen-driven growth is always applied. Rapid proliferation is added on
    top of it once capacity is above the proliferation threshold.
    """
    stimulation = get_stimulation(antibody, inv_microliters_blood)
    antibody.capacity += (
        params.msp1_antibody_growth_rate * dt * (1 - antibody.capacity)
        * utils.basic_sigmoid(params.antibody_stimulation_c50, stimulation)
    )

    if antibody.capacity > B_CELL_PROLIFERATION_THRESHOLD:
        proliferate(antibody, dt)

    clamp_capacity(antibody)


def update_capacity_with_rate(antibody, dt: float, growth_rate: float) -> None:
    """Capacity growth at a rate supplied by the caller (used for CSP).

    Capacity stays at or below 1 only if it was at or below 1 before the call.
    """
    antibody.capacity += growth_rate * dt * (1 - antibody.capacity)
    clamp_capacity(antibody)


def _pfemp1_growth(
    antibody, dt: float, params: Parameters, inv_microliters_blood: float, growth_rate: float
) -> None:
    min_stimulation = params.antibody_stimulation_c50 * params.minimum_adapted_response
    stimulation = get_stimulation(antibody, inv_microliters_blood) + min_stimulation
    antibody.capacity += (
        growth_rate * dt * (1 - antibody.capacity)
        * utils.basic_sigmoid(params.antibody_stimulation_c50, stimulation)
    )


def update_capacity_pfemp1_minor(
    antibody, dt: float, params: Parameters, inv_microliters_blood: float
) -> None:
    """Minor PfEMP1 capacity growth.

    Below the proliferation threshold growth is antigen-driven with a baseline
    stimulation and a non-specific growth rate, above it only rapid
    proliferation applies.
    """
    if antibody.capacity <= B_CELL_PROLIFERATION_THRESHOLD:
        growth_rate = params.antibody_capacity_growth_rate * params.non_specific_growth
        _pfemp1_growth(antibody, dt, params, inv_microliters_blood, growth_rate)
    else:
        proliferate(antibody, dt)

    clamp_capacity(antibody)


def update_capacity_pfemp1_major(
    antibody, dt: float, params: Parameters, inv_microliters_blood: float
) -> None:
    """Major PfEMP1 capacity growth.

    Same as the minor version with the full growth rate. Capacity is only
    clamped in the antigen-driven branch.
    """
    if antibody.capacity <= B_CELL_PROLIFERATION_THRESHOLD:
        _pfemp1_growth(
            antibody, dt, params, inv_microliters_blood, params.antibody_capacity_growth_rate
        )
        clamp_capacity(antibody)
    else:
        # left unclamped, (1 - c) * 0.33 * dt stays below 1 - c for dt < 1 / 0.33
        proliferate(antibody, dt)


def update_concentration(antibody, dt: float, params: Parameters) -> None:
    """Release of antibodies once capacity passes the release threshold.
    Concentration never ends above capacity."""
    if antibody.capacity > ANTIBODY_RELEASE_THRESHOLD:
        antibody.concentration += (
            (antibody.capacity - antibody.concentration) * ANTIBODY_RELEASE_FACTOR * dt
        )

    if antibody.concentration > antibody.capacity:
        antibody.concentration = antibody.capacity


def update_concentration_csp(antibody, dt: float, params: Parameters) -> None:
    """Boosted anti-CSP concentrations decay instead of being released."""
    if antibody.concentration > antibody.capacity:
        decay_csp_above_capacity(antibody, dt, params)
    else:
        update_concentration(antibody, dt, params)


def stimulate_cytokines(antibody, dt: float, inv_microliters_blood: float) -> float:
    """Cytokine signal from antigen not yet covered by antibodies.

    `dt` is unused and kept so that all per-step calls share a signature.
    """
    return (1 - antibody.concentration) * antibody.antigen_count * inv_microliters_blood


@dataclasses.dataclass(frozen=True)
class UpdateLaw():
    """Set of update functions applied to one antigen family."""

    decay: Callable[..., None]
    update_capacity: Callable[..., None]
    update_concentration: Callable[..., None]


UPDATE_LAWS: dict[AntibodyType, UpdateLaw] = {
    AntibodyType.CSP: UpdateLaw(decay_csp, update_capacity, update_concentration_csp),
    AntibodyType.MSP1: UpdateLaw(decay, update_capacity, update_concentration),
    AntibodyType.PFEMP1_MINOR: UpdateLaw(
        decay, update_capacity_pfemp1_minor, update_concentration
    ),
    AntibodyType.PFEMP1_MAJOR: UpdateLaw(
        decay, update_capacity_pfemp1_major, update_concentration
    ),
}
"""Update laws of each antigen family."""
