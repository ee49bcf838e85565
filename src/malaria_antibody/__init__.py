r"""
Model of the within-host antibody response to malaria antigens
==============================================================

The module `malaria_antibody` contains an `Antibody` class holding the capacity
and concentration of antibodies of one host against one antigenic variant, the
`update_laws` that evolve them over time for each antigen family (CSP, MSP1,
minor and major PfEMP1 epitopes), and a `Simulation` class which runs all
antibodies of a host against a schedule of antigen exposures and vaccine boosts.

Antibody capacity is the adaptive ceiling on antibody production and represents
the memory B cell population. It grows with antigen stimulation, switches to rapid
B cell proliferation above a threshold and relaxes to a long-term memory level.
Antibody concentration is released once capacity passes a threshold, is bounded
by capacity and decays over time.
"""
from .antibody import Antibody
from .factory import (
    create_antibody,
    create_csp_antibody,
    create_msp_antibody,
    create_pfemp1_minor_antibody,
    create_pfemp1_major_antibody,
)
from .parameters import Parameters
from .simulation import Simulation
from .utils import AntibodyType

__all__ = [
    'Antibody', 'AntibodyType', 'Parameters', 'Simulation',
    'create_antibody', 'create_csp_antibody', 'create_msp_antibody',
    'create_pfemp1_minor_antibody', 'create_pfemp1_major_antibody',
]
