"""Constructors of antibodies for each antigen family.

The family of an antibody is only ever assigned here.
"""
from .antibody import Antibody
from .utils import AntibodyType


def create_csp_antibody(variant: int, capacity: float, concentration: float = 0.) -> Antibody:
    return Antibody(AntibodyType.CSP, variant, capacity, concentration)


def create_msp_antibody(variant: int, capacity: float, concentration: float = 0.) -> Antibody:
    return Antibody(AntibodyType.MSP1, variant, capacity, concentration)


def create_pfemp1_minor_antibody(
    variant: int, capacity: float, concentration: float = 0.
) -> Antibody:
    return Antibody(AntibodyType.PFEMP1_MINOR, variant, capacity, concentration)


def create_pfemp1_major_antibody(
    variant: int, capacity: float, concentration: float = 0.
) -> Antibody:
    return Antibody(AntibodyType.PFEMP1_MAJOR, variant, capacity, concentration)


ANTIBODY_CONSTRUCTORS = {
    AntibodyType.CSP: create_csp_antibody,
    AntibodyType.MSP1: create_msp_antibody,
    AntibodyType.PFEMP1_MINOR: create_pfemp1_minor_antibody,
    AntibodyType.PFEMP1_MAJOR: create_pfemp1_major_antibody,
}


def create_antibody(
    antibody_type: AntibodyType | str,
    variant: int,
    capacity: float,
    concentration: float = 0.,
) -> Antibody:
    """Create an antibody of the given family.

    Args:
        antibody_type: The family, or the name of a member of AntibodyType.
        variant: Antigenic variant within the family.
        capacity: Initial antibody capacity.
        concentration: Initial antibody concentration.

    Raises:
        KeyError: if antibody_type is not the name of an antigen family.
    """
    if isinstance(antibody_type, str):
        antibody_type = AntibodyType[antibody_type]
    return ANTIBODY_CONSTRUCTORS[antibody_type](variant, capacity, concentration)
