r"""
Antibody class
==============

This module defines the `Antibody` class, which holds the state of the humoral
response of one host to one antigenic variant of one antigen family.

| **Attribute**      | **Type**       | **Description** |
|--------------------|----------------|-----------------|
| `antibody_type`    | `AntibodyType` | Antigen family targeted, selects the update laws. |
| `variant`          | `int`          | Antigenic variant within the family. |
| `capacity`         | `float`        | Adaptive ceiling on concentration, a proxy for memory B cells (*0, ..., 1*). |
| `concentration`    | `float`        | Circulating antibody level, normally at most `capacity`. |
| `antigen_count`    | `int`          | Antigen detected since the last `reset_counters`. |
| `antigen_present`  | `bool`         | Whether any antigen was detected since the last `reset_counters`. |

Assigning `capacity` or `concentration` directly is a trusted override (e.g. a
vaccine boost or restoring a saved state) and is never clamped.
"""
import dataclasses
from typing import Self

from . import update_laws
from .parameters import Parameters
from .utils import AntibodyType


@dataclasses.dataclass
class Antibody():
    """Antibody capacity, concentration and antigen counters.

    Use the functions in `factory` to create antibodies of a given family.
    """

    antibody_type: AntibodyType
    variant: int
    capacity: float
    concentration: float = 0.
    antigen_count: int = 0
    antigen_present: bool = False

    @property
    def update_law(self) -> update_laws.UpdateLaw:
        return update_laws.UPDATE_LAWS[self.antibody_type]

    def reset_counters(self) -> None:
        """Forget the antigen detected in the previous timestep."""
        self.antigen_present = False
        self.antigen_count = 0

    def increase_antigen_count(self, antigen_count: int) -> None:
        """Record detected antigen. Non-positive counts are ignored."""
        if antigen_count > 0:
            self.antigen_count += antigen_count
            self.antigen_present = True

    def set_antigenic_presence(self, antigen_present: bool) -> None:
        self.antigen_present = antigen_present

    def decay(self, dt: float, params: Parameters) -> None:
        self.update_law.decay(self, dt, params)

    def update_capacity(
        self, dt: float, params: Parameters, inv_microliters_blood: float
    ) -> None:
        """Antigen-driven growth of capacity according to the family's law."""
        self.update_law.update_capacity(self, dt, params, inv_microliters_blood)

    def update_capacity_with_rate(self, dt: float, growth_rate: float) -> None:
        """Capacity growth at an explicit rate, e.g. for CSP after sporozoite exposure."""
        update_laws.update_capacity_with_rate(self, dt, growth_rate)

    def update_concentration(self, dt: float, params: Parameters) -> None:
        self.update_law.update_concentration(self, dt, params)

    def stimulate_cytokines(self, dt: float, inv_microliters_blood: float) -> float:
        return update_laws.stimulate_cytokines(self, dt, inv_microliters_blood)

    def to_dict(self) -> dict:
        """State of the antibody as a json/yaml serializable dict."""
        return {
            'capacity': float(self.capacity),
            'concentration': float(self.concentration),
            'antigen_count': int(self.antigen_count),
            'antigen_present': bool(self.antigen_present),
            'antibody_type': self.antibody_type.name,
            'variant': int(self.variant),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Restore an antibody written by `to_dict`.

        The type may be given by name or by value. Fields are assigned as is,
        so saved states (including boosted ones) round-trip exactly.

        Raises:
            KeyError: if a field is missing or the type name is unknown.
            ValueError: if the type value is unknown.
        """
        antibody_type = data['antibody_type']
        if isinstance(antibody_type, str):
            antibody_type = AntibodyType[antibody_type]
        else:
            antibody_type = AntibodyType(antibody_type)
        return cls(
            antibody_type=antibody_type,
            variant=int(data['variant']),
            capacity=float(data['capacity']),
            concentration=float(data['concentration']),
            antigen_count=int(data['antigen_count']),
            antigen_present=bool(data['antigen_present']),
        )
