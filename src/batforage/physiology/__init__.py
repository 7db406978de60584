"""Physiology: derived body parameters and the per-step energy budget."""

from batforage.physiology.energy_budget import (
    Physiology,
    EnergyUpdate,
    derive_physiology,
    sample_body_mass,
    basal_metabolic_rate,
    flight_power,
    cruising_speed,
    cost_of_transport,
    flight_efficiency,
    foraging_efficiency,
    metabolic_cost,
    apply_energy_update,
)

__all__ = [
    "Physiology",
    "EnergyUpdate",
    "derive_physiology",
    "sample_body_mass",
    "basal_metabolic_rate",
    "flight_power",
    "cruising_speed",
    "cost_of_transport",
    "flight_efficiency",
    "foraging_efficiency",
    "metabolic_cost",
    "apply_energy_update",
]
