"""
Simulation parameters configuration.

All configurable model parameters with their defaults and validation.
Values are supplied once at start; there is no dynamic reconfiguration.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Optional, Tuple

from batforage.parameters.errors import ConfigurationError


Range = Tuple[float, float]


@dataclass
class SimulationParameters:
    """
    All simulation parameters with defaults.

    Spatial quantities are in domain units (the same units as
    ``cell_size``), energies in calories and time in steps.
    """

    # === Simulation Setup ===
    random_seed: Optional[int] = None
    n_steps: int = 480                 # Total steps to run (10 days at default cycle)
    bat_count: int = 50                # Fixed population size

    # === Domain ===
    domain_size: Tuple[float, ...] = (100.0, 100.0)   # Extent per axis (2D or 3D)
    cell_size: float = 1.0             # Resource field resolution

    # === Patches ===
    n_patches: int = 12
    patch_radius_range: Range = (3.0, 8.0)
    patch_prey_range: Range = (1.0, 5.0)       # Prey per cell inside a patch
    patch_capacity_range: Tuple[int, int] = (2, 8)

    # === Roosts ===
    roost_sites: Tuple[Tuple[float, ...], ...] = ((50.0, 50.0),)

    # === Energetics ===
    metabolic_rate_factor: float = 1.0       # Multiplier on BMR per active step
    death_threshold: float = 0.0             # Calories at or below which a bat dies
    max_calories: float = 100.0
    initial_calorie_range: Range = (0.6, 1.0)  # Fraction of max_calories at creation
    forage_gain_range: Range = (1.0, 3.0)    # Calories per foraging step before efficiency

    # === Day-night cycle ===
    cycle_length: int = 48                   # Steps per simulated day
    active_length: int = 24                  # Nightly active steps, then roosting
    return_window: int = 4                   # Trailing active steps spent returning

    # === Perception and movement ===
    sensory_range: float = 20.0
    min_flight_efficiency: float = 0.5
    min_foraging_efficiency: float = 0.5
    step_size: float = 2.0
    tolerance: float = 0.5                   # Collision and arrival tolerance
    repulsion_radius: float = 2.0

    # === Population composition ===
    competition_rate_range: Range = (0.1, 0.5)
    group_joiner_fraction: float = 0.5
    female_fraction: float = 0.5
    pregnant_fraction: float = 0.3           # Of females
    lactating_fraction: float = 0.3          # Of females
    age_range: Tuple[int, int] = (1, 10)     # Years, inclusive
    mass_mean_male: float = 20.0             # grams
    mass_mean_female: float = 22.0
    mass_sd: float = 2.0

    def __post_init__(self):
        """Validate parameters."""
        self.domain_size = tuple(float(v) for v in self.domain_size)
        self.roost_sites = tuple(tuple(float(c) for c in site) for site in self.roost_sites)
        self._validate()

    def _validate(self) -> None:
        """Validate parameter ranges."""
        if self.n_steps < 1:
            raise ConfigurationError("n_steps must be at least 1")
        if self.bat_count < 0:
            raise ConfigurationError("bat_count must be non-negative")
        if len(self.domain_size) not in (2, 3):
            raise ConfigurationError("domain_size must have 2 or 3 axes")
        if any(v <= 0 for v in self.domain_size):
            raise ConfigurationError("domain_size extents must be positive")
        if self.cell_size <= 0:
            raise ConfigurationError("cell_size must be positive")
        if self.n_patches < 0:
            raise ConfigurationError("n_patches must be non-negative")

        self._check_range("patch_radius_range", self.patch_radius_range)
        self._check_range("patch_prey_range", self.patch_prey_range, strictly_positive=True)
        self._check_range("patch_capacity_range", self.patch_capacity_range)
        self._check_range("initial_calorie_range", self.initial_calorie_range)
        self._check_range("forage_gain_range", self.forage_gain_range)
        self._check_range("competition_rate_range", self.competition_rate_range)
        self._check_range("age_range", self.age_range)
        if self.initial_calorie_range[1] > 1.0:
            raise ConfigurationError("initial_calorie_range is a fraction and must not exceed 1")
        if self.age_range[0] < 1:
            raise ConfigurationError("age_range must start at 1 year or later")

        if not self.roost_sites:
            raise ConfigurationError("at least one roost site is required")
        for site in self.roost_sites:
            if len(site) != len(self.domain_size):
                raise ConfigurationError(
                    f"roost site {site} does not match domain dimensionality {len(self.domain_size)}"
                )
            if any(c < 0 or c > extent for c, extent in zip(site, self.domain_size)):
                raise ConfigurationError(f"roost site {site} lies outside the domain")

        if self.max_calories <= 0:
            raise ConfigurationError("max_calories must be positive")
        if not 0 <= self.death_threshold < self.max_calories:
            raise ConfigurationError("death_threshold must be in [0, max_calories)")
        if self.metabolic_rate_factor < 0:
            raise ConfigurationError("metabolic_rate_factor must be non-negative")

        if self.cycle_length < 2:
            raise ConfigurationError("cycle_length must be at least 2")
        if not 1 <= self.active_length < self.cycle_length:
            raise ConfigurationError("active_length must be in [1, cycle_length)")
        if not 0 <= self.return_window <= self.active_length:
            raise ConfigurationError("return_window must be in [0, active_length]")

        for name in ("min_flight_efficiency", "min_foraging_efficiency"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ConfigurationError(f"{name} must be in (0, 1]")
        for name in ("step_size", "tolerance", "repulsion_radius", "sensory_range"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be positive")
        for name in ("group_joiner_fraction", "female_fraction",
                     "pregnant_fraction", "lactating_fraction"):
            if not 0 <= getattr(self, name) <= 1:
                raise ConfigurationError(f"{name} must be between 0 and 1")
        if self.pregnant_fraction + self.lactating_fraction > 1:
            raise ConfigurationError("pregnant_fraction + lactating_fraction must not exceed 1")
        if self.mass_mean_male <= 0 or self.mass_mean_female <= 0 or self.mass_sd < 0:
            raise ConfigurationError("bat masses must be positive")

    @staticmethod
    def _check_range(name: str, value, strictly_positive: bool = False) -> None:
        if len(value) != 2:
            raise ConfigurationError(f"{name} must be a (low, high) pair")
        low, high = value
        if low < 0 or (strictly_positive and low <= 0):
            raise ConfigurationError(f"{name} lower bound must be positive")
        if high < low:
            raise ConfigurationError(f"{name} upper bound must not be below lower bound")

    @classmethod
    def from_dict(cls, params: dict) -> SimulationParameters:
        """Create parameters from dictionary."""
        return cls(**{k: v for k, v in params.items() if hasattr(cls, k)})

    def to_dict(self) -> dict:
        """Convert parameters to dictionary."""
        return asdict(self)

    @property
    def ndim(self) -> int:
        """Number of spatial axes (2 or 3)."""
        return len(self.domain_size)

    @property
    def roost_hours_start(self) -> int:
        """First time-of-day value of the daytime roosting segment."""
        return self.active_length + 1

    @property
    def return_window_start(self) -> int:
        """First time-of-day value of the pre-sunrise return window."""
        return self.active_length - self.return_window + 1
