"""
Cyclic day-night clock.

A simulated day of ``cycle_length`` steps is split into a nightly active
period followed by a daytime roosting segment:

    time_of_day:  1 ........ active_length | active_length+1 ... cycle_length
                  [ foraging | return window ][          roost hours        ]

The return window is the last ``return_window`` steps of the active period.
Step counting starts at 1; ``time_of_day = ((t - 1) mod cycle_length) + 1``
and a new day begins whenever ``t mod cycle_length == 1``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class DayPhase(Enum):
    """Segment of the day a time-of-day value falls in."""
    ACTIVE = auto()
    RETURN_WINDOW = auto()
    ROOST_HOURS = auto()


@dataclass(frozen=True)
class ClockState:
    """Immutable snapshot of the clock at one step."""
    step: int
    day: int
    time_of_day: int
    phase: DayPhase
    new_day: bool


class DayNightClock:
    """
    Step counter with day-night segmentation.

    Example:
        clock = DayNightClock(cycle_length=48, active_length=24, return_window=4)
        while clock.step < n_steps:
            clock.advance()
            if clock.is_new_day:
                ...  # regenerate patches
    """

    def __init__(self, cycle_length: int, active_length: int, return_window: int):
        if cycle_length < 2:
            raise ValueError("cycle_length must be at least 2")
        if not 1 <= active_length < cycle_length:
            raise ValueError("active_length must be in [1, cycle_length)")
        if not 0 <= return_window <= active_length:
            raise ValueError("return_window must be in [0, active_length]")
        self.cycle_length = cycle_length
        self.active_length = active_length
        self.return_window = return_window
        self._step = 0

    @classmethod
    def from_params(cls, params) -> DayNightClock:
        return cls(params.cycle_length, params.active_length, params.return_window)

    @property
    def step(self) -> int:
        """Current step (0 before the first advance)."""
        return self._step

    def advance(self) -> ClockState:
        """Move to the next step and return the new state."""
        self._step += 1
        return self.state

    @property
    def time_of_day(self) -> int:
        return ((self._step - 1) % self.cycle_length) + 1

    @property
    def day(self) -> int:
        """Day number, starting at 1 on the first step."""
        return (self._step - 1) // self.cycle_length + 1

    @property
    def is_new_day(self) -> bool:
        return self._step % self.cycle_length == 1

    @property
    def in_return_window(self) -> bool:
        tod = self.time_of_day
        return self.return_window > 0 and (
            self.active_length - self.return_window < tod <= self.active_length
        )

    @property
    def is_roost_hours(self) -> bool:
        return self.time_of_day > self.active_length

    @property
    def phase(self) -> DayPhase:
        if self.is_roost_hours:
            return DayPhase.ROOST_HOURS
        if self.in_return_window:
            return DayPhase.RETURN_WINDOW
        return DayPhase.ACTIVE

    @property
    def state(self) -> ClockState:
        return ClockState(
            step=self._step,
            day=self.day,
            time_of_day=self.time_of_day,
            phase=self.phase,
            new_day=self.is_new_day,
        )
