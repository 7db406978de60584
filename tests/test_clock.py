"""Tests for the day-night clock."""

import pytest

from batforage.core.clock import ClockState, DayNightClock, DayPhase
from batforage.parameters import SimulationParameters


@pytest.fixture
def clock():
    return DayNightClock(cycle_length=10, active_length=6, return_window=2)


def advance_to(clock, step):
    while clock.step < step:
        clock.advance()
    return clock


class TestDayNightClock:
    """Test step counting and day segmentation."""

    def test_starts_before_first_step(self, clock):
        """Should start at step 0."""
        assert clock.step == 0

    def test_time_of_day_cycles(self, clock):
        """Should wrap time of day every cycle."""
        seen = [clock.advance().time_of_day for _ in range(21)]
        assert seen == [1, 2, 3, 4, 5, 6, 7, 8, 9, 10] * 2 + [1]

    def test_new_day_boundaries(self, clock):
        """Should flag a new day on the first step of each cycle."""
        new_days = []
        for _ in range(25):
            if clock.advance().new_day:
                new_days.append(clock.step)
        assert new_days == [1, 11, 21]

    def test_day_counter(self, clock):
        """Should count days from 1."""
        assert advance_to(clock, 1).day == 1
        assert advance_to(clock, 10).day == 1
        assert advance_to(clock, 11).day == 2

    def test_phases(self, clock):
        """Should split the cycle into active, return window and roost hours."""
        phases = [clock.advance().phase for _ in range(10)]
        assert phases == (
            [DayPhase.ACTIVE] * 4 + [DayPhase.RETURN_WINDOW] * 2 + [DayPhase.ROOST_HOURS] * 4
        )

    def test_no_return_window(self):
        """Should never report a return window of length zero."""
        clock = DayNightClock(cycle_length=4, active_length=2, return_window=0)
        assert not any(clock.advance().phase is DayPhase.RETURN_WINDOW for _ in range(8))

    def test_state_snapshot_frozen(self, clock):
        """Should return an immutable clock state."""
        state = clock.advance()
        assert isinstance(state, ClockState)
        assert state.new_day
        with pytest.raises(Exception):
            state.step = 5

    def test_from_params(self):
        """Should build the clock from simulation parameters."""
        params = SimulationParameters(cycle_length=48, active_length=24, return_window=4)
        clock = advance_to(DayNightClock.from_params(params), 21)
        assert clock.in_return_window
        assert not advance_to(clock, 25).in_return_window

    @pytest.mark.parametrize("args", [(1, 1, 0), (10, 10, 0), (10, 5, 6)])
    def test_invalid_configuration(self, args):
        """Should reject inconsistent cycle lengths."""
        with pytest.raises(ValueError):
            DayNightClock(*args)
