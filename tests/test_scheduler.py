"""
Tests for parameter sweeps and frame scheduling.
"""

from __future__ import annotations

import pytest

from multibrotgif.exceptions import ConfigError, InvalidParameterRange
from multibrotgif.scheduler import FrameSchedule, ParameterSweep, schedule_from_config
from multibrotgif.types import Domain, Endpoint, PipelineConfig, SweepTarget


# ---------------------------------------------------------------------------
# ParameterSweep
# ---------------------------------------------------------------------------

class TestParameterSweep:
    def test_inclusive_reaches_end(self):
        sweep = ParameterSweep(2.0, 8.0, 4, Endpoint.INCLUSIVE)
        assert sweep.values() == pytest.approx([2.0, 4.0, 6.0, 8.0])

    def test_exclusive_stops_short(self):
        sweep = ParameterSweep(2.0, 8.0, 4, Endpoint.EXCLUSIVE)
        assert sweep.values() == [2.0, 3.5, 5.0, 6.5]

    def test_single_frame_inclusive_is_start(self):
        assert ParameterSweep(2.0, 8.0, 1, Endpoint.INCLUSIVE).values() == [2.0]

    def test_single_frame_exclusive_is_start(self):
        assert ParameterSweep(2.0, 8.0, 1, Endpoint.EXCLUSIVE).values() == [2.0]

    def test_constant_sweep(self):
        assert ParameterSweep(3.0, 3.0, 3).values() == [3.0, 3.0, 3.0]

    def test_end_before_start_raises(self):
        with pytest.raises(InvalidParameterRange) as exc_info:
            ParameterSweep(8.0, 2.0, 4)
        assert exc_info.value.start == 8.0
        assert exc_info.value.end == 2.0

    def test_non_positive_total_is_empty(self):
        assert ParameterSweep(2.0, 8.0, 0).values() == []
        assert ParameterSweep(2.0, 8.0, -3).values() == []


# ---------------------------------------------------------------------------
# FrameSchedule
# ---------------------------------------------------------------------------

class TestFrameSchedule:
    def test_indices_contiguous(self):
        schedule = FrameSchedule(ParameterSweep(2.0, 8.0, 5))
        assert [t.index for t in schedule] == [0, 1, 2, 3, 4]
        assert len(schedule) == 5

    def test_restartable(self):
        schedule = FrameSchedule(ParameterSweep(2.0, 8.0, 3))
        assert list(schedule) == list(schedule)

    def test_exponent_sweep(self):
        schedule = FrameSchedule(ParameterSweep(2.0, 8.0, 4))
        assert [t.exponent for t in schedule] == pytest.approx([2.0, 4.0, 6.0, 8.0])

    def test_fixed_fields(self):
        schedule = FrameSchedule(
            ParameterSweep(2.0, 3.0, 2), iterations=77, width=30, height=20,
        )
        for task in schedule:
            assert task.iterations == 77
            assert (task.width, task.height) == (30, 20)
            assert (task.x_min, task.x_max, task.y_min, task.y_max) == (-2.0, 2.0, -2.0, 2.0)

    def test_domain_edge_sweep(self):
        schedule = FrameSchedule(
            ParameterSweep(1.0, 2.0, 3),
            target=SweepTarget.X_MAX,
            exponent=3.0,
        )
        tasks = list(schedule)
        assert [t.x_max for t in tasks] == [1.0, 1.5, 2.0]
        assert all(t.exponent == 3.0 for t in tasks)
        assert all(t.x_min == -2.0 for t in tasks)

    def test_task_at_out_of_range(self):
        schedule = FrameSchedule(ParameterSweep(2.0, 8.0, 2))
        with pytest.raises(IndexError):
            schedule.task_at(2)

    def test_empty(self):
        schedule = FrameSchedule(ParameterSweep(2.0, 8.0, 0))
        assert len(schedule) == 0
        assert list(schedule) == []


# ---------------------------------------------------------------------------
# schedule_from_config
# ---------------------------------------------------------------------------

class TestScheduleFromConfig:
    def test_defaults_follow_config(self):
        config = PipelineConfig(dimension=16, frames=3, iterations=12,
                                power_start=2.0, power_end=4.0)
        tasks = list(schedule_from_config(config))
        assert [t.exponent for t in tasks] == [2.0, 3.0, 4.0]
        assert all(t.width == t.height == 16 for t in tasks)
        assert all(t.iterations == 12 for t in tasks)

    def test_custom_domain(self):
        config = PipelineConfig(frames=1, domain=Domain(-1.0, 1.0, -0.5, 0.5))
        (task,) = schedule_from_config(config)
        assert (task.x_min, task.x_max, task.y_min, task.y_max) == (-1.0, 1.0, -0.5, 0.5)

    def test_power_end_before_start(self):
        config = PipelineConfig(power_start=8.0, power_end=2.0)
        with pytest.raises(InvalidParameterRange):
            schedule_from_config(config)

    def test_domain_sweep_needs_bounds(self):
        config = PipelineConfig(frames=2, sweep_target=SweepTarget.Y_MIN)
        with pytest.raises(ConfigError):
            schedule_from_config(config)

    def test_domain_sweep_reversed_bounds(self):
        config = PipelineConfig(frames=2, sweep_target=SweepTarget.Y_MIN,
                                sweep_start=0.0, sweep_end=-1.0)
        with pytest.raises(InvalidParameterRange):
            schedule_from_config(config)

    def test_domain_sweep_holds_exponent(self):
        config = PipelineConfig(frames=2, power_start=3.0, power_end=9.0,
                                sweep_target=SweepTarget.Y_MIN,
                                sweep_start=-2.0, sweep_end=-1.0)
        tasks = list(schedule_from_config(config))
        assert [t.y_min for t in tasks] == [-2.0, -1.0]
        assert all(t.exponent == 3.0 for t in tasks)
