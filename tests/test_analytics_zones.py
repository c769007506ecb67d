"""Tests for fitengine.analytics.zones -- Karvonen zones and time in zone."""

from datetime import timedelta

import pytest

from fitengine.analytics.zones import (
    zone_boundaries,
    zone_for,
    zone_durations,
    _round_half_down,
    HeartRateZoneBoundaries,
    ZoneDistribution,
)

from tests.conftest import NOW, make_hr_series, make_profile


class TestRoundHalfDown:
    def test_below_half(self):
        assert _round_half_down(123.4) == 123

    def test_above_half(self):
        assert _round_half_down(161.6) == 162

    def test_tie_goes_down(self):
        assert _round_half_down(123.5) == 123


class TestZoneBoundaries:
    def test_age_30_resting_60(self):
        z = zone_boundaries(make_profile(max_hr=187, resting_hr=60))
        assert z.as_list() == [123, 136, 149, 162, 174]
        assert z.max_hr == 187

    @pytest.mark.parametrize("max_hr,resting", [(150, 30), (187, 60), (220, 120), (200, 45)])
    def test_strictly_increasing(self, max_hr, resting):
        z = zone_boundaries(make_profile(max_hr=max_hr, resting_hr=resting))
        b = z.as_list()
        assert all(a < b_ for a, b_ in zip(b, b[1:]))
        assert b[-1] <= z.max_hr

    def test_narrow_reserve_widened(self):
        z = zone_boundaries(make_profile(max_hr=150, resting_hr=148))
        b = z.as_list()
        assert all(a < b_ for a, b_ in zip(b, b[1:]))
        assert b[-1] <= 150

    def test_zone_name(self):
        assert HeartRateZoneBoundaries.zone_name(1) == "Recovery"
        assert HeartRateZoneBoundaries.zone_name(5) == "VO2 Max"
        assert HeartRateZoneBoundaries.zone_name(9) == "Unknown"


class TestZoneFor:
    @pytest.fixture
    def zones(self):
        return zone_boundaries(make_profile())

    def test_very_low_clamps_to_1(self, zones):
        assert zone_for(zones, 40) == 1

    def test_just_below_zone1_max(self, zones):
        assert zone_for(zones, 122) == 1

    def test_at_zone1_max_is_zone_2(self, zones):
        assert zone_for(zones, 123) == 2

    def test_zone_3(self, zones):
        assert zone_for(zones, 140) == 3

    def test_zone_4(self, zones):
        assert zone_for(zones, 160) == 4

    def test_at_zone4_max_is_zone_5(self, zones):
        assert zone_for(zones, 162) == 5

    def test_above_max_clamps_to_5(self, zones):
        assert zones.zone_for(230) == 5


class TestZoneDurations:
    @pytest.fixture
    def zones(self):
        return zone_boundaries(make_profile())

    def test_empty(self, zones):
        dist = zone_durations([], zones)
        assert dist.total_sec == 0.0
        assert all(p == 0.0 for p in dist.percentages.values())

    def test_gap_goes_to_earlier_sample(self, zones):
        samples = make_hr_series(NOW, [100, 170], interval_sec=60)
        dist = zone_durations(samples, zones, tail_sec=5.0)
        assert dist.seconds[1] == 60.0
        assert dist.seconds[5] == 5.0

    def test_non_finite_readings_dropped(self, zones):
        samples = make_hr_series(NOW, [100, float("nan"), 170, float("inf")], interval_sec=60)
        dist = zone_durations(samples, zones, tail_sec=5.0)
        assert dist.seconds[1] == 120.0
        assert dist.seconds[5] == 5.0
        assert dist.total_sec == 125.0

    def test_unsorted_input(self, zones):
        samples = make_hr_series(NOW, [100, 140, 160], interval_sec=10)
        dist = zone_durations(list(reversed(samples)), zones, tail_sec=0.0)
        assert dist.seconds[1] == 10.0
        assert dist.seconds[3] == 10.0
        assert dist.seconds[4] == 0.0

    def test_total_and_percentages(self, zones):
        samples = make_hr_series(NOW, [130] * 10, interval_sec=6)
        dist = zone_durations(samples, zones, tail_sec=6.0)
        assert dist.total_sec == 60.0
        assert dist.percentages[2] == 100.0

    def test_single_sample_holds_for_tail(self, zones):
        samples = make_hr_series(NOW, [150])
        dist = zone_durations(samples, zones, tail_sec=5.0)
        assert dist.total_sec == 5.0


class TestZoneDistribution:
    def test_default_all_zero(self):
        dist = ZoneDistribution()
        assert dist.total_sec == 0.0
        assert set(dist.seconds) == {1, 2, 3, 4, 5}
