"""Tests for fitengine.analytics.profile -- profile resolution."""

from datetime import date

import pytest

from fitengine.analytics.profile import (
    resolve_profile,
    estimate_max_hr,
    age_from_birth_date,
    _in_range,
    DEFAULT_MAX_HR,
    DEFAULT_RESTING_HR,
    DEFAULT_VO2_MAX,
    SOURCE_DEFAULT,
    SOURCE_DERIVED,
    SOURCE_OVERRIDE,
    SOURCE_SENSOR,
)
from fitengine.records import BodyMetrics
from fitengine.sources import OverrideStore, ProfileField


TODAY = date(2026, 2, 13)


class TestEstimateMaxHR:
    def test_age_30(self):
        assert estimate_max_hr(30) == 187

    def test_age_40(self):
        assert estimate_max_hr(40) == 180

    def test_age_50(self):
        assert estimate_max_hr(50) == 173

    def test_clamped_low(self):
        # 208 - 70 = 138 -> floor 150
        assert estimate_max_hr(100) == 150

    def test_young(self):
        assert estimate_max_hr(10) == 201


class TestAgeFromBirthDate:
    def test_before_birthday(self):
        assert age_from_birth_date(date(1995, 6, 1), TODAY) == 30

    def test_on_birthday(self):
        assert age_from_birth_date(date(1996, 2, 13), TODAY) == 30


class TestInRange:
    def test_none(self):
        assert not _in_range(ProfileField.WEIGHT_KG, None)

    def test_negative_weight(self):
        assert not _in_range(ProfileField.WEIGHT_KG, -5.0)

    def test_sane_resting(self):
        assert _in_range(ProfileField.RESTING_HEART_RATE, 58)


class TestResolveProfile:
    def test_all_defaults(self):
        p = resolve_profile(today=TODAY)
        assert p.age is None
        assert p.max_heart_rate == DEFAULT_MAX_HR
        assert p.resting_heart_rate == DEFAULT_RESTING_HR
        assert p.vo2_max == DEFAULT_VO2_MAX
        assert p.weight_kg == 70.0
        assert p.height_cm == 175.0
        assert p.overrides == frozenset()
        assert all(v == SOURCE_DEFAULT for v in p.sources.values())

    def test_max_hr_derived_from_age(self):
        p = resolve_profile(BodyMetrics(age=30, resting_heart_rate=60), today=TODAY)
        assert p.max_heart_rate == 187
        assert p.sources["max_heart_rate"] == SOURCE_DERIVED
        assert p.heart_rate_reserve == 127

    def test_age_from_date_of_birth(self):
        p = resolve_profile(BodyMetrics(date_of_birth=date(1995, 6, 1)), today=TODAY)
        assert p.age == 30
        assert p.max_heart_rate == 187
        assert p.sources["age"] == SOURCE_SENSOR

    def test_override_beats_sensor(self):
        store = OverrideStore()
        store.set(ProfileField.RESTING_HEART_RATE, 52)
        p = resolve_profile(BodyMetrics(age=30, resting_heart_rate=60), store, today=TODAY)
        assert p.resting_heart_rate == 52
        assert p.is_overridden(ProfileField.RESTING_HEART_RATE)
        assert p.sources["resting_heart_rate"] == SOURCE_OVERRIDE

    def test_max_hr_override_suppresses_derivation(self):
        store = OverrideStore({ProfileField.MAX_HEART_RATE: 200})
        p = resolve_profile(BodyMetrics(age=30), store, today=TODAY)
        assert p.max_heart_rate == 200
        assert p.is_overridden("max_heart_rate")

    def test_cleared_override_recomputes(self):
        store = OverrideStore({ProfileField.MAX_HEART_RATE: 200})
        store.clear(ProfileField.MAX_HEART_RATE)
        p = resolve_profile(BodyMetrics(age=30), store, today=TODAY)
        assert p.max_heart_rate == 187
        assert not p.is_overridden("max_heart_rate")

    def test_out_of_range_override_falls_through(self):
        store = OverrideStore({ProfileField.WEIGHT_KG: -5.0})
        p = resolve_profile(BodyMetrics(weight_kg=80.0), store, today=TODAY)
        assert p.weight_kg == 80.0
        assert p.sources["weight_kg"] == SOURCE_SENSOR
        assert not p.is_overridden(ProfileField.WEIGHT_KG)

    def test_out_of_range_sensor_falls_to_default(self):
        p = resolve_profile(BodyMetrics(vo2_max=400.0), today=TODAY)
        assert p.vo2_max == DEFAULT_VO2_MAX

    def test_resting_too_close_to_max_rejected(self):
        store = OverrideStore({ProfileField.MAX_HEART_RATE: 120})
        p = resolve_profile(BodyMetrics(resting_heart_rate=115), store, today=TODAY)
        assert p.resting_heart_rate == DEFAULT_RESTING_HR
        assert p.heart_rate_reserve >= 10

    def test_bmi(self):
        p = resolve_profile(today=TODAY)
        assert p.bmi == pytest.approx(22.9)
        assert p.bmi_category == "Normal"

    def test_bmi_obese(self):
        p = resolve_profile(BodyMetrics(weight_kg=110.0, height_cm=175.0), today=TODAY)
        assert p.bmi_category == "Obese"


class TestOverrideStore:
    def test_round_trip_dict(self):
        store = OverrideStore.from_dict({"age": 41, "weight_kg": "82.5"})
        assert store.get(ProfileField.AGE) == 41.0
        assert store.to_dict() == {"age": 41.0, "weight_kg": 82.5}

    def test_unknown_keys_skipped(self):
        store = OverrideStore.from_dict({"shoe_size": 44, "age": "old"})
        assert store.to_dict() == {}

    def test_clear_all(self):
        store = OverrideStore({ProfileField.AGE: 30, ProfileField.VO2_MAX: 50})
        store.clear_all()
        assert store.overridden_fields() == frozenset()
