from __future__ import annotations

import pytest

from heatcompare.boiler import (
    BOILER_CATALOG,
    UNKNOWN_SEASONAL_ETA,
    BoilerSpec,
    age_factor,
    band_key,
    build_boiler_efficiency_model,
    classify_oversize_band,
    clamp_eta,
    format_gc_number,
    shape_eta_series,
    size_boiler,
)


@pytest.mark.parametrize(
    "ratio, band",
    [
        (None, "well_matched"),
        (1.0, "well_matched"),
        (1.3, "well_matched"),
        (1.31, "mild_oversize"),
        (1.8, "mild_oversize"),
        (1.81, "oversized"),
        (2.5, "oversized"),
        (2.51, "aggressive"),
        (6.0, "aggressive"),
    ],
)
def test_oversize_band_boundaries(ratio, band):
    assert classify_oversize_band(ratio) == band


@pytest.mark.parametrize(
    "age, factor",
    [(None, 1.00), (0, 1.00), (5, 1.00), (6, 0.97), (10, 0.97), (15, 0.94), (20, 0.91), (21, 0.88), (60, 0.88)],
)
def test_age_factor_steps(age, factor):
    assert age_factor(age) == factor


def test_clamp_eta():
    assert clamp_eta(1.2) == 0.95
    assert clamp_eta(0.1) == 0.55
    assert clamp_eta(0.87654) == 0.877


def test_gc_formatting():
    assert format_gc_number("4758301") == "47-583-01"
    assert format_gc_number("12") == "12"


def test_size_boiler_without_heat_loss():
    sizing = size_boiler(None, "combi", None)
    assert sizing.nominal_kw == 24.0
    assert sizing.oversize_ratio is None
    assert sizing.band == "well_matched"
    assert sizing.penalty == 0.0


def test_size_boiler_ratio():
    sizing = size_boiler(30, "combi", 12)
    assert sizing.oversize_ratio == pytest.approx(2.5)
    assert sizing.band == "oversized"
    assert sizing.penalty == 0.06


class TestBaselineResolution:

    def test_catalog_match_wins_over_everything(self):
        model = build_boiler_efficiency_model(
            BoilerSpec(gc_number="47-583-01", efficiency_pct=70, condensing="no", age_years=2)
        )
        assert model.baseline_source == "catalog"
        assert model.baseline_eta == pytest.approx(BOILER_CATALOG["4758301"]["seasonal_efficiency"])

    def test_explicit_percentage_beats_band(self):
        model = build_boiler_efficiency_model(
            BoilerSpec(gc_number="99-999-99", efficiency_pct=81, condensing="yes", age_years=2)
        )
        assert model.baseline_source == "explicit"
        assert model.baseline_eta == pytest.approx(0.81)
        assert any("not found in catalog" in n for n in model.notes)

    def test_band_estimate(self):
        model = build_boiler_efficiency_model(BoilerSpec(condensing="no", age_years=18))
        assert model.baseline_source == "band"
        assert model.band_key == "non_condensing_old"
        assert model.baseline_eta == pytest.approx(0.70)

    def test_unknown_fallback(self):
        model = build_boiler_efficiency_model(BoilerSpec())
        assert model.baseline_source == "unknown"
        assert model.baseline_eta == UNKNOWN_SEASONAL_ETA
        assert model.age_factor == 1.0
        assert any("fallback" in n for n in model.notes)
        assert any("age unknown" in n for n in model.notes)

    @pytest.mark.parametrize(
        "condensing, age, key",
        [
            ("no", 3, "non_condensing_recent"),
            ("no", 8, "non_condensing_mid"),
            ("yes", 2, "modern_condensing_recent"),
            ("yes", 12, "modern_condensing_mid"),
            ("yes", 17, "modern_condensing_old"),
            ("yes", 25, "early_condensing_old"),
            ("unknown", 10, None),
        ],
    )
    def test_band_keys(self, condensing, age, key):
        assert band_key(condensing, age) == key


class TestAdjustments:

    def test_age_is_multiplied_in(self):
        model = build_boiler_efficiency_model(BoilerSpec(efficiency_pct=90, age_years=12))
        assert model.age_factor == 0.94
        assert model.age_adjusted_eta == pytest.approx(0.846)
        # not a combi: no oversize step
        assert model.sizing is None
        assert model.in_home_eta == model.age_adjusted_eta

    def test_unrealistic_age_is_ignored(self):
        model = build_boiler_efficiency_model(BoilerSpec(efficiency_pct=90, age_years=150))
        assert model.age_is_unrealistic
        assert model.age_factor == 1.0
        assert any("unrealistic" in n for n in model.notes)

    def test_unrealistic_age_still_picks_the_band(self):
        model = build_boiler_efficiency_model(BoilerSpec(condensing="no", age_years=150))
        assert model.baseline_source == "band"
        assert model.band_key == "non_condensing_old"
        assert model.baseline_eta == pytest.approx(0.70)
        assert model.age_factor == 1.0
        assert model.age_adjusted_eta == pytest.approx(0.70)

    def test_combi_oversize_derate(self):
        model = build_boiler_efficiency_model(BoilerSpec(
            efficiency_pct=90, age_years=3, boiler_type="combi",
            nominal_output_kw=30, peak_heat_loss_kw=10,
        ))
        assert model.sizing.band == "aggressive"
        assert model.in_home_eta == pytest.approx(round(0.90 * 0.91, 3))

    def test_combi_with_unknown_heat_loss_is_well_matched(self):
        model = build_boiler_efficiency_model(BoilerSpec(efficiency_pct=90, boiler_type="combi"))
        assert model.sizing.band == "well_matched"
        assert model.in_home_eta == model.age_adjusted_eta
        assert any("Peak heat loss unknown" in n for n in model.notes)

    def test_results_stay_in_bounds(self):
        low = build_boiler_efficiency_model(BoilerSpec(efficiency_pct=40, age_years=30))
        high = build_boiler_efficiency_model(BoilerSpec(efficiency_pct=120))
        assert low.in_home_eta == 0.55
        assert high.in_home_eta == 0.95


class TestShapedSeries:

    def test_low_load_slices_lose_two_points(self):
        series = shape_eta_series([0.0, 2.0, 4.7, 6.0, 20.0], 0.88, 24)
        assert list(series) == pytest.approx([0.88, 0.86, 0.86, 0.88, 0.88])

    def test_series_is_clamped(self):
        assert list(shape_eta_series([1.0], 0.56, 24)) == [0.55]

    def test_model_carries_series_when_demand_given(self):
        model = build_boiler_efficiency_model(BoilerSpec(
            efficiency_pct=90, boiler_type="combi", nominal_output_kw=24,
            peak_heat_loss_kw=20, demand_kw=(0.0, 3.0, 10.0),
        ))
        base = model.in_home_eta
        assert model.eta_series == pytest.approx((base, round(base - 0.02, 3), base))

    def test_no_series_without_demand(self):
        assert build_boiler_efficiency_model(BoilerSpec()).eta_series is None
