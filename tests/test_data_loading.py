from __future__ import annotations

import json

import pandas as pd
import pytest

from heatcompare.consistency import assert_demand_equal
from heatcompare.data_loading import (
    load_boiler_bands,
    load_boiler_catalog,
    load_building_inputs,
    load_profile,
)
from heatcompare.profile import default_profile
from heatcompare.simulate import simulate

from conftest import SPF_MIDPOINT


def test_catalog_keeps_gc_numbers_as_text():
    df = load_boiler_catalog()
    assert df["gc_number"].map(type).eq(str).all()
    assert "4758301" in set(df["gc_number"])
    assert df["seasonal_efficiency"].between(0.55, 0.95).all()


def test_bands_cover_condensing_and_non_condensing():
    keys = set(load_boiler_bands()["band_key"])
    assert {"non_condensing_old", "early_condensing_old", "modern_condensing_recent"} <= keys


def test_building_inputs_from_json(tmp_path):
    path = tmp_path / "house.json"
    path.write_text(json.dumps({"heat_loss_watts": 6500, "bathroom_count": 2, "occupancy": "steady_home"}))
    b = load_building_inputs(path)
    assert b.peak_heat_loss_kw == pytest.approx(6.5)
    assert b.bathroom_count == 2
    assert b.occupancy == "steady_home"


def test_building_inputs_defaults(tmp_path):
    path = tmp_path / "house.json"
    path.write_text(json.dumps({"heat_loss_watts": 9000}))
    b = load_building_inputs(str(path))
    assert (b.bathroom_count, b.occupancy) == (1, "professional")


def test_building_inputs_need_heat_loss(tmp_path):
    path = tmp_path / "house.json"
    path.write_text(json.dumps({"bathroom_count": 1}))
    with pytest.raises(KeyError, match="heat_loss_watts"):
        load_building_inputs(path)


def test_profile_csv_is_ordered_by_slice(tmp_path, building):
    frame = default_profile(building).to_frame().iloc[::-1]
    path = tmp_path / "profile.csv"
    frame.to_csv(path, index=False)
    loaded = load_profile(path)
    assert loaded.source == "user_edit"
    assert loaded.heat_intent == default_profile(building).heat_intent
    assert loaded.dhw_lpm == default_profile(building).dhw_lpm


def test_short_profile_csv_is_rejected_by_simulator(tmp_path, building):
    path = tmp_path / "profile.csv"
    default_profile(building).to_frame().head(20).to_csv(path, index=False)
    profile = load_profile(path)
    with pytest.raises(ValueError, match="array length mismatch"):
        simulate(building, profile, "combi", "ashp", SPF_MIDPOINT)


def test_profile_csv_missing_columns(tmp_path):
    path = tmp_path / "profile.csv"
    pd.DataFrame({"slice": [0], "heat_intent": [2]}).to_csv(path, index=False)
    with pytest.raises(KeyError, match="dhw_lpm"):
        load_profile(path)


def test_blank_draw_cells_load_as_zero(tmp_path, building):
    frame = default_profile(building).to_frame()
    frame.loc[5, "cold_lpm"] = None
    frame.loc[7, "dhw_lpm"] = None
    path = tmp_path / "profile.csv"
    frame.to_csv(path, index=False)

    profile = load_profile(path)
    assert profile.cold_lpm[5] == 0.0
    assert default_profile(building).dhw_lpm[7] > 0
    assert profile.dhw_lpm[7] == 0.0

    ab = simulate(building, profile, "stored_vented", "ashp", SPF_MIDPOINT)
    ba = simulate(building, profile, "ashp", "stored_vented", SPF_MIDPOINT)
    assert ab.hourly[7].system_a.dhw_kw == 0.0
    assert_demand_equal(ab, ba)
