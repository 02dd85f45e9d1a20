from __future__ import annotations

import numpy as np
import pytest

from heatcompare.flow import DHW_DELTA_T_C, dhw_lpm_to_kw, flow_to_power_kw


def test_zero_flow_is_zero_power():
    assert flow_to_power_kw(0, 35) == 0.0


def test_one_litre_per_minute_at_35k():
    # 1/60 kg/s * 4186 J/kg°C * 35 °C / 1000
    assert flow_to_power_kw(1, 35) == pytest.approx(2.442, abs=1e-3)


def test_three_litres_per_minute():
    assert flow_to_power_kw(3, DHW_DELTA_T_C) == pytest.approx(7.3255, abs=1e-4)


def test_power_scales_linearly_with_delta_t():
    assert flow_to_power_kw(6, 40) == pytest.approx(2 * flow_to_power_kw(6, 20))


def test_vector_form_matches_scalar_exactly():
    lpm = [0.0, 0.75, 1.5, 3.0, 9.0]
    vec = dhw_lpm_to_kw(np.array(lpm))
    for v, q in zip(lpm, vec):
        assert q == flow_to_power_kw(v, DHW_DELTA_T_C)
