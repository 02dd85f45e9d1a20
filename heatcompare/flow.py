# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/flow.py
# Hot-water flow rate -> thermal power, Q = m_dot * Cp * dT
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import numpy as np

WATER_CP_J_PER_KG_C = 4186.0
SECONDS_PER_MINUTE = 60.0
W_PER_KW = 1000.0

# Mains inlet 10 °C -> 45 °C at the tap
DHW_DELTA_T_C = 35.0


def flow_to_power_kw(litres_per_minute: float, delta_t_c: float) -> float:
    # 1 L of water ~ 1 kg, so L/min / 60 is kg/s
    mass_flow_kg_s = float(litres_per_minute) / SECONDS_PER_MINUTE
    return mass_flow_kg_s * WATER_CP_J_PER_KG_C * float(delta_t_c) / W_PER_KW


def dhw_lpm_to_kw(lpm: np.ndarray | float, delta_t_c: float = DHW_DELTA_T_C) -> np.ndarray:
    """Vectorised form of flow_to_power_kw for a whole DHW channel."""
    lpm = np.asarray(lpm, dtype=float)
    return lpm / SECONDS_PER_MINUTE * WATER_CP_J_PER_KG_C * float(delta_t_c) / W_PER_KW
