# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/heating.py
# System-independent demand: what the house asks for, before any system answers
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .flow import DHW_DELTA_T_C, dhw_lpm_to_kw
from .profile import BuildingInputs, DemandProfile, HeatIntent

# Fraction of design heat loss called for at each intent level
HEAT_INTENT_FRACTION = {
    HeatIntent.OFF: 0.0,
    HeatIntent.SETBACK: 0.40,  # low-fire hold around 16 °C
    HeatIntent.COMFORT: 1.00,
}

# Demand channels are reported to the watt
DEMAND_DECIMALS = 3


@dataclass(frozen=True)
class DemandSlice:
    index: int
    minute: int
    space_heat_kw: float
    dhw_kw: float
    cold_lpm: float


def space_heat_kw(heat_intent: np.ndarray, peak_heat_loss_kw: float) -> np.ndarray:
    levels = np.asarray(heat_intent, dtype=int)
    lut = np.array([HEAT_INTENT_FRACTION[HeatIntent(i)] for i in range(len(HeatIntent))])
    return np.round(lut[levels] * float(peak_heat_loss_kw), DEMAND_DECIMALS)


def dhw_demand_kw(dhw_lpm: np.ndarray) -> np.ndarray:
    return np.round(dhw_lpm_to_kw(dhw_lpm, DHW_DELTA_T_C), DEMAND_DECIMALS)


def demand_slices(building: BuildingInputs, profile: DemandProfile) -> tuple[DemandSlice, ...]:
    """Shared demand timeline. Depends only on the building and the profile.

    Assumes the profile has already been length-checked against its resolution.
    """
    sh_kw = space_heat_kw(profile.heat_intent, building.peak_heat_loss_kw)
    dhw_kw = dhw_demand_kw(profile.dhw_lpm)
    return tuple(
        DemandSlice(
            index=i,
            minute=i * profile.resolution_minutes,
            space_heat_kw=float(sh_kw[i]),
            dhw_kw=float(dhw_kw[i]),
            cold_lpm=float(profile.cold_lpm[i]),
        )
        for i in range(len(profile.heat_intent))
    )
