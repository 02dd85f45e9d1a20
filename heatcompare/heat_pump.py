# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/heat_pump.py
# Air-source heat pump: planar COP approximation + design flow-temp regime
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# EN14511 test point A7/W35
REF_COP = 4.10
REF_OUTDOOR_C = 7.0
REF_FLOW_C = 35.0

# COP change per °C
K_OUTDOOR = 0.10
K_FLOW = 0.07

MIN_COP = 1.5
MAX_COP = 5.0

STANDARD_OUTDOOR_C = 7.0
COLD_MORNING_OUTDOOR_C = -3.0

# (flow °C, SPF band, SPF range)
_REGIMES = {
    "full_job": (35.0, "good", (3.8, 4.4)),
    "some": (45.0, "ok", (3.0, 3.2)),
    "none": (50.0, "poor", (2.9, 3.1)),
}

_FULL_JOB_FLAG = (
    "regime-full-job-unlocks-low-temp",
    "info",
    "Full job unlocks low-temp + higher SPF",
    "Upgrading all emitters to low-temperature radiators or underfloor heating "
    "enables 35°C design flow, the optimal operating point for an ASHP.",
)


@dataclass(frozen=True)
class RegimeFlag:
    id: str
    severity: str  # "warn" | "info"
    title: str
    detail: str


@dataclass(frozen=True)
class DesignRegime:
    emitter_upgrade_appetite: str
    design_flow_temp_c: float
    spf_band: str
    spf_range: tuple[float, float]
    spf_midpoint: float
    design_cop: float
    cold_morning_cop: float
    flags: tuple[RegimeFlag, ...]
    assumptions: tuple[str, ...]


def _raw_cop(outdoor_c, flow_c):
    return REF_COP + K_OUTDOOR * (outdoor_c - REF_OUTDOOR_C) - K_FLOW * (flow_c - REF_FLOW_C)


def compute_cop(outdoor_temp_c: float, flow_temp_c: float) -> float:
    """COP(+7, 35) = 4.10, COP(-3, 50) = 2.05; clamped to [1.5, 5.0]."""
    raw = _raw_cop(float(outdoor_temp_c), float(flow_temp_c))
    return round(min(MAX_COP, max(MIN_COP, raw)), 2)


def cop_series(outdoor_temps_c: np.ndarray, flow_temp_c: float) -> np.ndarray:
    """compute_cop over an outdoor temperature array (same clamp, same rounding)."""
    tout = np.asarray(outdoor_temps_c, dtype=float)
    return np.round(np.clip(_raw_cop(tout, float(flow_temp_c)), MIN_COP, MAX_COP), 2)


def select_design_regime(emitter_upgrade_appetite: str = "none") -> DesignRegime:
    """Map emitter-upgrade appetite to a design flow temperature and SPF band.

    none -> 50 °C (poor), some -> 45 °C (ok), full_job -> 35 °C (good).
    Unrecognised values are treated as "none", the most conservative case.
    """
    appetite = str(emitter_upgrade_appetite).lower()
    if appetite not in _REGIMES:
        appetite = "none"
    flow_c, spf_band, spf_range = _REGIMES[appetite]

    flags: list[RegimeFlag] = []
    if flow_c >= 50:
        flags.append(RegimeFlag(
            "regime-flow-temp-elevated",
            "warn",
            "Elevated flow temperature",
            "Operating at 50°C flow significantly reduces heat pump efficiency. "
            "Consider upgrading emitters to unlock lower flow temps and higher SPF.",
        ))
        flags.append(RegimeFlag(
            "regime-cop-penalty",
            "warn",
            "COP penalty at high flow temp",
            f"Each 1°C of flow above {REF_FLOW_C:.0f}°C costs about {K_FLOW:.2f} COP; "
            f"at 50°C the design-day COP falls to {compute_cop(STANDARD_OUTDOOR_C, 50):.2f}.",
        ))
        flags.append(RegimeFlag(*_FULL_JOB_FLAG))
    elif flow_c >= 45:
        flags.append(RegimeFlag(
            "regime-cop-penalty",
            "info",
            "Moderate COP at 45°C flow",
            "Partial emitter upgrades allow 45°C flow with a moderate SPF (~3.0–3.2).",
        ))
        flags.append(RegimeFlag(*_FULL_JOB_FLAG))

    assumptions = (
        "Lower flow temps increase SPF; high flow temps collapse COP.",
        "SPF estimated at design conditions; actual performance varies with climate and occupancy.",
        f"Planar COP model: {REF_COP} at +{REF_OUTDOOR_C:.0f}°C outdoor / {REF_FLOW_C:.0f}°C flow, "
        f"+{K_OUTDOOR}/°C outdoor, -{K_FLOW}/°C flow, clamped to [{MIN_COP}, {MAX_COP}].",
    )

    return DesignRegime(
        emitter_upgrade_appetite=appetite,
        design_flow_temp_c=flow_c,
        spf_band=spf_band,
        spf_range=spf_range,
        spf_midpoint=round((spf_range[0] + spf_range[1]) / 2, 2),
        design_cop=compute_cop(STANDARD_OUTDOOR_C, flow_c),
        cold_morning_cop=compute_cop(COLD_MORNING_OUTDOOR_C, flow_c),
        flags=tuple(flags),
        assumptions=assumptions,
    )
