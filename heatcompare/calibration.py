# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/calibration.py
# Heat-loss coefficient from monitored periods: P = UA * (T_in - T_out)
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import pandas as pd

# BS EN 12831 UK design conditions
DESIGN_INTERNAL_C = 21.0
DESIGN_EXTERNAL_C = -3.0
DESIGN_DELTA_T_K = DESIGN_INTERNAL_C - DESIGN_EXTERNAL_C

REQUIRED_COLUMNS = ("energy_kwh", "heating_hours", "indoor_temp_c", "outdoor_temp_c")
LOW_CONFIDENCE_R2 = 0.7


@dataclass(frozen=True)
class CalibrationResult:
    ua_w_per_k: float
    design_heat_loss_w: float
    r_squared: float
    points_used: int
    notes: tuple[str, ...]


def calibrate_heat_loss(periods: pd.DataFrame) -> CalibrationResult:
    """Least-squares UA through the origin over monitored periods.

    ``periods`` needs energy_kwh, heating_hours, indoor_temp_c, outdoor_temp_c.
    Rows with no heating hours are ignored. With fewer than two usable rows the
    result is an all-zero, zero-confidence estimate rather than an error.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in periods.columns]
    if missing:
        raise KeyError(f"calibration data missing columns: {', '.join(missing)}")

    df = periods.loc[periods["heating_hours"] > 0]
    if len(df) < 2:
        return CalibrationResult(
            0.0, 0.0, 0.0, len(df),
            ("Insufficient data: at least 2 periods with heating hours are needed.",),
        )

    delta_t = (df["indoor_temp_c"] - df["outdoor_temp_c"]).to_numpy(dtype=float)
    power_w = (df["energy_kwh"] * 1000.0 / df["heating_hours"]).to_numpy(dtype=float)

    sxx = float(np.dot(delta_t, delta_t))
    ua = float(np.dot(delta_t, power_w)) / sxx if sxx > 0 else 0.0

    ss_tot = float(np.sum((power_w - power_w.mean()) ** 2))
    ss_res = float(np.sum((power_w - ua * delta_t) ** 2))
    r2 = max(0.0, 1.0 - ss_res / ss_tot) if ss_tot > 0 else 0.0

    design_w = ua * DESIGN_DELTA_T_K
    notes = [
        f"UA = {ua:.1f} W/K from {len(df)} periods (R² = {r2:.2f}).",
        f"Design heat loss {design_w:.0f} W at {DESIGN_EXTERNAL_C:.0f}°C external, "
        f"{DESIGN_INTERNAL_C:.0f}°C internal.",
    ]
    if r2 < LOW_CONFIDENCE_R2:
        notes.append(
            "Low confidence: the periods span a narrow temperature range or are noisy. "
            "Include at least one winter and one shoulder-season period."
        )

    return CalibrationResult(
        ua_w_per_k=round(ua, 2),
        design_heat_loss_w=round(design_w, 0),
        r_squared=round(r2, 3),
        points_used=len(df),
        notes=tuple(notes),
    )
