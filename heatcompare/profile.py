# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/profile.py
# One-day demand profile: heat intent, DHW draw and cold draw per time slice
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import math
import numbers
from bisect import bisect_right
from dataclasses import dataclass, replace
from enum import IntEnum

import pandas as pd

from .errors import InvalidResolutionError, ProfileError

MINUTES_PER_DAY = 1440

# Painter steps for the DHW channel (L/min)
DHW_LPM_STEPS = (0.0, 0.75, 1.5, 3.0, 4.5, 6.0, 7.5, 9.0)

# One shower-equivalent per bathroom at peak; above 9 L/min mains/pipe bore binds first
DHW_LPM_PER_BATHROOM = 1.5
DHW_MAX_PLAUSIBLE_LPM = 9.0

PROFILE_SOURCES = ("measured", "user_edit")
PROFILE_CHANNELS = ("heat_intent", "dhw_lpm", "cold_lpm")


class HeatIntent(IntEnum):
    OFF = 0
    SETBACK = 1
    COMFORT = 2


# Bands are (start_minute, end_minute, value); end exclusive.
# Anything not covered by a heat band is OFF, by a DHW band is zero.
_OCCUPANCY_BANDS = {
    "professional": {
        "heat": [
            (6 * 60, 9 * 60, HeatIntent.COMFORT),
            (9 * 60, 17 * 60, HeatIntent.SETBACK),
            (17 * 60, 22 * 60, HeatIntent.COMFORT),
        ],
        "dhw": [(6 * 60, 9 * 60, 1.0), (19 * 60, 22 * 60, 0.5)],
    },
    "steady_home": {
        "heat": [
            (0, 6 * 60, HeatIntent.SETBACK),
            (6 * 60, 23 * 60, HeatIntent.COMFORT),
            (23 * 60, 24 * 60, HeatIntent.SETBACK),
        ],
        "dhw": [(7 * 60, 9 * 60, 1.0), (18 * 60, 20 * 60, 0.5)],
    },
    "shift_worker": {
        "heat": [
            (0, 3 * 60, HeatIntent.COMFORT),
            (3 * 60, 10 * 60, HeatIntent.SETBACK),
            (10 * 60, 13 * 60, HeatIntent.COMFORT),
            (13 * 60, 21 * 60, HeatIntent.SETBACK),
            (21 * 60, 24 * 60, HeatIntent.COMFORT),
        ],
        "dhw": [(10 * 60, 12 * 60, 1.0), (21 * 60, 22 * 60, 0.5)],
    },
}

OCCUPANCY_SIGNATURES = tuple(_OCCUPANCY_BANDS)
_INTENT_LEVELS = frozenset(int(h) for h in HeatIntent)


@dataclass(frozen=True)
class BuildingInputs:
    heat_loss_watts: float
    bathroom_count: int = 1
    occupancy: str = "professional"

    @property
    def peak_heat_loss_kw(self) -> float:
        return float(self.heat_loss_watts) / 1000.0


def slice_count(resolution_minutes: int) -> int:
    """N = 1440 / resolution; the resolution must divide the day exactly."""
    if (
        not isinstance(resolution_minutes, numbers.Real)
        or isinstance(resolution_minutes, bool)
        or not math.isfinite(resolution_minutes)
        or int(resolution_minutes) != resolution_minutes
        or resolution_minutes <= 0
        or MINUTES_PER_DAY % int(resolution_minutes) != 0
    ):
        raise InvalidResolutionError(
            f"resolution_minutes must be a positive divisor of {MINUTES_PER_DAY}, "
            f"got {resolution_minutes!r}"
        )
    return MINUTES_PER_DAY // int(resolution_minutes)


def snap_dhw_lpm(lpm: float) -> float:
    """Round a draw down onto the painter's DHW step set."""
    lpm = max(0.0, min(float(lpm), DHW_LPM_STEPS[-1]))
    return DHW_LPM_STEPS[bisect_right(DHW_LPM_STEPS, lpm) - 1]


@dataclass(frozen=True)
class DemandProfile:
    heat_intent: tuple[int, ...]
    dhw_lpm: tuple[float, ...]
    cold_lpm: tuple[float, ...]
    resolution_minutes: int = 60
    source: str = "measured"

    def __post_init__(self):
        # accept any sequence, store tuples so profiles stay hashable
        object.__setattr__(self, "heat_intent", tuple(int(v) for v in self.heat_intent))
        object.__setattr__(self, "dhw_lpm", tuple(float(v) for v in self.dhw_lpm))
        object.__setattr__(self, "cold_lpm", tuple(float(v) for v in self.cold_lpm))
        if self.source not in PROFILE_SOURCES:
            raise ProfileError(f"source must be one of {PROFILE_SOURCES}, got {self.source!r}")
        bad = sorted({v for v in self.heat_intent if v not in _INTENT_LEVELS})
        if bad:
            raise ProfileError(f"heat_intent levels must be 0, 1 or 2, got {bad}")
        for name in ("dhw_lpm", "cold_lpm"):
            bad = [i for i, v in enumerate(getattr(self, name)) if not math.isfinite(v)]
            if bad:
                raise ProfileError(f"{name} must be finite, non-finite at slices {bad}")

    @property
    def slice_count(self) -> int:
        return slice_count(self.resolution_minutes)

    @property
    def slice_hours(self) -> float:
        return self.resolution_minutes / 60.0

    def lengths(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in PROFILE_CHANNELS}

    def paint(self, channel: str, start: int, stop: int, value: float) -> DemandProfile:
        """Return a copy with ``channel[start:stop]`` set to ``value``, tagged user_edit."""
        if channel not in PROFILE_CHANNELS:
            raise ProfileError(f"Unknown profile channel '{channel}'")
        values = list(getattr(self, channel))
        if channel == "dhw_lpm":
            value = snap_dhw_lpm(value)
        elif channel == "heat_intent":
            if value not in _INTENT_LEVELS:
                raise ProfileError(f"heat_intent levels must be 0, 1 or 2, got {value!r}")
            value = int(value)
        values[start:stop] = [value] * len(values[start:stop])
        return replace(self, **{channel: values, "source": "user_edit"})

    def to_frame(self) -> pd.DataFrame:
        n = max(self.lengths().values())
        df = pd.DataFrame({"slice": range(n)})
        for name in PROFILE_CHANNELS:
            df[name] = pd.Series(getattr(self, name), dtype=float)
        df["hour"] = df["slice"] * self.resolution_minutes / 60.0
        return df


def _band_value(bands, minute: int, default):
    for start, end, value in bands:
        if start <= minute < end:
            return value
    return default


def peak_dhw_lpm(bathroom_count: int | None) -> float:
    bathrooms = 1 if bathroom_count is None else max(0, int(bathroom_count))
    return snap_dhw_lpm(min(bathrooms * DHW_LPM_PER_BATHROOM, DHW_MAX_PLAUSIBLE_LPM))


def default_profile(building: BuildingInputs, resolution_minutes: int = 60) -> DemandProfile:
    """Baseline ("measured") profile from the building's occupancy and bathroom count.

    Heat intent and DHW follow the occupancy signature's daily bands; a slice takes
    the band its start minute falls in. Cold draw is left at zero: it is something a
    user paints on, not something the building implies.
    """
    n = slice_count(resolution_minutes)
    signature = str(building.occupancy).lower()
    if signature not in _OCCUPANCY_BANDS:
        raise ProfileError(
            f"Unknown occupancy '{building.occupancy}', expected one of {OCCUPANCY_SIGNATURES}"
        )
    bands = _OCCUPANCY_BANDS[signature]
    peak = peak_dhw_lpm(building.bathroom_count)

    minutes = [i * resolution_minutes for i in range(n)]
    heat_intent = [int(_band_value(bands["heat"], m, HeatIntent.OFF)) for m in minutes]
    dhw_lpm = [snap_dhw_lpm(peak * _band_value(bands["dhw"], m, 0.0)) for m in minutes]
    cold_lpm = [0.0] * n

    return DemandProfile(
        heat_intent=heat_intent,
        dhw_lpm=dhw_lpm,
        cold_lpm=cold_lpm,
        resolution_minutes=resolution_minutes,
        source="measured",
    )
