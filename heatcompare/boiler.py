# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/boiler.py
# Boiler seasonal efficiency: catalog/band baseline, age decay, oversize derate
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from types import MappingProxyType

import numpy as np

from .data_loading import load_boiler_bands, load_boiler_catalog

_LOGGER = logging.getLogger(__name__)

UNKNOWN_SEASONAL_ETA = 0.84
MIN_ETA = 0.55
MAX_ETA = 0.95
ETA_DECIMALS = 3

LOW_LOAD_FRACTION = 0.20
LOW_LOAD_PENALTY = 0.02

MAX_PLAUSIBLE_AGE_YEARS = 100
# condensing units older than this predate the modern condensing era
EARLY_CONDENSING_AGE_YEARS = 20

NOMINAL_KW_FALLBACK = {
    "combi": 24.0,
    "system": 18.0,
    "regular": 18.0,
    "back_boiler": 18.0,
    "unknown": 24.0,
}
DEFAULT_NOMINAL_KW = 24.0

# (upper ratio bound inclusive, band, penalty)
_OVERSIZE_BANDS = (
    (1.3, "well_matched", 0.00),
    (1.8, "mild_oversize", 0.03),
    (2.5, "oversized", 0.06),
    (float("inf"), "aggressive", 0.09),
)
OVERSIZE_PENALTY = {band: penalty for _, band, penalty in _OVERSIZE_BANDS}

# age upper bound inclusive -> factor
_AGE_FACTORS = ((5, 1.00), (10, 0.97), (15, 0.94), (20, 0.91))
_AGE_FACTOR_FLOOR = 0.88


def _frozen_lookup(df, key: str) -> MappingProxyType:
    return MappingProxyType({
        str(row[key]): MappingProxyType(row.to_dict())
        for _, row in df.iterrows()
    })


# Loaded once; read-only for the life of the process
BOILER_CATALOG = _frozen_lookup(load_boiler_catalog(), "gc_number")
BOILER_BANDS = _frozen_lookup(load_boiler_bands(), "band_key")


@dataclass(frozen=True)
class BoilerSpec:
    gc_number: str | None = None
    efficiency_pct: float | None = None
    age_years: float | None = None
    boiler_type: str = "unknown"  # combi | system | regular | back_boiler | unknown
    condensing: str = "unknown"  # yes | no | unknown
    nominal_output_kw: float | None = None
    peak_heat_loss_kw: float | None = None
    demand_kw: tuple[float, ...] | None = None


@dataclass(frozen=True)
class BoilerSizing:
    nominal_kw: float
    peak_heat_loss_kw: float | None
    oversize_ratio: float | None
    band: str
    penalty: float


@dataclass(frozen=True)
class BoilerEfficiencyModel:
    baseline_eta: float
    baseline_source: str  # catalog | explicit | band | unknown
    band_key: str | None
    age_factor: float
    age_is_unrealistic: bool
    age_adjusted_eta: float
    sizing: BoilerSizing | None
    in_home_eta: float
    eta_series: tuple[float, ...] | None
    notes: tuple[str, ...]


def clamp_eta(value: float) -> float:
    return round(min(MAX_ETA, max(MIN_ETA, float(value))), ETA_DECIMALS)


def normalise_gc_number(gc_number: str | None) -> str:
    return re.sub(r"\D", "", gc_number or "")


def format_gc_number(digits: str) -> str:
    """'4758301' -> '47-583-01'; anything that isn't seven digits comes back unchanged."""
    d = normalise_gc_number(digits)
    if len(d) != 7:
        return digits
    return f"{d[:2]}-{d[2:5]}-{d[5:]}"


def age_factor(age_years: float | None) -> float:
    age = 0.0 if age_years is None else float(age_years)
    for upper, factor in _AGE_FACTORS:
        if age <= upper:
            return factor
    return _AGE_FACTOR_FLOOR


def classify_oversize_band(ratio: float | None) -> str:
    # unknown ratio -> no penalty rather than a false alarm
    if ratio is None:
        return "well_matched"
    for upper, band, _ in _OVERSIZE_BANDS:
        if ratio <= upper:
            return band
    return "aggressive"


def size_boiler(
    nominal_output_kw: float | None,
    boiler_type: str | None,
    peak_heat_loss_kw: float | None,
) -> BoilerSizing:
    nominal_kw = (
        float(nominal_output_kw)
        if nominal_output_kw is not None
        else NOMINAL_KW_FALLBACK.get(boiler_type or "unknown", DEFAULT_NOMINAL_KW)
    )
    if peak_heat_loss_kw is None or peak_heat_loss_kw <= 0:
        ratio = None
    else:
        ratio = nominal_kw / float(peak_heat_loss_kw)
    band = classify_oversize_band(ratio)
    return BoilerSizing(
        nominal_kw=nominal_kw,
        peak_heat_loss_kw=peak_heat_loss_kw,
        oversize_ratio=ratio,
        band=band,
        penalty=OVERSIZE_PENALTY[band],
    )


def band_key(condensing: str | None, age_years: float | None) -> str | None:
    age = 0.0 if age_years is None else float(age_years)
    condensing = (condensing or "unknown").lower()
    if condensing == "no":
        if age >= 16:
            return "non_condensing_old"
        if age >= 6:
            return "non_condensing_mid"
        return "non_condensing_recent"
    if condensing == "yes":
        if age > EARLY_CONDENSING_AGE_YEARS:
            return "early_condensing_old"
        if age >= 16:
            return "modern_condensing_old"
        if age >= 6:
            return "modern_condensing_mid"
        return "modern_condensing_recent"
    return None


def shape_eta_series(demand_kw, base_eta: float, nominal_output_kw: float) -> np.ndarray:
    """Per-slice efficiency with a low-load cycling penalty.

    Slices firing below 20 % of nominal output lose two points. Zero-demand
    slices are the boiler being off, not cycling, so they keep ``base_eta``.
    """
    d = np.asarray(demand_kw, dtype=float)
    threshold_kw = float(nominal_output_kw) * LOW_LOAD_FRACTION
    penalty = np.where((d > 0) & (d < threshold_kw), LOW_LOAD_PENALTY, 0.0)
    return np.round(np.clip(base_eta - penalty, MIN_ETA, MAX_ETA), ETA_DECIMALS)


def _resolve_baseline(boiler: BoilerSpec, age_years, notes: list[str]):
    gc = normalise_gc_number(boiler.gc_number)
    if boiler.gc_number is not None:
        entry = BOILER_CATALOG.get(gc) if gc else None
        if entry is not None:
            notes.append(f"Catalog match for GC {format_gc_number(gc)}: {entry['notes']}.")
            return float(entry["seasonal_efficiency"]), "catalog", None
        if gc:
            notes.append(f"GC number '{boiler.gc_number}' not found in catalog; falling back.")
        else:
            notes.append("GC number not provided or invalid format; falling back.")

    if boiler.efficiency_pct is not None:
        notes.append(f"Using supplied seasonal efficiency of {float(boiler.efficiency_pct):.1f}%.")
        return float(boiler.efficiency_pct) / 100.0, "explicit", None

    key = band_key(boiler.condensing, age_years)
    if key is not None and key in BOILER_BANDS:
        band = BOILER_BANDS[key]
        notes.append(f"Band estimate: {band['description']}.")
        return float(band["seasonal_efficiency"]), "band", key

    notes.append(
        f"Insufficient boiler data; using fallback seasonal efficiency {UNKNOWN_SEASONAL_ETA:.2f}."
    )
    _LOGGER.info("No catalog, explicit or band efficiency for %s; using %.2f", boiler, UNKNOWN_SEASONAL_ETA)
    return UNKNOWN_SEASONAL_ETA, "unknown", None


def build_boiler_efficiency_model(boiler: BoilerSpec) -> BoilerEfficiencyModel:
    """Resolve baseline -> age-adjusted -> in-home efficiency for one boiler.

    Baseline priority: catalog match by GC number, then an explicitly supplied
    percentage, then the condensing/age band table, then UNKNOWN_SEASONAL_ETA.
    Missing data never raises; each fallback is recorded in ``notes``.
    """
    notes: list[str] = []

    age_is_unrealistic = boiler.age_years is not None and (
        boiler.age_years < 0 or boiler.age_years > MAX_PLAUSIBLE_AGE_YEARS
    )
    effective_age = None if age_is_unrealistic else boiler.age_years
    if age_is_unrealistic:
        notes.append(
            f"Boiler age input ({boiler.age_years} years) is unrealistic; treated as unknown "
            "and no age decay applied."
        )
    elif boiler.age_years is None:
        notes.append("Boiler age unknown; no age decay applied.")

    # the band still reads the raw age; only the decay ignores an implausible one
    baseline_eta, source, key = _resolve_baseline(boiler, boiler.age_years, notes)

    factor = age_factor(effective_age)
    if effective_age is not None:
        notes.append(f"Age factor {factor:.2f} applied for {effective_age} years.")
    age_adjusted = clamp_eta(baseline_eta * factor)

    sizing = None
    in_home = age_adjusted
    if (boiler.boiler_type or "").lower() == "combi":
        sizing = size_boiler(boiler.nominal_output_kw, "combi", boiler.peak_heat_loss_kw)
        if sizing.oversize_ratio is None:
            notes.append("Peak heat loss unknown; oversize penalty not applied.")
        else:
            notes.append(f"Oversize ratio {sizing.oversize_ratio:.2f}x ({sizing.band}).")
        in_home = clamp_eta(age_adjusted * (1.0 - sizing.penalty))

    eta_series = None
    if boiler.demand_kw is not None and len(boiler.demand_kw) > 0:
        nominal_kw = sizing.nominal_kw if sizing else (
            boiler.nominal_output_kw
            if boiler.nominal_output_kw is not None
            else NOMINAL_KW_FALLBACK.get(boiler.boiler_type, DEFAULT_NOMINAL_KW)
        )
        eta_series = tuple(float(v) for v in shape_eta_series(boiler.demand_kw, in_home, nominal_kw))

    _LOGGER.debug(
        "Boiler efficiency: baseline=%.3f (%s) age_adjusted=%.3f in_home=%.3f",
        baseline_eta, source, age_adjusted, in_home,
    )

    return BoilerEfficiencyModel(
        baseline_eta=clamp_eta(baseline_eta),
        baseline_source=source,
        band_key=key,
        age_factor=factor,
        age_is_unrealistic=age_is_unrealistic,
        age_adjusted_eta=age_adjusted,
        sizing=sizing,
        in_home_eta=in_home,
        eta_series=eta_series,
        notes=tuple(notes),
    )
