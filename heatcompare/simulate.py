# ──────────────────────────────────────────────────────────────────────────────
# File: heatcompare/simulate.py
# Runs one demand day through two heating systems and returns per-slice flows
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import functools
import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable

import numpy as np
import pandas as pd

from .errors import ProfileLengthError, UnknownArchetypeError
from .heat_pump import MIN_COP, REF_FLOW_C, REF_OUTDOOR_C, compute_cop, cop_series
from .heating import DemandSlice, demand_slices
from .profile import BuildingInputs, DemandProfile, slice_count

_LOGGER = logging.getLogger(__name__)

# Gas boiler nominal efficiency (fraction)
NOMINAL_BOILER_ETA = 0.92

# Combi DHW service-switching: points lost while the heat exchanger serves taps
COMBI_DHW_ETA_PENALTY = 0.20
COMBI_MIN_ETA = 0.50
COMBI_MAX_ETA = 0.99

# One purge per draw sequence: standing cold water flushed from the heat
# exchanger. Fixed energies, independent of slice length.
COMBI_PURGE_DUMP_KWH = 0.09
COMBI_PURGE_FUEL_INPUT_KWH = 0.5

# ASHP cold-morning zone (00:00 - 06:59), outdoor ~3 °C below the daily reference
ASHP_COLD_MORNING_END_MINUTE = 7 * 60
ASHP_DAWN_OUTDOOR_DROP_C = 3.0


class SystemArchetype(str, Enum):
    COMBI = "combi"
    STORED_VENTED = "stored_vented"
    STORED_UNVENTED = "stored_unvented"
    ASHP = "ashp"

    @classmethod
    def parse(cls, value) -> SystemArchetype:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise UnknownArchetypeError(
                f"Unknown system archetype '{value}', expected one of {[a.value for a in cls]}"
            ) from None


@dataclass(frozen=True)
class PurgeState:
    was_idle_last_slice: bool = True


@dataclass(frozen=True)
class SliceContext:
    slice_hours: float
    ashp_cop: float


@dataclass(frozen=True)
class SystemOutput:
    space_heat_kw: float
    dhw_kw: float  # negative on a combi purge slice
    eta_or_cop: float
    dumped_kw: float
    input_kw: float
    purge: bool = False


# DeliveryRule(demand, prior_state, ctx) -> (output, new_state)
RuleResult = tuple[SystemOutput, PurgeState]
DeliveryRule = Callable[[DemandSlice, PurgeState, SliceContext], RuleResult]


def _next_state(demand: DemandSlice) -> PurgeState:
    return PurgeState(was_idle_last_slice=demand.dhw_kw <= 0)


def combi_rule(demand: DemandSlice, state: PurgeState, ctx: SliceContext) -> RuleResult:
    """Single heat exchanger: DHW pre-empts space heat for the whole slice."""
    new_state = _next_state(demand)
    if demand.dhw_kw > 0:
        if state.was_idle_last_slice:
            dumped_kw = COMBI_PURGE_DUMP_KWH / ctx.slice_hours
            input_kw = COMBI_PURGE_FUEL_INPUT_KWH / ctx.slice_hours
            out = SystemOutput(
                space_heat_kw=0.0,
                dhw_kw=-dumped_kw,
                eta_or_cop=-dumped_kw / input_kw,
                dumped_kw=dumped_kw,
                input_kw=input_kw,
                purge=True,
            )
            return out, new_state
        eta = min(COMBI_MAX_ETA, max(COMBI_MIN_ETA, NOMINAL_BOILER_ETA - COMBI_DHW_ETA_PENALTY))
        out = SystemOutput(0.0, demand.dhw_kw, eta, 0.0, demand.dhw_kw / eta)
        return out, new_state
    out = SystemOutput(
        demand.space_heat_kw, 0.0, NOMINAL_BOILER_ETA, 0.0, demand.space_heat_kw / NOMINAL_BOILER_ETA
    )
    return out, new_state


def stored_rule(demand: DemandSlice, state: PurgeState, ctx: SliceContext) -> RuleResult:
    """Cylinder-backed boiler: space heat and DHW together, no penalty."""
    delivered = demand.space_heat_kw + demand.dhw_kw
    out = SystemOutput(
        demand.space_heat_kw, demand.dhw_kw, NOMINAL_BOILER_ETA, 0.0, delivered / NOMINAL_BOILER_ETA
    )
    return out, _next_state(demand)


def ashp_rule(demand: DemandSlice, state: PurgeState, ctx: SliceContext) -> RuleResult:
    # modulates to demand; DHW comes off the cylinder it keeps charged
    delivered = demand.space_heat_kw + demand.dhw_kw
    out = SystemOutput(demand.space_heat_kw, demand.dhw_kw, ctx.ashp_cop, 0.0, delivered / ctx.ashp_cop)
    return out, _next_state(demand)


DELIVERY_RULES: "MappingProxyType[SystemArchetype, DeliveryRule]" = MappingProxyType({
    SystemArchetype.COMBI: combi_rule,
    SystemArchetype.STORED_VENTED: stored_rule,
    SystemArchetype.STORED_UNVENTED: stored_rule,
    SystemArchetype.ASHP: ashp_rule,
})


@dataclass(frozen=True)
class SliceResult:
    index: int
    minute: int
    space_heat_kw: float
    dhw_kw: float
    cold_lpm: float
    system_a: SystemOutput
    system_b: SystemOutput

    @property
    def hour(self) -> float:
        return self.minute / 60.0


@dataclass(frozen=True)
class SimulationResult:
    hourly: tuple[SliceResult, ...]
    system_a: SystemArchetype
    system_b: SystemArchetype
    resolution_minutes: int
    ashp_spf_midpoint: float

    @property
    def slice_hours(self) -> float:
        return self.resolution_minutes / 60.0

    def to_frame(self) -> pd.DataFrame:
        """Long table: one row per slice per system, units in the column names."""
        rows = []
        for label, archetype in (("A", self.system_a), ("B", self.system_b)):
            for r in self.hourly:
                out = r.system_a if label == "A" else r.system_b
                rows.append({
                    "slice": r.index,
                    "hour": r.hour,
                    "system": label,
                    "archetype": archetype.value,
                    "space_heat_demand_kW": r.space_heat_kw,
                    "dhw_demand_kW": r.dhw_kw,
                    "cold_Lpm": r.cold_lpm,
                    "space_heat_kW": out.space_heat_kw,
                    "dhw_kW": out.dhw_kw,
                    "eta_or_cop": out.eta_or_cop,
                    "dumped_kW": out.dumped_kw,
                    "input_kW": out.input_kw,
                    "purge": out.purge,
                })
        return pd.DataFrame(rows)

    def summary(self) -> pd.DataFrame:
        """Daily energy per system (kWh)."""
        h = self.slice_hours
        return (
            self.to_frame()
            .assign(
                kWh_space_heat=lambda d: d.space_heat_kW * h,
                kWh_dhw=lambda d: d.dhw_kW * h,
                kWh_input=lambda d: d.input_kW * h,
                kWh_dumped=lambda d: d.dumped_kW * h,
            )
            .groupby(["system", "archetype"], as_index=False)
            .agg(
                kWh_space_heat=("kWh_space_heat", "sum"),
                kWh_dhw=("kWh_dhw", "sum"),
                kWh_input=("kWh_input", "sum"),
                kWh_dumped=("kWh_dumped", "sum"),
                purge_events=("purge", "sum"),
            )
        )


def validate_profile(profile: DemandProfile, outdoor_temps_c=None) -> int:
    """Return N for the profile's resolution or raise before anything is computed."""
    n = slice_count(profile.resolution_minutes)
    lengths = profile.lengths()
    if outdoor_temps_c is not None:
        lengths["outdoor_temps_c"] = len(outdoor_temps_c)
    bad = {name: length for name, length in lengths.items() if length != n}
    if bad:
        got = ", ".join(f"{name}={length}" for name, length in lengths.items())
        raise ProfileLengthError(
            f"array length mismatch: {profile.resolution_minutes}-minute resolution needs "
            f"{n} slices per channel, got {got}"
        )
    return n


def ashp_cop_timeline(
    n: int,
    resolution_minutes: int,
    spf_midpoint: float,
    design_flow_temp_c: float = REF_FLOW_C,
    outdoor_temps_c=None,
) -> np.ndarray:
    """Per-slice COP anchored on the SPF midpoint.

    The planar COP model supplies the shape: each slice is shifted from the SPF
    by COP(t_out, flow) - COP(7 °C, flow). Without an outdoor series only the
    cold-morning slices move, using a dawn temperature 3 °C below reference.
    """
    reference = compute_cop(REF_OUTDOOR_C, design_flow_temp_c)
    if outdoor_temps_c is not None:
        offsets = cop_series(outdoor_temps_c, design_flow_temp_c) - reference
    else:
        dip = compute_cop(REF_OUTDOOR_C - ASHP_DAWN_OUTDOOR_DROP_C, design_flow_temp_c) - reference
        minutes = np.arange(n) * resolution_minutes
        offsets = np.where(minutes < ASHP_COLD_MORNING_END_MINUTE, dip, 0.0)
    # floor only: the SPF itself is never capped
    return np.maximum(MIN_COP, float(spf_midpoint) + offsets)


def simulate(
    building: BuildingInputs,
    profile: DemandProfile,
    system_a,
    system_b,
    ashp_spf_midpoint: float,
    design_flow_temp_c: float = REF_FLOW_C,
    outdoor_temps_c=None,
) -> SimulationResult:
    """Simulate one day of demand through system A and system B.

    Demand is built once from (building, profile) and shared by both systems.
    Each system then folds its delivery rule over the slices in order, carrying
    only the purge state between neighbours.
    """
    a = SystemArchetype.parse(system_a)
    b = SystemArchetype.parse(system_b)
    n = validate_profile(profile, outdoor_temps_c)

    demand = demand_slices(building, profile)
    cops = ashp_cop_timeline(
        n, profile.resolution_minutes, ashp_spf_midpoint, design_flow_temp_c, outdoor_temps_c
    )

    rule_a, rule_b = DELIVERY_RULES[a], DELIVERY_RULES[b]
    state_a = state_b = PurgeState()
    rows = []
    for d, cop in zip(demand, cops):
        ctx = SliceContext(slice_hours=profile.slice_hours, ashp_cop=float(cop))
        out_a, state_a = rule_a(d, state_a, ctx)
        out_b, state_b = rule_b(d, state_b, ctx)
        rows.append(SliceResult(
            index=d.index,
            minute=d.minute,
            space_heat_kw=d.space_heat_kw,
            dhw_kw=d.dhw_kw,
            cold_lpm=d.cold_lpm,
            system_a=out_a,
            system_b=out_b,
        ))

    _LOGGER.debug(
        "Simulated %s vs %s: %d slices at %d min, purges A=%d B=%d",
        a.value, b.value, n, profile.resolution_minutes,
        sum(r.system_a.purge for r in rows), sum(r.system_b.purge for r in rows),
    )

    return SimulationResult(
        hourly=tuple(rows),
        system_a=a,
        system_b=b,
        resolution_minutes=profile.resolution_minutes,
        ashp_spf_midpoint=float(ashp_spf_midpoint),
    )


@functools.lru_cache(maxsize=128)
def _simulate_cached(building, profile, a, b, spf, flow_c, outdoor):
    return simulate(building, profile, a, b, spf, flow_c, outdoor)


def compare_all(
    building: BuildingInputs,
    profile: DemandProfile,
    systems,
    ashp_spf_midpoint: float,
    design_flow_temp_c: float = REF_FLOW_C,
    outdoor_temps_c=None,
) -> dict[tuple[SystemArchetype, SystemArchetype], SimulationResult]:
    """Every ordered pair of ``systems`` on the same demand, memoised per input set."""
    archetypes = list(dict.fromkeys(SystemArchetype.parse(s) for s in systems))
    outdoor = None if outdoor_temps_c is None else tuple(float(t) for t in outdoor_temps_c)
    return {
        (a, b): _simulate_cached(
            building, profile, a, b, float(ashp_spf_midpoint), float(design_flow_temp_c), outdoor
        )
        for a, b in itertools.permutations(archetypes, 2)
    }
