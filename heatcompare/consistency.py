# heatcompare/consistency.py
from __future__ import annotations

from .errors import DemandMismatchError
from .profile import slice_count
from .simulate import SimulationResult

_DEMAND_FIELDS = ("space_heat_kw", "dhw_kw", "cold_lpm")


def _check_length(result: SimulationResult, label: str) -> None:
    n = slice_count(result.resolution_minutes)
    if len(result.hourly) != n:
        raise DemandMismatchError(
            f"result {label} has {len(result.hourly)} slices, "
            f"{result.resolution_minutes}-minute resolution needs {n}"
        )


def assert_demand_equal(result_a: SimulationResult, result_b: SimulationResult) -> None:
    """Fail unless both runs carry the exact same demand timeline.

    Two runs built from one building and one profile must agree bit for bit on
    every demand channel, whichever systems were compared and in whichever order.
    """
    _check_length(result_a, "A")
    _check_length(result_b, "B")
    if result_a.resolution_minutes != result_b.resolution_minutes:
        raise DemandMismatchError(
            f"resolution differs: {result_a.resolution_minutes} vs {result_b.resolution_minutes} min"
        )
    for row_a, row_b in zip(result_a.hourly, result_b.hourly):
        for name in _DEMAND_FIELDS:
            va, vb = getattr(row_a, name), getattr(row_b, name)
            if va != vb:
                raise DemandMismatchError(
                    f"demand channel '{name}' differs at slice {row_a.index}: {va!r} != {vb!r}"
                )
