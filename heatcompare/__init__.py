# heatcompare/__init__.py
from __future__ import annotations

from .boiler import BoilerEfficiencyModel, BoilerSpec, build_boiler_efficiency_model
from .calibration import CalibrationResult, calibrate_heat_loss
from .consistency import assert_demand_equal
from .errors import (
    DemandMismatchError,
    HeatCompareError,
    InvalidResolutionError,
    ProfileError,
    ProfileLengthError,
    UnknownArchetypeError,
)
from .flow import flow_to_power_kw
from .heat_pump import compute_cop, select_design_regime
from .profile import BuildingInputs, DemandProfile, HeatIntent, default_profile
from .simulate import SimulationResult, SystemArchetype, compare_all, simulate

__all__ = [
    "BoilerEfficiencyModel",
    "BoilerSpec",
    "BuildingInputs",
    "CalibrationResult",
    "DemandMismatchError",
    "DemandProfile",
    "HeatCompareError",
    "HeatIntent",
    "InvalidResolutionError",
    "ProfileError",
    "ProfileLengthError",
    "SimulationResult",
    "SystemArchetype",
    "UnknownArchetypeError",
    "assert_demand_equal",
    "build_boiler_efficiency_model",
    "calibrate_heat_loss",
    "compare_all",
    "compute_cop",
    "default_profile",
    "flow_to_power_kw",
    "select_design_regime",
    "simulate",
]
