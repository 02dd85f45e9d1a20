# heatcompare/data_loading.py
from __future__ import annotations
from pathlib import Path
import json

import pandas as pd

from .profile import BuildingInputs, DemandProfile

DATA_DIR = Path(__file__).resolve().with_name("data")
BOILER_CATALOG_CSV = DATA_DIR / "boiler_catalog.csv"
BOILER_BANDS_CSV = DATA_DIR / "boiler_bands.csv"

_PROFILE_COLUMNS = ("heat_intent", "dhw_lpm", "cold_lpm")


# you can call this with either str or Path
def _to_path(p) -> Path:
    return Path(p).expanduser().resolve()


def load_boiler_catalog(path: str | Path = BOILER_CATALOG_CSV) -> pd.DataFrame:
    """Load boiler_catalog.csv -> columns: gc_number, fuel, boiler_type, condensing,
    seasonal_efficiency, notes"""
    path = _to_path(path)
    # gc numbers keep their leading zeros
    df = pd.read_csv(path, dtype={"gc_number": str})
    df["seasonal_efficiency"] = df["seasonal_efficiency"].astype(float)
    return df


def load_boiler_bands(path: str | Path = BOILER_BANDS_CSV) -> pd.DataFrame:
    """Load boiler_bands.csv -> columns: band_key, description, seasonal_efficiency"""
    path = _to_path(path)
    df = pd.read_csv(path)
    df["seasonal_efficiency"] = df["seasonal_efficiency"].astype(float)
    return df


def load_building_inputs(path: str | Path) -> BuildingInputs:
    """Load a building JSON -> {"heat_loss_watts": ..., "bathroom_count": ..., "occupancy": ...}"""
    path = _to_path(path)
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)
    if "heat_loss_watts" not in raw:
        raise KeyError(f"'heat_loss_watts' missing from building inputs file {path}")
    return BuildingInputs(
        heat_loss_watts=float(raw["heat_loss_watts"]),
        bathroom_count=int(raw.get("bathroom_count", 1)),
        occupancy=str(raw.get("occupancy", "professional")),
    )


def load_profile(
    path: str | Path,
    resolution_minutes: int = 60,
    source: str = "user_edit",
) -> DemandProfile:
    """Load a painted profile CSV -> columns: slice, heat_intent, dhw_lpm, cold_lpm.

    Rows are ordered by ``slice`` when the column is present. Lengths are not
    checked here; the simulator rejects a profile that does not fit its resolution.
    """
    path = _to_path(path)
    df = pd.read_csv(path)
    missing = [c for c in _PROFILE_COLUMNS if c not in df.columns]
    if missing:
        raise KeyError(f"Profile file {path} is missing columns: {', '.join(missing)}")
    if "slice" in df.columns:
        df["slice"] = df["slice"].astype(int)
        df = df.sort_values("slice")
    # a blank draw cell means no draw
    df[["dhw_lpm", "cold_lpm"]] = df[["dhw_lpm", "cold_lpm"]].fillna(0.0)
    return DemandProfile(
        heat_intent=df["heat_intent"].astype(int).tolist(),
        dhw_lpm=df["dhw_lpm"].astype(float).tolist(),
        cold_lpm=df["cold_lpm"].astype(float).tolist(),
        resolution_minutes=int(resolution_minutes),
        source=source,
    )
