from __future__ import annotations

import pytest

from heatcompare.profile import BuildingInputs, DemandProfile

SPF_MIDPOINT = 4.1


def flat_profile(n=24, heat=0, dhw=0.0, cold=0.0, resolution=60, **overrides) -> DemandProfile:
    """Profile with every slice the same, unless a channel is passed in full."""
    channels = {
        "heat_intent": [heat] * n,
        "dhw_lpm": [dhw] * n,
        "cold_lpm": [cold] * n,
    }
    channels.update(overrides)
    return DemandProfile(resolution_minutes=resolution, source="user_edit", **channels)


@pytest.fixture
def building() -> BuildingInputs:
    return BuildingInputs(heat_loss_watts=8000, bathroom_count=2, occupancy="professional")
