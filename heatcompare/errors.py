# heatcompare/errors.py
from __future__ import annotations


class HeatCompareError(Exception):
    """Base class for everything the engine raises on purpose."""


class ProfileError(HeatCompareError, ValueError):
    """A demand profile breaks its input contract."""


class InvalidResolutionError(ProfileError):
    pass


class ProfileLengthError(ProfileError):
    pass


class UnknownArchetypeError(HeatCompareError, ValueError):
    pass


class DemandMismatchError(HeatCompareError, AssertionError):
    """Two runs that should share one demand timeline do not."""
