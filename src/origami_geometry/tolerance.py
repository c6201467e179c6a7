"""
Tolerance policy and configuration for the projection/boolean pipeline.

Every point, scalar and area comparison in this package goes through the
single epsilon defined here. It is one order of magnitude looser than the
precision the 2D engine works with, so the error accumulated by projecting
a polygon to the working plane and back is absorbed. Points closer than the
tolerance are considered the same point; that is accepted as a (very
improbable) source of misclassification.
"""
from dataclasses import dataclass

TOLERANCE: float = 1e-6


def almost_zero(value: float, tolerance: float = TOLERANCE) -> bool:
    return abs(value) < tolerance


def epsilon_equals(a: float, b: float, tolerance: float = TOLERANCE) -> bool:
    return abs(a - b) < tolerance


def area_is_almost_zero(area: float, tolerance: float = TOLERANCE) -> bool:
    """Areas scale quadratically, but the tolerance is loose enough to use as is."""
    return abs(area) < tolerance


@dataclass(frozen=True)
class GeometryConfig:
    """Tuning parameters for the boolean operations and the projector cache."""

    tolerance: float = TOLERANCE
    # A folded figure touches few distinct planes, over and over
    cache_max_size: int = 100
    cache_ttl_seconds: float = 600.0

    def __post_init__(self):
        if self.tolerance <= 0.0:
            raise ValueError(f"Tolerance must be positive, got {self.tolerance}")
        if self.cache_max_size < 1:
            raise ValueError(f"Cache size must be at least 1, got {self.cache_max_size}")
        if self.cache_ttl_seconds <= 0.0:
            raise ValueError(f"Cache TTL must be positive, got {self.cache_ttl_seconds}")
