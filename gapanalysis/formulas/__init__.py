"""
Scientific formulas, constants, and classification functions.

config.py retains runtime parameters and column contracts; this package
holds the science.
"""

from gapanalysis.formulas.classification import (
    classify_priority,
    classify_priority_series,
    priority_bins,
)
from gapanalysis.formulas.spatial import (
    EARTH_AUTHALIC_RADIUS_M,
    geographic_cell_areas_km2,
    projected_cell_areas_km2,
)

__all__ = [
    # classification
    "classify_priority",
    "classify_priority_series",
    "priority_bins",
    # spatial
    "EARTH_AUTHALIC_RADIUS_M",
    "geographic_cell_areas_km2",
    "projected_cell_areas_km2",
]
