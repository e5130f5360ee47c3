"""
Conservation gap analysis metrics (Khoury et al. 2019).

GRSex (ex-situ geographic representativeness) from germplasm occurrences
and species distribution rasters, and the combined FCSc summary
assessment from final ex-situ and in-situ scores.
"""

from gapanalysis.errors import (
    ConfigurationError,
    DataMismatchError,
    GapAnalysisError,
    UndefinedScoreError,
)
from gapanalysis.fcsc import fcsc
from gapanalysis.formulas.classification import classify_priority
from gapanalysis.gap_maps import write_gap_maps
from gapanalysis.grsex import compute_species_grsex, grsex
from gapanalysis.rasters import GridRaster, read_raster, read_raster_stack

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DataMismatchError",
    "GapAnalysisError",
    "GridRaster",
    "UndefinedScoreError",
    "classify_priority",
    "compute_species_grsex",
    "fcsc",
    "grsex",
    "read_raster",
    "read_raster_stack",
    "write_gap_maps",
]
