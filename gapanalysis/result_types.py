"""
Typed result records for per-species scoring and score combination.

Per-species computations return immutable records; batch entry points
collect them into tables in input order, alongside the structured
diagnostics raised on the way.
"""

from dataclasses import dataclass, field
from typing import Optional

import pandas as pd

# Diagnostic codes for recoverable per-species conditions.
NO_GERMPLASM_OCCURRENCES = "no_germplasm_occurrences"
ZERO_RANGE_AREA = "zero_range_area"
ASSUMED_CRS = "assumed_crs"
UNDEFINED_COMBINED_SCORE = "undefined_combined_score"


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal condition resolved with a safe default."""

    species: str
    code: str
    message: str

    def to_dict(self):
        return {"species": self.species, "code": self.code, "message": self.message}


def diagnostics_frame(diagnostics):
    """Tabulate diagnostics as a DataFrame with species/code/message columns."""
    return pd.DataFrame(
        [d.to_dict() for d in diagnostics],
        columns=["species", "code", "message"],
    )


@dataclass(frozen=True)
class SpeciesGRSex:
    """GRSex outcome for a single species."""

    species: str
    grsex: float
    conserved_area_km2: float = 0.0
    range_area_km2: float = 0.0
    gap_map: Optional[object] = None  # GridRaster when requested
    diagnostics: tuple = ()

    def to_row(self):
        return {"species": self.species, "GRSex": self.grsex}


@dataclass
class GRSexResult:
    """Result of a GRSex batch run."""

    scores: pd.DataFrame
    gap_maps: Optional[dict] = None
    diagnostics: list = field(default_factory=list)
    timing_seconds: float = 0.0

    @property
    def warnings(self):
        return [d.message for d in self.diagnostics]

    def diagnostics_frame(self):
        return diagnostics_frame(self.diagnostics)


@dataclass
class CombinedResult:
    """Result of combining ex-situ and in-situ final conservation scores."""

    table: pd.DataFrame
    diagnostics: list = field(default_factory=list)

    @property
    def undefined_species(self):
        return [d.species for d in self.diagnostics
                if d.code == UNDEFINED_COMBINED_SCORE]

    def diagnostics_frame(self):
        return diagnostics_frame(self.diagnostics)
