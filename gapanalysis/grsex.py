"""
Geographic representativeness score, ex situ (GRSex).

GRSex methodology:
Following Khoury et al. (2019), GRSex is the share of a species'
predicted range (thresholded distribution model) lying within
buffer_distance of a germplasm (G) accession:

    GRSex = min(100, conserved_area / range_area × 100)

Each species is an independent, pure transform (occurrences + raster →
SpeciesGRSex). Recoverable degeneracies (no G points, empty range, unset
CRS) resolve to safe defaults and are reported as Diagnostic records;
caller misconfiguration (bad table, species/raster mismatch) aborts the
whole run before any species is scored.

Citation: Khoury, C.K. et al. (2019). Ecological Indicators, 98, 420-429.
          Ramirez-Villegas, J. et al. (2010). PLOS ONE, 5(10), e13497.
"""

import math
import numbers
import os
from collections.abc import Mapping
from concurrent.futures import ProcessPoolExecutor, as_completed

import pandas as pd

from gapanalysis import config
from gapanalysis.buffers import build_buffer_geometry, select_germplasm_points
from gapanalysis.errors import ConfigurationError, DataMismatchError
from gapanalysis.gap_maps import gap_map as build_gap_map
from gapanalysis.logging_config import (
    StepTimer,
    get_pipeline_logger,
    log_step_summary,
)
from gapanalysis.overlay import overlay_areas
from gapanalysis.rasters import GridRaster, coerce_raster, ensure_crs
from gapanalysis.result_types import (
    ASSUMED_CRS,
    NO_GERMPLASM_OCCURRENCES,
    ZERO_RANGE_AREA,
    Diagnostic,
    GRSexResult,
    SpeciesGRSex,
)
from gapanalysis.schemas import GRSexSchema, OccurrenceSchema, validate_schema

log = get_pipeline_logger(__name__)


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def grs_score(conserved_area, range_area):
    """Capped percentage of range area that is conserved.

    Rasterization can make the conserved area marginally exceed the range
    area, hence the cap. A zero, negative or non-finite range area is
    degenerate and scores 0.0.
    """
    if range_area is None or not math.isfinite(range_area) or range_area <= 0:
        return 0.0
    if conserved_area is None or not math.isfinite(conserved_area) or conserved_area <= 0:
        return 0.0
    return min(config.SCORE_MAX, conserved_area / range_area * 100)


def _diagnose(species, code, message):
    log.warning(message, extra={"species": species, "code": code})
    return Diagnostic(species=species, code=code, message=message)


def compute_species_grsex(species, occurrences, raster,
                          buffer_distance=config.DEFAULT_BUFFER_DISTANCE_M,
                          gap_map=False):
    """GRSex for one species.

    Parameters
    ----------
    species : str
    occurrences : pd.DataFrame
        Occurrence table (may contain other species; filtered here).
    raster : GridRaster or str
        The species' distribution model, or a raster file to load for
        this species only.
    buffer_distance : float
        Buffer radius in metres.
    gap_map : bool
        Also derive the unbuffered part of the range.

    Returns
    -------
    SpeciesGRSex
    """
    diagnostics = []

    raster, assumed = ensure_crs(coerce_raster(raster, name=species))
    if assumed:
        diagnostics.append(_diagnose(
            species, ASSUMED_CRS,
            f"No coordinate system was provided for {species}, "
            f"assuming {config.DEFAULT_CRS} (+proj=longlat +datum=WGS84)",
        ))

    points = select_germplasm_points(occurrences, species)
    if len(points) == 0:
        diagnostics.append(_diagnose(
            species, NO_GERMPLASM_OCCURRENCES,
            f"No germplasm (G) occurrences with coordinates for {species}, "
            "GRSex was automatically assigned 0",
        ))

    geometry = build_buffer_geometry(points, buffer_distance, target_crs=raster.crs)
    areas = overlay_areas(geometry, raster)

    if areas.range_area_km2 <= 0:
        diagnostics.append(_diagnose(
            species, ZERO_RANGE_AREA,
            f"Distribution model for {species} has no predicted presence "
            "cells, GRSex was automatically assigned 0",
        ))

    score = grs_score(areas.conserved_area_km2, areas.range_area_km2)
    log.debug("%s: conserved %.1f km² of %.1f km² → GRSex %.2f",
              species, areas.conserved_area_km2, areas.range_area_km2, score)

    species_gap_map = None
    if gap_map:
        log.info("Calculating GRSex gap map for %s", species)
        species_gap_map = build_gap_map(
            areas.range_mask, areas.conserved_mask, raster, species
        )

    return SpeciesGRSex(
        species=species,
        grsex=float(score),
        conserved_area_km2=areas.conserved_area_km2,
        range_area_km2=areas.range_area_km2,
        gap_map=species_gap_map,
        diagnostics=tuple(diagnostics),
    )


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------

def validate_occurrences(occurrence_data):
    """Fail fast on a missing or malformed occurrence table."""
    if occurrence_data is None or not isinstance(occurrence_data, pd.DataFrame):
        raise ConfigurationError(
            "Please add a valid data frame with columns: "
            + ", ".join(config.OCCURRENCE_COLUMNS)
        )
    if list(occurrence_data.columns) != config.OCCURRENCE_COLUMNS:
        raise ConfigurationError(
            "Please format the column names in your dataframe as "
            + ", ".join(config.OCCURRENCE_COLUMNS)
            + f" (got: {', '.join(map(str, occurrence_data.columns))})"
        )
    validate_schema(occurrence_data, OccurrenceSchema, "grsex", strict=True)


def validate_parameters(buffer_distance, gap_map, max_workers):
    """Check scalar parameters; returns the normalised gap_map flag."""
    if (isinstance(buffer_distance, bool)
            or not isinstance(buffer_distance, numbers.Real)
            or not math.isfinite(buffer_distance)
            or buffer_distance <= 0):
        raise ConfigurationError(
            f"buffer_distance must be a positive number of metres, got {buffer_distance!r}"
        )
    if gap_map is None:
        gap_map = False
    if not isinstance(gap_map, bool):
        raise ConfigurationError(
            f"Choose a valid option for gap_map (True or False), got {gap_map!r}"
        )
    if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers < 1:
        raise ConfigurationError(
            f"max_workers must be a positive integer, got {max_workers!r}"
        )
    return gap_map


def pair_species_rasters(species_list, rasters):
    """Build the species → raster mapping once, rejecting any mismatch.

    Parameters
    ----------
    species_list : list[str]
        Ordered species; duplicates are rejected.
    rasters : Mapping[str, GridRaster | path] or Sequence[GridRaster | path]
        Keyed by species, or positionally aligned with species_list.

    Returns
    -------
    dict
        species → GridRaster or raster path, in species_list order. Paths
        are checked here but only read when their species is scored.
    """
    if len(set(species_list)) != len(species_list):
        dupes = sorted({s for s in species_list if species_list.count(s) > 1})
        raise ConfigurationError(f"Duplicate species in species_list: {dupes}")
    if rasters is None:
        raise DataMismatchError("No distribution rasters were provided")

    if isinstance(rasters, Mapping):
        missing = [s for s in species_list if s not in rasters]
        extra = [k for k in rasters if k not in set(species_list)]
        if missing:
            raise DataMismatchError(
                f"No distribution raster provided for species: {missing}"
            )
        if extra:
            raise DataMismatchError(
                f"Distribution rasters provided for unknown species: {extra}"
            )
        pairs = [(s, rasters[s]) for s in species_list]
    else:
        rasters = list(rasters)
        if len(rasters) != len(species_list):
            raise DataMismatchError(
                f"{len(species_list)} species but {len(rasters)} distribution "
                "rasters; the lists must be aligned one-to-one"
            )
        pairs = list(zip(species_list, rasters))

    paired = {}
    for species, raster in pairs:
        if raster is None:
            raise DataMismatchError(f"Distribution raster for {species} is missing")
        paired[species] = _check_raster_source(species, raster)
    return paired


def _check_raster_source(species, raster):
    """Accept a GridRaster or an existing raster file without reading it."""
    if isinstance(raster, GridRaster):
        return raster
    if isinstance(raster, (str, os.PathLike)):
        if not os.path.isfile(raster):
            raise DataMismatchError(
                f"Distribution raster file for {species} does not exist: {raster}"
            )
        return raster
    raise ConfigurationError(
        f"Distribution raster for {species} must be a GridRaster or a raster "
        f"file path, got {type(raster).__name__}"
    )


def _check_occurrences_present(occurrence_data, species_list):
    """A raster without any occurrence rows means the inputs are misaligned."""
    present = set(occurrence_data["species"])
    absent = [s for s in species_list if s not in present]
    if absent:
        raise DataMismatchError(
            "No occurrence data exists, but a distribution raster was "
            f"provided. Please check your occurrence data input for: {absent}"
        )


# ---------------------------------------------------------------------------
# Batch entry point
# ---------------------------------------------------------------------------

def _score_species(task):
    """Worker: (species, occurrences, raster, buffer_distance, gap_map) → SpeciesGRSex."""
    return compute_species_grsex(*task)


def _score_all(tasks, max_workers):
    if max_workers == 1 or len(tasks) <= 1:
        return [_score_species(task) for task in tasks]

    by_species = {}
    with ProcessPoolExecutor(max_workers=max_workers) as executor:
        futures = {executor.submit(_score_species, t): t[0] for t in tasks}
        for future in as_completed(futures):
            species = futures[future]
            by_species[species] = future.result()
            log.debug("Completed GRSex for %s", species)
    return [by_species[task[0]] for task in tasks]


def grsex(species_list, occurrence_data, rasters,
          buffer_distance=config.DEFAULT_BUFFER_DISTANCE_M,
          gap_map=False, max_workers=config.DEFAULT_MAX_WORKERS):
    """Compute GRSex for every species.

    Parameters
    ----------
    species_list : list[str] or None
        Species to score; defines output row order. None uses the
        occurrence table's species in order of first appearance (only
        allowed when rasters is a mapping).
    occurrence_data : pd.DataFrame
        Columns exactly species, latitude, longitude, type.
    rasters : Mapping or Sequence
        Distribution models keyed by species, or aligned with species_list.
        Values may be GridRaster objects or raster file paths.
    buffer_distance : float
        Buffer radius in metres. Default: config.DEFAULT_BUFFER_DISTANCE_M.
    gap_map : bool
        Also return species → gap map GridRaster.
    max_workers : int
        Worker processes; 1 scores species sequentially.

    Returns
    -------
    GRSexResult
        scores: DataFrame [species, GRSex] in species_list order;
        gap_maps: dict or None; diagnostics: list[Diagnostic].

    Raises
    ------
    ConfigurationError, DataMismatchError
        On invalid inputs; no species is scored in that case.
    """
    validate_occurrences(occurrence_data)
    gap_map = validate_parameters(buffer_distance, gap_map, max_workers)

    if species_list is None:
        if not isinstance(rasters, Mapping):
            raise ConfigurationError(
                "species_list is required when rasters are given positionally"
            )
        species_list = list(pd.unique(occurrence_data["species"]))
    else:
        species_list = [str(s) for s in species_list]

    paired = pair_species_rasters(species_list, rasters)
    _check_occurrences_present(occurrence_data, species_list)

    tasks = []
    for species, raster in paired.items():
        species_occ = occurrence_data[occurrence_data["species"] == species]
        tasks.append((species, species_occ, raster, buffer_distance, gap_map))

    with StepTimer() as timer:
        records = _score_all(tasks, max_workers)

    scores = pd.DataFrame(
        [r.to_row() for r in records],
        columns=[config.SPECIES_COLUMN, config.GRSEX_COLUMN],
    ).astype({config.GRSEX_COLUMN: "float64"})
    if len(scores):
        validate_schema(scores, GRSexSchema, "grsex", strict=True)

    diagnostics = [d for r in records for d in r.diagnostics]
    gap_maps = {r.species: r.gap_map for r in records} if gap_map else None

    log_step_summary(
        log, "grsex",
        input_summary={"species": len(species_list),
                       "occurrences": len(occurrence_data),
                       "buffer_distance_m": buffer_distance},
        output_summary={"scored": len(scores),
                        "mean_grsex": round(float(scores[config.GRSEX_COLUMN].mean()), 2)
                        if len(scores) else None},
        timing_seconds=timer.elapsed,
        warnings_list=[d.message for d in diagnostics],
    )
    return GRSexResult(
        scores=scores,
        gap_maps=gap_maps,
        diagnostics=diagnostics,
        timing_seconds=timer.elapsed,
    )
