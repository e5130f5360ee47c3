"""
GRSex gap maps: predicted range not covered by any germplasm buffer.
"""

import os
import re

import numpy as np

from gapanalysis import config
from gapanalysis.logging_config import get_pipeline_logger
from gapanalysis.rasters import write_raster

log = get_pipeline_logger(__name__)


def gap_mask(range_mask, buffer_mask):
    """1 where the species is predicted but unbuffered, NaN elsewhere.

    Buffer no-data is read as 0, so range − buffer is 1 (gap) or
    0 (covered); cells outside the range stay NaN.
    """
    covered = np.nan_to_num(buffer_mask, nan=0.0)
    difference = range_mask - covered
    return np.where(difference == 1, 1.0, np.nan).astype("float32")


def gap_map(range_mask, buffer_mask, template, species):
    """Gap mask wrapped as a GridRaster on the template's grid, named by species."""
    return template.with_data(gap_mask(range_mask, buffer_mask), name=species)


def gap_map_filename(species):
    """File-system safe GeoTIFF name for a species gap map."""
    stem = re.sub(r"[^A-Za-z0-9._-]+", "_", str(species)).strip("_")
    return f"{stem}{config.GAP_MAP_SUFFIX}"


def write_gap_maps(gap_maps, output_dir):
    """Write each species gap map as a GeoTIFF.

    Returns
    -------
    dict
        species → written file path.
    """
    os.makedirs(output_dir, exist_ok=True)
    paths = {}
    for species, raster in gap_maps.items():
        path = os.path.join(output_dir, gap_map_filename(species))
        write_raster(path, raster)
        paths[species] = path
        log.info("Saved gap map: %s", path)
    return paths
