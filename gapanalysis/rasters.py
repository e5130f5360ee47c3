"""
In-memory raster grids and GeoTIFF I/O for species distribution models.

Distribution models are thresholded grids: 1 marks predicted presence,
everything else is absence. Internally every mask is float32 with NaN as
no-data, so multiplying two masks yields 1 only where both are 1.
"""

import os
from dataclasses import dataclass, replace
from typing import Optional

import numpy as np
import rasterio
from affine import Affine
from pyproj import CRS as ProjCRS
from pyproj import Proj, Transformer
from rasterio.crs import CRS

from gapanalysis import config
from gapanalysis.formulas.spatial import (
    geographic_cell_areas_km2,
    projected_cell_areas_km2,
)


@dataclass(frozen=True, eq=False)
class GridRaster:
    """Single-band grid with its georeferencing."""

    data: np.ndarray
    transform: Affine
    crs: Optional[CRS] = None
    nodata: Optional[float] = None
    name: Optional[str] = None

    @property
    def shape(self):
        return self.data.shape

    @property
    def height(self):
        return self.data.shape[0]

    @property
    def width(self):
        return self.data.shape[1]

    def with_data(self, data, name=None):
        """Same grid and CRS, different cell values (NaN no-data)."""
        return replace(self, data=data, nodata=np.nan, name=name or self.name)


def read_raster(path, band=1, name=None):
    """Load one band of a raster file as a GridRaster.

    Cells equal to the file's nodata value become NaN.
    """
    with rasterio.open(path) as src:
        data = src.read(band).astype("float32")
        if src.nodata is not None and not np.isnan(src.nodata):
            data[data == src.nodata] = np.nan
        return GridRaster(
            data=data,
            transform=src.transform,
            crs=src.crs,
            nodata=np.nan,
            name=name or os.path.splitext(os.path.basename(path))[0],
        )


def read_raster_stack(path, names=None):
    """Unstack a multi-band raster into one GridRaster per band.

    Parameters
    ----------
    path : str
        Multi-band raster (one species distribution model per band).
    names : list[str], optional
        Band names. Defaults to the band descriptions, then "band_<n>".
    """
    with rasterio.open(path) as src:
        descriptions = src.descriptions
        count = src.count
    if names is not None and len(names) != count:
        raise ValueError(
            f"{path} has {count} bands but {len(names)} names were given"
        )

    rasters = []
    for band in range(1, count + 1):
        if names is not None:
            name = names[band - 1]
        else:
            name = descriptions[band - 1] or f"band_{band}"
        rasters.append(read_raster(path, band=band, name=name))
    return rasters


def write_raster(path, raster):
    """Write a GridRaster as a single-band float32 GeoTIFF (NaN no-data)."""
    meta = {
        "driver": "GTiff",
        "height": raster.height,
        "width": raster.width,
        "count": 1,
        "dtype": "float32",
        "crs": raster.crs,
        "transform": raster.transform,
        "nodata": np.nan,
    }
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with rasterio.open(path, "w", **meta) as dst:
        dst.write(raster.data.astype("float32"), 1)
        if raster.name:
            dst.set_band_description(1, raster.name)
    return path


def coerce_raster(obj, name=None):
    """Accept a GridRaster or a path to a raster file."""
    if isinstance(obj, GridRaster):
        return obj
    if isinstance(obj, (str, os.PathLike)):
        return read_raster(obj, name=name)
    raise TypeError(
        f"Expected a GridRaster or raster file path, got {type(obj).__name__}"
    )


def ensure_crs(raster):
    """Return (raster, assumed) with config.DEFAULT_CRS filled in if unset."""
    if raster.crs:
        return raster, False
    return replace(raster, crs=CRS.from_user_input(config.DEFAULT_CRS)), True


def to_presence_mask(raster):
    """Strict 1/NaN mask: only cells exactly equal to PRESENCE_VALUE survive.

    Guards against floating no-data sentinels (-9999, 3e-178) that would
    otherwise pass a looser "non-NaN" test.
    """
    data = np.where(raster.data == config.PRESENCE_VALUE, 1.0, np.nan)
    return data.astype("float32")


def projected_areal_scale(transform, shape, crs):
    """Areal scale factor of a projected CRS at every cell centre.

    Cell centres are taken back to the CRS's geodetic lon/lat and the
    projection's own distortion factors are evaluated there. Cells
    outside the projection's domain come back non-finite and are skipped
    by area sums.
    """
    crs = ProjCRS.from_user_input(crs.to_wkt() if hasattr(crs, "to_wkt") else crs)
    height, width = shape
    cols, rows = np.meshgrid(np.arange(width) + 0.5, np.arange(height) + 0.5)
    xs, ys = transform * (cols, rows)

    to_geodetic = Transformer.from_crs(crs, crs.geodetic_crs, always_xy=True)
    lons, lats = to_geodetic.transform(xs, ys)
    factors = Proj(crs).get_factors(lons, lats)
    return np.asarray(factors.areal_scale, dtype="float64").reshape(shape)


def cell_area_grid(raster):
    """Per-cell true ground area in km² for the raster's grid.

    Geographic CRSs get zonal-band areas (shrinking toward the poles).
    Projected CRSs get the cell's map area corrected by the projection's
    areal scale factor at the cell centre, so conformal grids such as
    Web Mercator shrink toward the poles too.
    """
    crs = raster.crs if raster.crs else CRS.from_user_input(config.DEFAULT_CRS)
    if crs.is_geographic:
        return geographic_cell_areas_km2(raster.transform, raster.shape)
    _, metres_per_unit = crs.linear_units_factor
    scale = projected_areal_scale(raster.transform, raster.shape, crs)
    return projected_cell_areas_km2(raster.transform, raster.shape,
                                    metres_per_unit, areal_scale=scale)
