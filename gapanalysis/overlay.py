"""
Raster overlay of buffer coverage on species distribution models.

OVERLAY methodology:
The buffer coverage is burned onto the distribution raster's own grid
(same extent, resolution and CRS) using cell-centre inclusion, giving a
1/NaN buffer mask. Multiplying it with the strict presence mask of the
distribution keeps only cells that are both predicted and buffered.

AREA methodology:
Areas are cell-count × median true cell area. Cell areas vary with
latitude under geographic CRSs, so they are computed per cell; the
median (rather than the mean) keeps a handful of distorted edge cells
from skewing the estimate.
"""

from dataclasses import dataclass

import numpy as np
from rasterio.features import rasterize

from gapanalysis.rasters import cell_area_grid, to_presence_mask


@dataclass(frozen=True, eq=False)
class OverlayAreas:
    """Masks and areas produced by overlaying buffers on one distribution."""

    range_mask: np.ndarray
    buffer_mask: np.ndarray
    conserved_mask: np.ndarray
    range_area_km2: float
    conserved_area_km2: float


def rasterize_buffer(geometry, raster):
    """Burn a buffer geometry onto the raster grid as a 1/NaN mask.

    A missing or empty geometry yields an all-NaN mask.
    """
    if geometry is None or geometry.is_empty:
        return np.full(raster.shape, np.nan, dtype="float32")

    burned = rasterize(
        [(geometry, 1)],
        out_shape=raster.shape,
        transform=raster.transform,
        fill=0,
        all_touched=False,
        dtype="uint8",
    )
    return np.where(burned == 1, 1.0, np.nan).astype("float32")


def intersect_masks(mask_a, mask_b):
    """Elementwise product: 1 where both masks are 1, NaN elsewhere."""
    return (mask_a * mask_b).astype("float32")


def mask_area(mask, cell_areas):
    """Area covered by a 1/NaN mask: valid cell count × median cell area.

    Parameters
    ----------
    mask : np.ndarray
        1/NaN mask.
    cell_areas : np.ndarray
        Per-cell area (km²) on the same grid (see rasters.cell_area_grid).

    Returns
    -------
    float
        Area in km²; 0.0 when the mask has no valid cells.
    """
    valid = np.isfinite(mask)
    sizes = cell_areas[valid]
    sizes = sizes[np.isfinite(sizes)]
    if sizes.size == 0:
        return 0.0
    return float(sizes.size * np.median(sizes))


def overlay_areas(buffer_geometry, raster):
    """Overlay buffer coverage on a distribution raster and measure both areas.

    Parameters
    ----------
    buffer_geometry : shapely geometry or None
        Buffer coverage already in the raster's CRS.
    raster : GridRaster
        Species distribution model with a CRS assigned.

    Returns
    -------
    OverlayAreas
    """
    range_mask = to_presence_mask(raster)
    buffer_mask = rasterize_buffer(buffer_geometry, raster)
    conserved_mask = intersect_masks(buffer_mask, range_mask)

    cell_areas = cell_area_grid(raster)
    return OverlayAreas(
        range_mask=range_mask,
        buffer_mask=buffer_mask,
        conserved_mask=conserved_mask,
        range_area_km2=mask_area(range_mask, cell_areas),
        conserved_area_km2=mask_area(conserved_mask, cell_areas),
    )
