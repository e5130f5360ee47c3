"""
Spatial constants and per-cell area formulas.

All functions are pure (no I/O, no side effects).
"""

import numpy as np

# Authalic (equal-area) radius of the WGS84 ellipsoid, metres.
# A sphere of this radius has the same surface area as the ellipsoid,
# so zonal-band cell areas stay unbiased in aggregate.
EARTH_AUTHALIC_RADIUS_M = 6371007.181

M2_PER_KM2 = 1e6


def geographic_cell_areas_km2(transform, shape, radius_m=EARTH_AUTHALIC_RADIUS_M):
    """True area of every cell of a north-up lon/lat grid, in km².

    A cell spanning latitudes φ1..φ2 and Δλ radians of longitude on a
    sphere of radius R covers R² · Δλ · |sin φ2 − sin φ1|. Cells in the
    same row share an area, so the result is broadcast across columns.

    Parameters
    ----------
    transform : affine.Affine
        Grid transform in degrees (no rotation).
    shape : tuple
        (height, width).
    radius_m : float
        Sphere radius in metres.

    Returns
    -------
    np.ndarray
        float64 array of shape ``shape``.
    """
    height, width = shape
    row_edges = transform.f + transform.e * np.arange(height + 1)
    lat = np.radians(np.clip(row_edges, -90.0, 90.0))
    band = np.abs(np.diff(np.sin(lat)))
    dlon = np.radians(abs(transform.a))
    row_area = radius_m ** 2 * dlon * band / M2_PER_KM2
    return np.repeat(row_area[:, np.newaxis], width, axis=1)


def projected_cell_areas_km2(transform, shape, metres_per_unit=1.0, areal_scale=None):
    """True cell areas of a projected grid, in km².

    The map-unit area of a cell is |det(transform)| (rotated or sheared
    grids included). Dividing it by the projection's areal scale factor
    at each cell centre gives the ground area; without scale factors the
    map area is returned unchanged, which is exact for equal-area
    projections only.

    Parameters
    ----------
    transform : affine.Affine
        Grid transform in map units.
    shape : tuple
        (height, width).
    metres_per_unit : float
        Length of one map unit in metres.
    areal_scale : np.ndarray, optional
        Areal scale factor (map area / ground area) per cell.

    Returns
    -------
    np.ndarray
        float64 array of shape ``shape``.
    """
    cell_area = abs(transform.a * transform.e - transform.b * transform.d)
    cell_area_km2 = cell_area * metres_per_unit ** 2 / M2_PER_KM2
    areas = np.full(shape, cell_area_km2, dtype="float64")
    if areal_scale is None:
        return areas
    with np.errstate(divide="ignore", invalid="ignore"):
        return areas / np.asarray(areal_scale, dtype="float64")
