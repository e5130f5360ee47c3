"""
Circular buffers around germplasm occurrence points.

BUFFER methodology:
Following Ramirez-Villegas et al. (2010) and Khoury et al. (2019), each
germplasm (G) accession is surrounded by a circle of radius
buffer_distance (default 50 km, CA50) to approximate the area already
well collected. A metric radius is only meaningful in a metric frame, so
each circle is built in an azimuthal equidistant projection centred on
its own point (distances from the centre are true there at any latitude),
reprojected to WGS84, unioned, and finally reprojected to the raster CRS.

DATELINE handling:
In WGS84 a circle near ±180° has vertices on both sides of the
antimeridian, and a circle around a pole has a ring that wraps through
all longitudes. Each ring is unwrapped to continuous longitudes, closed
along the pole when it encircles one, then cut at ±180° with the
overhanging pieces shifted back by 360°.
"""

import geopandas as gpd
import numpy as np
import pandas as pd
from pyproj import CRS as ProjCRS
from shapely.affinity import translate
from shapely.geometry import MultiPolygon, Point, Polygon, box
from shapely.ops import unary_union
from shapely.validation import make_valid

from gapanalysis import config
from gapanalysis.logging_config import get_pipeline_logger

log = get_pipeline_logger(__name__)

WGS84 = "EPSG:4326"


def select_germplasm_points(occurrences, species):
    """Coordinates of a species' G records with both coordinates present.

    Returns
    -------
    pd.DataFrame
        Columns [longitude, latitude], possibly empty.
    """
    occ = occurrences[occurrences["species"] == species]
    occ = occ[
        (occ["type"] == config.GERMPLASM_TYPE)
        & occ["latitude"].notna()
        & occ["longitude"].notna()
    ]
    return occ[["longitude", "latitude"]].astype(float).reset_index(drop=True)


def _aeqd_crs(lon, lat):
    return (
        f"+proj=aeqd +lat_0={lat} +lon_0={lon} +x_0=0 +y_0=0 "
        "+datum=WGS84 +units=m +no_defs"
    )


def _polygonal(geometry):
    """Drop the line and point slivers that clipping can leave behind."""
    if geometry.geom_type in ("Polygon", "MultiPolygon"):
        return geometry
    parts = [g for g in getattr(geometry, "geoms", []) if g.geom_type in ("Polygon", "MultiPolygon")]
    return unary_union(parts) if parts else MultiPolygon()


def wrap_dateline(coords, centre_lat):
    """Polygon (lon/lat) from a WGS84 ring, split at the antimeridian.

    Parameters
    ----------
    coords : array-like
        Closed ring vertices (lon, lat) with longitudes in [-180, 180].
    centre_lat : float
        Latitude of the circle centre; picks the pole a wrapping ring
        encloses.

    Returns
    -------
    shapely geometry
        Polygon or MultiPolygon within [-180, 180] × [-90, 90].
    """
    coords = np.asarray(coords, dtype=float)
    lons = np.unwrap(coords[:, 0], period=360.0)
    vertices = list(zip(lons, coords[:, 1]))

    if abs(lons[-1] - lons[0]) > 180.0:
        # The ring went once around the globe: it encloses a pole.
        pole = 90.0 if centre_lat >= 0 else -90.0
        vertices += [(lons[-1], pole), (lons[0], pole)]

    shape = _polygonal(make_valid(Polygon(vertices)))
    pieces = []
    for shift in (-360.0, 0.0, 360.0):
        window = box(-180.0 - shift, -90.0, 180.0 - shift, 90.0)
        piece = _polygonal(shape.intersection(window))
        if not piece.is_empty:
            pieces.append(translate(piece, xoff=shift))
    return unary_union(pieces)


def geodesic_buffer(lon, lat, distance_m):
    """Circle of radius distance_m (metres) around a lon/lat point, in WGS84.

    Circles crossing the antimeridian come back as a MultiPolygon with one
    part on each side; circles containing a pole reach latitude ±90.
    """
    circle = gpd.GeoSeries([Point(0.0, 0.0)], crs=_aeqd_crs(lon, lat))
    ring = circle.buffer(distance_m).to_crs(WGS84).iloc[0].exterior
    return wrap_dateline(ring.coords, lat)


def buffers_geodataframe(points, distance_m):
    """One row per point with its buffer polygon (WGS84)."""
    geometries = [
        geodesic_buffer(lon, lat, distance_m)
        for lon, lat in zip(points["longitude"], points["latitude"])
    ]
    return gpd.GeoDataFrame(
        pd.DataFrame(points).reset_index(drop=True),
        geometry=geometries,
        crs=WGS84,
    )


def build_buffer_geometry(points, distance_m, target_crs=WGS84):
    """Union of geodesic buffers around every point, in target_crs.

    Parameters
    ----------
    points : pd.DataFrame
        Columns [longitude, latitude] (see select_germplasm_points).
    distance_m : float
        Buffer radius in metres.
    target_crs : CRS-like
        CRS of the distribution raster.

    Returns
    -------
    shapely geometry or None
        None when there are no points (no conserved area).
    """
    if points is None or len(points) == 0:
        return None

    # Duplicate accessions at one site contribute a single circle.
    unique_points = points[["longitude", "latitude"]].drop_duplicates()
    buffers = buffers_geodataframe(unique_points, distance_m)
    coverage = unary_union(list(buffers.geometry))
    log.debug("Buffered %d points (%d unique) at %.0f m",
              len(points), len(unique_points), distance_m)

    coverage = gpd.GeoSeries([coverage], crs=WGS84)
    if not _same_crs(coverage.crs, target_crs):
        coverage = coverage.to_crs(_crs_input(target_crs))
    return coverage.iloc[0]


def _crs_input(crs):
    # rasterio CRS objects → WKT so pyproj can read them.
    to_wkt = getattr(crs, "to_wkt", None)
    return to_wkt() if callable(to_wkt) else crs


def _same_crs(crs_a, crs_b):
    return ProjCRS.from_user_input(_crs_input(crs_a)) == ProjCRS.from_user_input(_crs_input(crs_b))
