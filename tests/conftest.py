"""
Shared fixtures for gap analysis tests.

Provides synthetic distribution rasters, occurrence tables and temporary
directories so each test module can focus on verifying scoring logic
against known inputs.
"""

import os

import geopandas as gpd
import numpy as np
import pandas as pd
import pytest
import rasterio
from rasterio.crs import CRS
from rasterio.transform import from_origin
from shapely.geometry import Point

from gapanalysis.logging_config import reset_logging
from gapanalysis.rasters import GridRaster


# ---------------------------------------------------------------------------
# Constants for synthetic test geometry
# ---------------------------------------------------------------------------
# Projected grid: UTM 32N, 1 km cells, 10 rows x 60 cols, north-up.
UTM_EPSG = 32632
UTM_X0, UTM_Y0 = 500_000.0, 5_000_000.0
CELL_M = 1000.0
HEIGHT, WIDTH = 10, 60

# Presence blocks: A = cols 0-3 (40 cells), B = cols 50-55 (60 cells).
BLOCK_A = slice(0, 4)
BLOCK_B = slice(50, 56)

# Three germplasm points inside block A (metres from the grid origin).
G_POINT_OFFSETS = [(2000.0, -5000.0), (1500.0, -3000.0), (2500.0, -7000.0)]
# 15 km covers all of block A and none of block B (~48 km away).
BUFFER_M = 15_000

# Geographic grid: 0.5 degree cells over 10-15E, 40-45N.
GEO_WEST, GEO_NORTH, GEO_RES = 10.0, 45.0, 0.5

SPECIES_A = "Cucurbita alpha"
SPECIES_B = "Cucurbita beta"


def utm_to_lonlat(offsets):
    """Convert (dx, dy) metre offsets from the UTM grid origin to lon/lat."""
    points = [Point(UTM_X0 + dx, UTM_Y0 + dy) for dx, dy in offsets]
    geo = gpd.GeoSeries(points, crs=f"EPSG:{UTM_EPSG}").to_crs("EPSG:4326")
    return [(p.x, p.y) for p in geo]


def make_projected_raster(data=None, crs=f"EPSG:{UTM_EPSG}"):
    """GridRaster on the synthetic UTM grid (two presence blocks by default)."""
    if data is None:
        data = np.zeros((HEIGHT, WIDTH), dtype="float32")
        data[:, BLOCK_A] = 1.0
        data[:, BLOCK_B] = 1.0
    return GridRaster(
        data=data,
        transform=from_origin(UTM_X0, UTM_Y0, CELL_M, CELL_M),
        crs=CRS.from_user_input(crs) if crs else None,
        nodata=np.nan,
    )


def make_geographic_raster(data=None, crs="EPSG:4326", size=10):
    """GridRaster on a 0.5 degree lon/lat grid, all presence by default."""
    if data is None:
        data = np.ones((size, size), dtype="float32")
    return GridRaster(
        data=data,
        transform=from_origin(GEO_WEST, GEO_NORTH, GEO_RES, GEO_RES),
        crs=CRS.from_user_input(crs) if crs else None,
        nodata=np.nan,
    )


@pytest.fixture(autouse=True)
def _isolated_logging():
    """Start each test with fresh package logging state."""
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def projected_raster():
    return make_projected_raster()


@pytest.fixture
def geographic_raster():
    return make_geographic_raster()


@pytest.fixture
def occurrences():
    """Occurrence table for two species.

    SPECIES_A: three G points inside block A, one H point, one G point
    without latitude. SPECIES_B: herbarium records only.
    """
    g_points = utm_to_lonlat(G_POINT_OFFSETS)
    h_point = utm_to_lonlat([(52_000.0, -5000.0)])[0]
    rows = [
        {"species": SPECIES_A, "latitude": lat, "longitude": lon, "type": "G"}
        for lon, lat in g_points
    ]
    rows.append({"species": SPECIES_A, "latitude": h_point[1],
                 "longitude": h_point[0], "type": "H"})
    rows.append({"species": SPECIES_A, "latitude": np.nan,
                 "longitude": h_point[0], "type": "G"})
    rows.append({"species": SPECIES_B, "latitude": h_point[1],
                 "longitude": h_point[0], "type": "H"})
    rows.append({"species": SPECIES_B, "latitude": g_points[0][1],
                 "longitude": g_points[0][0], "type": "H"})
    return pd.DataFrame(rows, columns=["species", "latitude", "longitude", "type"])


@pytest.fixture
def species_rasters(projected_raster):
    return {SPECIES_A: projected_raster, SPECIES_B: make_projected_raster()}


@pytest.fixture
def geotiff_path(tmp_path, projected_raster):
    """The projected test raster written as a GeoTIFF with -9999 nodata."""
    path = os.path.join(tmp_path, "sdm.tif")
    data = projected_raster.data.copy()
    data[0, 10] = -9999.0
    meta = {
        "driver": "GTiff",
        "height": HEIGHT,
        "width": WIDTH,
        "count": 1,
        "dtype": "float32",
        "crs": projected_raster.crs,
        "transform": projected_raster.transform,
        "nodata": -9999.0,
    }
    with rasterio.open(path, "w", **meta) as dst:
        dst.write(data, 1)
    return path
