"""
Centralized configuration for ex-situ / in-situ conservation gap analysis.

All analysis parameters, thresholds, column contracts, and runtime
switches are defined here with inline citations justifying each choice.
Scientific constants (earth radius, priority bins) live in
gapanalysis.formulas.
"""

import os

# ─── BUFFER PARAMETERS ───────────────────────────────────────────────────
# Following Ramirez-Villegas et al. (2010) collecting gap methodology:
# "A 50 km radius around each germplasm accession (CA50) approximates the
# area already well collected."
# Citation: Ramirez-Villegas, J. et al. (2010). A Gap Analysis Methodology
#           for Collecting Crop Genepools. PLOS ONE, 5(10), e13497.
DEFAULT_BUFFER_DISTANCE_M = 50000

# ─── DISTRIBUTION RASTERS ────────────────────────────────────────────────
# Thresholded species distribution models mark predicted presence with 1.
# Anything else (0, -9999, 3e-178 float artefacts) is treated as absence.
PRESENCE_VALUE = 1

# Assumed when a distribution raster carries no CRS
# (+proj=longlat +datum=WGS84 +no_defs).
DEFAULT_CRS = "EPSG:4326"

# ─── OCCURRENCE TABLE CONTRACT ───────────────────────────────────────────
# Exact column names and order expected from occurrence producers.
OCCURRENCE_COLUMNS = ["species", "latitude", "longitude", "type"]

# G = germplasm (genebank accession), H = herbarium/observation only.
# Only G records are buffered for the ex-situ geographic score.
GERMPLASM_TYPE = "G"
HERBARIUM_TYPE = "H"

# ─── SCORE TABLE COLUMNS ─────────────────────────────────────────────────
SPECIES_COLUMN = "species"
GRSEX_COLUMN = "GRSex"
FCSEX_COLUMN = "FCSex"
FCSIN_COLUMN = "FCSin"
FCSC_STATISTICS = ("min", "max", "mean")
FCSC_COLUMNS = [f"FCSc_{stat}" for stat in FCSC_STATISTICS]
FCSC_CLASS_COLUMNS = [f"FCSc_{stat}_class" for stat in FCSC_STATISTICS]

# ─── CONSERVATION PRIORITY THRESHOLDS (0-100 score) ──────────────────────
# Following Khoury et al. (2019) summary assessment categories:
# HP < 25 <= MP < 50 <= LP < 75 <= SC
# Citation: Khoury, C.K. et al. (2019). Comprehensiveness of conservation
#           of useful wild plants. Ecological Indicators, 98, 420-429.
PRIORITY_HP_UPPER = 25.0
PRIORITY_MP_UPPER = 50.0
PRIORITY_LP_UPPER = 75.0
PRIORITY_LABELS = ["HP", "MP", "LP", "SC"]

# Scores are percentages.
SCORE_MIN = 0.0
SCORE_MAX = 100.0

# ─── RUNTIME ─────────────────────────────────────────────────────────────
# Species are independent; >1 evaluates them in worker processes.
DEFAULT_MAX_WORKERS = 1

# Optional directory for the rotating JSON Lines log. Unset = console only.
LOG_DIR = os.environ.get("GAPANALYSIS_LOG_DIR")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Gap map GeoTIFFs written by write_gap_maps()
GAP_MAP_SUFFIX = "_GRSex_gap_map.tif"
