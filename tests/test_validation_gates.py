"""
Tests for Pandera schema validation gates.

Verifies that:
- Schemas reject invalid data (missing columns, wrong order, out-of-range)
- validate_schema() returns messages in lenient mode
- validate_schema() raises ConfigurationError in strict mode
"""

import numpy as np
import pandas as pd
import pytest

from gapanalysis.errors import ConfigurationError
from gapanalysis.schemas import (
    FCScSchema,
    FCSexSchema,
    GRSexSchema,
    OccurrenceSchema,
    validate_schema,
)


# ── OccurrenceSchema ────────────────────────────────────────────────────


class TestOccurrenceSchema:

    def _valid_df(self):
        return pd.DataFrame({
            "species": ["a", "a", "b"],
            "latitude": [10.0, np.nan, -20.0],
            "longitude": [20.0, 30.0, 170.0],
            "type": ["G", "G", "H"],
        })

    def test_valid_data_passes(self):
        OccurrenceSchema.validate(self._valid_df())

    def test_wrong_column_order_fails(self):
        df = self._valid_df()[["species", "longitude", "latitude", "type"]]
        with pytest.raises(Exception):
            OccurrenceSchema.validate(df)

    def test_extra_column_fails(self):
        df = self._valid_df().assign(source="x")
        with pytest.raises(Exception):
            OccurrenceSchema.validate(df)

    def test_latitude_out_of_range_fails(self):
        df = self._valid_df()
        df.loc[0, "latitude"] = 95.0
        with pytest.raises(Exception):
            OccurrenceSchema.validate(df)

    def test_missing_species_fails(self):
        df = self._valid_df()
        df.loc[0, "species"] = None
        with pytest.raises(Exception):
            OccurrenceSchema.validate(df)

    def test_integer_coordinates_coerced(self):
        df = self._valid_df().assign(latitude=[1, 2, 3])
        OccurrenceSchema.validate(df)


# ── Score tables ────────────────────────────────────────────────────────


class TestScoreSchemas:

    def test_grsex_out_of_range_fails(self):
        df = pd.DataFrame({"species": ["a"], "GRSex": [100.5]})
        with pytest.raises(Exception):
            GRSexSchema.validate(df)

    def test_grsex_duplicate_species_fails(self):
        df = pd.DataFrame({"species": ["a", "a"], "GRSex": [1.0, 2.0]})
        with pytest.raises(Exception):
            GRSexSchema.validate(df)

    def test_fcsex_allows_missing_and_extra_columns(self):
        df = pd.DataFrame({"species": ["a", "b"], "FCSex": [np.nan, 40.0],
                           "SRSex": [1.0, 2.0]})
        FCSexSchema.validate(df)

    def test_fcsc_rejects_unknown_class(self):
        df = pd.DataFrame({
            "species": ["a"], "FCSex": [10.0], "FCSin": [10.0],
            "FCSc_min": [10.0], "FCSc_max": [10.0], "FCSc_mean": [10.0],
            "FCSc_min_class": ["HP"], "FCSc_max_class": ["HP"],
            "FCSc_mean_class": ["urgent"],
        })
        with pytest.raises(Exception):
            FCScSchema.validate(df)


# ── validate_schema ─────────────────────────────────────────────────────


class TestValidateSchema:

    def _bad(self):
        return pd.DataFrame({"species": ["a"], "GRSex": [-5.0]})

    def test_lenient_returns_messages(self):
        messages = validate_schema(self._bad(), GRSexSchema, "grsex")
        assert len(messages) >= 1
        assert messages[0].startswith("[grsex]")

    def test_strict_raises(self):
        with pytest.raises(ConfigurationError, match="GRSexSchema"):
            validate_schema(self._bad(), GRSexSchema, "grsex", strict=True)

    def test_valid_returns_empty(self):
        df = pd.DataFrame({"species": ["a"], "GRSex": [5.0]})
        assert validate_schema(df, GRSexSchema, "grsex") == []

    def test_none_dataframe(self):
        assert validate_schema(None, GRSexSchema, "grsex") == ["[grsex] DataFrame is None"]
        with pytest.raises(ConfigurationError):
            validate_schema(None, GRSexSchema, "grsex", strict=True)
