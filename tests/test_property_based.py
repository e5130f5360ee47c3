"""
Property-based tests using Hypothesis for scoring and classification.

These tests verify invariants that must hold for ALL valid inputs,
not just specific examples.

Run with: pytest tests/test_property_based.py -v
"""

import numpy as np
import pandas as pd
from hypothesis import assume, given, settings
from hypothesis import strategies as st
from hypothesis.extra.numpy import arrays

SCORES = st.floats(min_value=0.0, max_value=100.0, allow_nan=False)
CLASS_ORDER = {"HP": 0, "MP": 1, "LP": 2, "SC": 3}


# ── Classification properties ───────────────────────────────────────────


class TestClassifyPriorityProperties:
    """Properties of classify_priority that must hold for ALL scores."""

    @given(score=SCORES)
    def test_classification_is_total(self, score):
        """Every non-missing score gets a class."""
        from gapanalysis.formulas.classification import classify_priority

        assert classify_priority(score) in CLASS_ORDER

    @given(a=SCORES, b=SCORES)
    def test_classification_is_monotonic(self, a, b):
        """A higher score never results in a higher priority."""
        from gapanalysis.formulas.classification import classify_priority

        assume(a <= b)
        assert CLASS_ORDER[classify_priority(a)] <= CLASS_ORDER[classify_priority(b)]

    @given(scores=st.lists(SCORES, min_size=1, max_size=50))
    def test_series_agrees_with_scalar(self, scores):
        from gapanalysis.formulas.classification import (
            classify_priority,
            classify_priority_series,
        )

        assert classify_priority_series(scores).tolist() == [
            classify_priority(s) for s in scores
        ]


# ── Score properties ────────────────────────────────────────────────────


class TestGrsScoreProperties:

    @given(
        conserved=st.floats(min_value=0.0, max_value=1e7, allow_nan=False),
        extra=st.floats(min_value=0.0, max_value=1e7, allow_nan=False),
    )
    def test_score_is_bounded(self, conserved, extra):
        """Conserved area never exceeds range area, so 0 <= GRSex <= 100."""
        from gapanalysis.grsex import grs_score

        score = grs_score(conserved, conserved + extra)
        assert 0.0 <= score <= 100.0

    @given(area=st.floats(min_value=0.0, max_value=1e7, allow_nan=False))
    def test_zero_range_scores_zero(self, area):
        from gapanalysis.grsex import grs_score

        assert grs_score(area, 0.0) == 0.0


class TestCombineScoresProperties:

    @given(ex=SCORES, ins=SCORES)
    def test_min_mean_max_ordered(self, ex, ins):
        from gapanalysis.fcsc import combine_scores

        out = combine_scores(ex, ins)
        assert out["FCSc_min"] <= out["FCSc_mean"] <= out["FCSc_max"]

    @given(ex=SCORES, ins=SCORES)
    def test_symmetric(self, ex, ins):
        from gapanalysis.fcsc import combine_scores

        assert combine_scores(ex, ins) == combine_scores(ins, ex)

    @given(
        ex=st.lists(st.one_of(SCORES, st.just(np.nan)), min_size=1, max_size=20),
        data=st.data(),
    )
    @settings(max_examples=50, deadline=None)
    def test_fcsc_is_idempotent(self, ex, data):
        """Running the combiner twice on the same tables gives the same table."""
        from gapanalysis.fcsc import fcsc

        ins = data.draw(st.lists(st.one_of(SCORES, st.just(np.nan)),
                                 min_size=len(ex), max_size=len(ex)))
        species = [f"sp{i}" for i in range(len(ex))]
        fcs_ex = pd.DataFrame({"species": species, "FCSex": ex})
        fcs_in = pd.DataFrame({"species": species, "FCSin": ins})

        first = fcsc(fcs_ex, fcs_in).table
        second = fcsc(fcs_ex, fcs_in).table
        pd.testing.assert_frame_equal(first, second)


# ── Mask properties ─────────────────────────────────────────────────────


class TestMaskProperties:

    @given(
        arr=arrays(
            dtype=np.float32,
            shape=st.tuples(st.integers(1, 20), st.integers(1, 20)),
            elements=st.sampled_from([0.0, 1.0, -9999.0, np.nan, 2.0]),
        )
    )
    def test_presence_mask_is_one_or_nan(self, arr):
        from gapanalysis.rasters import GridRaster, to_presence_mask
        from rasterio.transform import from_origin

        raster = GridRaster(data=arr, transform=from_origin(0, 0, 1, 1))
        mask = to_presence_mask(raster)
        finite = mask[np.isfinite(mask)]
        assert np.all(finite == 1.0)
        assert finite.size == int((arr == 1.0).sum())

    @given(
        range_bits=arrays(dtype=bool, shape=(8, 8)),
        buffer_bits=arrays(dtype=bool, shape=(8, 8)),
    )
    def test_conserved_never_exceeds_range(self, range_bits, buffer_bits):
        from gapanalysis.gap_maps import gap_mask
        from gapanalysis.overlay import intersect_masks, mask_area

        range_mask = np.where(range_bits, 1.0, np.nan)
        buffer_mask = np.where(buffer_bits, 1.0, np.nan)
        areas = np.ones((8, 8))

        conserved = intersect_masks(range_mask, buffer_mask)
        gap = gap_mask(range_mask, buffer_mask)
        assert mask_area(conserved, areas) <= mask_area(range_mask, areas)
        assert (mask_area(conserved, areas) + mask_area(gap, areas)
                == mask_area(range_mask, areas))
