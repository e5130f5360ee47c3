"""
Conservation priority classification.

All functions are pure (no I/O, no side effects).
"""

import numpy as np
import pandas as pd

from gapanalysis import config


def priority_bins():
    """Bin edges for pd.cut, left-inclusive: [-inf, 25, 50, 75, inf]."""
    return [
        -np.inf,
        config.PRIORITY_HP_UPPER,
        config.PRIORITY_MP_UPPER,
        config.PRIORITY_LP_UPPER,
        np.inf,
    ]


def classify_priority(score):
    """Classify a single 0-100 conservation score into a priority class.

    Uses left-inclusive intervals (right=False semantics):
        score < 25        → "HP" (high priority for further conservation)
        25 <= score < 50  → "MP" (medium priority)
        50 <= score < 75  → "LP" (low priority)
        score >= 75       → "SC" (sufficiently conserved)
        NaN               → None

    Parameters
    ----------
    score : float
        Final conservation score.

    Returns
    -------
    str or None
    """
    if score is None or pd.isna(score):
        return None
    if score < config.PRIORITY_HP_UPPER:
        return "HP"
    if score < config.PRIORITY_MP_UPPER:
        return "MP"
    if score < config.PRIORITY_LP_UPPER:
        return "LP"
    return "SC"


def classify_priority_series(scores):
    """Classify a Series/array of scores into priority classes.

    Uses pd.cut with right=False, consistent with classify_priority().
    Missing scores stay missing.

    Returns
    -------
    pd.Series
        Object series of "HP"/"MP"/"LP"/"SC" (NaN where the score is NaN).
    """
    scores = pd.Series(scores, dtype="float64")
    classes = pd.cut(
        scores,
        bins=priority_bins(),
        labels=config.PRIORITY_LABELS,
        right=False,
    )
    return classes.astype(object)
