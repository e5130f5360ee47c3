"""
Combined final conservation score (FCSc) summary assessment.

FCSc methodology:
Following Khoury et al. (2019), the ex-situ (FCSex) and in-situ (FCSin)
final conservation scores of a species are summarised by their minimum,
maximum and mean, each mapped to a priority class:
    < 25 HP, [25, 50) MP, [50, 75) LP, >= 75 SC.
When one side is missing the statistics degrade to the present value.
When both are missing the statistics are undefined: they stay NaN, the
classes stay empty, and the species is reported.

Citation: Khoury, C.K. et al. (2019). Ecological Indicators, 98, 420-429.
"""

import numpy as np
import pandas as pd

from gapanalysis import config
from gapanalysis.errors import ConfigurationError, UndefinedScoreError
from gapanalysis.formulas.classification import classify_priority_series
from gapanalysis.logging_config import get_pipeline_logger
from gapanalysis.result_types import (
    UNDEFINED_COMBINED_SCORE,
    CombinedResult,
    Diagnostic,
)
from gapanalysis.schemas import FCScSchema, FCSexSchema, FCSinSchema, validate_schema

log = get_pipeline_logger(__name__)


def _require_table(df, score_column, schema, label):
    if df is None or not isinstance(df, pd.DataFrame):
        raise ConfigurationError(f"{label} must be a DataFrame with columns species, {score_column}")
    missing = [c for c in (config.SPECIES_COLUMN, score_column) if c not in df.columns]
    if missing:
        raise ConfigurationError(f"{label} is missing required columns: {missing}")
    validate_schema(df, schema, label, strict=True)


def combine_scores(fcs_ex, fcs_in):
    """Min, max and mean of the non-missing scores of one species.

    Returns
    -------
    dict
        Keys FCSc_min, FCSc_max, FCSc_mean (NaN when both are missing).
    """
    values = [v for v in (fcs_ex, fcs_in) if v is not None and not pd.isna(v)]
    if not values:
        return {name: np.nan for name in config.FCSC_COLUMNS}
    return {
        "FCSc_min": float(min(values)),
        "FCSc_max": float(max(values)),
        "FCSc_mean": float(sum(values) / len(values)),
    }


def fcsc(fcs_ex, fcs_in, strict=False):
    """Join ex-situ and in-situ final scores and classify the summaries.

    Parameters
    ----------
    fcs_ex : pd.DataFrame
        Columns species, FCSex (extra columns are ignored).
    fcs_in : pd.DataFrame
        Columns species, FCSin (extra columns are ignored).
    strict : bool
        Raise UndefinedScoreError instead of reporting species whose two
        scores are both missing.

    Returns
    -------
    CombinedResult
        table: one row per ex-situ species, in ex-situ order, with columns
        species, FCSex, FCSin, FCSc_min/max/mean, FCSc_min/max/mean_class.
        diagnostics: undefined_combined_score per all-missing species.
    """
    _require_table(fcs_ex, config.FCSEX_COLUMN, FCSexSchema, "fcs_ex")
    _require_table(fcs_in, config.FCSIN_COLUMN, FCSinSchema, "fcs_in")

    # Left join keyed on the ex-situ table; species are unique on both sides
    # (schema-checked), so each ex-situ species appears exactly once.
    df = pd.merge(
        fcs_ex[[config.SPECIES_COLUMN, config.FCSEX_COLUMN]],
        fcs_in[[config.SPECIES_COLUMN, config.FCSIN_COLUMN]],
        on=config.SPECIES_COLUMN,
        how="left",
        validate="one_to_one",
    )
    df[config.FCSEX_COLUMN] = df[config.FCSEX_COLUMN].astype("float64")
    df[config.FCSIN_COLUMN] = df[config.FCSIN_COLUMN].astype("float64")

    # Rows are independent: each is summarised on its own.
    summaries = pd.DataFrame(
        [combine_scores(ex, ins)
         for ex, ins in zip(df[config.FCSEX_COLUMN], df[config.FCSIN_COLUMN])],
        index=df.index,
        columns=config.FCSC_COLUMNS,
    ).astype("float64")
    df = pd.concat([df, summaries], axis=1)
    pair = df[[config.FCSEX_COLUMN, config.FCSIN_COLUMN]]

    for stat_col, class_col in zip(config.FCSC_COLUMNS, config.FCSC_CLASS_COLUMNS):
        df[class_col] = classify_priority_series(df[stat_col]).values

    undefined = df.loc[pair.isna().all(axis=1), config.SPECIES_COLUMN].tolist()
    diagnostics = []
    for species in undefined:
        message = (
            f"Both FCSex and FCSin are missing for {species}; "
            "combined scores are undefined"
        )
        if strict:
            raise UndefinedScoreError(message)
        log.warning(message, extra={"species": species, "code": UNDEFINED_COMBINED_SCORE})
        diagnostics.append(Diagnostic(species, UNDEFINED_COMBINED_SCORE, message))

    validate_schema(df, FCScSchema, "fcsc", strict=True)
    log.info("Combined final conservation scores for %d species (%d undefined)",
             len(df), len(undefined))
    return CombinedResult(table=df, diagnostics=diagnostics)
