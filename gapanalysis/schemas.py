"""
Pandera DataFrame schemas for input and output validation gates.

Declarative, reusable schemas that check both structure AND value ranges
of the occurrence table and the per-species score tables.

Usage:
    from gapanalysis.schemas import OccurrenceSchema, validate_schema
    validate_schema(df, OccurrenceSchema, "grsex", strict=True)
"""

import pandera as pa
from pandera import Column, Check, DataFrameSchema

from gapanalysis import config
from gapanalysis.errors import ConfigurationError

_SCORE_RANGE = Check.in_range(config.SCORE_MIN, config.SCORE_MAX)


# ── Occurrence table ────────────────────────────────────────────────────

OccurrenceSchema = DataFrameSchema(
    columns={
        "species": Column(str, nullable=False),
        "latitude": Column(float, Check.in_range(-90.0, 90.0), nullable=True, coerce=True),
        "longitude": Column(float, Check.in_range(-180.0, 180.0), nullable=True, coerce=True),
        "type": Column(nullable=True),
    },
    # Column names AND order are a contract with occurrence producers.
    strict=True,
    ordered=True,
    name="OccurrenceSchema",
)


# ── GRSex output ────────────────────────────────────────────────────────

GRSexSchema = DataFrameSchema(
    columns={
        "species": Column(str, nullable=False, unique=True),
        config.GRSEX_COLUMN: Column(float, _SCORE_RANGE, nullable=False),
    },
    strict=True,
    ordered=True,
    name="GRSexSchema",
)


# ── Final conservation scores (inputs to the combiner) ──────────────────

FCSexSchema = DataFrameSchema(
    columns={
        "species": Column(str, nullable=False, unique=True),
        config.FCSEX_COLUMN: Column(float, _SCORE_RANGE, nullable=True, coerce=True),
    },
    # Producers usually carry the sub-indicator columns too.
    strict=False,
    name="FCSexSchema",
)

FCSinSchema = DataFrameSchema(
    columns={
        "species": Column(str, nullable=False, unique=True),
        config.FCSIN_COLUMN: Column(float, _SCORE_RANGE, nullable=True, coerce=True),
    },
    strict=False,
    name="FCSinSchema",
)


# ── Combined assessment ─────────────────────────────────────────────────

FCScSchema = DataFrameSchema(
    columns={
        "species": Column(str, nullable=False, unique=True),
        config.FCSEX_COLUMN: Column(float, _SCORE_RANGE, nullable=True),
        config.FCSIN_COLUMN: Column(float, _SCORE_RANGE, nullable=True),
        **{
            name: Column(float, _SCORE_RANGE, nullable=True)
            for name in config.FCSC_COLUMNS
        },
        **{
            name: Column(checks=Check.isin(config.PRIORITY_LABELS), nullable=True)
            for name in config.FCSC_CLASS_COLUMNS
        },
    },
    strict=True,
    ordered=True,
    name="FCScSchema",
)


# ── Convenience validation function ─────────────────────────────────────

def validate_schema(df, schema, step_name, strict=False):
    """Validate a DataFrame against a Pandera schema.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame to validate.
    schema : pa.DataFrameSchema
        Schema to validate against.
    step_name : str
        Step name for error messages.
    strict : bool
        If True, raise on failure. If False, return messages.

    Returns
    -------
    list[str]
        Validation messages (empty if all pass).

    Raises
    ------
    ConfigurationError
        Only if strict=True and validation fails.
    """
    messages = []

    if df is None:
        msg = f"[{step_name}] DataFrame is None"
        if strict:
            raise ConfigurationError(msg)
        return [msg]

    try:
        schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        for failure in exc.failure_cases.itertuples():
            messages.append(
                f"[{step_name}] Schema violation: "
                f"column='{failure.column}' check='{failure.check}' "
                f"failure_case={failure.failure_case}"
            )

        if strict:
            raise ConfigurationError(
                f"[{step_name}] {schema.name} validation failed with "
                f"{len(messages)} errors: " + "; ".join(messages[:5])
            ) from exc

    return messages
