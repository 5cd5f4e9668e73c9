# ===========================================
# utils.py
# ===========================================
#
# @file utils.py
# @brief Shared logging helpers and schema-aware casting for loader DataFrames.
#
# Description:
#   This module provides the small helpers shared by the provisioning pipeline
#   and the setup CLI: prefixed console logging, and a cast that aligns a
#   Polars DataFrame to the column layout planned for a benchmark table.
#
# Included Utilities:
#   - log / warn / err:  [INFO] / [WARN] / [ERROR] prefixed console output
#   - align_frame:       Vectorized, schema-aware casting for Polars DataFrames
#
# Usage:
#   from pipeline.utils import log, align_frame
#
# Design Notes:
#   - Schema mismatches are surfaced with detailed debug output
#   - "NA" strings are treated as nulls in non-text columns
#

from polars import col, when
import polars as pl


def log(msg: str):
    """!Prints an info message to stdout.

    @param msg The message string.
    """
    print(f"[INFO] {msg}")


def warn(msg: str):
    print(f"[WARN] {msg}")


def err(msg: str):
    """!Prints an error message to stdout.
    @param msg The message string.
    """
    print(f"[ERROR] {msg}")


def align_frame(df: pl.DataFrame, schema: dict) -> pl.DataFrame:
    """
    @brief Cast a Polars DataFrame to a planned table layout, handling 'NA' strings as nulls.

    The loader builds rows from the text data that follows the header. This
    aligns them with the table created by the provisioner: columns are
    selected in schema order and cast to the declared dtype. In columns that
    are not text, the literal "NA" is replaced with null before casting.

    @param df The input Polars DataFrame to cast.
    @param schema Ordered dictionary in the format { column_name: dtype },
                  as returned by SchemaPlan.polars_schema().

    @return A new Polars DataFrame with exactly the schema's columns, in order.

    @throws ValueError If any schema column is missing in the DataFrame.
    """
    missing = [c for c in schema if c not in df.columns]

    if missing:
        err("SCHEMA MISMATCH DETECTED")
        print("Expected columns (from schema):")
        for s in schema:
            print(f"  {s}")
        print("Found columns (in DataFrame):")
        for c in df.columns:
            print(f"  {c}")
        raise ValueError(f"Schema mismatch: missing column(s) {', '.join(missing)}")

    casted = []

    for c, dtype in schema.items():
        if dtype != pl.Utf8 and df[c].dtype == pl.Utf8:
            expr = when(col(c) == "NA").then(None).otherwise(col(c)).cast(dtype).alias(c)
        else:
            expr = col(c).cast(dtype).alias(c)
        casted.append(expr)

    return df.select(casted)
