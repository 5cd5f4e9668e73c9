# ===========================================
# schema.py
# ===========================================
#
# @file schema.py
# @brief Defines the column type policy shared by the provisioner and the loader.
#
# Description:
#   The benchmark's synthetic data model has exactly two kinds of values:
#   categorical tags (host names, regions, ...) and numeric measurements.
#   There is no type inference; every column's Polars dtype follows from its
#   role alone:
#     - tag columns (tags table and the optional in-table tag) → Utf8
#     - measured fields                                        → Float64
#     - `time`                                                 → Datetime("us", "UTC")
#     - `tags_id` surrogate key                                → Int32
#
# Format:
#   Table schemas are ordered dictionaries:
#   {
#       "Column Name": Polars DataType,
#       ...
#   }
#
# Design Notes:
#   - `time` and `tags_id` lead every measurement table regardless of configuration
#   - The tags table additionally gets a SERIAL primary key `id`, which is what
#     `tags_id` refers to; it is generated by the database and is not part of
#     the loader-facing schema


import polars as pl

TAGS_TABLE = "tags"
TIME_COLUMN = "time"
TAGS_ID_COLUMN = "tags_id"
TAGS_PRIMARY_KEY = "id SERIAL PRIMARY KEY"

TAG_DTYPE = pl.Utf8()
FIELD_DTYPE = pl.Float64()
TIME_DTYPE = pl.Datetime("us", "UTC")
TAGS_ID_DTYPE = pl.Int32()

"""
@brief Leading columns of every measurement table, in order.
"""
BASE_COLUMNS = {
    TIME_COLUMN: TIME_DTYPE,
    TAGS_ID_COLUMN: TAGS_ID_DTYPE,
}


def tags_schema(tags) -> dict:
    """!Schema of the tags table: every tag is text."""
    return {name: TAG_DTYPE for name in tags if name}


def measurement_schema(pseudo_cols, in_table_tag: bool) -> dict:
    """!Schema of the measurement table.

    @param pseudo_cols Column names after `time` and `tags_id`; when
           `in_table_tag` is set the first one is the denormalized tag.
    @param in_table_tag Whether pseudo_cols[0] is the in-table tag.
    """
    schema = dict(BASE_COLUMNS)
    for idx, name in enumerate(pseudo_cols):
        if not name:
            continue
        schema[name] = TAG_DTYPE if in_table_tag and idx == 0 else FIELD_DTYPE
    return schema
