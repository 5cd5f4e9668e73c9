# ===========================================
# indexes.py
# ===========================================

## \file indexes.py
## \brief Chooses which per-field indexes to build on the measurement table.
##
## \details
## Two index shapes are supported for numeric fields:
## - `time-major`  → `(time DESC, <field>)`
## - `value-major` → `(<field>, time DESC)`
##
## The configured index type is a comma-separated list of these tokens, so both
## shapes can be requested at once. Empty tokens are ignored. Only the first
## `field-index-count` fields get indexes (`-1` for all of them): indexing every
## column of a wide synthetic table is too slow to build for a benchmark run.

from pipeline.ddl import create_index, ident

TIME_MAJOR = "time-major"
VALUE_MAJOR = "value-major"
INDEX_TYPES = (TIME_MAJOR, VALUE_MAJOR)

UNLIMITED = -1


class IndexTypeError(ValueError):
    """!Raised for an index type token outside of INDEX_TYPES."""


def split_index_spec(index_type_spec: str) -> list:
    """!Splits an index type list, dropping empty tokens.

    @param index_type_spec Comma-separated tokens, e.g. "time-major,,value-major".
    @return The non-empty tokens, in order.
    @throws IndexTypeError On the first unknown token.
    """
    tokens = []
    for token in (index_type_spec or "").split(","):
        token = token.strip()
        if not token:
            continue
        if token not in INDEX_TYPES:
            raise IndexTypeError(f"Unknown index type {token!r}, expected one of {', '.join(INDEX_TYPES)}")
        tokens.append(token)
    return tokens


def validate_index_spec(index_type_spec: str):
    split_index_spec(index_type_spec)


def index_expression(column: str, index_type: str) -> str:
    column = ident(column)
    match index_type:
        case "time-major": return f"(time DESC, {column})"
        case "value-major": return f"({column}, time DESC)"
        case _: raise IndexTypeError(f"Unknown index type {index_type!r}")


def plan_field_indexes(table: str, column: str, index_type_spec: str) -> list:
    """!Returns the CREATE INDEX statements for one field.

    The whole token list is validated before any statement is built, so an unknown
    token never yields a partial list.

    @param table The measurement table name.
    @param column The field to index.
    @param index_type_spec Comma-separated index type tokens; empty for none.
    @return List of CREATE INDEX statements, one per token.
    @throws IndexTypeError If any token is unknown.
    """
    return [create_index(table, index_expression(column, t)) for t in split_index_spec(index_type_spec)]


def should_index(position: int, field_index_count: int, extra_cols: int = 0) -> bool:
    """!Whether the pseudo-column at `position` falls within the index budget.

    @param position Zero-based position in the measurement table's pseudo-column list.
    @param field_index_count Number of fields to index, or -1 for all.
    @param extra_cols 1 when an in-table tag occupies position 0, else 0.
    """
    if field_index_count == UNLIMITED:
        return True
    return position < field_index_count + extra_cols
