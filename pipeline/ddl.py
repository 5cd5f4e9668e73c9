# ===========================================
# ddl.py
# ===========================================

## \file ddl.py
## \brief Renders the PostgreSQL / TimescaleDB statements used during provisioning.
##
## \details
## Table and column names come straight from the dataset header, so every
## identifier is checked against a conservative allow-list before it is spliced
## into statement text. Names that pass the check never need quoting, which
## keeps the emitted DDL identical to what the loader expects to find.
##
## \par Example
## \code
## create_table("cpu", [("time", "timestamptz"), ("usage_user", "DOUBLE PRECISION")])
## → CREATE TABLE cpu (time timestamptz, usage_user DOUBLE PRECISION)
## \endcode

import re

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# PostgreSQL NAMEDATALEN - 1
MAX_IDENTIFIER_LENGTH = 63


class InvalidIdentifierError(ValueError):
    """!Raised for a table, column or database name that is unsafe to interpolate."""


def ident(name: str) -> str:
    """!Validates an identifier and returns it unchanged.

    @param name The table, column or database name.
    @return The same name, safe to interpolate into statement text.
    @throws InvalidIdentifierError If the name is empty, too long or has characters outside [A-Za-z0-9_].
    """
    if not isinstance(name, str) or not IDENTIFIER_RE.match(name):
        raise InvalidIdentifierError(f"invalid identifier: {name!r}")
    if len(name) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(
            f"identifier longer than {MAX_IDENTIFIER_LENGTH} characters: {name!r}"
        )
    return name


def create_database(name: str) -> str:
    return f"CREATE DATABASE {ident(name)}"


def drop_database(name: str) -> str:
    return f"DROP DATABASE IF EXISTS {ident(name)}"


def create_table(table: str, columns, prefix: str = "") -> str:
    """!Builds a CREATE TABLE statement.

    @param table The table name.
    @param columns Sequence of (column_name, sql_type) pairs.
    @param prefix Optional column definition emitted verbatim before the others (e.g. a serial key).
    """
    defs = [f"{ident(name)} {sql_type}" for name, sql_type in columns]
    if prefix:
        defs.insert(0, prefix)
    return f"CREATE TABLE {ident(table)} ({', '.join(defs)})"


def create_index(table: str, expression: str, unique: bool = False, name: str = "") -> str:
    """!Builds a CREATE INDEX statement.

    The expression is built by the callers from validated column names, e.g.
    `(tags_id, "time" DESC)`.
    """
    kind = "UNIQUE INDEX" if unique else "INDEX"
    named = f" {ident(name)}" if name else ""
    return f"CREATE {kind}{named} ON {ident(table)} {expression}"


def create_extension(name: str) -> str:
    return f"CREATE EXTENSION IF NOT EXISTS {ident(name)} CASCADE"


def create_hypertable(table: str, time_column: str, partitioning_column: str,
                      number_partitions: int, chunk_time_interval: int) -> str:
    """!Builds the call converting a plain table into a TimescaleDB hypertable.

    @param chunk_time_interval Chunk width in microseconds.
    """
    return (
        f"SELECT create_hypertable('{ident(table)}'::regclass, '{ident(time_column)}'::name, "
        f"partitioning_column => '{ident(partitioning_column)}'::name, "
        f"number_partitions => {int(number_partitions)}::smallint, "
        f"chunk_time_interval => {int(chunk_time_interval)}, create_default_indexes=>FALSE)"
    )
