# ===========================================
# schema_to_timescale.py
# ===========================================

## \file schema_to_timescale.py
## \brief Plans the TimescaleDB schema for a benchmark dataset header.
##
## \details
## Turns a parsed dataset header plus the index/partitioning options into the
## full, ordered list of DDL statements for the benchmark database:
##
## \code
## CREATE TABLE tags (id SERIAL PRIMARY KEY, hostname TEXT, region TEXT)
## CREATE UNIQUE INDEX uniq1 ON tags (hostname, region)
## CREATE INDEX ON tags (hostname)
## CREATE INDEX ON tags (region)
## CREATE TABLE cpu (time timestamptz, tags_id integer, usage_user DOUBLE PRECISION, ...)
## CREATE INDEX ON cpu (tags_id, "time" DESC)
## CREATE INDEX ON cpu (usage_user, time DESC)
## CREATE EXTENSION IF NOT EXISTS timescaledb CASCADE
## SELECT create_hypertable('cpu'::regclass, 'time'::name, partitioning_column => 'tags_id'::name, ...)
## \endcode
##
## The plan also records the column layout of both tables (`table_columns`),
## which the loader uses to serialize rows in exactly the planned order.
##
## \par Features
## - Column types follow the fixed tag/field policy in `pipeline.schema`
## - Polars dtypes are rendered as PostgreSQL type names
## - Index shapes and the number of indexed fields are configurable
## - Every header-derived identifier is validated before use
##
## \par Usage
## \code
## $ python3 -m pipeline.schema_to_timescale < data.csv
## → prints the planned DDL without touching a database
## \endcode

from dataclasses import dataclass, field
from datetime import timedelta
from types import MappingProxyType
import sys

from pipeline import ddl
from pipeline.header import HeaderDescriptor, HeaderFormatError, parse_header
from pipeline.indexes import VALUE_MAJOR, plan_field_indexes, should_index, validate_index_spec
from pipeline.schema import (
    TAGS_ID_COLUMN,
    TAGS_PRIMARY_KEY,
    TAGS_TABLE,
    TIME_COLUMN,
    measurement_schema,
    tags_schema,
)
from pipeline.utils import warn

TIMESCALE_EXTENSION = "timescaledb"
TAGS_UNIQUE_INDEX = "uniq1"


def polars_to_postgres_dtype(dtype):
    """!Converts a Polars data type to a PostgreSQL column type.

    @param dtype The input data type (string, Polars class, or Polars dtype object).

    @return A string representing the PostgreSQL column type.

    @throws ValueError If the dtype is not supported or recognized.
    """
    if isinstance(dtype, str):
        dtype_map = {
            "String": "TEXT",
            "Utf8": "TEXT",
            "Int32": "integer",
            "Int64": "bigint",
            "Float64": "DOUBLE PRECISION",
            "Datetime": "timestamptz",
        }
        pg_type = dtype_map.get(dtype)
        if pg_type is None:
            raise ValueError(f"Unsupported string dtype: {dtype}")
        return pg_type

    if isinstance(dtype, type):
        dtype = dtype()

    dtype_name = type(dtype).__name__

    match dtype_name:
        case "Utf8" | "String": pg_type = "TEXT"
        case "Int32": pg_type = "integer"
        case "Int64": pg_type = "bigint"
        case "Float64": pg_type = "DOUBLE PRECISION"
        case "Datetime": pg_type = "timestamptz"
        case _: raise ValueError(f"Unsupported dtype: {dtype_name}")

    return pg_type


@dataclass(frozen=True)
class SchemaOptions:
    """!Index and partitioning choices for one provisioning run.

    @param in_table_tag Keep a copy of the first tag in the measurement table.
    @param field_index Comma-separated per-field index types ("time-major", "value-major").
    @param field_index_count Number of fields to index, -1 for all.
    @param partition_index Add a (tags_id, time DESC) index.
    @param time_index Add a (time DESC) index, unless time_partition_index is set.
    @param time_partition_index Add a (time DESC, tags_id) index.
    @param use_hypertable Convert the measurement table into a hypertable.
    @param number_partitions Hypertable space partitions on tags_id.
    @param chunk_time Hypertable chunk width.
    """

    in_table_tag: bool = True
    field_index: str = VALUE_MAJOR
    field_index_count: int = 0
    partition_index: bool = True
    time_index: bool = False
    time_partition_index: bool = False
    use_hypertable: bool = True
    number_partitions: int = 1
    chunk_time: timedelta = timedelta(hours=12)


@dataclass(frozen=True)
class SchemaPlan:
    """!Everything needed to create, and later load, the benchmark tables."""

    hypertable: str
    partitioning_field: str
    table_columns: MappingProxyType
    schemas: MappingProxyType
    tags_statements: tuple
    table_statement: str
    table_indexes: tuple = ()
    field_indexes: tuple = ()
    hypertable_statements: tuple = field(default=())

    def statements(self) -> list:
        """!All DDL statements, in execution order."""
        return [
            *self.tags_statements,
            self.table_statement,
            *self.table_indexes,
            *self.field_indexes,
            *self.hypertable_statements,
        ]

    def polars_schema(self, table: str) -> dict:
        """!Ordered {column: dtype} layout of a planned table.

        @throws KeyError If the table is not part of this plan.
        """
        return dict(self.schemas[table])


def _check_columns(line: str, names, reserved):
    """!Rejects column names that would collide in the created table.

    Unquoted PostgreSQL identifiers fold to lower case, so names are compared
    case-insensitively. Empty names are skipped, as they produce no column.

    @throws HeaderFormatError On a reserved or repeated name.
    """
    seen = set(reserved)
    for name in names:
        if not name:
            continue
        key = name.lower()
        if key in seen:
            raise HeaderFormatError(
                f"input header in wrong format: column '{name}' on the {line} line "
                f"is reserved or repeated"
            )
        seen.add(key)


def _tags_statements(tags) -> list:
    schema = tags_schema(tags)
    names = ", ".join(ddl.ident(name) for name in schema)
    stmts = [
        ddl.create_table(
            TAGS_TABLE,
            [(name, polars_to_postgres_dtype(dtype)) for name, dtype in schema.items()],
            prefix=TAGS_PRIMARY_KEY,
        ),
        ddl.create_index(TAGS_TABLE, f"({names})", unique=True, name=TAGS_UNIQUE_INDEX),
    ]
    stmts.extend(ddl.create_index(TAGS_TABLE, f"({name})") for name in schema)
    return stmts


def _table_indexes(hypertable: str, options: SchemaOptions) -> list:
    stmts = []
    if options.partition_index:
        stmts.append(ddl.create_index(hypertable, f'({TAGS_ID_COLUMN}, "{TIME_COLUMN}" DESC)'))

    # time-partition-index overrides time-index; partition-index is independent.
    if options.time_partition_index:
        if options.partition_index:
            warn("both partition-index and time-partition-index are set; creating both indexes")
        stmts.append(ddl.create_index(hypertable, f'("{TIME_COLUMN}" DESC, {TAGS_ID_COLUMN})'))
    elif options.time_index:
        stmts.append(ddl.create_index(hypertable, f'("{TIME_COLUMN}" DESC)'))
    return stmts


def plan_schema(header: HeaderDescriptor, options: SchemaOptions = SchemaOptions()) -> SchemaPlan:
    """!Derives the full benchmark schema from a dataset header.

    @param header The parsed dataset header.
    @param options Index and partitioning choices.

    @return A SchemaPlan holding the ordered DDL and the table column registry.

    @throws HeaderFormatError If the tag line marker is wrong or no tag is declared,
           or a column name is reserved or repeated.
    @throws IndexTypeError If options.field_index holds an unknown token.
    @throws InvalidIdentifierError If a header name is not a safe identifier.
    """
    header.validate()
    validate_index_spec(options.field_index)

    tags = header.tags
    if not tags or not tags[0]:
        raise HeaderFormatError("input header in wrong format: no tags declared")

    hypertable = ddl.ident(header.hypertable)
    if hypertable == TAGS_TABLE:
        raise HeaderFormatError(f"input header in wrong format: table name '{TAGS_TABLE}' is reserved")
    fields = header.fields
    partitioning_field = tags[0]

    _check_columns("tag", tags, {"id"})

    pseudo_cols = []
    if options.in_table_tag:
        pseudo_cols.append(partitioning_field)
    pseudo_cols.extend(fields)
    _check_columns("column", pseudo_cols, {TIME_COLUMN, TAGS_ID_COLUMN})

    extra_cols = 1 if options.in_table_tag else 0
    field_indexes = []
    for idx, name in enumerate(pseudo_cols):
        if not name:
            continue
        # The in-table tag is categorical and never gets a field index.
        if options.in_table_tag and idx == 0:
            continue
        if should_index(idx, options.field_index_count, extra_cols):
            field_indexes.extend(plan_field_indexes(hypertable, name, options.field_index))

    schema = measurement_schema(pseudo_cols, options.in_table_tag)
    table_statement = ddl.create_table(
        hypertable,
        [(name, polars_to_postgres_dtype(dtype)) for name, dtype in schema.items()],
    )

    hypertable_statements = []
    if options.use_hypertable:
        hypertable_statements = [
            ddl.create_extension(TIMESCALE_EXTENSION),
            ddl.create_hypertable(
                hypertable,
                TIME_COLUMN,
                TAGS_ID_COLUMN,
                options.number_partitions,
                options.chunk_time // timedelta(microseconds=1),
            ),
        ]

    return SchemaPlan(
        hypertable=hypertable,
        partitioning_field=partitioning_field,
        table_columns=MappingProxyType({TAGS_TABLE: tuple(tags), hypertable: tuple(fields)}),
        schemas=MappingProxyType({
            TAGS_TABLE: MappingProxyType(tags_schema(tags)),
            hypertable: MappingProxyType(schema),
        }),
        tags_statements=tuple(_tags_statements(tags)),
        table_statement=table_statement,
        table_indexes=tuple(_table_indexes(hypertable, options)),
        field_indexes=tuple(field_indexes),
        hypertable_statements=tuple(hypertable_statements),
    )


if __name__ == "__main__":
    plan = plan_schema(parse_header(sys.stdin.buffer))
    for stmt in plan.statements():
        print(f"{stmt};")
