#!/usr/bin/env python3
# ===========================================
# setup.py
# ===========================================

## \file setup.py
## \brief CLI utility to provision the TimescaleDB benchmark database from a data header.
##
## \details
## This script handles the full setup flow for a benchmark load:
## - Reads the three-line header from the data file (or stdin)
## - Plans tables, indexes and hypertable conversion with `schema_to_timescale.py`
## - Drops a previous benchmark database when asked to
## - Creates the database and runs the planned DDL in it
##
## The header is consumed from the same binary stream the loader reads rows
## from, so piping data through this script leaves nothing behind it but rows.
##
## \par Usage
## \code
## python3 -m scripts.setup [--file data.csv] [--db-name NAME] [--no-drop-db] [--dry-run]
##                          [--field-index time-major,value-major] [--field-index-count N] ...
## \endcode
##
## \par Exit status
## - 0 — database provisioned (or DDL printed with `--dry-run`)
## - 1 — database error (connection failure, failing statement, database already exists)
## - 2 — malformed header or invalid configuration
##
## \par Notes
## - Defaults for every option are loaded from `.env` via `scripts/config.py`
## - Requires `psycopg2` and a reachable PostgreSQL server with the timescaledb extension


import argparse
import sys

import psycopg2

from pipeline.creator import TimescaleCreator
from pipeline.header import parse_header
from pipeline.schema_to_timescale import SchemaOptions, plan_schema
from pipeline.utils import err, log
from scripts.config import *


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create the TimescaleDB benchmark database from a data file header")
    parser.add_argument("--file", type=str, default=None, help="Data file to read the header from (default: stdin)")
    parser.add_argument("--postgres", type=str, default=PG_CONNECT, help="libpq connection string; dbname is ignored")
    parser.add_argument("--db-name", type=str, default=DB_NAME, help="Benchmark database to create")
    parser.add_argument("--drop-db", action=argparse.BooleanOptionalAction, default=True, help="Drop an existing benchmark database first")
    parser.add_argument("--dry-run", action="store_true", help="Print the planned DDL without connecting")

    parser.add_argument("--in-table-tag", action=argparse.BooleanOptionalAction, default=IN_TABLE_TAG, help="Keep the first tag in the measurement table")
    parser.add_argument("--field-index", type=str, default=FIELD_INDEX, help="Comma-separated field index types: time-major, value-major")
    parser.add_argument("--field-index-count", type=int, default=FIELD_INDEX_COUNT, help="Number of fields to index, -1 for all")
    parser.add_argument("--partition-index", action=argparse.BooleanOptionalAction, default=PARTITION_INDEX, help="Index on (tags_id, time DESC)")
    parser.add_argument("--time-index", action=argparse.BooleanOptionalAction, default=TIME_INDEX, help="Index on (time DESC)")
    parser.add_argument("--time-partition-index", action=argparse.BooleanOptionalAction, default=TIME_PARTITION_INDEX, help="Index on (time DESC, tags_id)")
    parser.add_argument("--use-hypertable", action=argparse.BooleanOptionalAction, default=USE_HYPERTABLE, help="Convert the measurement table into a hypertable")
    parser.add_argument("--number-partitions", type=int, default=NUMBER_PARTITIONS, help="Hypertable partitions on tags_id")
    parser.add_argument("--chunk-time", type=parse_duration, default=CHUNK_TIME, help="Hypertable chunk width, e.g. 12h")
    return parser


def options_from_args(args) -> SchemaOptions:
    return SchemaOptions(
        in_table_tag=args.in_table_tag,
        field_index=args.field_index,
        field_index_count=args.field_index_count,
        partition_index=args.partition_index,
        time_index=args.time_index,
        time_partition_index=args.time_partition_index,
        use_hypertable=args.use_hypertable,
        number_partitions=args.number_partitions,
        chunk_time=args.chunk_time,
    )


def provision(creator: TimescaleCreator, db_name: str, plan, drop_db: bool = True):
    """!Replaces (or creates) the benchmark database and runs the planned DDL.

    @param creator The DDL executor.
    @param db_name The benchmark database name.
    @param plan The SchemaPlan to apply.
    @param drop_db Drop an existing database first; otherwise an existing one is an error.

    @throws RuntimeError If the database exists and drop_db is False.
    @throws psycopg2.Error On any failing statement.
    """
    if creator.db_exists(db_name):
        if not drop_db:
            raise RuntimeError(f"database '{db_name}' already exists; pass --drop-db to replace it")
        log(f"Database '{db_name}' exists, dropping it.")
        creator.remove_old_db(db_name)

    creator.create_db(db_name, plan)
    log(f"Schema for '{plan.hypertable}' loaded into '{db_name}'.")


def main(argv=None, stream=None) -> int:
    """!CLI entrypoint. Parses arguments, plans the schema and provisions the database.

    All errors end up here; library code never exits the process.

    @return Process exit status.
    """
    args = build_parser().parse_args(argv)

    try:
        if stream is not None:
            header = parse_header(stream)
        elif args.file:
            with open(args.file, "rb") as f:
                header = parse_header(f)
        else:
            header = parse_header(sys.stdin.buffer)

        plan = plan_schema(header, options_from_args(args))
    except (OSError, ValueError) as e:
        err(str(e))
        return 2

    if args.dry_run:
        for stmt in plan.statements():
            print(f"{stmt};")
        return 0

    try:
        provision(TimescaleCreator(args.postgres), args.db_name, plan, drop_db=args.drop_db)
    except ValueError as e:
        err(str(e))
        return 2
    except (RuntimeError, psycopg2.Error) as e:
        err(f"Provisioning '{args.db_name}' failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
