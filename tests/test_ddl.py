import pytest

from pipeline import ddl
from pipeline.ddl import InvalidIdentifierError


@pytest.mark.parametrize("name", ["cpu", "usage_user", "_x", "Host9"])
def test_ident_accepts_plain_names(name) -> None:
    assert ddl.ident(name) == name


@pytest.mark.parametrize("name", ["", "9lives", "cpu; DROP TABLE tags", "usage-user", 'a"b', "x" * 64, None])
def test_ident_rejects_unsafe_names(name) -> None:
    with pytest.raises(InvalidIdentifierError):
        ddl.ident(name)


def test_create_table() -> None:
    stmt = ddl.create_table("cpu", [("time", "timestamptz"), ("usage_user", "DOUBLE PRECISION")])
    assert stmt == "CREATE TABLE cpu (time timestamptz, usage_user DOUBLE PRECISION)"


def test_create_table_with_prefix() -> None:
    stmt = ddl.create_table("tags", [("hostname", "TEXT")], prefix="id SERIAL PRIMARY KEY")
    assert stmt == "CREATE TABLE tags (id SERIAL PRIMARY KEY, hostname TEXT)"


def test_create_index_variants() -> None:
    assert ddl.create_index("cpu", "(time DESC)") == "CREATE INDEX ON cpu (time DESC)"
    assert ddl.create_index("tags", "(hostname)", unique=True, name="uniq1") == "CREATE UNIQUE INDEX uniq1 ON tags (hostname)"


def test_database_statements() -> None:
    assert ddl.create_database("benchmark") == "CREATE DATABASE benchmark"
    assert ddl.drop_database("benchmark") == "DROP DATABASE IF EXISTS benchmark"
    with pytest.raises(InvalidIdentifierError):
        ddl.drop_database("bench mark")


def test_create_hypertable() -> None:
    stmt = ddl.create_hypertable("cpu", "time", "tags_id", 2, 43_200_000_000)
    assert stmt == (
        "SELECT create_hypertable('cpu'::regclass, 'time'::name, "
        "partitioning_column => 'tags_id'::name, number_partitions => 2::smallint, "
        "chunk_time_interval => 43200000000, create_default_indexes=>FALSE)"
    )
