import pytest

from pipeline.creator import TimescaleCreator, strip_dbname
from pipeline.schema_to_timescale import SchemaOptions, plan_schema
from tests.fakes.fake_connection import FakeServer

ADMIN = "host=localhost user=postgres sslmode=disable"
BENCH = ADMIN + " dbname=benchmark"


@pytest.mark.parametrize(
    "conn_str, expected",
    [
        ("host=localhost dbname=bench user=postgres", "host=localhost user=postgres"),
        ("dbname=bench host=localhost", "host=localhost"),
        ("host=localhost user=postgres", "host=localhost user=postgres"),
        ("host=db password='a  b' dbname=bench", "host=db password='a  b'"),
    ],
)
def test_strip_dbname(conn_str, expected) -> None:
    assert strip_dbname(conn_str) == expected


def test_bench_conn_str_targets_database(server) -> None:
    creator = TimescaleCreator("host=localhost dbname=other user=postgres sslmode=disable", connect=server)
    assert creator.admin_conn_str == ADMIN
    assert creator.bench_conn_str("benchmark") == BENCH


def test_db_exists_queries_catalog(server) -> None:
    server.databases.add("benchmark")
    creator = TimescaleCreator(ADMIN, connect=server)

    assert creator.db_exists("benchmark")
    assert not creator.db_exists("missing")
    assert server.executed[0] == (ADMIN, "SELECT 1 FROM pg_database WHERE datname = %s", ("benchmark",))
    assert all(conn.closed for conn in server.connections)


def test_remove_old_db_is_idempotent(server) -> None:
    creator = TimescaleCreator(ADMIN, connect=server)
    creator.remove_old_db("benchmark")
    creator.remove_old_db("benchmark")
    assert server.statements() == ["DROP DATABASE IF EXISTS benchmark"] * 2
    assert all(conn.autocommit and conn.closed for conn in server.connections)


def test_create_db_runs_plan_on_benchmark_connection(server, cpu_header) -> None:
    plan = plan_schema(cpu_header, SchemaOptions(in_table_tag=False, field_index="time-major", field_index_count=-1))
    TimescaleCreator(ADMIN, connect=server).create_db("benchmark", plan)

    assert server.statements(ADMIN) == ["CREATE DATABASE benchmark"]
    assert server.statements(BENCH) == plan.statements()
    assert [conn.dsn for conn in server.connections] == [ADMIN, BENCH]
    assert all(conn.closed for conn in server.connections)


def test_create_db_without_plan(server) -> None:
    TimescaleCreator(ADMIN, connect=server).create_db("benchmark")
    assert server.statements() == ["CREATE DATABASE benchmark"]


def test_failing_statement_aborts_rest_and_closes(cpu_header) -> None:
    plan = plan_schema(cpu_header, SchemaOptions(in_table_tag=False))
    failing = plan.table_statement
    server = FakeServer(fail_on={failing})

    with pytest.raises(RuntimeError, match="statement failed"):
        TimescaleCreator(ADMIN, connect=server).create_db("benchmark", plan)

    executed = server.statements(BENCH)
    assert executed[-1] == failing
    assert len(executed) < len(plan.statements())
    assert all(conn.closed for conn in server.connections)


def test_create_db_failure_skips_benchmark_connection() -> None:
    server = FakeServer(fail_on={"CREATE DATABASE benchmark"})
    with pytest.raises(RuntimeError):
        TimescaleCreator(ADMIN, connect=server).create_db("benchmark", None)
    assert [conn.dsn for conn in server.connections] == [ADMIN]
    assert server.connections[0].closed
