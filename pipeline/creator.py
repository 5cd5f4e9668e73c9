# ===========================================
# creator.py
# ===========================================

## \file creator.py
## \brief Creates the benchmark database and its tables on a PostgreSQL/TimescaleDB server.
##
## \details
## Server-level work (checking, dropping and creating the benchmark database)
## runs over an administrative connection whose connection string has any
## `dbname=` component removed, since the target database may not exist yet.
## Table, index and hypertable statements run over a second connection scoped
## to the benchmark database.
##
## Every operation opens its own connection and closes it before returning,
## including when a statement fails. Errors raised by psycopg2 are not retried
## and propagate to the caller.
##
## \par Usage
## \code{.py}
## creator = TimescaleCreator("host=localhost user=postgres sslmode=disable")
## if creator.db_exists("benchmark"):
##     creator.remove_old_db("benchmark")
## creator.create_db("benchmark", plan)
## \endcode

import re

import psycopg2

from pipeline import ddl
from pipeline.utils import log

DBNAME_RE = re.compile(r"\s*\bdbname=\S*\b")


def strip_dbname(conn_str: str) -> str:
    """!Removes a `dbname=...` component from a libpq connection string."""
    return DBNAME_RE.sub("", conn_str).strip()


class TimescaleCreator:
    """!Runs the provisioning DDL against a server.

    @param conn_str libpq key/value connection string; a `dbname` in it is ignored.
    @param connect Connection factory, psycopg2.connect by default.
    """

    def __init__(self, conn_str: str, connect=psycopg2.connect):
        self.admin_conn_str = strip_dbname(conn_str)
        self._connect = connect

    def bench_conn_str(self, db_name: str) -> str:
        return f"{self.admin_conn_str} dbname={ddl.ident(db_name)}".strip()

    def _open(self, conn_str: str):
        conn = self._connect(conn_str)
        # CREATE/DROP DATABASE cannot run inside a transaction block.
        conn.autocommit = True
        return conn

    def db_exists(self, db_name: str) -> bool:
        """!Checks the server catalog for a database.

        @param db_name The database name.
        @return True if the database exists.
        """
        conn = self._open(self.admin_conn_str)
        try:
            with conn.cursor() as cur:
                cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (db_name,))
                return cur.fetchone() is not None
        finally:
            conn.close()

    def remove_old_db(self, db_name: str):
        """!Drops a database; succeeds when it does not exist."""
        conn = self._open(self.admin_conn_str)
        try:
            with conn.cursor() as cur:
                cur.execute(ddl.drop_database(db_name))
            log(f"Dropped database '{db_name}' (if it existed).")
        finally:
            conn.close()

    def create_db(self, db_name: str, plan=None):
        """!Creates a database and, if given, the tables of a schema plan in it.

        @param db_name The database name.
        @param plan Optional SchemaPlan whose statements run in the new database.

        @throws psycopg2.Error On the first failing statement; the rest are not run.
        """
        conn = self._open(self.admin_conn_str)
        try:
            with conn.cursor() as cur:
                cur.execute(ddl.create_database(db_name))
            log(f"Created database '{db_name}'.")
        finally:
            conn.close()

        if plan is not None:
            self.apply(db_name, plan.statements())

    def apply(self, db_name: str, statements):
        """!Executes statements in order on a connection scoped to db_name."""
        conn = self._open(self.bench_conn_str(db_name))
        try:
            with conn.cursor() as cur:
                for stmt in statements:
                    log(f"Executing: {stmt}")
                    cur.execute(stmt)
        finally:
            conn.close()
