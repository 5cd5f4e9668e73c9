class FakeCursor:
    def __init__(self, conn) -> None:
        self.conn = conn
        self._row = None

    def __enter__(self):
        return self

    def __exit__(self, *exc) -> None:
        return None

    def execute(self, sql, args=None) -> None:
        self.conn.server.executed.append((self.conn.dsn, sql, args))
        if sql in self.conn.server.fail_on:
            raise self.conn.server.error(f"statement failed: {sql}")
        if sql.startswith("SELECT 1 FROM pg_database"):
            self._row = (1,) if args[0] in self.conn.server.databases else None

    def fetchone(self):
        return self._row


class FakeConnection:
    def __init__(self, server, dsn: str) -> None:
        self.server = server
        self.dsn = dsn
        self.autocommit = False
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def close(self) -> None:
        self.closed = True


class FakeServer:
    """Stands in for psycopg2.connect, recording every statement."""

    def __init__(self, databases=(), fail_on=(), error=RuntimeError) -> None:
        self.databases = set(databases)
        self.fail_on = set(fail_on)
        self.error = error
        self.executed = []
        self.connections = []

    def __call__(self, dsn: str) -> FakeConnection:
        conn = FakeConnection(self, dsn)
        self.connections.append(conn)
        return conn

    def statements(self, dsn=None):
        return [sql for d, sql, _ in self.executed if dsn is None or d == dsn]


