import pytest
from neo4j.exceptions import ServiceUnavailable

from grafnote.db.conn import Connection, QueryExecutionError
from grafnote.db.manager import ConnectionManager
from grafnote.db.neo4j.conn import Neo4jConnection
from grafnote.query.cypher import node_ids_query


class _EchoConnection(Connection):
    def __init__(self, error=None):
        self.error = error
        self.calls = []
        self.closed = False

    def execute(self, query, **kwargs):
        self.calls.append((query, kwargs))
        if self.error is not None:
            raise self.error
        return [{"value": kwargs.get("name")}]

    def close(self):
        self.closed = True


class _FakeRecord:
    def __init__(self, data):
        self._data = data

    def data(self):
        return dict(self._data)


class _FakeSession:
    def __init__(self, rows=(), error=None):
        self.rows = rows
        self.error = error
        self.runs = []
        self.closed = False

    def run(self, query, parameters=None):
        self.runs.append((query, parameters))
        if self.error is not None:
            raise self.error
        return [_FakeRecord(r) for r in self.rows]

    def close(self):
        self.closed = True


class _FakeDriver:
    def __init__(self, session):
        self._session = session
        self.session_kwargs = None
        self.closed = False

    def session(self, **kwargs):
        self.session_kwargs = kwargs
        return self._session

    def close(self):
        self.closed = True


def _patch_driver(monkeypatch, session):
    driver = _FakeDriver(session)
    calls = []

    def fake_driver(uri, auth=None):
        calls.append((uri, auth))
        return driver

    monkeypatch.setattr("grafnote.db.neo4j.conn.GraphDatabase.driver", fake_driver)
    return driver, calls


def test_run_binds_params():
    conn = _EchoConnection()
    rows = conn.run(node_ids_query("Person", "Alice"))
    assert rows == [{"value": "Alice"}]
    query, params = conn.calls[0]
    assert params == {"name": "Alice"}
    assert "Alice" not in query


def test_run_tags_failures_with_query_name():
    conn = _EchoConnection(error=QueryExecutionError("boom"))
    with pytest.raises(QueryExecutionError) as e:
        conn.run(node_ids_query("Person", "Alice"))
    assert e.value.query_name == "node_ids"


def test_connection_manager_closes(config):
    conn = _EchoConnection()
    with ConnectionManager(connection_config=config, factory=lambda _: conn) as db:
        assert db is conn
    assert conn.closed


def test_connection_manager_open_is_idempotent(config):
    opened = []

    def factory(_):
        opened.append(_EchoConnection())
        return opened[-1]

    manager = ConnectionManager(config, factory)
    assert manager.open() is manager.open()
    assert len(opened) == 1
    manager.close()
    manager.close()
    assert opened[0].closed
    assert manager.conn is None


def test_neo4j_connection(monkeypatch, config):
    session = _FakeSession(rows=[{"value": "1"}])
    driver, calls = _patch_driver(monkeypatch, session)
    config.database = "notes"

    conn = Neo4jConnection(config)
    assert calls == [("bolt://localhost:7687", ("neo4j", "pw"))]
    assert driver.session_kwargs == {"database": "notes"}
    assert conn.execute("MATCH (n) RETURN n.ID AS value", id="1") == [{"value": "1"}]
    assert session.runs == [("MATCH (n) RETURN n.ID AS value", {"id": "1"})]

    conn.close()
    assert session.closed and driver.closed
    with pytest.raises(QueryExecutionError):
        conn.execute("RETURN 1")


def test_neo4j_errors_are_wrapped(monkeypatch, config):
    session = _FakeSession(error=ServiceUnavailable("connection refused"))
    _patch_driver(monkeypatch, session)
    conn = Neo4jConnection(config)
    with pytest.raises(QueryExecutionError) as e:
        conn.run(node_ids_query("Person", "Alice"))
    assert e.value.query_name == "node_ids"
    assert isinstance(e.value.__cause__, ServiceUnavailable)
