"""Tests for Neo4jConfig: environment, keyword and credential-file sources."""

from grafnote.db.connection.onto import DEFAULT_BOLT_PORT, Neo4jConfig


class TestNeo4jConfig:
    """Tests for Neo4jConfig construction."""

    def test_defaults(self, monkeypatch):
        for var in ("NEO4J_URI", "NEO4J_USERNAME", "NEO4J_PASSWORD", "NEO4J_DATABASE"):
            monkeypatch.delenv(var, raising=False)
        config = Neo4jConfig()
        assert config.uri == f"bolt://localhost:{DEFAULT_BOLT_PORT}"
        assert config.auth is None
        assert config.database is None

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "bolt://db:7687")
        monkeypatch.setenv("NEO4J_USERNAME", "neo4j")
        monkeypatch.setenv("NEO4J_PASSWORD", "secret")
        monkeypatch.setenv("NEO4J_DATABASE", "notes")
        config = Neo4jConfig()
        assert config.uri == "bolt://db:7687"
        assert config.auth == ("neo4j", "secret")
        assert config.database == "notes"

    def test_keywords_override_env(self, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "bolt://db:7687")
        config = Neo4jConfig(uri="neo4j://other:7687")
        assert config.uri == "neo4j://other:7687"


class TestAuthFile:
    """Tests for Neo4jConfig.from_auth_file()."""

    def test_two_line_file(self, tmp_path):
        path = tmp_path / "auth.txt"
        path.write_text("neo4j\n pw \n")
        config = Neo4jConfig.from_auth_file(path, uri="bolt://db:7687")
        assert config.auth == ("neo4j", "pw")
        assert config.uri == "bolt://db:7687"

    def test_missing_file_yields_empty_credentials(self, tmp_path, caplog, monkeypatch):
        monkeypatch.delenv("NEO4J_USERNAME", raising=False)
        config = Neo4jConfig.from_auth_file(tmp_path / "absent.txt")
        assert config.username == ""
        assert config.password == ""
        assert config.auth is None
        assert "not present" in caplog.text

    def test_file_without_secret(self, tmp_path):
        path = tmp_path / "auth.txt"
        path.write_text("neo4j\n")
        config = Neo4jConfig.from_auth_file(path)
        assert config.auth == ("neo4j", "")
