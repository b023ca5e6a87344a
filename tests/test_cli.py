"""CLI tests: commands run against patched connections."""

from unittest.mock import MagicMock, patch

from typer.testing import CliRunner

from mediatrack.cli import app
from mediatrack.db.schema import SchemaReport
from mediatrack.errors import ConnectivityError, SchemaError

runner = CliRunner()


def _connection(healthy: bool = True) -> MagicMock:
    conn = MagicMock()
    conn.uri = "neo4j://localhost:7687"
    conn.health_check.return_value = healthy
    conn.__enter__.return_value = conn
    return conn


class TestVersion:
    def test_prints_version(self):
        from mediatrack import __version__

        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestHealth:
    def test_healthy(self):
        with patch("mediatrack.db.GraphConnection") as graph_connection:
            graph_connection.from_config.return_value = _connection()
            result = runner.invoke(app, ["health"])
        assert result.exit_code == 0
        assert "healthy" in result.stdout

    def test_unreachable_exits_1(self):
        with patch("mediatrack.db.GraphConnection") as graph_connection:
            graph_connection.from_config.side_effect = ConnectivityError("refused")
            result = runner.invoke(app, ["health"])
        assert result.exit_code == 1
        assert "Cannot reach graph store" in result.stdout

    def test_bad_uri_override(self):
        result = runner.invoke(app, ["health", "--uri", "http://localhost:7474"])
        assert result.exit_code == 2

    def test_bad_uri_in_environment_exits_2(self, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "http://localhost:7474")
        with patch("mediatrack.db.GraphConnection") as graph_connection:
            result = runner.invoke(app, ["health"])
        assert result.exit_code == 2
        assert "Invalid configuration" in result.stdout
        graph_connection.from_config.assert_not_called()

    def test_uri_option_overrides_bad_environment(self, monkeypatch):
        monkeypatch.setenv("NEO4J_URI", "http://localhost:7474")
        with patch("mediatrack.db.GraphConnection") as graph_connection:
            graph_connection.from_config.return_value = _connection()
            result = runner.invoke(app, ["health", "--uri", "bolt://localhost:7687"])
        assert result.exit_code == 0
        config = graph_connection.from_config.call_args.args[0]
        assert config.neo4j_uri == "bolt://localhost:7687"


class TestInitSchema:
    def test_prints_declared_names(self):
        report = SchemaReport(constraints=["user_id_unique"], indexes=["media_title_index"])
        with patch("mediatrack.db.GraphConnection") as graph_connection, patch(
            "mediatrack.db.SchemaInitializer"
        ) as initializer:
            graph_connection.from_config.return_value = _connection()
            initializer.return_value.ensure_schema.return_value = report
            result = runner.invoke(app, ["init-schema"])

        assert result.exit_code == 0
        assert "user_id_unique" in result.stdout
        assert "media_title_index" in result.stdout

    def test_failure_exits_1(self):
        with patch("mediatrack.db.GraphConnection") as graph_connection, patch(
            "mediatrack.db.SchemaInitializer"
        ) as initializer:
            graph_connection.from_config.return_value = _connection()
            initializer.return_value.ensure_schema.side_effect = SchemaError("boom", statement="CREATE INDEX x")
            result = runner.invoke(app, ["init-schema"])

        assert result.exit_code == 1
        assert "Schema initialization failed" in result.stdout


class TestStats:
    def test_counts_table(self):
        with patch("mediatrack.db.GraphConnection") as graph_connection, patch(
            "mediatrack.db.Repository"
        ) as repository:
            graph_connection.from_config.return_value = _connection()
            repository.return_value.node_counts.return_value = {"User": 3, "Movie": 12}
            result = runner.invoke(app, ["stats"])

        assert result.exit_code == 0
        assert "Movie" in result.stdout
        assert "12" in result.stdout


class TestVerbose:
    def test_verbose_reconfigures_logging(self):
        with patch("mediatrack.log_config.configure_logging") as configure:
            result = runner.invoke(app, ["--verbose", "version"])
        assert result.exit_code == 0
        configure.assert_called_once_with("DEBUG")
