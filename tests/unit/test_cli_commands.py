"""
Unit tests for the pgschemadiff CLI

Schemas are supplied as snapshot files, or through a stubbed catalog
reader for commands that need a database.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from pgschemadiff import __version__
from pgschemadiff import cli as cli_module
from pgschemadiff.cli import cli
from pgschemadiff.differ import wrap_in_transaction
from pgschemadiff.storage import load_snapshot, save_snapshot
from tests.utils import FakeCatalogReader, literal, make_column, make_schema, make_table, make_view


class ConnectedFakeReader(FakeCatalogReader):
    def __enter__(self) -> "ConnectedFakeReader":
        return self

    def __exit__(self, *exc_info: object) -> None:
        return None


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def snapshot_pair(tmp_path) -> tuple[Path, Path]:
    """Desired drops table legacy from current"""
    desired = make_schema([make_table("users", [make_column("id")])])
    current = make_schema(
        [make_table("users", [make_column("id")]), make_table("legacy", [make_column("id")])]
    )
    desired_path = tmp_path / "desired.json"
    current_path = tmp_path / "current.json"
    save_snapshot(desired_path, desired)
    save_snapshot(current_path, current)
    return desired_path, current_path


@pytest.fixture
def fake_database(monkeypatch):
    """Route PostgresCatalogReader.connect to an in-memory catalog"""
    reader = ConnectedFakeReader()
    reader.add_table("users")
    reader.add_column("users", "id", 1, default="nextval('users_id_seq'::regclass)", nullable=False)
    reader.add_constraint("users", "users_pkey", "p", "{1}")
    reader.sequences = ["users_id_seq"]
    connections = []

    def fake_connect(settings, database):
        connections.append((settings, database))
        return reader

    monkeypatch.setattr(cli_module.PostgresCatalogReader, "connect", staticmethod(fake_connect))
    return connections


class TestVersion:
    def test_version(self, runner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestDiffCommand:
    """Test the diff command against snapshot files"""

    def test_writes_wrapped_script(self, runner, snapshot_pair, tmp_path) -> None:
        desired, current = snapshot_pair
        output = tmp_path / "out" / "migrate.sql"

        result = runner.invoke(cli, ["diff", str(desired), str(current), "-o", str(output)])

        assert result.exit_code == 0, result.output
        assert output.read_text() == wrap_in_transaction('DROP TABLE IF EXISTS "legacy";\n')
        assert "Statements: 1" in result.output

    def test_default_output_file(self, runner, snapshot_pair) -> None:
        desired, current = snapshot_pair

        with runner.isolated_filesystem():
            result = runner.invoke(cli, ["diff", str(desired), str(current)])

            assert result.exit_code == 0, result.output
            assert Path("migrate.sql").read_text().endswith("ROLLBACK;\n")

    def test_commit_flag(self, runner, snapshot_pair, tmp_path) -> None:
        desired, current = snapshot_pair
        output = tmp_path / "migrate.sql"

        runner.invoke(cli, ["diff", str(desired), str(current), "-o", str(output), "--commit"])

        assert output.read_text().endswith("COMMIT;\n")

    def test_print_to_stdout(self, runner, snapshot_pair) -> None:
        desired, current = snapshot_pair

        result = runner.invoke(cli, ["diff", str(desired), str(current), "-o", "-"])

        assert result.exit_code == 0, result.output
        assert 'DROP TABLE IF EXISTS "legacy";' in result.output
        assert "BEGIN;" in result.output

    def test_no_changes(self, runner, snapshot_pair, tmp_path) -> None:
        desired, _ = snapshot_pair

        result = runner.invoke(
            cli, ["diff", str(desired), str(desired), "-o", str(tmp_path / "m.sql")]
        )

        assert result.exit_code == 0
        assert "No changes detected" in result.output

    def test_warnings_are_printed(self, runner, tmp_path) -> None:
        desired_path = tmp_path / "d.json"
        current_path = tmp_path / "c.json"
        save_snapshot(
            desired_path, make_schema([make_table("t", [make_column("c", default=literal("1"))])])
        )
        save_snapshot(
            current_path, make_schema([make_table("t", [make_column("c", default=literal("0"))])])
        )

        result = runner.invoke(
            cli, ["diff", str(desired_path), str(current_path), "-o", str(tmp_path / "m.sql")]
        )

        assert result.exit_code == 0, result.output
        assert "changed from 0 to 1" in result.output
        assert "Warnings: 1" in result.output
        assert "DROP DEFAULT" in (tmp_path / "m.sql").read_text()

    def test_kind_mismatch_exits_without_output(self, runner, tmp_path) -> None:
        desired_path = tmp_path / "d.json"
        current_path = tmp_path / "c.json"
        save_snapshot(desired_path, make_schema([make_table("report")]))
        save_snapshot(current_path, make_schema([make_view("report")]))
        output = tmp_path / "migrate.sql"

        result = runner.invoke(cli, ["diff", str(desired_path), str(current_path), "-o", str(output)])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert not output.exists()

    def test_invalid_snapshot_exits(self, runner, tmp_path) -> None:
        broken = tmp_path / "broken.json"
        broken.write_text("{")

        result = runner.invoke(cli, ["diff", str(broken), str(broken), "-o", "-"])

        assert result.exit_code == 1
        assert "Invalid snapshot" in result.output

    def test_database_side(self, runner, fake_database, snapshot_pair, tmp_path) -> None:
        """A non-file argument is read from the database"""
        desired, _ = snapshot_pair
        output = tmp_path / "migrate.sql"

        result = runner.invoke(
            cli,
            ["diff", str(desired), "prod", "-o", str(output), "--schema", "public"],
            env={"PGHOST": "db.internal", "PGPORT": "6543"},
        )

        assert result.exit_code == 0, result.output
        settings, database = fake_database[0]
        assert database == "prod"
        assert settings.host == "db.internal"
        assert settings.port == 6543
        script = output.read_text()
        assert 'ALTER TABLE "users" ALTER COLUMN "id" DROP NOT NULL;' in script
        assert 'DROP SEQUENCE IF EXISTS "users_id_seq";' in script

    def test_invalid_port_exits(self, runner, snapshot_pair) -> None:
        desired, current = snapshot_pair

        result = runner.invoke(cli, ["diff", str(desired), str(current), "-o", "-", "--port", "0"])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert "Traceback" not in result.output

    def test_unwritable_output_exits(self, runner, snapshot_pair, tmp_path) -> None:
        desired, current = snapshot_pair
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        result = runner.invoke(
            cli, ["diff", str(desired), str(current), "-o", str(blocker / "migrate.sql")]
        )

        assert result.exit_code == 1
        assert "Error" in result.output
        assert isinstance(result.exception, SystemExit)


class TestSnapshotCommand:
    def test_writes_snapshot(self, runner, fake_database, tmp_path) -> None:
        output = tmp_path / "prod.json"

        result = runner.invoke(cli, ["snapshot", "prod", "--output", str(output), "--user", "ro"])

        assert result.exit_code == 0, result.output
        schema = load_snapshot(output)
        assert schema.catalog == "prod"
        assert [table.name for table in schema.tables] == ["users"]
        assert [sequence.name for sequence in schema.sequences] == ["users_id_seq"]
        assert fake_database[0][0].user == "ro"

    def test_invalid_port_exits(self, runner, fake_database, tmp_path) -> None:
        output = tmp_path / "prod.json"

        result = runner.invoke(cli, ["snapshot", "prod", "--output", str(output), "--port", "70000"])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert fake_database == []
        assert not output.exists()

    def test_unwritable_output_exits(self, runner, fake_database, tmp_path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")

        result = runner.invoke(cli, ["snapshot", "prod", "--output", str(blocker / "prod.json")])

        assert result.exit_code == 1
        assert "Error" in result.output
        assert isinstance(result.exception, SystemExit)

    def test_output_is_required(self, runner) -> None:
        result = runner.invoke(cli, ["snapshot", "prod"])

        assert result.exit_code == 2
