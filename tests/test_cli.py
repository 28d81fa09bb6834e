"""Tests for the pqgate command line interface."""

from pathlib import Path
from unittest.mock import patch

import click
import pytest
import yaml
from click.testing import CliRunner

from pqgate.cli import cli, load_schema
from pqgate.hashing import compute_hash


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def query_files(tmp_path: Path) -> list[Path]:
    first = tmp_path / "add_one.graphql"
    first.write_text("{ add(x: 1, y: 1) }")
    second = tmp_path / "add_three.graphql"
    second.write_text("{ add(x: 3, y: 3) }")
    return [first, second]


class TestHashCommand:
    def test_prints_hashes(self, runner: CliRunner, query_files: list[Path]) -> None:
        result = runner.invoke(cli, ["hash", *map(str, query_files)])

        assert result.exit_code == 0
        lines = result.output.splitlines()
        assert lines[0] == f"{compute_hash('{ add(x: 1, y: 1) }')}  {query_files[0]}"
        assert lines[1] == f"{compute_hash('{ add(x: 3, y: 3) }')}  {query_files[1]}"

    def test_missing_file(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["hash", str(tmp_path / "missing.graphql")])

        assert result.exit_code != 0


class TestManifestCommand:
    def test_stdout(self, runner: CliRunner, query_files: list[Path]) -> None:
        result = runner.invoke(cli, ["manifest", *map(str, query_files)])

        assert result.exit_code == 0
        assert yaml.safe_load(result.output) == {
            "queries": {
                compute_hash("{ add(x: 1, y: 1) }"): "{ add(x: 1, y: 1) }",
                compute_hash("{ add(x: 3, y: 3) }"): "{ add(x: 3, y: 3) }",
            }
        }

    def test_output_file(
        self, runner: CliRunner, query_files: list[Path], tmp_path: Path
    ) -> None:
        output = tmp_path / "manifest.yaml"

        result = runner.invoke(cli, ["manifest", *map(str, query_files), "-o", str(output)])

        assert result.exit_code == 0
        assert "Wrote 2 queries" in result.output
        assert len(yaml.safe_load(output.read_text())["queries"]) == 2


class TestLoadSchema:
    def test_loads_schema(self, tmp_path: Path, monkeypatch) -> None:
        (tmp_path / "cli_schema_module.py").write_text(
            "import strawberry\n"
            "\n"
            "@strawberry.type\n"
            "class Query:\n"
            "    @strawberry.field\n"
            "    def hello(self) -> str:\n"
            "        return 'world'\n"
            "\n"
            "schema = strawberry.Schema(query=Query)\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        schema = load_schema("cli_schema_module:schema")

        assert schema.execute_sync("{ hello }").data == {"hello": "world"}

    def test_requires_attribute(self) -> None:
        with pytest.raises(click.BadParameter, match="module:attribute"):
            load_schema("just_a_module")

    def test_unknown_module(self) -> None:
        with pytest.raises(click.BadParameter, match="Cannot import module"):
            load_schema("pqgate_missing_module:schema")

    def test_not_a_schema(self) -> None:
        with pytest.raises(click.BadParameter, match="is not a strawberry.Schema"):
            load_schema("pqgate.hashing:compute_hash")


class TestServeCommand:
    @patch("pqgate.cli.uvicorn.run")
    @patch("pqgate.cli.load_schema")
    def test_starts_uvicorn(self, mock_load_schema, mock_run, runner: CliRunner, schema) -> None:
        mock_load_schema.return_value = schema

        result = runner.invoke(cli, ["serve", "--schema", "app:schema", "--port", "9000"])

        assert result.exit_code == 0
        mock_load_schema.assert_called_once_with("app:schema")
        assert mock_run.call_args.kwargs["port"] == 9000
        assert mock_run.call_args.kwargs["host"] == "0.0.0.0"

    def test_bad_schema_path(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["serve", "--schema", "no-colon"])

        assert result.exit_code != 0
