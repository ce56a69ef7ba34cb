"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from gql_pydefs import __version__
from gql_pydefs.cli import main


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def output(tmp_path):
    return tmp_path / "definitions.py"


def test_version(runner):
    result = runner.invoke(main, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_generate(runner, schema_dir, output):
    result = runner.invoke(
        main, ["generate", "-t", str(schema_dir / "*.graphql"), "-o", str(output)]
    )
    assert result.exit_code == 0, result.output
    assert "class Book(BaseModel):" in output.read_text()


def test_generator_flags(runner, schema_dir, output):
    result = runner.invoke(
        main,
        [
            "generate",
            "-t", str(schema_dir / "*.graphql"),
            "-o", str(output),
            "--output-as", "interface",
            "--enums-as-types",
            "--skip-resolver-args",
            "--scalar", "DateTime=datetime.datetime",
            "--header", "# flake8: noqa",
            "--quiet",
        ],
    )
    assert result.exit_code == 0, result.output
    content = output.read_text()
    assert "from __future__ import annotations\n\n# flake8: noqa\n\n" in content
    assert "class Book(Protocol):" in content
    assert 'Status = Literal["ACTIVE", "INACTIVE"]' in content
    assert "from datetime import datetime" in content
    assert "DateTime = datetime" in content
    assert "def " not in content


def test_missing_output(runner, schema_dir):
    result = runner.invoke(main, ["generate", "-t", str(schema_dir / "*.graphql")])
    assert result.exit_code == 2
    assert "--output" in result.output


@pytest.mark.parametrize("value", ["DateTime", "=datetime.datetime", "DateTime="])
def test_bad_scalar_mapping(runner, schema_dir, output, value):
    result = runner.invoke(
        main,
        ["generate", "-t", str(schema_dir / "*.graphql"), "-o", str(output), "--scalar", value],
    )
    assert result.exit_code == 2
    assert "NAME=TARGET" in result.output
    assert not output.exists()


def test_config_file(runner, schema_dir, output, tmp_path):
    config = tmp_path / "gql-pydefs.json"
    config.write_text(
        json.dumps(
            {
                "typePaths": [str(schema_dir / "*.graphql")],
                "path": str(output),
                "outputAs": "interface",
                "customScalarTypeMapping": {"DateTime": "datetime.datetime"},
            }
        )
    )

    result = runner.invoke(main, ["generate", "--config", str(config), "--enums-as-types"])

    assert result.exit_code == 0, result.output
    content = output.read_text()
    assert "class Book(Protocol):" in content
    assert "DateTime = datetime" in content
    assert 'Status = Literal["ACTIVE", "INACTIVE"]' in content


def test_flags_override_config(runner, schema_dir, output, tmp_path):
    config = tmp_path / "gql-pydefs.json"
    config.write_text(json.dumps({"typePaths": ["./nothing/*.graphql"], "path": str(output)}))

    result = runner.invoke(
        main, ["generate", "-c", str(config), "-t", str(schema_dir / "*.graphql")]
    )

    assert result.exit_code == 0, result.output
    assert output.exists()


def test_invalid_config(runner, tmp_path):
    config = tmp_path / "gql-pydefs.json"
    config.write_text(json.dumps({"typePaths": ["*.graphql"], "outputAs": "dataclass"}))

    result = runner.invoke(main, ["generate", "-c", str(config)])

    assert result.exit_code == 1
    assert "Invalid config file" in result.output


def test_schema_error(runner, tmp_path, output):
    schema = tmp_path / "broken.graphql"
    schema.write_text("type Book { author: Author }")

    result = runner.invoke(main, ["generate", "-t", str(schema), "-o", str(output)])

    assert result.exit_code == 1
    assert "Author" in result.output
    assert not output.exists()


def test_empty_type_paths(runner, tmp_path, output):
    result = runner.invoke(
        main, ["generate", "-t", str(tmp_path / "none" / "*.graphql"), "-o", str(output)]
    )
    assert result.exit_code == 1
    assert "typeDefs" in result.output
