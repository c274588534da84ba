import json
import shutil

import pytest
import yaml
from click.testing import CliRunner

from lockgraph import __version__
from lockgraph.cli import cli

QUIET = {"LOG_LEVEL": "ERROR"}


@pytest.fixture
def runner():
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_resolve_json(runner, composer_project):
    result = runner.invoke(cli, ["resolve", str(composer_project)], env=QUIET)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    names = [module["name"] for module in payload["composer"]]
    assert names == ["shop", "foo", "bar", "phpunit"]
    assert "modules" not in payload["composer"][0]
    assert payload["composer"][1]["checksum"]["source"] == "url-placeholder"


def test_resolve_tree_yaml(runner, npm_project):
    result = runner.invoke(cli, ["resolve", str(npm_project), "--deps", "-f", "yaml"], env=QUIET)

    assert result.exit_code == 0, result.output
    payload = yaml.safe_load(result.stdout)
    body_parser = payload["npm"][2]
    assert body_parser["name"] == "body-parser"
    assert body_parser["modules"]["debug"]["modules"]["ms"]["version"] == "2.0.0"


def test_resolve_without_dev(runner, npm_project):
    result = runner.invoke(cli, ["resolve", str(npm_project), "--no-include-dev", "-e", "npm"], env=QUIET)

    assert result.exit_code == 0, result.output
    assert [m["name"] for m in json.loads(result.stdout)["npm"]] == ["e-commerce", "bcryptjs", "body-parser"]


def test_resolve_uninstalled_project_fails(runner, composer_project):
    shutil.rmtree(composer_project / "vendor")

    result = runner.invoke(cli, ["resolve", str(composer_project)], env=QUIET)

    assert result.exit_code == 1
    assert "NOT_INSTALLED" in result.output


def test_resolve_unsupported_directory_fails(runner, tmp_path):
    result = runner.invoke(cli, ["resolve", str(tmp_path)], env=QUIET)

    assert result.exit_code == 1
    assert "no supported ecosystem" in result.output


def test_ecosystems(runner, npm_project):
    result = runner.invoke(cli, ["ecosystems", str(npm_project)], env=QUIET)

    assert result.exit_code == 0
    assert "composer: not applicable" in result.output
    assert "npm: installed" in result.output


def test_config_json(runner):
    result = runner.invoke(cli, ["config", "-f", "json"], env={**QUIET, "LOCKGRAPH_ECOSYSTEMS": "npm"})

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["resolution"]["ecosystems"] == ["npm"]
    assert payload["logging"]["level"] == "ERROR"


def test_config_file_option(runner, tmp_path):
    config_file = tmp_path / "lockgraph.yaml"
    config_file.write_text("resolution:\n  composer_url_host: git.example.org\n", encoding="utf-8")

    result = runner.invoke(cli, ["-c", str(config_file), "config"], env=QUIET)

    assert result.exit_code == 0, result.output
    assert "[resolution]" in result.output
    assert "composer_url_host: git.example.org" in result.output


def test_invalid_config_fails(runner):
    result = runner.invoke(cli, ["config"], env={**QUIET, "LOCKGRAPH_ECOSYSTEMS": "pip"})

    assert result.exit_code == 1
    assert "Invalid ecosystem" in result.output
