"""
Tests for the command-line interface.

Only commands that finish without touching the network are exercised:
catalog listings, version output and input validation.
"""

import pytest
from typer.testing import CliRunner

from mediahub import __version__
from mediahub.cli.main import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_args(tmp_path):
    return ["--config-dir", str(tmp_path)]


def test_version(runner):
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_creates_settings_file(runner, tmp_path, config_args):
    result = runner.invoke(app, config_args + ["providers", "--json"])

    assert result.exit_code == 0
    assert (tmp_path / "settings.json").exists()


def test_providers_json(runner, config_args):
    result = runner.invoke(app, config_args + ["providers", "--json"])

    assert result.exit_code == 0
    assert '"name": "hianime"' in result.stdout
    assert '"status": "broken"' in result.stdout


def test_providers_table(runner, config_args):
    result = runner.invoke(app, config_args + ["providers", "--category", "anime"])

    assert result.exit_code == 0
    assert "HiAnime" in result.stdout
    assert "primary hianime" in result.stdout


def test_empty_query(runner, config_args):
    result = runner.invoke(app, config_args + ["search", "   "])

    assert result.exit_code == 1


def test_unknown_provider(runner, config_args):
    result = runner.invoke(app, config_args + ["search", "naruto", "--provider", "nosuchsite"])

    assert result.exit_code == 1
    assert "Unknown provider" in result.stdout


def test_invalid_audio(runner, config_args):
    result = runner.invoke(app, config_args + ["sources", "x$episode$1", "--provider", "hianime", "--audio", "loud"])

    assert result.exit_code == 1


def test_movie_sources_need_media_id(runner, config_args):
    result = runner.invoke(app, config_args + ["sources", "10766", "--provider", "flixhq"])

    assert result.exit_code == 1
    assert "media_id" in result.stdout
