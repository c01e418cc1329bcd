"""Tests for prtriage.reports.config argument parsing and repository selection.

Run with coverage:
    pytest tests/test_report_config.py --maxfail=1 -v --cov=prtriage.reports.config --cov-report=term-missing
"""

import json
from importlib import reload
from pathlib import Path
from unittest.mock import MagicMock

import pytest

import prtriage.github.config as github_config
from prtriage.reports import config


def _settings(argv):
    parser = config.build_arg_parser("test", "test")
    config.add_modules_argument(parser)
    return parser, config.resolve_settings(config.parse_args(parser, argv))


def test_defaults_and_explicit_options():
    _, settings = _settings(["-n", "acme", "-t", "tok", "--workers", "4", "--fetch-policy", "best-effort"])
    assert settings.namespace == "acme"
    assert settings.repo_regex == ".*"
    assert settings.pool_size == 4
    assert settings.policy == "best-effort"
    assert settings.output_dir == Path(github_config.OUTPUT_DIR)


def test_preset_overrides_namespace_and_regex():
    _, settings = _settings(["--voxpupuli", "-t", "tok"])
    assert (settings.namespace, settings.repo_regex) == ("voxpupuli", "^puppet-")


def test_presets_are_mutually_exclusive():
    parser = config.build_arg_parser("test", "test")
    with pytest.raises(SystemExit):
        config.parse_args(parser, ["--community", "--voxpupuli"])


def test_missing_options_exit_non_zero(capsys, monkeypatch):
    monkeypatch.setattr(config, "GITHUB_TOKEN", None)
    parser, settings = _settings(["-t", ""])
    missing = config.missing_options(settings)
    assert missing == ["-n", "-t"]
    with pytest.raises(SystemExit) as info:
        config.require_options(parser, missing)
    assert info.value.code == 1
    out = capsys.readouterr().out
    assert "Missing options: -n, -t" in out
    assert "usage:" in out


def test_modules_file_replaces_namespace(tmp_path):
    modules = tmp_path / "modules.json"
    modules.write_text(json.dumps([
        {"github_namespace": "acme", "repo_name": "widgets"},
        {"github_namespace": "acme"},
        {"github_namespace": "other", "repo_name": "gadgets"},
    ]))
    _, settings = _settings(["--modules", str(modules), "-t", "tok"])
    assert config.missing_options(settings) == []

    gateway = MagicMock()
    assert config.selected_repos(gateway, settings) == ["acme/widgets", "other/gadgets"]
    gateway.list_repositories.assert_not_called()


def test_selected_repos_uses_namespace_and_regex():
    _, settings = _settings(["-n", "acme", "-r", "^w", "-t", "tok"])
    gateway = MagicMock()
    gateway.list_repositories.return_value = ["widgets", "wombats"]
    assert config.selected_repos(gateway, settings) == ["acme/widgets", "acme/wombats"]
    gateway.list_repositories.assert_called_once_with("acme", "^w")


def test_env_override_for_pool_size(monkeypatch):
    monkeypatch.setenv("PRTRIAGE_POOL_SIZE", "3")
    reloaded = reload(github_config)
    try:
        assert reloaded.POOL_SIZE == 3
    finally:
        monkeypatch.delenv("PRTRIAGE_POOL_SIZE", raising=False)
        reload(github_config)
