"""Tests for configuration loading and precedence."""

import json
from types import SimpleNamespace

import pytest

import cli_config
from constants import Constants

TUNABLES = [
    "REQUEST_TIMEOUT", "USER_AGENT", "ALLOWED_GIT_HOSTS", "REGISTRY_URL_NPM",
    "REGISTRY_URL_MAVEN_REPO", "GITHUB_API_BASE", "GITLAB_API_BASE",
]


@pytest.fixture(autouse=True)
def restore_constants(monkeypatch):
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
    saved = {name: getattr(Constants, name) for name in TUNABLES}
    yield
    for name, value in saved.items():
        setattr(Constants, name, value)


class TestLoadConfig:
    """YAML and JSON config files."""

    def test_yaml(self, tmp_path):
        path = tmp_path / "srcpin.yml"
        path.write_text("http:\n  timeout: 5\nregistries:\n  npm:\n    url: https://npm.mirror/\n", encoding="utf-8")
        assert cli_config.load_config(str(path)) == {
            "http": {"timeout": 5}, "registries": {"npm": {"url": "https://npm.mirror/"}},
        }

    def test_json_by_extension(self, tmp_path):
        path = tmp_path / "srcpin.json"
        path.write_text(json.dumps({"hosts": {"allowed": ["github.com"]}}), encoding="utf-8")
        assert cli_config.load_config(str(path)) == {"hosts": {"allowed": ["github.com"]}}

    def test_missing_file(self, tmp_path):
        assert cli_config.load_config(str(tmp_path / "absent.yml")) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yml"
        path.write_text("http: [unclosed", encoding="utf-8")
        assert cli_config.load_config(str(path)) == {}

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        assert cli_config.load_config(str(path)) == {}

    def test_env_path(self, tmp_path, monkeypatch):
        monkeypatch.setenv(Constants.ENV_CONFIG, str(tmp_path / "env.yml"))
        assert cli_config.find_config_path() == str(tmp_path / "env.yml")

    def test_explicit_path_wins(self, monkeypatch):
        monkeypatch.setenv(Constants.ENV_CONFIG, "/from/env.yml")
        assert cli_config.find_config_path("/explicit.yml") == "/explicit.yml"


class TestApplyConfig:
    """Recognised keys land on Constants."""

    def test_recognised_keys(self):
        cli_config.apply_config({
            "http": {"timeout": "12", "user_agent": "mirror-bot/2"},
            "registries": {"npm": {"url": "https://npm.mirror/"}, "maven_repo": {"url": "https://m2.mirror/"}},
            "hosts": {"allowed": ["GitHub.com", "codeberg.org"]},
            "gitlab": {"api_base": "https://gitlab.internal/api/v4"},
        })
        assert Constants.REQUEST_TIMEOUT == 12.0
        assert Constants.USER_AGENT == "mirror-bot/2"
        assert Constants.REGISTRY_URL_NPM == "https://npm.mirror/"
        assert Constants.REGISTRY_URL_MAVEN_REPO == "https://m2.mirror/"
        assert Constants.ALLOWED_GIT_HOSTS == ["github.com", "codeberg.org"]
        assert Constants.GITLAB_API_BASE == "https://gitlab.internal/api/v4"

    def test_unknown_and_invalid_values_ignored(self):
        before = Constants.REQUEST_TIMEOUT
        cli_config.apply_config({"http": {"timeout": "soon"}, "registries": {"cpan": {"url": "x"}}, "extra": 1})
        assert Constants.REQUEST_TIMEOUT == before

    def test_cli_overrides_file(self, tmp_path):
        path = tmp_path / "srcpin.yml"
        path.write_text("http:\n  timeout: 5\n", encoding="utf-8")
        cli_config.configure_from_args(SimpleNamespace(CONFIG=str(path), TIMEOUT=9.0))
        assert Constants.REQUEST_TIMEOUT == 9.0

    def test_file_applies_without_override(self, tmp_path):
        path = tmp_path / "srcpin.yml"
        path.write_text("http:\n  timeout: 5\n", encoding="utf-8")
        cli_config.configure_from_args(SimpleNamespace(CONFIG=str(path), TIMEOUT=None))
        assert Constants.REQUEST_TIMEOUT == 5.0
