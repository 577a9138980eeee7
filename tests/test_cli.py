"""Tests for the srcpin command line entry point."""

import json
from unittest.mock import patch

import pytest

import srcpin
from args import parse_args
from constants import Constants, ExitCodes, Registry
from common.errors import NotFoundError, TransportError
from registry.dispatcher import ResolutionOutcome
from registry.models import ResolvedPackage

PACKAGE = ResolvedPackage(
    registry=Registry.NPM,
    name="zod",
    version="3.22.4",
    repo_url="https://github.com/colinhacks/zod",
    git_tag="v3.22.4",
    ref_candidates=("v3.22.4", "3.22.4"),
    metadata_source="repository",
)


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    monkeypatch.delenv(Constants.ENV_CONFIG, raising=False)
    monkeypatch.delenv(Constants.ENV_LOG_LEVEL, raising=False)
    monkeypatch.setattr("cli_config.DEFAULT_CONFIG_PATHS", [])
    saved = Constants.REQUEST_TIMEOUT
    yield
    Constants.REQUEST_TIMEOUT = saved


def run_main(argv, outcomes):
    with patch("srcpin.SourceResolver") as resolver_cls:
        resolver_cls.return_value.resolve_many.return_value = outcomes
        with pytest.raises(SystemExit) as exc_info:
            srcpin.main(argv)
    return exc_info.value.code, resolver_cls.return_value.resolve_many


class TestParseArgs:
    """Argument parsing."""

    def test_specs_and_flags(self):
        args = parse_args(["zod", "pypi:requests", "--allow-prerelease", "--loglevel", "debug", "--timeout", "3"])
        assert args.specs == ["zod", "pypi:requests"]
        assert args.ALLOW_PRERELEASE is True
        assert args.LOG_LEVEL == "DEBUG"
        assert args.TIMEOUT == 3.0

    def test_nothing_to_resolve(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestMain:
    """Exit codes and JSON output."""

    def test_success(self, capsys):
        code, resolve_many = run_main(["zod"], [ResolutionOutcome(spec="zod", result=PACKAGE)])
        assert code == ExitCodes.SUCCESS.value
        resolve_many.assert_called_once_with(["zod"], allow_prerelease=False)
        data = json.loads(capsys.readouterr().out)
        assert data[0]["result"]["gitTag"] == "v3.22.4"

    def test_resolution_failure(self, capsys):
        outcomes = [
            ResolutionOutcome(spec="zod", result=PACKAGE),
            ResolutionOutcome(spec="nope", error=NotFoundError("missing")),
        ]
        code, _ = run_main(["zod", "nope"], outcomes)
        assert code == ExitCodes.RESOLUTION_ERROR.value
        assert json.loads(capsys.readouterr().out)[1]["error"]["kind"] == "NotFoundError"

    def test_only_transport_failures(self, capsys):
        outcomes = [ResolutionOutcome(spec="zod", error=TransportError("down"))]
        code, _ = run_main(["zod"], outcomes)
        assert code == ExitCodes.CONNECTION_ERROR.value

    def test_mixed_failures_report_resolution_error(self, capsys):
        outcomes = [
            ResolutionOutcome(spec="a", error=TransportError("down")),
            ResolutionOutcome(spec="b", error=NotFoundError("missing")),
        ]
        code, _ = run_main(["a", "b"], outcomes)
        assert code == ExitCodes.RESOLUTION_ERROR.value

    def test_list_file_and_output_file(self, tmp_path):
        listing = tmp_path / "specs.txt"
        listing.write_text("# comment\nzod\n\nzod\npypi:requests\n", encoding="utf-8")
        out = tmp_path / "out.json"
        code, resolve_many = run_main(
            ["-l", str(listing), "-o", str(out), "--allow-prerelease"],
            [ResolutionOutcome(spec="zod", result=PACKAGE)],
        )
        assert code == ExitCodes.SUCCESS.value
        resolve_many.assert_called_once_with(["zod", "pypi:requests"], allow_prerelease=True)
        assert json.loads(out.read_text(encoding="utf-8"))[0]["spec"] == "zod"

    def test_missing_list_file(self, tmp_path):
        code, resolve_many = run_main(["-l", str(tmp_path / "absent.txt")], [])
        assert code == ExitCodes.FILE_ERROR.value
        resolve_many.assert_not_called()

    def test_timeout_flag_applied(self, capsys):
        run_main(["zod", "--timeout", "4"], [ResolutionOutcome(spec="zod", result=PACKAGE)])
        assert Constants.REQUEST_TIMEOUT == 4.0
