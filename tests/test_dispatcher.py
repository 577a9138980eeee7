"""Tests for SourceResolver routing and batch handling."""

import json

import pytest

from constants import Constants, Registry
from common.errors import NotFoundError, SpecParseError, TransportError
from registry.dispatcher import SourceResolver
from registry.npm import NpmClient
from registry.pypi import PyPIClient

NPM = Constants.REGISTRY_URL_NPM
PYPI = Constants.REGISTRY_URL_PYPI


def zod_packument():
    return {
        "dist-tags": {"latest": "3.22.4"},
        "versions": {"3.22.4": {"repository": {"type": "git", "url": "git+https://github.com/colinhacks/zod.git"}}},
    }


@pytest.fixture
def resolver(fake_http, monkeypatch):
    for name in Constants.ENV_GITHUB_TOKEN:
        monkeypatch.delenv(name, raising=False)
    return SourceResolver(http=fake_http)


class TestSourceResolver:
    """Routing between registries and direct repositories."""

    def test_fresh_client_per_resolution(self, resolver):
        assert resolver.client_for(Registry.NPM) is not resolver.client_for(Registry.NPM)
        assert isinstance(resolver.client_for(Registry.NPM), NpmClient)
        assert isinstance(resolver.client_for(Registry.PYPI), PyPIClient)

    def test_unprefixed_package_goes_to_npm(self, resolver, fake_http):
        fake_http.add(NPM + "zod", zod_packument())
        result = resolver.resolve("zod")
        assert result.registry == Registry.NPM
        assert result.to_dict()["repoUrl"] == "https://github.com/colinhacks/zod"

    def test_prefixed_package(self, resolver, fake_http):
        fake_http.add(PYPI + "requests/json", {
            "info": {"version": "2.31.0", "project_urls": {"Source": "https://github.com/psf/requests"}},
            "releases": {"2.31.0": [{"upload_time_iso_8601": "2023-05-22T15:12:42Z"}]},
        })
        assert resolver.resolve("pypi:requests").version == "2.31.0"

    def test_repository_input(self, resolver, fake_http):
        fake_http.add(f"{Constants.GITHUB_API_BASE}/repos/colinhacks/zod", json.dumps({"default_branch": "main"}))
        result = resolver.resolve("colinhacks/zod")
        assert result.to_dict() == {
            "type": "repo",
            "host": "github.com",
            "owner": "colinhacks",
            "repo": "zod",
            "ref": "main",
            "repoUrl": "https://github.com/colinhacks/zod",
            "displayName": "github.com/colinhacks/zod",
        }

    def test_parse_error_before_network(self, resolver, fake_http):
        with pytest.raises(SpecParseError):
            resolver.resolve("maven:not-coordinates")
        assert fake_http.calls == []

    def test_resolve_repo_rejects_non_repo(self, resolver):
        with pytest.raises(SpecParseError):
            resolver.resolve_repo("lodash")


class TestResolveMany:
    """Batches keep going after a failure."""

    def test_mixed_outcomes(self, resolver, fake_http):
        fake_http.add(NPM + "zod", zod_packument())
        outcomes = resolver.resolve_many(["zod", "no-such-pkg", "npm:zod@9.9.9"])
        assert [o.ok for o in outcomes] == [True, False, False]
        assert isinstance(outcomes[1].error, NotFoundError)
        assert outcomes[2].to_dict()["error"]["recentVersions"] == ["3.22.4"]
        assert outcomes[2].to_dict()["error"]["kind"] == "NotFoundError"

    def test_transport_error_recorded(self, resolver, fake_http, transport_error):
        fake_http.add(NPM + "zod", transport_error)
        outcome = resolver.resolve_many(["zod"])[0]
        assert isinstance(outcome.error, TransportError)
        assert outcome.to_dict()["ok"] is False

    def test_no_state_shared_between_resolutions(self, resolver, fake_http):
        index_url = Constants.REGISTRY_URL_NUGET_V3
        reg = "https://nuget.test/v3/registration/"
        fake_http.add(index_url, {"resources": [{"@id": reg, "@type": "RegistrationsBaseUrl/3.6.0"}]})
        fake_http.add(reg + "serilog/index.json", {"items": [{"items": [{"catalogEntry": {
            "version": "3.1.1", "repository": {"type": "git", "url": "https://github.com/serilog/serilog"},
        }}]}]})
        outcomes = resolver.resolve_many(["nuget:Serilog", "nuget:Serilog"])
        assert [o.ok for o in outcomes] == [True, True]
        assert fake_http.urls().count(index_url) == 2
