"""Tests for NuGet V3 resolution."""

import pytest

from constants import Registry
from common.errors import NotFoundError, TransportError
from registry.nuget import NuGetClient, _extract_repo_candidates, _parse_nuspec
from registry.nuget.discovery import REGISTRATION_TYPES, _find_resource
from versioning.models import PackageSpec

INDEX_URL = "https://nuget.test/v3/index.json"
REG = "https://nuget.test/v3/registration5-gz-semver2/"
FLAT = "https://nuget.test/v3-flatcontainer/"

SERVICE_INDEX = {
    "version": "3.0.0",
    "resources": [
        {"@id": "https://nuget.test/v3/registration5-semver1", "@type": "RegistrationsBaseUrl"},
        {"@id": REG, "@type": "RegistrationsBaseUrl/3.6.0"},
        {"@id": FLAT, "@type": "PackageBaseAddress/3.0.0"},
    ],
}

NUSPEC = """<?xml version="1.0" encoding="utf-8"?>
<package xmlns="http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd">
  <metadata>
    <id>Serilog</id>
    <version>{version}</version>
    <projectUrl>https://serilog.net/</projectUrl>
    <repository type="git" url="https://github.com/serilog/serilog.git" commit="abc123" />
  </metadata>
</package>"""


def leaf(version, repository=None, project_url=None, listed=True):
    entry = {"version": version, "listed": listed, "published": "2024-01-01T00:00:00Z"}
    if repository is not None:
        entry["repository"] = repository
    if project_url is not None:
        entry["projectUrl"] = project_url
    return {"catalogEntry": entry}


@pytest.fixture
def client(fake_http):
    fake_http.add(INDEX_URL, SERVICE_INDEX)
    return NuGetClient(http=fake_http, service_index_url=INDEX_URL)


class TestNuGetDiscovery:
    """Service index and nuspec helpers."""

    def test_prefers_semver2_registration_hive(self):
        assert _find_resource(SERVICE_INDEX, REGISTRATION_TYPES) == REG

    def test_resource_gets_trailing_slash(self):
        index = {"resources": [{"@id": "https://x.test/reg", "@type": "RegistrationsBaseUrl"}]}
        assert _find_resource(index, REGISTRATION_TYPES) == "https://x.test/reg/"

    def test_parse_nuspec(self):
        assert _parse_nuspec(NUSPEC.format(version="3.1.1")) == {
            "repository": "https://github.com/serilog/serilog.git",
            "projectUrl": "https://serilog.net/",
        }

    def test_non_git_repository_type_ignored(self):
        candidates = _extract_repo_candidates(leaf("1.0.0", repository={"type": "tfs", "url": "https://tfs.example"}), None, [])
        assert candidates == []

    def test_sibling_order(self):
        siblings = [
            leaf("1.0.0", project_url="https://github.com/old/project"),
            leaf("2.0.0", repository={"url": "https://github.com/new/repo"}),
        ]
        candidates = _extract_repo_candidates(leaf("3.0.0"), None, siblings)
        assert [(c.source, c.raw_url) for c in candidates] == [
            ("repository", "https://github.com/new/repo"),
            ("projectUrl", "https://github.com/old/project"),
        ]


class TestNuGetClient:
    """End-to-end NuGet resolution."""

    def test_inline_registration_page(self, client, fake_http):
        fake_http.add(REG + "serilog/index.json", {"items": [{"items": [
            leaf("3.1.0", repository={"type": "git", "url": "https://github.com/serilog/serilog.git"}),
            leaf("3.1.1", repository={"type": "git", "url": "https://github.com/serilog/serilog.git"}),
            leaf("4.0.0-dev-02100", repository={"type": "git", "url": "https://github.com/serilog/serilog.git"}),
        ]}]})
        result = client.resolve(PackageSpec(Registry.NUGET, "Serilog"))
        assert result.version == "3.1.1"
        assert result.repo_url == "https://github.com/serilog/serilog"
        assert result.ref_candidates == ("v3.1.1", "3.1.1")
        assert all("nuspec" not in url for url in fake_http.urls())

    def test_paged_registration_index(self, client, fake_http):
        page_url = REG + "serilog/page/1.0.0/2.0.0.json"
        fake_http.add(REG + "serilog/index.json", {"items": [{"@id": page_url}]})
        fake_http.add(page_url, {"items": [leaf("2.0.0", repository={"url": "https://github.com/serilog/serilog"})]})
        assert client.resolve(PackageSpec(Registry.NUGET, "Serilog")).version == "2.0.0"

    def test_empty_inline_page_is_fetched(self, client, fake_http):
        page_url = REG + "serilog/page/1.0.0/2.0.0.json"
        fake_http.add(REG + "serilog/index.json", {"items": [{"@id": page_url, "items": []}]})
        fake_http.add(page_url, {"items": [leaf("2.0.0", repository={"url": "https://github.com/serilog/serilog"})]})
        assert client.resolve(PackageSpec(Registry.NUGET, "Serilog")).version == "2.0.0"
        assert page_url in fake_http.urls()

    def test_missing_page_warns(self, client, fake_http, caplog):
        missing = REG + "serilog/page/0.1.0/0.9.0.json"
        fake_http.add(REG + "serilog/index.json", {"items": [
            {"@id": missing},
            {"items": [leaf("2.0.0", repository={"url": "https://github.com/serilog/serilog"})]},
        ]})
        with caplog.at_level("WARNING", logger="registry.nuget.client"):
            result = client.resolve(PackageSpec(Registry.NUGET, "Serilog"))
        assert result.version == "2.0.0"
        assert any("could not be expanded" in r.getMessage() for r in caplog.records)

    def test_nuspec_fallback(self, client, fake_http):
        fake_http.add(REG + "serilog/index.json", {"items": [{"items": [leaf("3.1.1")]}]})
        fake_http.add(FLAT + "serilog/3.1.1/serilog.nuspec", NUSPEC.format(version="3.1.1"))
        result = client.resolve(PackageSpec(Registry.NUGET, "Serilog"))
        assert result.metadata_source == "nuspec.repository"

    def test_case_insensitive_version_request(self, client, fake_http):
        fake_http.add(REG + "pkg/index.json", {"items": [{"items": [
            leaf("1.0.0-Beta", repository={"url": "https://github.com/o/pkg"}),
        ]}]})
        assert client.resolve(PackageSpec(Registry.NUGET, "Pkg", "1.0.0-beta")).version == "1.0.0-Beta"

    def test_unlisted_versions_not_default(self, client, fake_http):
        fake_http.add(REG + "pkg/index.json", {"items": [{"items": [
            leaf("1.0.0", repository={"url": "https://github.com/o/pkg"}),
            leaf("1.1.0", repository={"url": "https://github.com/o/pkg"}, listed=False),
        ]}]})
        assert client.resolve(PackageSpec(Registry.NUGET, "Pkg")).version == "1.0.0"

    def test_sibling_leaf_fallback(self, client, fake_http):
        fake_http.add(REG + "pkg/index.json", {"items": [{"items": [
            leaf("1.0.0", repository={"url": "https://github.com/o/pkg"}),
            leaf("1.1.0"),
        ]}]})
        fake_http.add(FLAT + "pkg/1.1.0/pkg.nuspec", "<package><metadata /></package>")
        result = client.resolve(PackageSpec(Registry.NUGET, "Pkg"))
        assert result.version == "1.1.0"
        assert result.repo_url == "https://github.com/o/pkg"

    def test_unknown_package(self, client):
        with pytest.raises(NotFoundError):
            client.resolve(PackageSpec(Registry.NUGET, "Nope"))

    def test_missing_service_index(self, fake_http):
        with pytest.raises(TransportError):
            NuGetClient(http=fake_http, service_index_url=INDEX_URL).resolve(PackageSpec(Registry.NUGET, "Pkg"))
