"""Tests for per-registry specifier parsing and prefix dispatch."""

import pytest

from constants import Registry
from common.errors import SpecParseError
from registry.dispatcher import detect_input_type, detect_registry, has_registry_prefix, parse_package_spec
from versioning.parser import (
    format_spec,
    parse_crates_spec,
    parse_for_registry,
    parse_maven_spec,
    parse_npm_spec,
    parse_nuget_spec,
    parse_packagist_spec,
    parse_pypi_spec,
    tokenize_rightmost,
)


class TestTokenizeRightmost:
    """Splitting on the rightmost separator."""

    def test_splits_on_last_separator(self):
        assert tokenize_rightmost("a@b@c", "@") == ("a@b", "c")

    def test_leading_separator_is_part_of_name(self):
        assert tokenize_rightmost("@scope", "@") == ("@scope", None)

    def test_empty_version_means_unspecified(self):
        assert tokenize_rightmost("left-pad@", "@") == ("left-pad", None)


class TestNpmSpec:
    """npm names, scoped names and versions."""

    def test_plain_name(self):
        assert parse_npm_spec("zod") == ("zod", None)

    def test_name_with_version(self):
        assert parse_npm_spec("zod@3.22.4") == ("zod", "3.22.4")

    def test_scoped_name(self):
        assert parse_npm_spec("@babel/core") == ("@babel/core", None)

    def test_scoped_name_with_version(self):
        assert parse_npm_spec("@babel/core@7.24.0") == ("@babel/core", "7.24.0")

    def test_malformed_scope_rejected(self):
        with pytest.raises(SpecParseError):
            parse_npm_spec("@babel")

    def test_empty_name_rejected(self):
        with pytest.raises(SpecParseError):
            parse_npm_spec("   ")


class TestPyPISpec:
    """PyPI accepts == and @ version separators."""

    def test_double_equals(self):
        assert parse_pypi_spec("requests==2.31.0") == ("requests", "2.31.0")

    def test_at_separator(self):
        assert parse_pypi_spec("requests@2.31.0") == ("requests", "2.31.0")

    def test_bare_name(self):
        assert parse_pypi_spec("Flask_RESTful") == ("Flask_RESTful", None)

    def test_range_operator_rejected(self):
        with pytest.raises(SpecParseError):
            parse_pypi_spec("requests>=2.0")


class TestSimpleRegistries:
    """crates.io and NuGet use name@version."""

    def test_crate_with_version(self):
        assert parse_crates_spec("serde@1.0.197") == ("serde", "1.0.197")

    def test_nuget_with_version(self):
        assert parse_nuget_spec("Newtonsoft.Json@13.0.3") == ("Newtonsoft.Json", "13.0.3")

    def test_nuget_without_version(self):
        assert parse_nuget_spec("Newtonsoft.Json") == ("Newtonsoft.Json", None)


class TestMavenSpec:
    """groupId:artifactId[:version] and groupId:artifactId@version."""

    def test_group_and_artifact(self):
        coords = parse_maven_spec("com.google.guava:guava")
        assert (coords.group_id, coords.artifact_id, coords.version) == ("com.google.guava", "guava", None)

    def test_colon_version(self):
        assert parse_maven_spec("com.google.guava:guava:33.0.0-jre").version == "33.0.0-jre"

    def test_at_version(self):
        assert parse_maven_spec("com.google.guava:guava@33.0.0-jre").version == "33.0.0-jre"

    def test_at_version_wins_over_third_segment(self):
        assert parse_maven_spec("g:a:1.0@2.0").version == "2.0"

    def test_compound_name(self):
        assert parse_maven_spec("org.slf4j:slf4j-api").name == "org.slf4j:slf4j-api"

    @pytest.mark.parametrize("spec", ["guava", "g:a:1:extra", ":guava", "com.google:"])
    def test_malformed_coordinates_rejected(self, spec):
        with pytest.raises(SpecParseError):
            parse_maven_spec(spec)


class TestPackagistSpec:
    """vendor/package with : or @ versions."""

    def test_at_version(self):
        assert parse_packagist_spec("monolog/monolog@3.5.0") == ("monolog/monolog", "3.5.0")

    def test_colon_version(self):
        assert parse_packagist_spec("monolog/monolog:3.5.0") == ("monolog/monolog", "3.5.0")

    def test_colon_wins_when_version_contains_at(self):
        assert parse_packagist_spec("laravel/framework:dev-main@abc123") == (
            "laravel/framework", "dev-main@abc123",
        )

    def test_missing_vendor_rejected(self):
        with pytest.raises(SpecParseError):
            parse_packagist_spec("monolog")


class TestFormatSpec:
    """Rendering specifiers that parse back to the same name and version."""

    @pytest.mark.parametrize("registry,name,version", [
        (Registry.NPM, "@types/node", "20.11.0"),
        (Registry.PYPI, "requests", "2.31.0"),
        (Registry.MAVEN, "org.slf4j:slf4j-api", "2.0.12"),
        (Registry.PACKAGIST, "monolog/monolog", "3.5.0"),
    ])
    def test_format_then_parse(self, registry, name, version):
        parsed = parse_for_registry(registry, format_spec(registry, name, version))
        assert (parsed.name, parsed.version) == (name, version)

    def test_prefixed_form(self):
        assert format_spec(Registry.PYPI, "django", "5.0", prefixed=True) == "pypi:django==5.0"


class TestRegistryDetection:
    """Prefix handling in the dispatcher."""

    @pytest.mark.parametrize("raw,registry", [
        ("npm:zod", Registry.NPM),
        ("PIP:requests", Registry.PYPI),
        ("python:requests", Registry.PYPI),
        ("cargo:serde", Registry.CRATES),
        ("mvn:g:a", Registry.MAVEN),
        ("dotnet:Serilog", Registry.NUGET),
        ("composer:monolog/monolog", Registry.PACKAGIST),
    ])
    def test_prefix_aliases(self, raw, registry):
        detected, rest = detect_registry(raw)
        assert detected == registry
        assert rest == raw.split(":", 1)[1]

    def test_unprefixed_defaults_to_npm(self):
        assert detect_registry("zod") == (Registry.NPM, "zod")

    def test_has_registry_prefix(self):
        assert has_registry_prefix("Rust:serde")
        assert not has_registry_prefix("serde")

    def test_prefixed_input_is_package_even_if_repo_shaped(self):
        assert detect_input_type("packagist:monolog/monolog") == "package"

    def test_owner_repo_is_repository(self):
        assert detect_input_type("facebook/react") == "repo"

    def test_scoped_npm_is_package(self):
        assert detect_input_type("@babel/core") == "package"

    def test_parse_package_spec_with_prefix(self):
        spec = parse_package_spec("pypi:requests==2.31.0")
        assert (spec.registry, spec.name, spec.version) == (Registry.PYPI, "requests", "2.31.0")

    def test_prefix_without_name_rejected(self):
        with pytest.raises(SpecParseError):
            parse_package_spec("npm:")
