"""Tests for workspace_versions.deps."""

from __future__ import annotations

from pathlib import Path

import pytest
import tomlkit

from workspace_versions.deps import (
    dep_canonical_name,
    dep_version,
    find_existing_dependency,
    respecify_dep,
    update_dependency,
)
from workspace_versions.errors import MalformedVersionError
from workspace_versions.models import DependencyType, ExistingDependency
from workspace_versions.toml import get_all_dependency_strings, load_pyproject


class TestDepCanonicalName:
    def test_simple_name(self) -> None:
        assert dep_canonical_name("requests") == "requests"

    def test_with_version_bound(self) -> None:
        assert dep_canonical_name("requests>=2.0,<3.0") == "requests"

    def test_with_extras(self) -> None:
        assert dep_canonical_name("requests[security]>=2.0") == "requests"

    def test_normalizes_underscores_and_case(self) -> None:
        assert dep_canonical_name("My_Package>=1.0") == "my-package"


class TestDepVersion:
    def test_lower_bound(self) -> None:
        assert dep_version("pkg>=1.4.2") == "1.4.2"

    def test_pin(self) -> None:
        assert dep_version("pkg==2.0.0") == "2.0.0"

    def test_compatible_release(self) -> None:
        assert dep_version("pkg~=1.4.2") == "1.4.2"

    def test_range_uses_lower_bound(self) -> None:
        assert dep_version("pkg<2.0.0,>=1.0.0") == "1.0.0"

    def test_ignores_marker(self) -> None:
        assert dep_version('pkg>=1.2.3; python_version >= "3.10"') == "1.2.3"

    def test_short_version_raises(self) -> None:
        with pytest.raises(MalformedVersionError):
            dep_version("pkg>=1.0")

    def test_bare_name_has_no_version(self) -> None:
        assert dep_version("pkg") is None

    def test_marker_version_is_not_the_dependency_version(self) -> None:
        assert dep_version('pkg; python_full_version >= "3.10.1"') is None

    def test_specifier_wins_over_marker(self) -> None:
        dep = 'pkg==2.0.0; python_full_version >= "3.10.1"'
        assert dep_version(dep) == "2.0.0"

    def test_version_from_url(self) -> None:
        dep = "pkg @ file:///wheels/pkg-2.3.4-py3-none-any.whl"
        assert dep_version(dep) == "2.3.4"

    def test_url_without_version_raises(self) -> None:
        with pytest.raises(MalformedVersionError):
            dep_version("pkg @ https://example.com/pkg.tar.gz")


class TestRespecifyDep:
    def test_keeps_single_operator(self) -> None:
        assert respecify_dep("pkg~=1.4.2", "2.0.0") == "pkg~=2.0.0"

    def test_keeps_pin(self) -> None:
        assert respecify_dep("pkg==1.0.0", "1.1.0") == "pkg==1.1.0"

    def test_keeps_strict_lower_bound(self) -> None:
        assert respecify_dep("pkg>1.0.0", "2.0.0") == "pkg>2.0.0"

    def test_upper_bound_becomes_lower_bound(self) -> None:
        assert respecify_dep("pkg<2.0.0", "2.0.0") == "pkg>=2.0.0"

    def test_inclusive_upper_bound_becomes_lower_bound(self) -> None:
        assert respecify_dep("pkg<=1.9.0", "2.0.0") == "pkg>=2.0.0"

    def test_exclusion_becomes_lower_bound(self) -> None:
        assert respecify_dep("pkg!=1.0.0", "2.0.0") == "pkg>=2.0.0"

    def test_range_becomes_lower_bound(self) -> None:
        assert respecify_dep("pkg>=1.0.0,<2.0.0", "2.1.0") == "pkg>=2.1.0"

    def test_no_specifier_becomes_lower_bound(self) -> None:
        assert respecify_dep("pkg", "1.0.0") == "pkg>=1.0.0"

    def test_preserves_extras_sorted(self) -> None:
        assert respecify_dep("pkg[z,a]>=1.0.0", "3.0.0") == "pkg[a,z]>=3.0.0"

    def test_preserves_marker(self) -> None:
        result = respecify_dep('pkg>=1.0.0; python_version >= "3.10"', "2.0.0")
        assert result == 'pkg>=2.0.0; python_version >= "3.10"'


class TestFindExistingDependency:
    def test_in_dependencies(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        assert find_existing_dependency(doc, "internal-dep") == ExistingDependency(
            version="1.0.0", type=DependencyType.DEPENDENCIES
        )

    def test_in_optional_dependencies(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        existing = find_existing_dependency(doc, "another_internal")
        assert existing == ExistingDependency(
            version="0.5.0", type=DependencyType.OPTIONAL_DEPENDENCIES, group="dev"
        )

    def test_in_dependency_groups(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        existing = find_existing_dependency(doc, "group-internal")
        assert existing == ExistingDependency(
            version="0.1.0", type=DependencyType.DEPENDENCY_GROUPS, group="test"
        )

    def test_not_declared(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        assert find_existing_dependency(doc, "missing") is None

    def test_dependencies_win_over_groups(self) -> None:
        doc = tomlkit.parse(
            '[project]\ndependencies = ["pkg>=1.0.0"]\n'
            '[dependency-groups]\ndev = ["pkg>=2.0.0"]\n'
        )
        existing = find_existing_dependency(doc, "pkg")
        assert existing is not None
        assert existing.version == "1.0.0"

    def test_skips_include_group_tables(self) -> None:
        doc = tomlkit.parse(
            "[dependency-groups]\n"
            'dev = [{include-group = "test"}, "pkg>=1.2.3"]\n'
            'test = ["pytest>=8.0"]\n'
        )
        existing = find_existing_dependency(doc, "pkg")
        assert existing is not None
        assert existing.version == "1.2.3"

    def test_unversioned_declaration(self) -> None:
        doc = tomlkit.parse('[project]\ndependencies = ["pkg"]\n')
        assert find_existing_dependency(doc, "pkg") == ExistingDependency(
            version=None, type=DependencyType.DEPENDENCIES
        )


class TestUpdateDependency:
    def test_rewrites_dependency(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject,
            doc,
            DependencyType.DEPENDENCIES,
            None,
            "internal-dep",
            "2.0.0",
        )
        content = tmp_pyproject.read_text()
        assert "internal-dep>=2.0.0" in content
        assert "internal-dep>=1.0.0" not in content

    def test_rewrites_optional_dependency(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject,
            doc,
            DependencyType.OPTIONAL_DEPENDENCIES,
            "dev",
            "another-internal",
            "1.0.0",
        )
        assert "another-internal~=1.0.0" in tmp_pyproject.read_text()

    def test_rewrites_dependency_group(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject,
            doc,
            DependencyType.DEPENDENCY_GROUPS,
            "test",
            "group-internal",
            "0.2.0",
        )
        assert "group-internal==0.2.0" in tmp_pyproject.read_text()

    def test_adds_missing_dependency_sorted(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject, doc, DependencyType.DEPENDENCIES, None, "httpx", "0.27.0"
        )
        reloaded = load_pyproject(tmp_pyproject)
        assert list(reloaded["project"]["dependencies"]) == [
            "httpx>=0.27.0",
            "internal-dep>=1.0.0",
            "requests>=2.0",
        ]

    def test_creates_missing_group(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject,
            doc,
            DependencyType.DEPENDENCY_GROUPS,
            "lint",
            "ruff",
            "0.5.0",
        )
        reloaded = load_pyproject(tmp_pyproject)
        assert list(reloaded["dependency-groups"]["lint"]) == ["ruff>=0.5.0"]

    def test_group_required_for_groups(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        with pytest.raises(ValueError, match="group name"):
            update_dependency(
                tmp_pyproject,
                doc,
                DependencyType.OPTIONAL_DEPENDENCIES,
                None,
                "pkg",
                "1.0.0",
            )

    def test_preserves_external_deps(self, tmp_pyproject: Path) -> None:
        doc = load_pyproject(tmp_pyproject)
        update_dependency(
            tmp_pyproject,
            doc,
            DependencyType.DEPENDENCIES,
            None,
            "internal-dep",
            "1.5.0",
        )
        reloaded = load_pyproject(tmp_pyproject)
        deps = get_all_dependency_strings(reloaded)
        assert "requests>=2.0" in deps
        assert "pytest>=8.0" in deps
