"""Workspace pipeline: discover → validate → run scripts → upgrade dependencies.

This module drives workspace-versions over a whole uv workspace:
1. Discover the member packages and validate their manifests
2. Run a configured script (build, test, ...) in every package
3. Move a dependency to a new version in every package that declares it,
   asking the operator first whenever that crosses a major version
4. Align a dependency on the largest version any package asks for

Dependents are handled one after another so that confirmation prompts
never interleave.
"""

from __future__ import annotations

import glob
import shlex
from collections.abc import Mapping
from functools import partial
from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name

from .changelog import load_changelog
from .config import TEST_SCRIPT, Conventions, load_conventions
from .deps import dep_canonical_name, find_existing_dependency, update_dependency
from .errors import UnknownPackageError, UpgradeAbortedError
from .graph import topo_sort
from .manifest import (
    assert_is_string,
    get_package_options,
    has_naming_convention,
    validate_manifest,
)
from .models import (
    DependencyReference,
    ExistingDependency,
    PackageInfo,
    PackageVersion,
)
from .shell import ask as ask_operator
from .shell import fatal, run, step
from .shell import report as report_to_operator
from .toml import (
    get_all_dependency_strings,
    get_project_name,
    get_project_version,
    get_workspace_member_globs,
    load_pyproject,
)
from .upgrade import Ask, Report, confirm_major_upgrade
from .versions import parse_version, select_largest


def load_workspace_conventions() -> Conventions:
    """Read the conventions from the root pyproject.toml."""
    path = Path.cwd() / "pyproject.toml"
    return load_conventions(load_pyproject(path), str(path))


def discover_packages(conventions: Conventions | None = None) -> dict[str, PackageInfo]:
    """Scan the workspace and discover all managed packages.

    Reads [tool.uv.workspace].members from root pyproject.toml to find
    package directories. Every member must have a string name; members
    whose name lacks the configured prefix are not managed and are
    skipped, all others are validated in full.

    Returns:
        Map of canonical package name to PackageInfo.

    Raises:
        InvalidManifestError: If a managed package breaks the conventions.
    """
    step("Discovering workspace packages")

    root = Path.cwd()
    root_manifest = root / "pyproject.toml"
    root_doc = load_pyproject(root_manifest)
    if conventions is None:
        conventions = load_conventions(root_doc, str(root_manifest))
    member_globs = get_workspace_member_globs(root_doc, str(root_manifest))

    # Expand globs to find all package directories
    member_dirs: list[Path] = []
    for pattern in member_globs:
        for match in sorted(glob.glob(str(root / pattern))):
            p = Path(match)
            if (p / "pyproject.toml").exists():
                member_dirs.append(p)

    if not member_dirs:
        fatal("No packages found matching workspace members")

    # First pass: validate and collect basic info from each package
    packages: dict[str, PackageInfo] = {}
    raw_deps: dict[str, list[str]] = {}

    for d in member_dirs:
        manifest = d / "pyproject.toml"
        doc = load_pyproject(manifest)
        raw_name = doc.get("project", {}).get("name")
        assert_is_string(manifest, "name", raw_name)
        if not has_naming_convention(str(raw_name), conventions):
            print(f"  {raw_name}: not managed, skipping")
            continue
        validate_manifest(manifest, doc, conventions)

        name = get_project_name(doc)
        packages[name] = PackageInfo(
            path=str(d.relative_to(root)),
            version=get_project_version(doc),
        )
        raw_deps[name] = get_all_dependency_strings(doc)

    # Second pass: identify which deps are internal (within workspace)
    workspace_names = set(packages.keys())
    for name, deps in raw_deps.items():
        seen: set[str] = set()
        for dep_str in deps:
            dep_name = dep_canonical_name(dep_str)
            if dep_name in workspace_names and dep_name not in seen:
                packages[name].deps.append(dep_name)
                seen.add(dep_name)

    for name, info in packages.items():
        deps = f" → [{', '.join(info.deps)}]" if info.deps else ""
        print(f"  {name} {info.version} ({info.path}){deps}")

    return packages


def check_manifests() -> dict[str, PackageInfo]:
    """Validate every managed manifest, reporting what was checked."""
    packages = discover_packages()
    print(f"\n  {len(packages)} packages follow the workspace conventions")
    return packages


def _manifest_path(info: PackageInfo) -> Path:
    return Path(info.path) / "pyproject.toml"


def run_script(packages: Mapping[str, PackageInfo], script: str) -> None:
    """Run a package script in every package, dependencies first.

    The command comes from the package's [tool.workspace-versions.scripts]
    table and runs inside the package directory. Packages that opted out
    of tests are skipped for the test script. A missing script or a
    failing command halts the run.
    """
    order = topo_sort(packages)
    step(f"Running {script} in {len(order)} packages")

    for name in order:
        info = packages[name]
        manifest = _manifest_path(info)
        options = get_package_options(manifest, load_pyproject(manifest))
        command = options.scripts.get(script)
        if not command:
            if script == TEST_SCRIPT and options.no_tests:
                print(f"\n  {name}: no tests, skipping")
                continue
            fatal(f'{name} has no "{script}" script')

        print(f"\n  {name} ({info.path}): {command}")
        result = run(*shlex.split(command), cwd=info.path, check=False)
        if result.returncode != 0:
            fatal(f"{script} failed for {name}")


def _find_declarations(
    packages: Mapping[str, PackageInfo], name: str
) -> list[tuple[str, tomlkit.TOMLDocument, ExistingDependency]]:
    """Every other package that declares name, with its parsed manifest."""
    declared = []
    for pkg_name in sorted(packages):
        if pkg_name == canonicalize_name(name):
            continue
        doc = load_pyproject(_manifest_path(packages[pkg_name]))
        existing = find_existing_dependency(doc, name)
        if existing is not None:
            declared.append((pkg_name, doc, existing))
    return declared


def upgrade_dependency(
    packages: Mapping[str, PackageInfo],
    name: str,
    new_version: str | None = None,
    *,
    keep_going: bool = False,
    conventions: Conventions | None = None,
    ask: Ask = ask_operator,
    report: Report = report_to_operator,
) -> list[DependencyReference]:
    """Move every dependent of name to new_version.

    Major upgrades need the operator's confirmation (see
    confirm_major_upgrade); a dependent's manifest is only rewritten once
    the upgrade is allowed.

    Args:
        packages: Workspace packages by name.
        name: The dependency to upgrade.
        new_version: Target version. Defaults to the workspace package's
            own version.
        keep_going: Skip dependents whose upgrade is aborted instead of
            stopping at the first one.
        conventions: Workspace conventions; only the changelog file name is
            used here.
        ask: Yes/no prompt for major upgrades.
        report: Where breaking changes are shown.

    Returns:
        The dependency changes that were written.

    Raises:
        UnknownPackageError: No new_version given and name is not a
            workspace package.
        UpgradeAbortedError: An upgrade was aborted and keep_going is False.
    """
    conventions = conventions or Conventions()
    canonical = canonicalize_name(name)
    if new_version is None:
        if canonical not in packages:
            raise UnknownPackageError(name)
        new_version = packages[canonical].version
    parse_version(new_version)

    step(f"Upgrading {canonical} to {new_version}")
    load_entries = partial(load_changelog, filename=conventions.changelog)
    applied: list[DependencyReference] = []

    for pkg_name, doc, existing in _find_declarations(packages, canonical):
        if existing.version == new_version:
            print(f"  {pkg_name}: already at {new_version}")
            continue

        try:
            confirm_major_upgrade(
                packages,
                canonical,
                new_version,
                existing.version,
                ask=ask,
                report=report,
                load_entries=load_entries,
            )
        except UpgradeAbortedError as exc:
            if not keep_going:
                raise
            print(f"  {pkg_name}: skipped ({exc})")
            continue

        update_dependency(
            _manifest_path(packages[pkg_name]),
            doc,
            existing.type,
            existing.group,
            canonical,
            new_version,
        )
        applied.append(
            DependencyReference(
                package_name=canonical,
                existing_version=existing.version,
                new_version=new_version,
            )
        )
        previous = existing.version or "unversioned"
        print(f"  {pkg_name}: {canonical} {previous} → {new_version}")

    return applied


def align_dependency(
    packages: Mapping[str, PackageInfo],
    name: str,
    *,
    keep_going: bool = False,
    conventions: Conventions | None = None,
    ask: Ask = ask_operator,
    report: Report = report_to_operator,
) -> list[DependencyReference]:
    """Bring every dependent of name up to the largest version in use.

    Candidates are the versions dependents ask for plus, for a workspace
    package, its own version. Unversioned declarations are not candidates.
    Nothing happens if no package declares name or none names a version.
    """
    canonical = canonicalize_name(name)
    declarations = _find_declarations(packages, canonical)
    if not declarations:
        print(f"  No package depends on {canonical}")
        return []
    candidates = [
        PackageVersion(name=pkg_name, version=existing.version)
        for pkg_name, _, existing in declarations
        if existing.version is not None
    ]
    if canonical in packages:
        candidates.insert(
            0, PackageVersion(name=canonical, version=packages[canonical].version)
        )

    largest = select_largest(candidates)
    if largest is None:
        print(f"  No dependent of {canonical} names a version")
        return []
    print(f"  Largest version of {canonical}: {largest.version} ({largest.name})")
    return upgrade_dependency(
        packages,
        canonical,
        largest.version,
        keep_going=keep_going,
        conventions=conventions,
        ask=ask,
        report=report,
    )
