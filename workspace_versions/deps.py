"""Dependency handling utilities.

Provides functions for parsing PEP 508 dependency strings, locating a
dependency inside a pyproject.toml and rewriting it to a new version.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from typing import Any, cast

import tomlkit
from packaging.requirements import Requirement
from packaging.utils import canonicalize_name

from .models import DependencyType, ExistingDependency
from .toml import save_pyproject
from .versions import extract_version

# Which specifier carries "the" version of a requirement: pins first, then
# lower bounds. Anything else only counts if nothing better is present.
_OPERATOR_RANK = {"==": 0, "===": 1, "~=": 2, ">=": 3, ">": 4}


def dep_canonical_name(dep_str: str) -> str:
    """Extract the canonical package name from a PEP 508 dependency string.

    Examples:
        "requests>=2.0" → "requests"
        "My_Package[extra]~=1.0" → "my-package"
    """
    return canonicalize_name(Requirement(dep_str).name)


def dep_version(dep_str: str) -> str | None:
    """Return the major.minor.patch version a dependency string asks for.

    The version comes from the best specifier (pins, then lower bounds) or,
    for a direct reference without one, from its URL. A bare name such as
    a uv workspace source pins no version and gives None. The marker is
    never read.

    Examples:
        "pkg>=1.4.2" → "1.4.2"
        "pkg>=1.0.0,<2.0.0" → "1.0.0"
        "pkg @ file:///wheels/pkg-2.3.4-py3-none-any.whl" → "2.3.4"
        "pkg" → None

    Raises:
        MalformedVersionError: If the specifier or URL holds no full version.
    """
    req = Requirement(dep_str)
    specs = sorted(
        req.specifier,
        key=lambda s: (_OPERATOR_RANK.get(s.operator, len(_OPERATOR_RANK)), str(s)),
    )
    if specs:
        return extract_version(specs[0].version)
    if req.url:
        return extract_version(req.url)
    return None


def respecify_dep(dep_str: str, version: str) -> str:
    """Point a PEP 508 dependency at a new version.

    Name, extras and marker are preserved. A single pin or lower bound
    keeps its operator; anything else (a range, an upper bound, an
    exclusion, a URL or no specifier at all) becomes ">=version".

    Examples:
        respecify_dep("pkg~=1.4.2", "2.0.0") → "pkg~=2.0.0"
        respecify_dep("pkg<2.0.0", "2.0.0") → "pkg>=2.0.0"
        respecify_dep("pkg[b,a]>=1.0.0,<2.0.0", "2.1.0") → "pkg[a,b]>=2.1.0"
    """
    req = Requirement(dep_str)
    specs = list(req.specifier)
    operator = ">="
    if len(specs) == 1 and specs[0].operator in _OPERATOR_RANK:
        operator = specs[0].operator
    # Sort extras alphabetically for consistent output
    extras = f"[{','.join(sorted(req.extras))}]" if req.extras else ""
    marker = f"; {req.marker}" if req.marker else ""
    return f"{req.name}{extras}{operator}{version}{marker}"


def _dependency_lists(
    doc: tomlkit.TOMLDocument,
) -> Iterator[tuple[DependencyType, str | None, list]]:
    """Yield every dependency list of a pyproject.toml in lookup order."""
    project = doc.get("project", {})
    deps = project.get("dependencies")
    if isinstance(deps, list):
        yield DependencyType.DEPENDENCIES, None, deps
    for group, group_deps in project.get("optional-dependencies", {}).items():
        if isinstance(group_deps, list):
            yield DependencyType.OPTIONAL_DEPENDENCIES, str(group), group_deps
    for group, group_deps in doc.get("dependency-groups", {}).items():
        if isinstance(group_deps, list):
            yield DependencyType.DEPENDENCY_GROUPS, str(group), group_deps


def find_existing_dependency(
    doc: tomlkit.TOMLDocument, name: str
) -> ExistingDependency | None:
    """Find the first declaration of a dependency in a pyproject.toml.

    Looks in [project].dependencies, then each optional-dependencies extra,
    then each dependency group.

    Returns:
        The declaration's location and version, or None if not declared.
    """
    wanted = canonicalize_name(name)
    for dep_type, group, deps in _dependency_lists(doc):
        for dep_str in deps:
            if isinstance(dep_str, str) and dep_canonical_name(dep_str) == wanted:
                return ExistingDependency(
                    version=dep_version(dep_str), type=dep_type, group=group
                )
    return None


def _target_list(
    doc: tomlkit.TOMLDocument, dep_type: DependencyType, group: str | None
) -> list:
    """Return (creating if needed) the dependency list to write into."""
    if dep_type is DependencyType.DEPENDENCY_GROUPS:
        container = doc.setdefault("dependency-groups", tomlkit.table())
    else:
        # Cast needed because tomlkit types are complex unions
        container = cast(dict[str, Any], doc.setdefault("project", tomlkit.table()))
        if dep_type is DependencyType.OPTIONAL_DEPENDENCIES:
            container = container.setdefault("optional-dependencies", tomlkit.table())
    key = dep_type.value if dep_type is DependencyType.DEPENDENCIES else group
    if key is None:
        raise ValueError(f"A group name is required for {dep_type.value}")
    return container.setdefault(key, tomlkit.array())


def _sort_dep_list(deps: list) -> None:
    """Sort requirement strings by canonical name, in place.

    Non-string entries (PEP 735 include-group tables) keep their relative
    order after the requirements.
    """
    requirements = sorted(
        (str(d) for d in deps if isinstance(d, str)), key=dep_canonical_name
    )
    others = [d for d in deps if not isinstance(d, str)]
    for i, value in enumerate([*requirements, *others]):
        deps[i] = value


def update_dependency(
    pyproject_path: Path,
    doc: tomlkit.TOMLDocument,
    dep_type: DependencyType,
    group: str | None,
    name: str,
    version: str,
) -> None:
    """Write a dependency at a new version and save the manifest.

    An existing requirement for name in the target list is respecified;
    otherwise "name>=version" is added. The list is then sorted by name.

    Args:
        pyproject_path: Where to save the document.
        doc: The parsed manifest (modified in place).
        dep_type: Which table the dependency lives in.
        group: Extra or dependency-group name; ignored for dependencies.
        name: The dependency's package name.
        version: New major.minor.patch version.
    """
    deps = _target_list(doc, dep_type, group)
    wanted = canonicalize_name(name)
    for i, dep_str in enumerate(deps):
        if isinstance(dep_str, str) and dep_canonical_name(dep_str) == wanted:
            deps[i] = respecify_dep(str(dep_str), version)
            break
    else:
        deps.append(f"{name}>={version}")

    _sort_dep_list(deps)
    save_pyproject(pyproject_path, doc)
