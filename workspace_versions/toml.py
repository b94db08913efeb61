"""Reading and writing workspace manifests.

tomlkit keeps formatting and comments intact, so a manifest rewritten by an
upgrade only differs from the original in the lines that changed.
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from packaging.utils import canonicalize_name

from .errors import InvalidManifestError


def load_pyproject(path: Path) -> tomlkit.TOMLDocument:
    """Parse a pyproject.toml into a document that round-trips on save."""
    return tomlkit.parse(path.read_text())


def save_pyproject(path: Path, doc: tomlkit.TOMLDocument) -> None:
    path.write_text(tomlkit.dumps(doc))


def get_project_name(doc: tomlkit.TOMLDocument) -> str:
    """Return [project].name normalized per PEP 503 ("Acme_Core" → "acme-core").

    The manifest must already have passed validate_manifest().
    """
    return canonicalize_name(str(doc["project"]["name"]))


def get_project_version(doc: tomlkit.TOMLDocument) -> str:
    """Return [project].version of a validated manifest as a plain string."""
    return str(doc["project"]["version"])


def get_all_dependency_strings(doc: tomlkit.TOMLDocument) -> list[str]:
    """Collect all dependency strings from a pyproject.toml.

    Gathers dependencies from three locations:
    - [project].dependencies (main runtime deps)
    - [project].optional-dependencies.* (extras like [dev], [test])
    - [dependency-groups].* (PEP 735 dependency groups)

    Returns raw PEP 508 strings like "requests>=2.0" or "pkg[extra]~=1.0".
    """
    project = doc.get("project", {})
    deps: list[str] = [str(d) for d in project.get("dependencies", [])]
    for group_deps in project.get("optional-dependencies", {}).values():
        deps.extend(str(d) for d in group_deps)
    for group_deps in doc.get("dependency-groups", {}).values():
        # PEP 735 groups may also hold {include-group = "..."} tables
        deps.extend(str(d) for d in group_deps if isinstance(d, str))
    return deps


def get_workspace_member_globs(
    doc: tomlkit.TOMLDocument, path: str = "pyproject.toml"
) -> list[str]:
    """Return the [tool.uv.workspace].members patterns, e.g. "packages/*".

    Raises:
        InvalidManifestError: If the root manifest names no members.
    """
    members = doc.get("tool", {}).get("uv", {}).get("workspace", {}).get("members")
    if not members:
        raise InvalidManifestError(
            path, "No [tool.uv.workspace] members defined in root pyproject.toml"
        )
    return [str(m) for m in members]
