"""Data models for workspace-versions.

These Pydantic models carry package, dependency and changelog data between
the manifest readers, the upgrade workflow and the pipeline.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DependencyType(str, Enum):
    """Where in a pyproject.toml a dependency is declared, in lookup order."""

    DEPENDENCIES = "dependencies"
    OPTIONAL_DEPENDENCIES = "optional-dependencies"
    DEPENDENCY_GROUPS = "dependency-groups"


class PackageInfo(BaseModel):
    """Metadata for a single package in the monorepo workspace.

    Attributes:
        path: Relative path from workspace root to the package directory.
        version: Current version string from pyproject.toml.
        deps: List of internal (workspace) dependency names. External deps
              are not tracked here; only workspace packages have changelogs
              the upgrade workflow can read.
    """

    path: str
    version: str
    deps: list[str] = Field(default_factory=list)


class PackageVersion(BaseModel):
    """A version string together with the package (or release) it labels."""

    name: str
    version: str


class ChangelogEntry(BaseModel):
    """One released version and its breaking-change notes, if any."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    breaking_changes: str | None = Field(default=None, alias="breaking-changes")


class DependencyReference(BaseModel):
    """A dependency moving from one version to another.

    Attributes:
        package_name: The dependency being changed.
        existing_version: Version currently required, or None when the
            dependency is being added for the first time.
        new_version: Version being written.
    """

    package_name: str
    existing_version: str | None = None
    new_version: str


class ExistingDependency(BaseModel):
    """Where a dependency was found in a manifest and at which version.

    Attributes:
        version: Version extracted from the requirement's specifier or URL;
            None for a bare name (e.g. a uv workspace source).
        type: The table the requirement lives in.
        group: Extra or dependency-group name; None for [project].dependencies.
    """

    version: str | None = None
    type: DependencyType
    group: str | None = None
