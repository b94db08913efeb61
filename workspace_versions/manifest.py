"""Manifest validation against the workspace conventions.

Each managed package declares its scripts and options in its own
pyproject.toml:

    [tool.workspace-versions]
    no-tests = true

    [tool.workspace-versions.scripts]
    build = "uv build"
    test = "pytest"
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import TEST_SCRIPT, TOOL_TABLE, Conventions, get_tool_table
from .errors import InvalidManifestError


class PackageOptions(BaseModel):
    """Per-package settings from [tool.workspace-versions].

    Attributes:
        scripts: Script name → shell command run in the package directory.
        no_tests: The package has no test suite; "test" is not required.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    scripts: dict[str, str] = Field(default_factory=dict)
    no_tests: bool = Field(default=False, alias="no-tests", strict=True)


def get_package_options(path: Path, doc: tomlkit.TOMLDocument) -> PackageOptions:
    """Read and check a package's [tool.workspace-versions] table.

    Raises:
        InvalidManifestError: On unknown keys or values of the wrong type.
    """
    try:
        return PackageOptions.model_validate(get_tool_table(doc))
    except ValidationError as exc:
        raise InvalidManifestError(
            str(path), f"invalid [tool.{TOOL_TABLE}] options: {exc}"
        ) from exc


def get_required_scripts(
    options: PackageOptions, conventions: Conventions
) -> list[str]:
    """Scripts this package must define, honouring its no-tests opt-out."""
    if options.no_tests:
        return [s for s in conventions.required_scripts if s != TEST_SCRIPT]
    return list(conventions.required_scripts)


def has_naming_convention(name: str, conventions: Conventions) -> bool:
    return name.startswith(conventions.name_prefix)


def assert_is_string(path: Path, key: str, value: object) -> None:
    """Require [project].<key> to be a non-empty string."""
    if not value or not isinstance(value, str):
        raise InvalidManifestError(
            str(path), f'Expected "{key}" in pyproject.toml to be a valid string.'
        )


def validate_manifest(
    path: Path, doc: tomlkit.TOMLDocument, conventions: Conventions
) -> PackageOptions:
    """Check a package manifest against the conventions.

    Checks, in order: name and version are strings, the name carries the
    configured prefix, the package options are valid, and every required
    script is defined.

    Returns:
        The package's options, for callers that go on to run scripts.

    Raises:
        InvalidManifestError: On the first violated rule.
    """
    project = doc.get("project", {})
    name = project.get("name")
    assert_is_string(path, "name", name)
    assert_is_string(path, "version", project.get("version"))

    if not has_naming_convention(str(name), conventions):
        raise InvalidManifestError(
            str(path),
            f'The package name should start with "{conventions.name_prefix}".',
        )

    options = get_package_options(path, doc)
    for script in get_required_scripts(options, conventions):
        if not options.scripts.get(script):
            raise InvalidManifestError(
                str(path),
                f'Expected script "{script}" to be present in '
                f"[tool.{TOOL_TABLE}.scripts].",
            )
    return options
