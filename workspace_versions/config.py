"""Workspace conventions.

Read from the optional [tool.workspace-versions] table of the root
pyproject.toml:

    [tool.workspace-versions]
    name-prefix = "acme-"
    required-scripts = ["build", "test"]
    changelog = "CHANGELOG.toml"

Conventions are passed into validation and discovery explicitly, so tests
can check any combination without touching global state.
"""

from __future__ import annotations

from typing import Any

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from tomlkit.items import InlineTable, Table

from .changelog import DEFAULT_CHANGELOG
from .errors import InvalidManifestError

TOOL_TABLE = "workspace-versions"
TEST_SCRIPT = "test"


class Conventions(BaseModel):
    """Rules every workspace package has to follow.

    Attributes:
        name_prefix: Required start of every managed package name. Packages
            without it are not managed at all.
        required_scripts: Script names each package must define.
        changelog: File name of each package's changelog, relative to the
            package directory.
    """

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name_prefix: str = Field(default="", alias="name-prefix")
    required_scripts: list[str] = Field(
        default_factory=lambda: ["build", TEST_SCRIPT], alias="required-scripts"
    )
    changelog: str = DEFAULT_CHANGELOG


def get_tool_table(doc: tomlkit.TOMLDocument) -> dict[str, Any]:
    """Return [tool.workspace-versions] as plain Python values, or {} if absent."""
    table = doc.get("tool", {}).get(TOOL_TABLE)
    if isinstance(table, (Table, InlineTable)):
        return table.unwrap()
    return {}


def load_conventions(
    doc: tomlkit.TOMLDocument, path: str = "pyproject.toml"
) -> Conventions:
    """Build Conventions from the root pyproject.toml document.

    Raises:
        InvalidManifestError: If the table holds unknown keys or bad values.
    """
    try:
        return Conventions.model_validate(get_tool_table(doc))
    except ValidationError as exc:
        raise InvalidManifestError(
            path, f"invalid [tool.{TOOL_TABLE}] settings: {exc}"
        ) from exc
