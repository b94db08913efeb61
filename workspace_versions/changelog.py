"""Changelog loading.

Each workspace package keeps its release notes next to its pyproject.toml,
newest first by convention (the order is kept as written, never relied on):

    [[versions]]
    version = "2.0.0"
    breaking-changes = "Renamed Client.fetch to Client.get."

    [[versions]]
    version = "1.3.0"
"""

from __future__ import annotations

from pathlib import Path

import tomlkit
from pydantic import TypeAdapter, ValidationError
from tomlkit.exceptions import TOMLKitError

from .errors import InvalidChangelogError
from .models import ChangelogEntry

DEFAULT_CHANGELOG = "CHANGELOG.toml"

_entries = TypeAdapter(list[ChangelogEntry])


def load_changelog(
    directory: str | Path, filename: str = DEFAULT_CHANGELOG
) -> list[ChangelogEntry]:
    """Read the changelog of the package in directory.

    Returns:
        Entries in file order; an empty list if the package has no changelog.

    Raises:
        InvalidChangelogError: If the file cannot be parsed or an entry has
            no version.
    """
    path = Path(directory) / filename
    if not path.exists():
        return []

    try:
        doc = tomlkit.parse(path.read_text())
    except TOMLKitError as exc:
        raise InvalidChangelogError(str(path), str(exc)) from exc

    try:
        return _entries.validate_python(doc.unwrap().get("versions", []))
    except ValidationError as exc:
        raise InvalidChangelogError(str(path), str(exc)) from exc
