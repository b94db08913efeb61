"""Major-upgrade confirmation.

Moving a dependency across a major version may break its dependents, so
before such an upgrade is written the operator gets to read the breaking
changes recorded in the dependency's own changelog and has to say yes.

The flow for one upgrade:

    is it a major upgrade? ── no ──→ NOT_MAJOR (carry on, nothing shown)
            │ yes
    find the package and its changelog entry for the new version
            │ (UnknownPackageError / ChangelogEntryMissingError)
    show the breaking changes, ask the operator
            │
    CONFIRMED, or UpgradeRejectedError

Nothing here writes to a manifest. The caller applies the new version
only after confirm_major_upgrade() returns.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from enum import Enum
from pathlib import Path

from .changelog import load_changelog
from .errors import (
    ChangelogEntryMissingError,
    UnknownPackageError,
    UpgradeRejectedError,
)
from .models import ChangelogEntry, PackageInfo
from .shell import ask as ask_operator
from .shell import report as report_to_operator
from .versions import parse_version

CONFIRM_QUESTION = "Do you want to continue?"

Ask = Callable[[str], bool]
Report = Callable[[str], None]
LoadEntries = Callable[[Path], list[ChangelogEntry]]


class Confirmation(str, Enum):
    """The operator's answer to an upgrade prompt."""

    CONFIRMED = "confirmed"
    REJECTED = "rejected"


class UpgradeOutcome(str, Enum):
    """How an upgrade that is allowed to go ahead got there."""

    NOT_MAJOR = "not-major"
    CONFIRMED = "confirmed"


def is_major_upgrade(new_version: str, existing_version: str | None = None) -> bool:
    """True if new_version raises the major version of existing_version.

    A dependency with no existing version is being added, not upgraded, and
    never counts as a major upgrade.
    """
    if not existing_version:
        return False
    return parse_version(new_version).major > parse_version(existing_version).major


def find_changelog_entry(
    entries: Iterable[ChangelogEntry], version: str
) -> ChangelogEntry | None:
    """Return the entry whose version string is exactly version."""
    return next((e for e in entries if e.version == version), None)


def get_relevant_entries(
    entries: Iterable[ChangelogEntry], new_version: str, existing_version: str
) -> list[ChangelogEntry]:
    """Entries released after the existing major, up to and including the new one.

    The range is by major only: with 1.4.0 installed, a 1.9.0 entry is not
    relevant, while every 2.x.y and 3.x.y entry is when upgrading to 3.0.0.
    Input order is kept.
    """
    new_major = parse_version(new_version).major
    existing_major = parse_version(existing_version).major
    return [
        e
        for e in entries
        if existing_major < parse_version(e.version).major <= new_major
    ]


def build_summary(
    package_name: str,
    new_version: str,
    existing_version: str,
    entries: Iterable[ChangelogEntry],
) -> str:
    """Render the breaking changes between two versions for the operator.

    Relevant entries without breaking-change notes produce no line.
    """
    relevant = get_relevant_entries(entries, new_version, existing_version)
    breaking_changes = "\n".join(
        f"{e.version} - {e.breaking_changes}" for e in relevant if e.breaking_changes
    )
    return f"{package_name} - {new_version}\n\nBreaking changes:\n{breaking_changes}"


def request_confirmation(summary: str, ask: Ask, report: Report) -> Confirmation:
    """Show the summary and wait for the operator's yes or no."""
    report(summary)
    if ask(CONFIRM_QUESTION):
        return Confirmation.CONFIRMED
    return Confirmation.REJECTED


def confirm_major_upgrade(
    packages: Mapping[str, PackageInfo],
    package_name: str,
    new_version: str,
    existing_version: str | None,
    *,
    ask: Ask = ask_operator,
    report: Report = report_to_operator,
    load_entries: LoadEntries = load_changelog,
) -> UpgradeOutcome:
    """Decide whether upgrading package_name to new_version may go ahead.

    Args:
        packages: Workspace packages by name; package_name must be one of
            them when the upgrade is major.
        package_name: The dependency being upgraded.
        new_version: Version about to be written.
        existing_version: Version currently required, or None if the
            dependency is new.
        ask: Yes/no prompt. Blocks until answered.
        report: Where the breaking-change summary is shown.
        load_entries: Reads the changelog of a package directory. Defaults
            to reading CHANGELOG.toml.

    Returns:
        NOT_MAJOR if no confirmation was needed, CONFIRMED if the operator
        agreed.

    Raises:
        UnknownPackageError: The package is not in packages.
        ChangelogEntryMissingError: Its changelog has no new_version entry.
            Raised before anything is shown.
        UpgradeRejectedError: The operator said no.
    """
    if existing_version is None or not is_major_upgrade(new_version, existing_version):
        return UpgradeOutcome.NOT_MAJOR

    info = packages.get(package_name)
    if info is None:
        raise UnknownPackageError(package_name)

    entries = load_entries(Path(info.path))
    if find_changelog_entry(entries, new_version) is None:
        raise ChangelogEntryMissingError(package_name, new_version)

    summary = build_summary(package_name, new_version, existing_version, entries)
    if request_confirmation(summary, ask, report) is Confirmation.REJECTED:
        raise UpgradeRejectedError(package_name, new_version)
    return UpgradeOutcome.CONFIRMED
