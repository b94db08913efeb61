"""Version parsing, comparison and selection.

Only plain major.minor.patch versions are understood. There are two ways
in: extract_version() pulls the first version out of any text (a
dependency specifier, a file name), parse_version() insists the whole
string is a version. Both raise MalformedVersionError rather than guess.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

import semver

from .errors import MalformedVersionError
from .models import PackageVersion

_VERSION = re.compile(r"([0-9]+)\.([0-9]+)\.([0-9]+)")


def extract_version(text: str) -> str:
    """Return the first version embedded in text as "major.minor.patch".

    Examples:
        "^1.4.2" → "1.4.2"
        "pkg-2.3.4.tgz" → "2.3.4"
    """
    match = _VERSION.search(text)
    if not match:
        raise MalformedVersionError(
            f'The string "{text}" does not contain a semantic-version.'
        )
    major, minor, patch = match.groups()
    return f"{major}.{minor}.{patch}"


def parse_version(text: str) -> semver.Version:
    """Parse a string that is exactly "major.minor.patch".

    Surrounding characters, missing or extra components and prerelease
    suffixes are all rejected.
    """
    match = _VERSION.fullmatch(text)
    if not match:
        raise MalformedVersionError(
            f'The string "{text}" is not a valid semantic-version.'
        )
    major, minor, patch = (int(part) for part in match.groups())
    return semver.Version(major, minor, patch)


def serialize_version(version: semver.Version) -> str:
    """Render a version without zero padding, e.g. "1.2.3"."""
    return f"{version.major}.{version.minor}.{version.patch}"


def compare_versions(a: semver.Version, b: semver.Version) -> int:
    """Three-way compare on (major, minor, patch): negative, zero or positive."""
    if a.major != b.major:
        return a.major - b.major
    if a.minor != b.minor:
        return a.minor - b.minor
    return a.patch - b.patch


def select_largest(versions: Iterable[PackageVersion]) -> PackageVersion | None:
    """Return the entry with the highest version, or None if there are none.

    On a tie the earliest entry wins; a later equal version never
    replaces it.
    """
    largest: PackageVersion | None = None
    largest_parsed: semver.Version | None = None
    for candidate in versions:
        parsed = parse_version(candidate.version)
        if largest_parsed is None or compare_versions(largest_parsed, parsed) < 0:
            largest = candidate
            largest_parsed = parsed
    return largest
