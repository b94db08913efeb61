"""Exceptions raised by workspace-versions.

Every error derives from WorkspaceVersionsError so the CLI can turn any of
them into a clean exit. The three upgrade failures share UpgradeAbortedError:
callers that loop over many dependents catch that to skip one and move on.
"""

from __future__ import annotations


class WorkspaceVersionsError(Exception):
    """Base class for all workspace-versions errors."""


class MalformedVersionError(WorkspaceVersionsError, ValueError):
    """A string does not contain (or is not) a major.minor.patch version."""


class InvalidManifestError(WorkspaceVersionsError):
    """A pyproject.toml breaks the workspace conventions.

    Attributes:
        path: The offending manifest.
    """

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class UpgradeAbortedError(WorkspaceVersionsError):
    """A major upgrade did not go ahead. Never retried."""


class UnknownPackageError(UpgradeAbortedError):
    """The upgraded package is not part of the workspace."""

    def __init__(self, package_name: str) -> None:
        self.package_name = package_name
        super().__init__(f"No such package: {package_name}")


class ChangelogEntryMissingError(UpgradeAbortedError):
    """The package's changelog has no entry for the version being installed."""

    def __init__(self, package_name: str, version: str) -> None:
        self.package_name = package_name
        self.version = version
        super().__init__(
            f"Unable to find changelog version {version} for {package_name}. "
            "Is the package correctly installed?"
        )


class UpgradeRejectedError(UpgradeAbortedError):
    """The operator declined the upgrade."""

    def __init__(self, package_name: str, version: str) -> None:
        self.package_name = package_name
        self.version = version
        super().__init__(f"Upgrade of {package_name} to {version} cancelled by user.")


class InvalidChangelogError(WorkspaceVersionsError):
    """A changelog file exists but is not a list of [[versions]] tables."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")
