"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
import tomlkit


@pytest.fixture
def tmp_pyproject(tmp_path: Path) -> Path:
    """Create a temporary pyproject.toml file."""
    content = """\
[project]
name = "test-package"
version = "1.0.0"
dependencies = [
    "requests>=2.0",
    "internal-dep>=1.0.0",
]

[project.optional-dependencies]
dev = ["pytest>=8.0", "another-internal~=0.5.0"]

[dependency-groups]
test = ["pytest>=8.0", "group-internal==0.1.0"]
"""
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text(content)
    return pyproject


@pytest.fixture
def sample_toml_doc() -> tomlkit.TOMLDocument:
    """Create a sample TOML document."""
    content = """\
[project]
name = "my-package"
version = "2.0.0"
dependencies = ["click>=8.0", "pydantic>=2.0"]

[project.optional-dependencies]
dev = ["pytest>=8.0"]
docs = ["sphinx>=7.0"]

[dependency-groups]
test = ["hypothesis>=6.0"]

[tool.uv.workspace]
members = ["packages/*", "libs/*"]
"""
    return tomlkit.parse(content)


def package_manifest(
    name: str,
    version: str,
    dependencies: list[str] | None = None,
    scripts: dict[str, str] | None = None,
    no_tests: bool = False,
) -> str:
    """Render a member pyproject.toml that follows the default conventions."""
    if scripts is None:
        scripts = {"build": "uv build", "test": "pytest"}
    lines = [
        "[project]",
        f'name = "{name}"',
        f'version = "{version}"',
        "dependencies = [" + ", ".join(f'"{d}"' for d in dependencies or []) + "]",
        "",
        "[tool.workspace-versions]",
    ]
    if no_tests:
        lines.append("no-tests = true")
    lines.append("")
    lines.append("[tool.workspace-versions.scripts]")
    lines.extend(f'{key} = "{command}"' for key, command in scripts.items())
    return "\n".join(lines) + "\n"


WriteWorkspace = Callable[..., Path]


@pytest.fixture
def write_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> WriteWorkspace:
    """Build a uv workspace under tmp_path and chdir into it.

    Call with package directory name → manifest text, plus optional
    changelogs (directory name → CHANGELOG.toml text) and root settings
    (extra TOML appended to the root pyproject.toml).
    """

    def _write(
        packages: dict[str, str],
        changelogs: dict[str, str] | None = None,
        root_settings: str = "",
    ) -> Path:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.uv.workspace]\nmembers = ["packages/*"]\n' + root_settings
        )
        for directory, manifest in packages.items():
            package_dir = tmp_path / "packages" / directory
            package_dir.mkdir(parents=True)
            (package_dir / "pyproject.toml").write_text(manifest)
        for directory, changelog in (changelogs or {}).items():
            (tmp_path / "packages" / directory / "CHANGELOG.toml").write_text(changelog)
        monkeypatch.chdir(tmp_path)
        return tmp_path

    return _write


CORE_CHANGELOG = """\
[[versions]]
version = "3.0.0"
breaking-changes = "removed X"

[[versions]]
version = "2.0.0"
breaking-changes = "renamed Y"

[[versions]]
version = "1.5.0"
breaking-changes = "n/a"

[[versions]]
version = "1.0.0"
"""
