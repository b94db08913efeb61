"""Shell and terminal utilities.

Wraps subprocess for running package scripts, and provides the output
helpers and the yes/no prompt used when an operator has to sign off on
an upgrade.
"""

from __future__ import annotations

import subprocess
import sys

import click


def run(
    *args: str, cwd: str | None = None, check: bool = True
) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary shell command.

    Output is not captured - it streams directly to the terminal so users
    can see build and test progress.

    Args:
        *args: Command and arguments (e.g., "uv", "build").
        cwd: Directory to run the command in; defaults to the current one.
        check: If True (default), raise on non-zero exit.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    return subprocess.run(args, cwd=cwd, check=check)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str) -> None:
    """Print an error message and exit with code 1.

    Use for unrecoverable errors that should halt the whole run.
    """
    print(f"ERROR: {msg}", file=sys.stderr)
    sys.exit(1)


def report(text: str) -> None:
    """Show text to the operator."""
    click.echo(text)


def ask(question: str) -> bool:
    """Block until the operator answers a yes/no question. Defaults to no."""
    return click.confirm(question, default=False)
