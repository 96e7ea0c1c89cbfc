"""Preflight guard: fatal launch preconditions.

This module is the single enforcement point for conditions that must
abort a run before the node is invoked: a missing bootstrap artifact, a
missing node executable, or a missing discovery tool.  Every failure is a
``PreflightError`` carrying the process exit code; callers should not
catch it except to report and exit.

Recoverable conditions (echo service down, NAT negotiation refused) are
not modelled here; they are absorbed where they happen.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from nodeforge.config import LauncherConfig

logger = logging.getLogger(__name__)


class PreflightError(RuntimeError):
    """A launch precondition is not met.  The run must stop."""

    exit_code: int = 1


class MissingArtifactError(PreflightError):
    """The bootstrap artifact does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Missing bootstrap file: {path}")
        self.path = path


class ArtifactReadError(PreflightError):
    """The bootstrap artifact exists but could not be read."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read bootstrap file {path}: {reason}")
        self.path = path


class MissingExecutableError(PreflightError):
    """The node executable does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Missing node executable: {path}")
        self.path = path


class MissingDependencyToolError(PreflightError):
    """An external tool required for discovery is not on PATH."""

    def __init__(self, tool: str, hint: str = "") -> None:
        message = f"Required tool '{tool}' is missing"
        if hint:
            message += f", {hint}"
        super().__init__(message)
        self.tool = tool


# Install hints for tools the launcher may shell out to.
_TOOL_HINTS: dict[str, str] = {
    "dig": "please install dnsutils (bind-tools) to continue",
}


def require_tool(name: str) -> str:
    """Return the resolved path of *name* or raise ``MissingDependencyToolError``."""
    resolved = shutil.which(name)
    if resolved is None:
        error = MissingDependencyToolError(name, _TOOL_HINTS.get(name, ""))
        logger.critical("%s", error)
        raise error
    logger.debug("Found %s at %s", name, resolved)
    return resolved


def required_tools(config: LauncherConfig) -> list[str]:
    """Tools that network modes need before discovery starts."""
    if config.echo_backend == "dns":
        return ["dig"]
    return []


def require_artifact(path: Path) -> Path:
    """Raise ``MissingArtifactError`` unless *path* is an existing file."""
    path = Path(path)
    if not path.is_file():
        error = MissingArtifactError(path)
        logger.critical("%s", error)
        raise error
    return path


def require_executable(path: Path) -> Path:
    """Raise ``MissingExecutableError`` unless *path* is an existing file."""
    path = Path(path)
    if not path.is_file():
        error = MissingExecutableError(path)
        logger.critical("%s", error)
        raise error
    return path
