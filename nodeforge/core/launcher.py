"""Process launcher: invokes the node executable once, synchronously."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Callable
from pathlib import Path
from typing import Any

from nodeforge.core.preflight import require_executable
from nodeforge.models.launch import LaunchParameters

logger = logging.getLogger(__name__)


class ProcessLauncher:
    """Runs the node with LaunchParameters and waits for it to exit.

    Nothing happens after the child exits: no restart, no supervision.

    Parameters
    ----------
    executable:
        Path to the node binary.  Checked immediately before invocation.
    runner:
        ``subprocess.run``-compatible callable.  Defaults to ``subprocess.run``.
    """

    def __init__(
        self,
        executable: Path,
        *,
        runner: Callable[..., Any] | None = None,
    ) -> None:
        self.executable = Path(executable)
        self._runner = runner or subprocess.run

    def command(self, params: LaunchParameters) -> list[str]:
        """Full argv for *params*."""
        return [str(self.executable), *params.to_argv()]

    def launch(self, params: LaunchParameters) -> int:
        """Run the node and return its exit code.

        Raises
        ------
        MissingExecutableError
            If the executable does not exist at launch time.
        """
        require_executable(self.executable)
        argv = self.command(params)
        logger.info("Starting node: %s", " ".join(argv))
        completed = self._runner(argv, check=False)
        logger.info("Node exited with status %d", completed.returncode)
        return completed.returncode
