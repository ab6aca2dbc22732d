"""External command execution for privileged trust operations.

Trust-anchor changes are made by running OS tools (``cp``, ``rm``,
``update-ca-certificates``, ``security``) through an elevation command.
Each call blocks until the process exits. Exit codes are logged but never
raised: a failing trust command must not abort test setup or teardown.
"""
from __future__ import annotations

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from trusted_cert.config import ELEVATION_COMMAND

logger = logging.getLogger(__name__)


class CommandRunner(ABC):
    """Runs an external command and waits for it to finish."""

    @abstractmethod
    def run(self, executable: str, arguments: str = "") -> Optional[int]:
        """Run *executable* with the space-separated *arguments*.

        Returns
        -------
        int | None
            The process exit code, or ``None`` if the process could not be
            started or did not finish.
        """


class SubprocessCommandRunner(CommandRunner):
    """Runs commands through ``subprocess`` behind an elevation command.

    Parameters
    ----------
    elevation:
        Executable prefixed to every command (``/usr/bin/sudo`` by default).
        Pass ``None`` to run commands directly.
    timeout:
        Optional timeout in seconds for each command.
    """

    def __init__(
        self,
        elevation: Optional[str] = ELEVATION_COMMAND,
        timeout: Optional[float] = None,
    ) -> None:
        self._elevation = elevation
        self._timeout = timeout

    def build_argv(self, executable: str, arguments: str = "") -> list[str]:
        """Return the argv list that :meth:`run` would execute."""
        argv = [executable, *shlex.split(arguments)]
        if self._elevation:
            argv.insert(0, self._elevation)
        return argv

    def run(self, executable: str, arguments: str = "") -> Optional[int]:
        argv = self.build_argv(executable, arguments)
        logger.debug("Running %s", shlex.join(argv))

        try:
            completed = subprocess.run(argv, check=False, timeout=self._timeout)
        except subprocess.TimeoutExpired:
            logger.warning(
                "Command %r did not finish within %ss", shlex.join(argv), self._timeout
            )
            return None
        except OSError as exc:
            logger.warning("Command %r could not be started: %s", shlex.join(argv), exc)
            return None

        if completed.returncode != 0:
            logger.warning(
                "Command %r exited with code %d", shlex.join(argv), completed.returncode
            )
        return completed.returncode


@dataclass
class CommandInvocation:
    """A single command recorded by :class:`RecordingCommandRunner`."""

    executable: str
    arguments: str

    def __str__(self) -> str:
        return f"{self.executable} {self.arguments}".strip()


@dataclass
class RecordingCommandRunner(CommandRunner):
    """Records commands instead of executing them.

    Useful for dry runs and for asserting the exact commands issued.

    Parameters
    ----------
    exit_code:
        Exit code reported for every recorded command.
    """

    exit_code: Optional[int] = 0
    invocations: list[CommandInvocation] = field(default_factory=list)

    def run(self, executable: str, arguments: str = "") -> Optional[int]:
        invocation = CommandInvocation(executable=executable, arguments=arguments)
        self.invocations.append(invocation)
        logger.info("Recorded command: %s", invocation)
        return self.exit_code

    def commands(self) -> list[str]:
        """Return every recorded invocation rendered as a command line."""
        return [str(invocation) for invocation in self.invocations]
