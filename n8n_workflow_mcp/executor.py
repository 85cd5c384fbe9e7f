"""Command executor for docker / n8n command lines."""

import asyncio
import subprocess
from abc import ABC, abstractmethod
from typing import Optional

from .exceptions import ExecutionError
from .logging_config import get_logger

logger = get_logger(__name__)


class Executor(ABC):
    """Abstract base class for command executors."""

    @abstractmethod
    async def run(self, command: str) -> str:
        """Execute a command.

        Args:
            command: Command line to execute

        Returns:
            Captured standard output

        Raises:
            ExecutionError: If the command fails or cannot be started
        """
        pass


class CommandExecutor(Executor):
    """Executes command lines on the local machine through the shell."""

    def __init__(self, timeout: Optional[float] = None):
        """Initialize the executor.

        Args:
            timeout: Command timeout in seconds (None waits for completion)
        """
        self.timeout = timeout

    async def run(self, command: str) -> str:
        logger.debug("Running command", extra={"command": command})

        try:
            process = await asyncio.create_subprocess_shell(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise ExecutionError(command, str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=self.timeout
            )
        except asyncio.TimeoutError:
            process.kill()
            await process.communicate()
            raise ExecutionError(command, f"timed out after {self.timeout} seconds")

        stdout_str = stdout.decode("utf-8", errors="replace")
        stderr_str = stderr.decode("utf-8", errors="replace")

        if process.returncode != 0:
            message = (
                stderr_str.strip()
                or stdout_str.strip()
                or f"exited with code {process.returncode}"
            )
            raise ExecutionError(command, message)

        # n8n prints deprecation warnings on every invocation
        if stderr_str.strip() and "WARNING" not in stderr_str:
            logger.warning(
                "Command wrote to stderr",
                extra={"command": command, "detail": stderr_str.strip()}
            )

        return stdout_str
