"""Pytest fixtures for n8n workflow manager tests."""

import os
import pytest

from n8n_workflow_mcp.exceptions import ExecutionError
from n8n_workflow_mcp.executor import Executor
from n8n_workflow_mcp.manager import N8nWorkflowManager


class ScriptedExecutor(Executor):
    """Executor returning canned output per command fragment.

    The first rule whose fragment occurs in the command wins. Commands
    without a matching rule succeed with empty output.
    """

    def __init__(self):
        self.commands = []
        self._rules = []

    def on(self, fragment, output="", error=None):
        self._rules.append((fragment, output, error))
        return self

    def ran(self, fragment):
        return any(fragment in command for command in self.commands)

    async def run(self, command):
        self.commands.append(command)
        for fragment, output, error in self._rules:
            if fragment in command:
                if error is not None:
                    raise ExecutionError(command, error)
                return output
        return ""


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings before each test."""
    from n8n_workflow_mcp.config import reload_settings
    os.environ.setdefault("MCP_LOG_LEVEL", "DEBUG")
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def executor():
    """Scripted executor recording every command."""
    return ScriptedExecutor()


@pytest.fixture
def manager(executor, tmp_path):
    """Manager bound to a test container with no restart delay."""
    return N8nWorkflowManager(
        "n8n-test",
        executor,
        backup_dir=str(tmp_path / "backups"),
        restart_wait_seconds=0,
    )
