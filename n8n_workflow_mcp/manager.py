"""n8n workflow management on top of the docker and n8n CLIs.

The container is the source of truth: nothing is cached here, every call
shells out and parses what comes back.
"""

import asyncio
import json
import os
import posixpath
import re
import tempfile
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .commands import N8nCommands
from .config import Settings, get_settings
from .exceptions import ExecutionError, NotFoundError
from .executor import CommandExecutor, Executor
from .logging_config import get_logger
from .schemas import (
    BackupResult,
    DiagnosticCheck,
    RestartResult,
    UpdateWorkflowResult,
    WorkflowSummary,
)
from .steps import Step, StepOutcome, run_steps

logger = get_logger(__name__)

_COLUMN_GAP = re.compile(r"\s{2,}")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")

CONTAINER_STATUS_CHECK = "Container Status"
WORKFLOW_STATUS_CHECK = "Workflow Status"
RECENT_LOGS_CHECK = "Recent Logs"


def _split_columns(line: str) -> List[str]:
    if "|" in line:
        return [column.strip() for column in line.split("|")]
    return _COLUMN_GAP.split(line)


def parse_workflow_listing(text: str) -> List[WorkflowSummary]:
    """Parse `n8n list:workflow` output into workflow summaries.

    Columns are separated by `|` (current n8n releases) or by runs of two or
    more spaces. Only a third column reading "Active" marks a workflow
    active.

    Args:
        text: Raw command output

    Returns:
        Summaries in listing order
    """
    workflows = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        columns = _split_columns(line)
        workflows.append(WorkflowSummary(
            identifier=columns[0],
            name=columns[1] if len(columns) > 1 else "",
            active=len(columns) > 2 and columns[2].lower() == "active",
        ))
    return workflows


class BackupNamer:
    """Generates backup file names that never repeat within a process.

    Names embed a UTC timestamp. When the clock has not moved past the
    previous timestamp, the previous one is reused with a sequence suffix.
    """

    def __init__(
        self,
        prefix: str = "n8n-backup",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.prefix = prefix
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._last_stamp: Optional[str] = None
        self._sequence = 0

    def next_stamp(self) -> str:
        """Return a timestamp token this namer has not returned before."""
        stamp = self._clock().strftime("%Y-%m-%dT%H-%M-%S-%fZ")

        if self._last_stamp is not None and stamp <= self._last_stamp:
            self._sequence += 1
            return f"{self._last_stamp}-{self._sequence}"

        self._last_stamp = stamp
        self._sequence = 0
        return stamp

    def next_name(self) -> str:
        return f"{self.prefix}-{self.next_stamp()}.json"


class N8nWorkflowManager:
    """Runs workflow operations against a single n8n container."""

    def __init__(
        self,
        container_name: str,
        executor: Optional[Executor] = None,
        *,
        docker_path: str = "docker",
        container_tmp_dir: str = "/tmp",
        backup_dir: str = ".",
        restart_wait_seconds: float = 10,
        log_tail_lines: int = 20,
        backup_namer: Optional[BackupNamer] = None,
    ):
        self.container_name = container_name
        self.executor = executor or CommandExecutor()
        self.commands = N8nCommands(container_name, docker_path=docker_path)
        self.container_tmp_dir = container_tmp_dir
        self.backup_dir = backup_dir
        self.restart_wait_seconds = restart_wait_seconds
        self.log_tail_lines = log_tail_lines
        self.backup_namer = backup_namer or BackupNamer()
        self._scratch_namer = BackupNamer()

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        executor: Optional[Executor] = None,
    ) -> "N8nWorkflowManager":
        """Build a manager from configuration."""
        settings = settings or get_settings()
        return cls(
            settings.n8n_container_name,
            executor or CommandExecutor(timeout=settings.command_timeout),
            docker_path=settings.docker_path,
            container_tmp_dir=settings.container_tmp_dir,
            backup_dir=settings.backup_dir,
            restart_wait_seconds=settings.restart_wait_seconds,
            log_tail_lines=settings.log_tail_lines,
        )

    # -------------------------------------------------------------------------
    # list_workflows
    # -------------------------------------------------------------------------

    async def list_workflows(self) -> List[WorkflowSummary]:
        output = await self.executor.run(self.commands.list_workflows())
        return parse_workflow_listing(output)

    # -------------------------------------------------------------------------
    # update_workflow
    # -------------------------------------------------------------------------

    async def update_workflow(
        self,
        workflow_id: str,
        update_data: Optional[Dict[str, Any]] = None,
        file_path: Optional[str] = None,
        activate: bool = False,
        restart: bool = False,
    ) -> UpdateWorkflowResult:
        """Import a new version of a workflow.

        The current version is exported inside the container first so it
        can be restored by hand. Steps stop at the first failure.

        Args:
            workflow_id: Workflow to update
            update_data: Workflow JSON document to import
            file_path: Local workflow JSON file to import instead
            activate: Activate the workflow after the import
            restart: Restart the container after the import

        Raises:
            StepFailedError: Naming the step that failed
        """
        if (update_data is None) == (file_path is None):
            raise ValueError("Provide exactly one of update_data or file_path")

        safe_id = _UNSAFE_FILENAME_CHARS.sub("_", workflow_id)
        stamp = self._scratch_namer.next_stamp()
        backup_path = posixpath.join(
            self.container_tmp_dir,
            f"workflow-{safe_id}-backup-{stamp}.json",
        )
        container_input = posixpath.join(
            self.container_tmp_dir,
            f"workflow-update-{stamp}.json",
        )
        local_files: List[str] = []
        state = {"path": file_path, "copied": False}

        async def export_current() -> None:
            await self.executor.run(self.commands.export_workflow(workflow_id, backup_path))

        async def materialize() -> None:
            payload = dict(update_data)
            # Without an id n8n imports a new workflow instead of overwriting
            payload.setdefault("id", workflow_id)
            fd, path = tempfile.mkstemp(prefix="workflow-update-", suffix=".json")
            local_files.append(path)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(payload, fh)
            state["path"] = path

        async def copy_in() -> None:
            await self.executor.run(
                self.commands.copy_to_container(state["path"], container_input)
            )
            state["copied"] = True

        async def import_workflow() -> None:
            await self.executor.run(self.commands.import_workflow(container_input))

        async def activate_workflow() -> None:
            await self.executor.run(self.commands.activate_workflow(workflow_id))

        steps = [Step("backup", export_current)]
        if update_data is not None:
            steps.append(Step("materialize", materialize))
        steps.append(Step("copy", copy_in))
        steps.append(Step("import", import_workflow))
        if activate:
            steps.append(Step("activate", activate_workflow))
        if restart:
            steps.append(Step("restart", self._restart_and_wait))

        try:
            await run_steps(steps)
        finally:
            if state["copied"]:
                await self._remove_scratch(container_input)
            for path in local_files:
                try:
                    os.remove(path)
                except OSError as e:
                    logger.warning(
                        "Failed to remove temporary file",
                        extra={"path": path, "error": str(e)}
                    )

        return UpdateWorkflowResult(
            message="Workflow updated successfully",
            workflow_id=workflow_id,
            backup_path=backup_path,
            activated=activate,
            restarted=restart,
        )

    # -------------------------------------------------------------------------
    # restart_container
    # -------------------------------------------------------------------------

    async def restart_container(self) -> RestartResult:
        """Restart the container and wait a fixed delay.

        There is no readiness probe: success means the restart command
        returned and the delay elapsed.
        """
        await self._restart_and_wait()
        return RestartResult(message="Container restarted successfully")

    async def _restart_and_wait(self) -> None:
        await self.executor.run(self.commands.restart())
        await asyncio.sleep(self.restart_wait_seconds)

    # -------------------------------------------------------------------------
    # backup_workflows
    # -------------------------------------------------------------------------

    async def backup_workflows(self) -> BackupResult:
        """Export all workflows and copy the export out of the container."""
        backup_file = self.backup_namer.next_name()
        container_path = posixpath.join(self.container_tmp_dir, backup_file)
        local_path = os.path.join(self.backup_dir, backup_file)

        os.makedirs(self.backup_dir, exist_ok=True)
        await self.executor.run(self.commands.export_all_workflows(container_path))
        await self.executor.run(self.commands.copy_from_container(container_path, local_path))
        await self._remove_scratch(container_path)

        return BackupResult(file=backup_file, path=local_path)

    async def _remove_scratch(self, container_path: str) -> None:
        """Delete a scratch file inside the container, logging failures."""
        try:
            await self.executor.run(self.commands.remove_in_container(container_path))
        except ExecutionError as e:
            logger.warning(
                "Failed to remove scratch file in container",
                extra={"path": container_path, "error": str(e)}
            )

    # -------------------------------------------------------------------------
    # troubleshoot
    # -------------------------------------------------------------------------

    async def troubleshoot(self, workflow_id: str) -> List[DiagnosticCheck]:
        """Collect container status, workflow status and recent logs.

        Every check runs even if an earlier one failed; failures show up
        as checks with status "failed", a missing workflow as "not_found".
        """
        async def container_status() -> str:
            status = await self.executor.run(self.commands.status())
            return status.strip() or "Container not running"

        async def workflow_status() -> str:
            output = await self.executor.run(self.commands.list_workflows())
            matches = [
                line.strip() for line in output.splitlines()
                if line.strip() and _split_columns(line.strip())[0] == workflow_id
            ]
            if not matches:
                raise NotFoundError(workflow_id)
            return "\n".join(matches)

        async def recent_logs() -> str:
            logs = await self.executor.run(self.commands.logs(self.log_tail_lines))
            return logs.rstrip()

        outcomes = await run_steps([
            Step(CONTAINER_STATUS_CHECK, container_status, recoverable=True),
            Step(WORKFLOW_STATUS_CHECK, workflow_status, recoverable=True),
            Step(RECENT_LOGS_CHECK, recent_logs, recoverable=True),
        ])
        return [self._to_check(outcome) for outcome in outcomes]

    @staticmethod
    def _to_check(outcome: StepOutcome) -> DiagnosticCheck:
        if outcome.ok:
            return DiagnosticCheck(check=outcome.name, result=outcome.value)
        if isinstance(outcome.error, NotFoundError):
            return DiagnosticCheck(
                check=outcome.name,
                result="Workflow not found",
                status="not_found",
            )
        return DiagnosticCheck(
            check=outcome.name,
            result=f"Check failed: {outcome.error}",
            status="failed",
        )
