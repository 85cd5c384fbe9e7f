"""n8n Workflow Manager - MCP tools for an n8n instance running in Docker.

Tools:
    list_workflows      List workflows in the container
    update_workflow     Import a new version of a workflow
    restart_container   Restart the n8n container
    backup_workflows    Export all workflows to a local file
    troubleshoot        Container status, workflow status and recent logs

Usage:
    n8n-workflow-mcp
"""

__version__ = "1.0.0"

from .config import Settings, get_settings
from .dispatcher import OPERATIONS, OperationDispatcher
from .exceptions import (
    ExecutionError,
    N8nManagerError,
    NotFoundError,
    StepFailedError,
    UnknownOperationError,
)
from .executor import CommandExecutor, Executor
from .manager import N8nWorkflowManager, parse_workflow_listing

__all__ = [
    "Settings",
    "get_settings",
    "OPERATIONS",
    "OperationDispatcher",
    "ExecutionError",
    "N8nManagerError",
    "NotFoundError",
    "StepFailedError",
    "UnknownOperationError",
    "CommandExecutor",
    "Executor",
    "N8nWorkflowManager",
    "parse_workflow_listing",
]
