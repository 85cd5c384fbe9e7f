"""Pydantic schemas for operation inputs and results."""

from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field, model_validator


# -----------------------------------------------------------------------------
# Inputs
# -----------------------------------------------------------------------------

class ListWorkflowsInput(BaseModel):
    """Input schema for list_workflows (no parameters)."""


class UpdateWorkflowInput(BaseModel):
    """Input schema for update_workflow."""

    workflow_id: str = Field(
        alias="workflowId",
        min_length=1,
        description="ID of the workflow to update"
    )
    update_data: Optional[Dict[str, Any]] = Field(
        default=None,
        alias="updateData",
        description="Full workflow JSON document to import"
    )
    file_path: Optional[str] = Field(
        default=None,
        alias="filePath",
        description="Path to a local workflow JSON file to import instead of updateData"
    )
    activate: bool = Field(
        default=False,
        description="Activate the workflow after importing it"
    )
    restart: bool = Field(
        default=False,
        description="Restart the n8n container after importing"
    )

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def check_payload(self) -> "UpdateWorkflowInput":
        """Require exactly one of updateData or filePath."""
        if (self.update_data is None) == (self.file_path is None):
            raise ValueError("Provide exactly one of updateData or filePath")
        return self


class RestartContainerInput(BaseModel):
    """Input schema for restart_container (no parameters)."""


class BackupWorkflowsInput(BaseModel):
    """Input schema for backup_workflows (no parameters)."""


class TroubleshootInput(BaseModel):
    """Input schema for troubleshoot."""

    workflow_id: str = Field(
        alias="workflowId",
        min_length=1,
        description="ID of the workflow to troubleshoot"
    )

    model_config = {"populate_by_name": True}


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

class WorkflowSummary(BaseModel):
    """One row of the n8n workflow listing."""

    identifier: str = Field(description="Workflow ID")
    name: str = Field(default="", description="Workflow name")
    active: bool = Field(default=False, description="Whether the workflow is active")


class UpdateWorkflowResult(BaseModel):
    """Result payload of update_workflow."""

    message: str
    workflow_id: str
    backup_path: str = Field(description="Path of the pre-update export inside the container")
    activated: bool = False
    restarted: bool = False


class RestartResult(BaseModel):
    """Result payload of restart_container."""

    message: str


class BackupResult(BaseModel):
    """Result payload of backup_workflows."""

    file: str = Field(description="Backup file name")
    path: str = Field(description="Local path of the backup file")


class DiagnosticCheck(BaseModel):
    """One troubleshooting check."""

    check: str
    result: str
    status: Literal["ok", "not_found", "failed"] = "ok"


class OperationResult(BaseModel):
    """Normalized result of any operation."""

    success: bool
    payload: Any = None
