"""Error types raised by the n8n workflow manager."""


class N8nManagerError(Exception):
    """Base class for all workflow manager errors."""
    pass


class ExecutionError(N8nManagerError):
    """Raised when an external command fails or cannot be started."""

    def __init__(self, command: str, message: str):
        self.command = command
        self.message = message
        super().__init__(f"Command failed: {command}: {message}")


class NotFoundError(N8nManagerError):
    """Raised when a workflow id is absent from the n8n listing."""

    def __init__(self, workflow_id: str):
        self.workflow_id = workflow_id
        super().__init__(f"Workflow not found: {workflow_id}")


class UnknownOperationError(N8nManagerError):
    """Raised when a request names an operation outside the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class StepFailedError(N8nManagerError):
    """Raised when a fatal step of a multi-step operation fails."""

    def __init__(self, step: str, cause: Exception):
        self.step = step
        self.cause = cause
        super().__init__(f"step '{step}' failed: {cause}")
