"""Operation catalog and request dispatch.

Maps the five tool names to their input schema and manager call, and turns
every outcome into a response envelope: {"result": ...} or {"error": ...}.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .exceptions import N8nManagerError, UnknownOperationError
from .logging_config import OperationLogger, get_logger
from .manager import N8nWorkflowManager
from .schemas import (
    BackupWorkflowsInput,
    ListWorkflowsInput,
    OperationResult,
    RestartContainerInput,
    TroubleshootInput,
    UpdateWorkflowInput,
)

logger = get_logger(__name__)

Handler = Callable[[N8nWorkflowManager, Any], Awaitable[Any]]


@dataclass
class OperationDefinition:
    """Definition of one operation.

    Attributes:
        name: Tool name exposed to MCP clients
        description: Human-readable description
        input_schema: Pydantic model validating the arguments
        handler: Coroutine taking the manager and validated input
        failure_prefix: Prefix naming the action in error messages
    """
    name: str
    description: str
    input_schema: Type[BaseModel]
    handler: Handler
    failure_prefix: str

    def input_json_schema(self) -> Dict[str, Any]:
        """JSON schema of the arguments, using the wire (camelCase) names."""
        schema = self.input_schema.model_json_schema(by_alias=True)
        schema.setdefault("properties", {})
        return schema


async def _list_workflows(manager: N8nWorkflowManager, params: ListWorkflowsInput):
    return await manager.list_workflows()


async def _update_workflow(manager: N8nWorkflowManager, params: UpdateWorkflowInput):
    return await manager.update_workflow(
        params.workflow_id,
        update_data=params.update_data,
        file_path=params.file_path,
        activate=params.activate,
        restart=params.restart,
    )


async def _restart_container(manager: N8nWorkflowManager, params: RestartContainerInput):
    return await manager.restart_container()


async def _backup_workflows(manager: N8nWorkflowManager, params: BackupWorkflowsInput):
    return await manager.backup_workflows()


async def _troubleshoot(manager: N8nWorkflowManager, params: TroubleshootInput):
    return await manager.troubleshoot(params.workflow_id)


OPERATIONS: List[OperationDefinition] = [
    OperationDefinition(
        name="list_workflows",
        description="List all n8n workflows in the container",
        input_schema=ListWorkflowsInput,
        handler=_list_workflows,
        failure_prefix="Failed to list workflows",
    ),
    OperationDefinition(
        name="update_workflow",
        description=(
            "Update a workflow with new configuration. The current version is "
            "exported inside the container before the import."
        ),
        input_schema=UpdateWorkflowInput,
        handler=_update_workflow,
        failure_prefix="Failed to update workflow",
    ),
    OperationDefinition(
        name="restart_container",
        description="Restart the n8n Docker container",
        input_schema=RestartContainerInput,
        handler=_restart_container,
        failure_prefix="Failed to restart container",
    ),
    OperationDefinition(
        name="backup_workflows",
        description="Create a backup of all workflows",
        input_schema=BackupWorkflowsInput,
        handler=_backup_workflows,
        failure_prefix="Failed to create backup",
    ),
    OperationDefinition(
        name="troubleshoot",
        description="Troubleshoot a workflow by checking its status and logs",
        input_schema=TroubleshootInput,
        handler=_troubleshoot,
        failure_prefix="Failed to troubleshoot",
    ),
]


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


class OperationDispatcher:
    """Routes named requests to the workflow manager."""

    def __init__(
        self,
        manager: N8nWorkflowManager,
        operations: Optional[List[OperationDefinition]] = None,
    ):
        self.manager = manager
        self._operations: Dict[str, OperationDefinition] = {}
        for definition in operations if operations is not None else OPERATIONS:
            if definition.name in self._operations:
                raise ValueError(f"Operation '{definition.name}' is already registered")
            self._operations[definition.name] = definition

    def get(self, name: str) -> Optional[OperationDefinition]:
        return self._operations.get(name)

    def list_operations(self) -> List[OperationDefinition]:
        return list(self._operations.values())

    async def execute(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> OperationResult:
        """Run an operation and return its normalized result.

        Raises:
            UnknownOperationError: If the name is not in the catalog
            ValidationError: If the arguments do not match the input schema
            N8nManagerError: If an external command or step fails
        """
        definition = self.get(name)
        if definition is None:
            raise UnknownOperationError(name)

        params = definition.input_schema.model_validate(arguments or {})
        payload = await definition.handler(self.manager, params)
        return OperationResult(success=True, payload=_to_jsonable(payload))

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Run an operation and always return a response envelope.

        Args:
            name: Operation name
            arguments: Raw arguments from the client

        Returns:
            {"result": {...}} on success, {"error": "..."} on failure
        """
        invocation_logger = OperationLogger(logger)
        invocation_logger.start(name, container=self.manager.container_name)

        try:
            result = await self.execute(name, arguments)
        except UnknownOperationError as e:
            invocation_logger.failure(str(e))
            return {"error": str(e)}
        except ValidationError as e:
            message = f"Invalid arguments for {name}: {e}"
            invocation_logger.failure(message)
            return {"error": message}
        except (N8nManagerError, ValueError) as e:
            message = f"{self._operations[name].failure_prefix}: {e}"
            invocation_logger.failure(message, step=getattr(e, "step", None))
            return {"error": message}
        except Exception as e:
            logger.error(f"Operation raised unexpectedly: {name}", exc_info=True)
            message = f"{self._operations[name].failure_prefix}: {e}"
            invocation_logger.failure(message)
            return {"error": message}

        invocation_logger.success()
        return {"result": result.model_dump(mode="json")}
