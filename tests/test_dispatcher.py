"""Tests for the operation dispatcher."""

import pytest
from unittest.mock import AsyncMock, patch

from n8n_workflow_mcp.dispatcher import OPERATIONS, OperationDefinition, OperationDispatcher
from n8n_workflow_mcp.exceptions import UnknownOperationError
from n8n_workflow_mcp.schemas import ListWorkflowsInput


OPERATION_NAMES = [
    "list_workflows",
    "update_workflow",
    "restart_container",
    "backup_workflows",
    "troubleshoot",
]


@pytest.fixture
def dispatcher(manager):
    return OperationDispatcher(manager)


class TestCatalog:
    """Tests for the operation catalog."""

    def test_catalog_names(self, dispatcher):
        assert [op.name for op in dispatcher.list_operations()] == OPERATION_NAMES

    def test_duplicate_registration_rejected(self, manager):
        with pytest.raises(ValueError, match="already registered"):
            OperationDispatcher(manager, operations=[OPERATIONS[0], OPERATIONS[0]])

    def test_input_schema_uses_wire_names(self, dispatcher):
        schema = dispatcher.get("update_workflow").input_json_schema()

        assert "workflowId" in schema["properties"]
        assert "updateData" in schema["properties"]
        assert "filePath" in schema["properties"]
        assert schema["required"] == ["workflowId"]

    def test_parameterless_schema_is_object(self, dispatcher):
        schema = dispatcher.get("list_workflows").input_json_schema()

        assert schema["type"] == "object"
        assert schema["properties"] == {}


class TestRouting:
    """Tests that each name reaches exactly one manager method."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name, method, arguments", [
        ("list_workflows", "list_workflows", {}),
        ("update_workflow", "update_workflow", {"workflowId": "id1", "updateData": {}}),
        ("restart_container", "restart_container", {}),
        ("backup_workflows", "backup_workflows", {}),
        ("troubleshoot", "troubleshoot", {"workflowId": "id1"}),
    ])
    async def test_routes_to_single_handler(self, dispatcher, manager, name, method, arguments):
        mocks = {}
        for other in OPERATION_NAMES:
            mocks[other] = AsyncMock(return_value=[])

        with patch.multiple(manager, **mocks):
            envelope = await dispatcher.dispatch(name, arguments)

        assert envelope == {"result": {"success": True, "payload": []}}
        for other, mock in mocks.items():
            if other == method:
                mock.assert_awaited_once()
            else:
                mock.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_operation_runs_nothing(self, dispatcher, executor):
        envelope = await dispatcher.dispatch("delete_everything", {})

        assert envelope == {"error": "Unknown tool: delete_everything"}
        assert executor.commands == []

    @pytest.mark.asyncio
    async def test_execute_raises_unknown_operation(self, dispatcher):
        with pytest.raises(UnknownOperationError):
            await dispatcher.execute("nope")


class TestResponses:
    """Tests for response envelopes."""

    @pytest.mark.asyncio
    async def test_list_result(self, dispatcher, executor):
        executor.on("list:workflow", "id1  WorkflowA  Active\nid2  WorkflowB  Inactive")

        envelope = await dispatcher.dispatch("list_workflows", {})

        assert envelope == {"result": {"success": True, "payload": [
            {"identifier": "id1", "name": "WorkflowA", "active": True},
            {"identifier": "id2", "name": "WorkflowB", "active": False},
        ]}}

    @pytest.mark.asyncio
    async def test_execution_error_prefixed_with_action(self, dispatcher, executor):
        executor.on("list:workflow", error="No such container: n8n-test")

        envelope = await dispatcher.dispatch("list_workflows", {})

        assert envelope["error"].startswith("Failed to list workflows: Command failed:")
        assert "No such container: n8n-test" in envelope["error"]

    @pytest.mark.asyncio
    async def test_update_error_names_import_step(self, dispatcher, executor):
        executor.on("import:workflow", error="invalid workflow")

        envelope = await dispatcher.dispatch(
            "update_workflow",
            {"workflowId": "id1", "updateData": {"nodes": []}, "activate": True, "restart": True},
        )

        assert envelope["error"].startswith("Failed to update workflow: step 'import' failed")
        assert "invalid workflow" in envelope["error"]
        assert not executor.ran("update:workflow")
        assert not executor.ran("docker restart")

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, dispatcher, executor):
        envelope = await dispatcher.dispatch("troubleshoot", {})

        assert envelope["error"].startswith("Invalid arguments for troubleshoot")
        assert executor.commands == []

    @pytest.mark.asyncio
    async def test_update_without_payload_rejected(self, dispatcher, executor):
        envelope = await dispatcher.dispatch("update_workflow", {"workflowId": "id1"})

        assert "updateData or filePath" in envelope["error"]
        assert executor.commands == []

    @pytest.mark.asyncio
    async def test_troubleshoot_not_found_still_succeeds(self, dispatcher, executor):
        executor.on("docker ps", "Up 2 minutes")
        executor.on("list:workflow", "id1  WorkflowA  Active")
        executor.on("docker logs", "started")

        envelope = await dispatcher.dispatch("troubleshoot", {"workflowId": "ghost"})

        payload = envelope["result"]["payload"]
        assert envelope["result"]["success"] is True
        assert payload[1] == {
            "check": "Workflow Status",
            "result": "Workflow not found",
            "status": "not_found",
        }
        assert payload[0]["check"] == "Container Status"
        assert payload[2]["check"] == "Recent Logs"

    @pytest.mark.asyncio
    async def test_backup_result(self, dispatcher):
        envelope = await dispatcher.dispatch("backup_workflows", {})

        assert envelope["result"]["payload"]["file"].startswith("n8n-backup-")

    @pytest.mark.asyncio
    async def test_unexpected_exception_becomes_error(self, manager):
        async def explode(manager, params):
            raise RuntimeError("kaboom")

        dispatcher = OperationDispatcher(manager, operations=[OperationDefinition(
            name="list_workflows",
            description="",
            input_schema=ListWorkflowsInput,
            handler=explode,
            failure_prefix="Failed to list workflows",
        )])

        envelope = await dispatcher.dispatch("list_workflows", {})

        assert envelope == {"error": "Failed to list workflows: kaboom"}

    @pytest.mark.asyncio
    async def test_dispatcher_survives_failures(self, dispatcher, executor):
        """Test a failed call does not prevent the next one."""
        executor.on("docker restart", error="boom")
        executor.on("list:workflow", "id1  A  Active")

        first = await dispatcher.dispatch("restart_container", {})
        second = await dispatcher.dispatch("list_workflows", {})

        assert "error" in first
        assert second["result"]["success"] is True
