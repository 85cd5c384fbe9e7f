"""Docker / n8n command line builders.

Every value interpolated into a command line is shell-quoted; the commands
themselves are opaque to this package.
"""

import shlex


class N8nCommands:
    """Builds the command lines used against one n8n container."""

    def __init__(self, container_name: str, docker_path: str = "docker"):
        self.container_name = container_name
        self.docker_path = docker_path

    def _docker(self, *args: str) -> str:
        return " ".join([shlex.quote(self.docker_path), *args])

    def _n8n(self, *args: str) -> str:
        """Run the n8n CLI inside the container."""
        return self._docker("exec", shlex.quote(self.container_name), "n8n", *args)

    # n8n CLI

    def list_workflows(self) -> str:
        return self._n8n("list:workflow")

    def export_workflow(self, workflow_id: str, output_path: str) -> str:
        return self._n8n(
            "export:workflow",
            shlex.quote(f"--id={workflow_id}"),
            shlex.quote(f"--output={output_path}"),
        )

    def export_all_workflows(self, output_path: str) -> str:
        return self._n8n(
            "export:workflow",
            "--all",
            shlex.quote(f"--output={output_path}"),
        )

    def import_workflow(self, input_path: str) -> str:
        return self._n8n("import:workflow", shlex.quote(f"--input={input_path}"))

    def activate_workflow(self, workflow_id: str) -> str:
        return self._n8n(
            "update:workflow",
            shlex.quote(f"--id={workflow_id}"),
            "--active=true",
        )

    def remove_in_container(self, container_path: str) -> str:
        return self._docker(
            "exec",
            shlex.quote(self.container_name),
            "rm",
            "-f",
            shlex.quote(container_path),
        )

    # Docker CLI

    def copy_to_container(self, local_path: str, container_path: str) -> str:
        return self._docker(
            "cp",
            shlex.quote(local_path),
            shlex.quote(f"{self.container_name}:{container_path}"),
        )

    def copy_from_container(self, container_path: str, local_path: str) -> str:
        return self._docker(
            "cp",
            shlex.quote(f"{self.container_name}:{container_path}"),
            shlex.quote(local_path),
        )

    def restart(self) -> str:
        return self._docker("restart", shlex.quote(self.container_name))

    def status(self) -> str:
        return self._docker(
            "ps",
            "--filter",
            shlex.quote(f"name={self.container_name}"),
            "--format",
            shlex.quote("{{.Status}}"),
        )

    def logs(self, tail: int) -> str:
        # docker logs replays the container's stderr on stderr
        return self._docker(
            "logs",
            "--tail",
            str(int(tail)),
            shlex.quote(self.container_name),
            "2>&1",
        )
