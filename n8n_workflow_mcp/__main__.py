"""Allow running the server with `python -m n8n_workflow_mcp`."""

from .mcp_server import main

if __name__ == "__main__":
    main()
