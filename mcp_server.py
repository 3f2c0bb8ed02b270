"""
Entry point for the Ledger MCP Server.

Usage:
    stdio mode (for Claude Desktop):
        python mcp_server.py

    HTTP mode (for web deployment):
        uvicorn mcp_server:app --port 8001

    Using FastMCP CLI:
        fastmcp run mcp_server.py
"""
import logging

from ledger_mcp.config import settings
from ledger_mcp.mcp.server import mcp

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# HTTP app for uvicorn deployment
app = mcp.http_app()

if __name__ == "__main__":
    # Run in stdio mode for Claude Desktop
    mcp.run()
