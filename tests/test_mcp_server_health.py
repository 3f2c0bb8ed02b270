"""
Smoke tests for the MCP HTTP app and the registered tool surface.
"""
import asyncio
import json
import os
import sys
from datetime import date

from fastmcp import Client
from starlette.testclient import TestClient

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ledger_mcp.mcp.dependencies import set_ledger  # noqa: E402
from mcp_server import app, mcp  # noqa: E402
from tests.fake_ledger import sample_ledger  # noqa: E402

EXPECTED_TOOLS = {
    "get_accounts", "create_account", "update_account", "close_account", "reopen_account", "delete_account",
    "get_transactions", "create_transaction", "update_transaction", "delete_transaction",
    "get_categories", "get_grouped_categories",
    "create_category", "update_category", "delete_category",
    "create_category_group", "update_category_group", "delete_category_group",
    "get_payees", "create_payee", "update_payee", "delete_payee",
    "get_rules", "create_rule", "update_rule", "delete_rule",
    "spending_by_category", "monthly_summary", "balance_history",
}


def test_health_endpoint_is_public() -> None:
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "mcp"}
    print("✓ MCP health endpoint is public")


def test_mcp_transport_route_exists() -> None:
    paths = [getattr(route, "path", "") for route in app.routes]
    assert any("mcp" in path for path in paths)
    print("✓ MCP transport route is mounted")


def test_all_tools_registered() -> None:
    async def list_tool_names() -> set[str]:
        async with Client(mcp) as client:
            return {tool.name for tool in await client.list_tools()}

    assert EXPECTED_TOOLS <= asyncio.run(list_tool_names())
    print("✓ All ledger tools are registered")



def test_account_transactions_resource() -> None:
    ledger = sample_ledger()
    ledger.transactions[0].date = date.today().isoformat()
    set_ledger(ledger)

    async def read() -> tuple[set[str], dict]:
        async with Client(mcp) as client:
            templates = {t.uriTemplate for t in await client.list_resource_templates()}
            contents = await client.read_resource("ledger://accounts/acc-checking/transactions")
            return templates, json.loads(contents[0].text)

    try:
        templates, body = asyncio.run(read())
    finally:
        set_ledger(None)

    assert "ledger://accounts/{account_id}/transactions" in templates
    assert [t["id"] for t in body["transactions"]] == ["t1"]
    assert body["transactions"][0]["category_name"] == "Salary"
    print("✓ Account transactions resource serves the default window")


if __name__ == "__main__":
    test_health_endpoint_is_public()
    test_mcp_transport_route_exists()
    test_all_tools_registered()
    test_account_transactions_resource()
    print("All MCP health tests passed.")
