"""
Payee tools for the MCP server.
"""
import logging
from typing import Optional

from ledger_mcp.ledger import LedgerClient, LedgerError

logger = logging.getLogger(__name__)


async def list_payees(ledger: LedgerClient) -> list[dict]:
    """
    List all payees.

    Returns:
        List of payee dictionaries with id, name, default category and transfer account.
        Transfer payees stand for one of the user's own accounts.
    """
    payees = await ledger.get_payees()
    return [
        {
            "id": p.id,
            "name": p.name,
            "category_id": p.category,
            "transfer_account_id": p.transfer_acct,
        }
        for p in payees
    ]


async def create_payee(ledger: LedgerClient, name: str, category_id: Optional[str] = None) -> dict:
    if not name or not name.strip():
        return {"success": False, "error": "Payee name is required"}

    payee = {"name": name.strip()}
    if category_id:
        payee["category"] = category_id

    try:
        payee_id = await ledger.create_payee(payee)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[PAYEES] Created payee {payee_id}")
    return {"success": True, "payee_id": payee_id}


async def update_payee(
    ledger: LedgerClient,
    payee_id: str,
    name: Optional[str] = None,
    category_id: Optional[str] = None
) -> dict:
    fields = {k: v for k, v in {"name": name, "category": category_id}.items() if v is not None}
    if not fields:
        return {"success": False, "error": "No fields to update"}

    try:
        await ledger.update_payee(payee_id, fields)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "payee_id": payee_id, "updated_fields": sorted(fields)}


async def delete_payee(ledger: LedgerClient, payee_id: str) -> dict:
    try:
        await ledger.delete_payee(payee_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[PAYEES] Deleted payee {payee_id}")
    return {"success": True, "payee_id": payee_id}
