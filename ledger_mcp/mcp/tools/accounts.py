"""
Account tools for the MCP server.
"""
import logging
from typing import Optional

from ledger_mcp.ledger import LedgerClient, LedgerError
from ledger_mcp.models import Account
from ledger_mcp.services.data_fetcher import LedgerDataFetcher

logger = logging.getLogger(__name__)


def _account_dict(account: Account) -> dict:
    return {
        "id": account.id,
        "name": account.name,
        "type": account.type or "Account",
        "balance": account.balance,
        "closed": account.closed,
        "offbudget": account.offbudget,
    }


async def list_accounts(ledger: LedgerClient, include_closed: bool = True) -> list[dict]:
    """
    List all accounts with their current balance.

    Args:
        ledger: Ledger client
        include_closed: Whether to include closed accounts (default: True)

    Returns:
        List of account dictionaries with id, name, type, balance (cents), closed and offbudget flags
    """
    accounts = await LedgerDataFetcher(ledger).fetch_accounts_with_balances()
    if not include_closed:
        accounts = [a for a in accounts if not a.closed]
    return [_account_dict(a) for a in accounts]


async def get_account(ledger: LedgerClient, account_id: str) -> dict | None:
    """
    Get a single account by ID, with its current balance.

    Returns:
        Account dictionary or None if not found
    """
    accounts = await ledger.get_accounts()
    account = next((a for a in accounts if a.id == account_id), None)
    if not account:
        return None
    account.balance = await ledger.get_account_balance(account_id)
    return _account_dict(account)


async def create_account(
    ledger: LedgerClient,
    name: str,
    account_type: Optional[str] = None,
    offbudget: bool = False,
    initial_balance: int = 0
) -> dict:
    """
    Create an account.

    Args:
        ledger: Ledger client
        name: Account name
        account_type: Account type, e.g. checking, savings, credit (optional)
        offbudget: Whether the account is off budget (default: False)
        initial_balance: Opening balance in cents (default: 0)

    Returns:
        Dict with success status and the new account ID, or error message
    """
    if not name or not name.strip():
        return {"success": False, "error": "Account name is required"}

    account = {"name": name.strip(), "offbudget": offbudget}
    if account_type:
        account["type"] = account_type

    try:
        account_id = await ledger.create_account(account, initial_balance)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[ACCOUNTS] Created account {account_id}")
    return {"success": True, "account_id": account_id}


async def update_account(
    ledger: LedgerClient,
    account_id: str,
    name: Optional[str] = None,
    account_type: Optional[str] = None,
    offbudget: Optional[bool] = None
) -> dict:
    """
    Update an account's name, type or budget status. Only provided fields change.
    """
    fields = {}
    if name is not None:
        fields["name"] = name
    if account_type is not None:
        fields["type"] = account_type
    if offbudget is not None:
        fields["offbudget"] = offbudget

    if not fields:
        return {"success": False, "error": "No fields to update"}

    try:
        await ledger.update_account(account_id, fields)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "account_id": account_id, "updated_fields": sorted(fields)}


async def close_account(
    ledger: LedgerClient,
    account_id: str,
    transfer_account_id: Optional[str] = None,
    transfer_category_id: Optional[str] = None
) -> dict:
    """
    Close an account.

    An account with a non-zero balance needs somewhere to move the remainder:
    another account (transfer_account_id) or, for on-budget accounts, a
    category (transfer_category_id).
    """
    try:
        await ledger.close_account(account_id, transfer_account_id, transfer_category_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[ACCOUNTS] Closed account {account_id}")
    return {"success": True, "account_id": account_id}


async def reopen_account(ledger: LedgerClient, account_id: str) -> dict:
    try:
        await ledger.reopen_account(account_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}
    return {"success": True, "account_id": account_id}


async def delete_account(ledger: LedgerClient, account_id: str) -> dict:
    try:
        await ledger.delete_account(account_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[ACCOUNTS] Deleted account {account_id}")
    return {"success": True, "account_id": account_id}
