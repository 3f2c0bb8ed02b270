"""
Transaction tools for the MCP server.
"""
import asyncio
import logging
from typing import Optional

from ledger_mcp.ledger import LedgerClient, LedgerError
from ledger_mcp.mcp.dependencies import get_date_range, validate_date
from ledger_mcp.models import Transaction
from ledger_mcp.services.category_classifier import CategoryMapper

logger = logging.getLogger(__name__)

MAX_LIMIT = 1000


def _matches(value: Optional[str], needle: Optional[str]) -> bool:
    if not needle:
        return True
    return needle.lower() in (value or "").lower()


async def list_transactions(
    ledger: LedgerClient,
    account_id: str,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    min_amount: Optional[int] = None,
    max_amount: Optional[int] = None,
    category_name: Optional[str] = None,
    payee_name: Optional[str] = None,
    limit: Optional[int] = None
) -> dict:
    """
    List transactions for an account with optional filtering.

    Args:
        ledger: Ledger client
        account_id: The account's ID
        start_date: Start date in ISO format (optional, default: 3 months ago)
        end_date: End date in ISO format (optional, default: today)
        min_amount: Minimum signed amount in cents (optional)
        max_amount: Maximum signed amount in cents (optional)
        category_name: Case-insensitive substring of the category name (optional)
        payee_name: Case-insensitive substring of the payee name (optional)
        limit: Max results (optional, max: 1000)

    Returns:
        Dict with matching transactions, newest first, plus matching and total counts
    """
    if not account_id:
        raise ValueError("account_id is required")

    start, end = get_date_range(start_date, end_date)

    transactions, categories, groups, payees = await asyncio.gather(
        ledger.get_transactions(account_id, start, end),
        ledger.get_categories(),
        ledger.get_category_groups(),
        ledger.get_payees(),
    )
    mapper = CategoryMapper(categories, groups)
    payee_names = {p.id: p.name for p in payees}

    rows = []
    for txn in sorted(transactions, key=lambda t: t.date, reverse=True):
        if min_amount is not None and txn.amount < min_amount:
            continue
        if max_amount is not None and txn.amount > max_amount:
            continue

        category = txn.category_name or (mapper.get_category_name(txn.category) if txn.category else None)
        payee = txn.payee_name or payee_names.get(txn.payee or "")

        if not _matches(category, category_name) or not _matches(payee, payee_name):
            continue

        rows.append(_transaction_dict(txn, category, payee))

    matching_count = len(rows)
    if limit is not None:
        rows = rows[:min(max(1, limit), MAX_LIMIT)]

    return {
        "period": {"start_date": start, "end_date": end},
        "transactions": rows,
        "matching_count": matching_count,
        "total_count": len(transactions),
    }


def _transaction_dict(txn: Transaction, category: Optional[str], payee: Optional[str]) -> dict:
    return {
        "id": txn.id,
        "account_id": txn.account,
        "date": txn.date,
        "amount": txn.amount,
        "payee_id": txn.payee,
        "payee_name": payee,
        "category_id": txn.category,
        "category_name": category,
        "notes": txn.notes,
        "transfer_id": txn.transfer_id,
        "cleared": txn.cleared,
    }


async def create_transaction(
    ledger: LedgerClient,
    account_id: str,
    date: str,
    amount: int,
    payee_id: Optional[str] = None,
    payee_name: Optional[str] = None,
    category_id: Optional[str] = None,
    notes: Optional[str] = None,
    cleared: Optional[bool] = None
) -> dict:
    """
    Create a transaction in an account.

    Args:
        ledger: Ledger client
        account_id: The account's ID
        date: Transaction date (YYYY-MM-DD)
        amount: Signed amount in cents (negative = outflow)
        payee_id: Existing payee ID (optional)
        payee_name: Payee name; creates the payee if it does not exist (optional)
        category_id: Category ID (optional)
        notes: Free-text notes (optional)
        cleared: Cleared flag (optional)

    Returns:
        Dict with success status, or error message
    """
    if not validate_date(date):
        return {"success": False, "error": "date must be a valid date in YYYY-MM-DD format"}

    transaction = {"date": date, "amount": amount}
    optional_fields = {
        "payee": payee_id,
        "payee_name": payee_name,
        "category": category_id,
        "notes": notes,
        "cleared": cleared,
    }
    transaction.update({k: v for k, v in optional_fields.items() if v is not None})

    try:
        result = await ledger.create_transaction(account_id, transaction)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[TRANSACTIONS] Created transaction in account {account_id}")
    return {"success": True, "result": result}


async def update_transaction(
    ledger: LedgerClient,
    transaction_id: str,
    category_id: Optional[str] = None,
    payee_id: Optional[str] = None,
    notes: Optional[str] = None,
    amount: Optional[int] = None,
    date: Optional[str] = None
) -> dict:
    """
    Update a transaction's category, payee, notes, amount or date.
    Only provided fields change.
    """
    if date is not None and not validate_date(date):
        return {"success": False, "error": "date must be a valid date in YYYY-MM-DD format"}

    fields = {
        k: v
        for k, v in {
            "category": category_id,
            "payee": payee_id,
            "notes": notes,
            "amount": amount,
            "date": date,
        }.items()
        if v is not None
    }
    if not fields:
        return {"success": False, "error": "No fields to update"}

    try:
        await ledger.update_transaction(transaction_id, fields)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "transaction_id": transaction_id, "updated_fields": sorted(fields)}


async def delete_transaction(ledger: LedgerClient, transaction_id: str) -> dict:
    try:
        await ledger.delete_transaction(transaction_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[TRANSACTIONS] Deleted transaction {transaction_id}")
    return {"success": True, "transaction_id": transaction_id}
