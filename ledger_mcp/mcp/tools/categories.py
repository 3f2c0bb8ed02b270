"""
Category and category group tools for the MCP server.
"""
import asyncio
import logging
from typing import Optional

from ledger_mcp.ledger import LedgerClient, LedgerError
from ledger_mcp.services.category_classifier import CategoryMapper

logger = logging.getLogger(__name__)


async def list_categories(ledger: LedgerClient) -> list[dict]:
    """
    List all categories with their group and derived flags.

    Returns:
        List of category dictionaries with id, name, group, is_income and is_savings_or_investment
    """
    categories, groups = await asyncio.gather(ledger.get_categories(), ledger.get_category_groups())
    mapper = CategoryMapper(categories, groups)

    result = []
    for cat in categories:
        info = mapper.get_group_info(cat.id)
        result.append({
            "id": cat.id,
            "name": cat.name,
            "group_id": cat.group_id,
            "group_name": info.name,
            "is_income": info.is_income,
            "is_savings_or_investment": info.is_savings_or_investment,
        })
    return result


async def get_grouped_categories(ledger: LedgerClient) -> list[dict]:
    """
    Get category groups, each with its nested list of categories.
    """
    categories, groups = await asyncio.gather(ledger.get_categories(), ledger.get_category_groups())

    # Build lookup map
    by_group: dict[str, list[dict]] = {g.id: [] for g in groups}
    for cat in categories:
        if cat.group_id in by_group:
            by_group[cat.group_id].append({"id": cat.id, "name": cat.name, "is_income": cat.is_income})

    return [
        {
            "id": group.id,
            "name": group.name,
            "is_income": group.is_income,
            "categories": by_group[group.id],
        }
        for group in groups
    ]


async def create_category(
    ledger: LedgerClient,
    name: str,
    group_id: str,
    is_income: bool = False
) -> dict:
    if not name or not name.strip():
        return {"success": False, "error": "Category name is required"}
    if not group_id:
        return {"success": False, "error": "group_id is required"}

    try:
        category_id = await ledger.create_category(
            {"name": name.strip(), "group_id": group_id, "is_income": is_income}
        )
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[CATEGORIES] Created category {category_id}")
    return {"success": True, "category_id": category_id}


async def update_category(
    ledger: LedgerClient,
    category_id: str,
    name: Optional[str] = None,
    group_id: Optional[str] = None
) -> dict:
    fields = {k: v for k, v in {"name": name, "group_id": group_id}.items() if v is not None}
    if not fields:
        return {"success": False, "error": "No fields to update"}

    try:
        await ledger.update_category(category_id, fields)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "category_id": category_id, "updated_fields": sorted(fields)}


async def delete_category(
    ledger: LedgerClient,
    category_id: str,
    transfer_category_id: Optional[str] = None
) -> dict:
    """
    Delete a category. Transactions in it move to transfer_category_id when given.
    """
    try:
        await ledger.delete_category(category_id, transfer_category_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[CATEGORIES] Deleted category {category_id}")
    return {"success": True, "category_id": category_id}


async def create_category_group(ledger: LedgerClient, name: str, is_income: bool = False) -> dict:
    if not name or not name.strip():
        return {"success": False, "error": "Category group name is required"}

    try:
        group_id = await ledger.create_category_group({"name": name.strip(), "is_income": is_income})
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[CATEGORIES] Created category group {group_id}")
    return {"success": True, "group_id": group_id}


async def update_category_group(ledger: LedgerClient, group_id: str, name: Optional[str] = None) -> dict:
    if name is None:
        return {"success": False, "error": "No fields to update"}

    try:
        await ledger.update_category_group(group_id, {"name": name})
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "group_id": group_id, "updated_fields": ["name"]}


async def delete_category_group(
    ledger: LedgerClient,
    group_id: str,
    transfer_category_id: Optional[str] = None
) -> dict:
    try:
        await ledger.delete_category_group(group_id, transfer_category_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[CATEGORIES] Deleted category group {group_id}")
    return {"success": True, "group_id": group_id}
