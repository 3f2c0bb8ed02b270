"""
Rule tools for the MCP server.

Rules are stored and returned as-is; their conditions and actions are never
evaluated here.
"""
import logging

from ledger_mcp.ledger import LedgerClient, LedgerError

logger = logging.getLogger(__name__)

REQUIRED_RULE_FIELDS = ("stage", "conditionsOp", "conditions", "actions")


def _missing_fields(rule: dict) -> list[str]:
    return [f for f in REQUIRED_RULE_FIELDS if f not in rule]


async def list_rules(ledger: LedgerClient) -> list[dict]:
    return await ledger.get_rules()


async def create_rule(ledger: LedgerClient, rule: dict) -> dict:
    """
    Create a rule.

    Args:
        ledger: Ledger client
        rule: Rule body with stage, conditionsOp, conditions and actions

    Returns:
        Dict with success status and the stored rule, or error message
    """
    missing = _missing_fields(rule)
    if missing:
        return {"success": False, "error": f"Rule is missing fields: {', '.join(missing)}"}

    try:
        stored = await ledger.create_rule(rule)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info("[RULES] Created rule")
    return {"success": True, "rule": stored}


async def update_rule(ledger: LedgerClient, rule_id: str, rule: dict) -> dict:
    missing = _missing_fields(rule)
    if missing:
        return {"success": False, "error": f"Rule is missing fields: {', '.join(missing)}"}

    try:
        stored = await ledger.update_rule(rule_id, rule)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    return {"success": True, "rule": stored}


async def delete_rule(ledger: LedgerClient, rule_id: str) -> dict:
    try:
        await ledger.delete_rule(rule_id)
    except LedgerError as e:
        return {"success": False, "error": str(e)}

    logger.info(f"[RULES] Deleted rule {rule_id}")
    return {"success": True, "rule_id": rule_id}
