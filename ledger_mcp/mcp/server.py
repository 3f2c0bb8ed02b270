"""
Main FastMCP server setup for the ledger.
Registers all tools from the tools modules, plus prompts and account resources.
"""
from typing import Optional

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from ledger_mcp.mcp import prompts
from ledger_mcp.mcp.dependencies import get_ledger
from ledger_mcp.mcp.tools import accounts, analytics, categories, payees, rules, transactions

# Initialize FastMCP server
mcp = FastMCP(
    name="Ledger MCP",
    instructions="""
Ledger MCP Server - Read, analyze and edit a personal budget ledger.

All amounts are integer cents: 12345 means 123.45. Negative amounts are
outflows, positive amounts are inflows. Dates are YYYY-MM-DD.

## Available functionality
- **Accounts**: List with balances, create, update, close, reopen, delete
- **Transactions**: List with filters, create, update, delete
- **Categories**: List, grouped tree, create/update/delete categories and groups
- **Payees / Rules**: List, create, update, delete (rules are stored as-is)
- **Analytics**: Spending by category, monthly summary with savings rates, balance history

## Reports
- `spending_by_category`: groups sorted by absolute total; income excluded unless `include_income=True`
- `monthly_summary`: transfers between own accounts are ignored; "investment"/"savings"
  groups count towards total savings, not regular expenses
- `balance_history`: month-end balances anchored at today's balance; omit `account_id`
  for every on-budget account
"""
)


@mcp.custom_route("/health", methods=["GET"])
async def health(request: Request) -> JSONResponse:
    return JSONResponse({"status": "healthy", "service": "mcp"})


# ============================================================================
# Account Tools
# ============================================================================

@mcp.tool
async def get_accounts(include_closed: bool = True) -> list[dict]:
    """
    List all accounts with their current balance and ID.

    Args:
        include_closed: Whether to include closed accounts (default: True)

    Returns:
        List of accounts with id, name, type, balance (cents), closed and offbudget flags
    """
    return await accounts.list_accounts(get_ledger(), include_closed)


@mcp.tool
async def create_account(
    name: str,
    account_type: Optional[str] = None,
    offbudget: bool = False,
    initial_balance: int = 0
) -> dict:
    """
    Create a new account.

    Args:
        name: Account name
        account_type: checking, savings, credit, investment, mortgage, debt or other (optional)
        offbudget: Whether the account is off budget (default: False)
        initial_balance: Opening balance in cents (default: 0)

    Returns:
        Dict with success status and the new account ID
    """
    return await accounts.create_account(get_ledger(), name, account_type, offbudget, initial_balance)


@mcp.tool
async def update_account(
    account_id: str,
    name: Optional[str] = None,
    account_type: Optional[str] = None,
    offbudget: Optional[bool] = None
) -> dict:
    """
    Update an account. Only provided fields change.

    Args:
        account_id: The account's ID
        name: New name (optional)
        account_type: New type (optional)
        offbudget: New budget status (optional)
    """
    return await accounts.update_account(get_ledger(), account_id, name, account_type, offbudget)


@mcp.tool
async def close_account(
    account_id: str,
    transfer_account_id: Optional[str] = None,
    transfer_category_id: Optional[str] = None
) -> dict:
    """
    Close an account.

    Args:
        account_id: The account's ID
        transfer_account_id: Account receiving any remaining balance (optional)
        transfer_category_id: Category for the remaining balance on on-budget accounts (optional)
    """
    return await accounts.close_account(get_ledger(), account_id, transfer_account_id, transfer_category_id)


@mcp.tool
async def reopen_account(account_id: str) -> dict:
    """Reopen a closed account."""
    return await accounts.reopen_account(get_ledger(), account_id)


@mcp.tool
async def delete_account(account_id: str) -> dict:
    """Permanently delete an account and its transactions."""
    return await accounts.delete_account(get_ledger(), account_id)


# ============================================================================
# Transaction Tools
# ============================================================================

@mcp.tool
async def get_transactions(
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
    Get transactions for an account with optional filtering.

    Args:
        account_id: The account's ID (see get_accounts)
        start_date: Start date YYYY-MM-DD (optional, default: 3 months ago)
        end_date: End date YYYY-MM-DD (optional, default: today)
        min_amount: Minimum signed amount in cents (optional)
        max_amount: Maximum signed amount in cents (optional)
        category_name: Case-insensitive substring of the category name (optional)
        payee_name: Case-insensitive substring of the payee name (optional)
        limit: Max results (optional, max: 1000)

    Returns:
        Dict with transactions (newest first), matching_count and total_count
    """
    return await transactions.list_transactions(
        get_ledger(), account_id, start_date, end_date, min_amount, max_amount, category_name, payee_name, limit
    )


@mcp.tool
async def create_transaction(
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
        account_id: The account's ID
        date: Transaction date YYYY-MM-DD
        amount: Signed amount in cents (negative = outflow)
        payee_id: Existing payee ID (optional)
        payee_name: Payee name, created if missing (optional)
        category_id: Category ID (optional)
        notes: Notes (optional)
        cleared: Cleared flag (optional)
    """
    return await transactions.create_transaction(
        get_ledger(), account_id, date, amount, payee_id, payee_name, category_id, notes, cleared
    )


@mcp.tool
async def update_transaction(
    transaction_id: str,
    category_id: Optional[str] = None,
    payee_id: Optional[str] = None,
    notes: Optional[str] = None,
    amount: Optional[int] = None,
    date: Optional[str] = None
) -> dict:
    """
    Update an existing transaction's category, payee, notes, amount (cents) or date.
    Only provided fields change.
    """
    return await transactions.update_transaction(
        get_ledger(), transaction_id, category_id, payee_id, notes, amount, date
    )


@mcp.tool
async def delete_transaction(transaction_id: str) -> dict:
    """Delete a transaction."""
    return await transactions.delete_transaction(get_ledger(), transaction_id)


# ============================================================================
# Category Tools
# ============================================================================

@mcp.tool
async def get_categories() -> list[dict]:
    """
    List all categories with group name and income / savings-or-investment flags.
    """
    return await categories.list_categories(get_ledger())


@mcp.tool
async def get_grouped_categories() -> list[dict]:
    """
    List all category groups with their id, name, income flag and category list.
    """
    return await categories.get_grouped_categories(get_ledger())


@mcp.tool
async def create_category(name: str, group_id: str, is_income: bool = False) -> dict:
    """
    Create a category inside a category group.

    Args:
        name: Category name
        group_id: The category group's ID
        is_income: Whether this is an income category (default: False)
    """
    return await categories.create_category(get_ledger(), name, group_id, is_income)


@mcp.tool
async def update_category(
    category_id: str,
    name: Optional[str] = None,
    group_id: Optional[str] = None
) -> dict:
    """Rename a category or move it to another group."""
    return await categories.update_category(get_ledger(), category_id, name, group_id)


@mcp.tool
async def delete_category(category_id: str, transfer_category_id: Optional[str] = None) -> dict:
    """
    Delete a category.

    Args:
        category_id: The category's ID
        transfer_category_id: Category that receives its transactions (optional)
    """
    return await categories.delete_category(get_ledger(), category_id, transfer_category_id)


@mcp.tool
async def create_category_group(name: str, is_income: bool = False) -> dict:
    """Create a category group."""
    return await categories.create_category_group(get_ledger(), name, is_income)


@mcp.tool
async def update_category_group(group_id: str, name: Optional[str] = None) -> dict:
    """Rename a category group."""
    return await categories.update_category_group(get_ledger(), group_id, name)


@mcp.tool
async def delete_category_group(group_id: str, transfer_category_id: Optional[str] = None) -> dict:
    """Delete a category group and its categories."""
    return await categories.delete_category_group(get_ledger(), group_id, transfer_category_id)


# ============================================================================
# Payee Tools
# ============================================================================

@mcp.tool
async def get_payees() -> list[dict]:
    """
    List all payees with their id, name, default category and transfer account.
    """
    return await payees.list_payees(get_ledger())


@mcp.tool
async def create_payee(name: str, category_id: Optional[str] = None) -> dict:
    """Create a payee, optionally with a default category."""
    return await payees.create_payee(get_ledger(), name, category_id)


@mcp.tool
async def update_payee(
    payee_id: str,
    name: Optional[str] = None,
    category_id: Optional[str] = None
) -> dict:
    """Rename a payee or change its default category."""
    return await payees.update_payee(get_ledger(), payee_id, name, category_id)


@mcp.tool
async def delete_payee(payee_id: str) -> dict:
    """Delete a payee."""
    return await payees.delete_payee(get_ledger(), payee_id)


# ============================================================================
# Rule Tools
# ============================================================================

@mcp.tool
async def get_rules() -> list[dict]:
    """List all rules as stored in the ledger."""
    return await rules.list_rules(get_ledger())


@mcp.tool
async def create_rule(rule: dict) -> dict:
    """
    Create a rule.

    Args:
        rule: Rule body with stage ("pre", "post" or null), conditionsOp ("and"/"or"),
            conditions and actions lists
    """
    return await rules.create_rule(get_ledger(), rule)


@mcp.tool
async def update_rule(rule_id: str, rule: dict) -> dict:
    """Replace a rule's stage, conditionsOp, conditions and actions."""
    return await rules.update_rule(get_ledger(), rule_id, rule)


@mcp.tool
async def delete_rule(rule_id: str) -> dict:
    """Delete a rule."""
    return await rules.delete_rule(get_ledger(), rule_id)


# ============================================================================
# Analytics Tools
# ============================================================================

@mcp.tool
async def spending_by_category(
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    account_id: Optional[str] = None,
    include_income: bool = False
) -> dict:
    """
    Get spending breakdown by category for a date range.

    Args:
        start_date: Start date YYYY-MM-DD (optional, default: 3 months ago)
        end_date: End date YYYY-MM-DD (optional, default: today)
        account_id: Limit to one account (optional, default: all on-budget accounts)
        include_income: Include income categories (default: False)

    Returns:
        Category groups sorted by absolute total, each with its categories,
        signed totals in cents and transaction counts
    """
    return await analytics.get_spending_by_category(
        get_ledger(), start_date, end_date, account_id, include_income
    )


@mcp.tool
async def monthly_summary(months: int = 3, account_id: Optional[str] = None) -> dict:
    """
    Get monthly income, expenses, investments and savings.

    Args:
        months: Number of months including the current one (default: 3)
        account_id: Limit to one account (optional, default: all on-budget accounts)

    Returns:
        Per-month breakdown (oldest first) and averages, including traditional
        and total savings rates in percent (0 when there is no income)
    """
    return await analytics.get_monthly_summary(get_ledger(), months, account_id)


@mcp.tool
async def balance_history(
    account_id: Optional[str] = None,
    months: int = 12,
    include_off_budget: bool = False
) -> dict:
    """
    Get month-end account balance history.

    Args:
        account_id: Account to report on (optional, default: all on-budget accounts)
        months: Number of months to include (default: 12)
        include_off_budget: With no account_id, also include off-budget accounts (default: False)

    Returns:
        Month-end balances (newest first) with month-over-month change;
        change is null for the earliest month
    """
    return await analytics.get_balance_history(get_ledger(), account_id, months, include_off_budget)


# ============================================================================
# Prompts
# ============================================================================

@mcp.prompt(name="financial-insights", description="Generate financial insights and advice")
def financial_insights_prompt(start_date: Optional[str] = None, end_date: Optional[str] = None) -> str:
    return prompts.financial_insights(start_date, end_date)


@mcp.prompt(name="budget-review", description="Review my budget and spending")
def budget_review_prompt(months: int = 3) -> str:
    return prompts.budget_review(months)


# ============================================================================
# Resources
# ============================================================================

@mcp.resource("ledger://accounts", mime_type="application/json")
async def accounts_resource() -> list[dict]:
    """All accounts with balances."""
    return await accounts.list_accounts(get_ledger())


@mcp.resource("ledger://accounts/{account_id}", mime_type="application/json")
async def account_resource(account_id: str) -> dict:
    """One account with its current balance."""
    account = await accounts.get_account(get_ledger(), account_id)
    if account is None:
        raise ValueError(f"Account with ID {account_id} not found")
    return account


@mcp.resource("ledger://accounts/{account_id}/transactions", mime_type="application/json")
async def account_transactions_resource(account_id: str) -> dict:
    """An account's transactions over the last three months, newest first."""
    return await transactions.list_transactions(get_ledger(), account_id)
