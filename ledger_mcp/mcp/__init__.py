"""
MCP (Model Context Protocol) server for the personal budget ledger.
Provides account, transaction, category, payee and rule management plus
spending, monthly summary and balance history reports.

Usage:
    from ledger_mcp.mcp.server import mcp

Tools available:
    Accounts:
        - get_accounts
        - create_account / update_account (WRITE)
        - close_account / reopen_account / delete_account (WRITE)

    Transactions:
        - get_transactions
        - create_transaction / update_transaction / delete_transaction (WRITE)

    Categories:
        - get_categories
        - get_grouped_categories
        - create_category / update_category / delete_category (WRITE)
        - create_category_group / update_category_group / delete_category_group (WRITE)

    Payees:
        - get_payees
        - create_payee / update_payee / delete_payee (WRITE)

    Rules:
        - get_rules
        - create_rule / update_rule / delete_rule (WRITE)

    Analytics:
        - spending_by_category
        - monthly_summary
        - balance_history
"""
