"""
Test the MCP tool functions against an in-memory ledger.
"""
import asyncio
import os
import sys
from datetime import date

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from ledger_mcp.mcp.tools import accounts, analytics, categories, payees, rules, transactions
from ledger_mcp.models import Transaction
from tests.fake_ledger import sample_ledger


def test_list_accounts():
    ledger = sample_ledger()

    result = asyncio.run(accounts.list_accounts(ledger))
    assert [a["id"] for a in result] == ["acc-checking", "acc-card", "acc-broker", "acc-old"]
    assert result[0]["balance"] == 300000
    assert result[2]["offbudget"] is True

    open_only = asyncio.run(accounts.list_accounts(ledger, include_closed=False))
    assert "acc-old" not in [a["id"] for a in open_only]

    single = asyncio.run(accounts.get_account(ledger, "acc-card"))
    assert single["balance"] == -6000
    assert asyncio.run(accounts.get_account(ledger, "nope")) is None
    print("✓ Accounts listed with current balances")


def test_spending_by_category_all_accounts():
    ledger = sample_ledger()

    result = asyncio.run(
        analytics.get_spending_by_category(ledger, "2024-01-01", "2024-02-29")
    )

    assert result["account"] == analytics.ALL_ACCOUNTS_LABEL
    assert [g["name"] for g in result["groups"]] == ["Living", "Savings"]
    living = result["groups"][0]
    # Off-budget brokerage spending is left out
    assert living["total"] == -84500
    assert [c["name"] for c in living["categories"]] == ["Rent", "Food"]
    assert result["total"] == -104500

    with_income = asyncio.run(
        analytics.get_spending_by_category(ledger, "2024-01-01", "2024-02-29", include_income=True)
    )
    assert with_income["groups"][0]["name"] == "Income"
    assert with_income["groups"][0]["total"] == 250000
    print("✓ Spending by category over on-budget accounts")


def test_spending_by_category_single_account():
    ledger = sample_ledger()
    result = asyncio.run(
        analytics.get_spending_by_category(ledger, "2024-01-01", "2024-02-29", account_id="acc-card")
    )
    assert result["account"] == "Credit Card"
    assert [(g["name"], g["total"]) for g in result["groups"]] == [("Living", -4500)]
    print("✓ Spending by category for one account")


def test_spending_by_category_rejects_bad_dates():
    ledger = sample_ledger()
    for start, end in (("2024-13-01", None), ("2024-03-01", "2024-01-01")):
        try:
            asyncio.run(analytics.get_spending_by_category(ledger, start, end))
            raise AssertionError("Expected ValueError")
        except ValueError:
            pass
    print("✓ Invalid date ranges are rejected")


def test_monthly_summary():
    ledger = sample_ledger()
    result = asyncio.run(
        analytics.get_monthly_summary(ledger, months=2, account_id="acc-checking")
    )
    # Fixture dates are in 2024; a window ending today finds nothing there
    assert result["account"] == "Checking"
    assert result["account_id"] == "acc-checking"
    assert result["months"] == []
    assert all(value == 0 for value in result["averages"].values())
    print("✓ Monthly summary for a window without data")


def test_monthly_summary_breakdown():
    ledger = sample_ledger()
    # Move the fixture into the current window
    today = date.today()
    this_month = today.replace(day=1).isoformat()
    for txn in ledger.transactions:
        txn.date = this_month

    result = asyncio.run(analytics.get_monthly_summary(ledger, months=1))

    assert len(result["months"]) == 1
    month = result["months"][0]
    assert month["month_key"] == this_month[:7]
    assert month["year"] == today.year
    assert month["month"] == today.month
    assert month["income"] == 250000
    assert month["expenses"] == 80000 + 4500 + 1500
    assert month["investments"] == 20000
    # Transfer t4 and the off-budget brokerage are excluded
    assert month["transactions"] == 5
    assert month["traditional_savings"] == 250000 - 86000
    assert month["total_savings"] == 250000 - 86000 + 20000
    assert abs(month["total_savings_rate"] - 184000 / 250000 * 100) < 1e-9

    averages = result["averages"]
    assert averages["avg_income"] == 250000
    assert abs(averages["avg_traditional_savings_rate"] - 164000 / 250000 * 100) < 1e-9
    print("✓ Monthly summary breakdown and savings rates")


def test_balance_history_single_account():
    ledger = sample_ledger()
    result = asyncio.run(
        analytics.get_balance_history(ledger, "acc-checking", months=3, end_date="2024-02-20")
    )

    balances = result["balances"]
    assert [b["month_key"] for b in balances] == ["2024-02", "2024-01", "2023-12"]
    assert balances[0]["balance"] == 300000
    # Undo February's -20000
    assert balances[1]["balance"] == 320000
    # Undo January: +250000, -80000, -50000 transfer
    assert balances[2]["balance"] == 320000 - 250000 + 80000 + 50000
    assert balances[2]["change"] is None
    assert balances[0]["change"] == -20000
    print("✓ Balance history for one account")



def test_balance_history_past_end_date():
    ledger = sample_ledger()
    ledger.transactions.append(
        Transaction(id="t8", account="acc-checking", date="2024-03-10", amount=-7000, category="cat-food")
    )

    result = asyncio.run(
        analytics.get_balance_history(ledger, "acc-checking", months=2, end_date="2024-02-20")
    )

    assert ledger.balance_cutoffs == ["2024-02-20"]
    balances = result["balances"]
    # Anchored at the balance on 2024-02-20, before the March spending
    assert balances[0]["month_key"] == "2024-02"
    assert balances[0]["balance"] == 307000
    assert balances[1]["balance"] == 327000

    asyncio.run(analytics.get_balance_history(ledger, "acc-checking", months=1))
    assert ledger.balance_cutoffs[-1] is None
    print("✓ Past end date anchors at the balance on that date")


def test_balance_history_all_accounts():
    ledger = sample_ledger()
    result = asyncio.run(analytics.get_balance_history(ledger, months=2, end_date="2024-02-20"))

    keys = [(b["month_key"], b["account"]) for b in result["balances"]]
    assert keys == [
        ("2024-02", "Checking"),
        ("2024-02", "Credit Card"),
        ("2024-01", "Checking"),
        ("2024-01", "Credit Card"),
    ]

    with_off_budget = asyncio.run(
        analytics.get_balance_history(ledger, months=1, include_off_budget=True, end_date="2024-02-20")
    )
    assert {b["account"] for b in with_off_budget["balances"]} == {"Checking", "Credit Card", "Brokerage"}

    missing = asyncio.run(analytics.get_balance_history(ledger, "nope"))
    assert missing["success"] is False
    print("✓ Balance history for all accounts")


def test_list_transactions_filters():
    ledger = sample_ledger()

    everything = asyncio.run(
        transactions.list_transactions(ledger, "acc-checking", "2024-01-01", "2024-02-29")
    )
    assert everything["total_count"] == 4
    assert [t["id"] for t in everything["transactions"]] == ["t5", "t4", "t2", "t1"]
    assert everything["transactions"][2]["payee_name"] == "Landlord LLC"
    assert everything["transactions"][2]["category_name"] == "Rent"

    outflows = asyncio.run(
        transactions.list_transactions(ledger, "acc-checking", "2024-01-01", "2024-02-29", max_amount=-30000)
    )
    assert [t["id"] for t in outflows["transactions"]] == ["t4", "t2"]

    by_category = asyncio.run(
        transactions.list_transactions(ledger, "acc-checking", "2024-01-01", "2024-02-29", category_name="sal")
    )
    assert [t["id"] for t in by_category["transactions"]] == ["t1"]

    by_payee = asyncio.run(
        transactions.list_transactions(ledger, "acc-card", "2024-01-01", "2024-02-29", payee_name="CORNER")
    )
    assert by_payee["matching_count"] == 2

    limited = asyncio.run(
        transactions.list_transactions(ledger, "acc-checking", "2024-01-01", "2024-02-29", limit=1)
    )
    assert len(limited["transactions"]) == 1
    assert limited["matching_count"] == 4
    print("✓ Transaction filters and limit")


def test_transaction_mutations():
    ledger = sample_ledger()

    created = asyncio.run(
        transactions.create_transaction(ledger, "acc-checking", "2024-03-01", -1299, payee_name="Cafe")
    )
    assert created["success"] is True
    assert ledger.calls[-1] == (
        "create_transaction", "acc-checking", {"date": "2024-03-01", "amount": -1299, "payee_name": "Cafe"}
    )

    bad_date = asyncio.run(transactions.create_transaction(ledger, "acc-checking", "03/01/2024", -1))
    assert bad_date["success"] is False

    updated = asyncio.run(transactions.update_transaction(ledger, "t2", category_id="cat-food", notes="moved"))
    assert updated["updated_fields"] == ["category", "notes"]

    nothing = asyncio.run(transactions.update_transaction(ledger, "t2"))
    assert nothing["success"] is False

    ledger.fail_with = "transaction not found"
    failed = asyncio.run(transactions.delete_transaction(ledger, "zzz"))
    assert failed == {"success": False, "error": "transaction not found"}
    print("✓ Transaction mutations report success or error")


def test_account_mutations():
    ledger = sample_ledger()

    created = asyncio.run(accounts.create_account(ledger, "  Travel  ", "savings", initial_balance=1000))
    assert created == {"success": True, "account_id": "create_account-id"}
    assert ledger.calls[-1] == ("create_account", {"name": "Travel", "offbudget": False, "type": "savings"}, 1000)

    assert asyncio.run(accounts.create_account(ledger, " "))["success"] is False
    assert asyncio.run(accounts.update_account(ledger, "acc-card"))["success"] is False

    closed = asyncio.run(accounts.close_account(ledger, "acc-card", transfer_account_id="acc-checking"))
    assert closed["success"] is True
    assert ledger.calls[-1] == ("close_account", "acc-card", "acc-checking", None)

    ledger.fail_with = "account has a balance"
    assert asyncio.run(accounts.reopen_account(ledger, "acc-old"))["error"] == "account has a balance"
    print("✓ Account mutations")


def test_categories_payees_and_rules():
    ledger = sample_ledger()

    listed = asyncio.run(categories.list_categories(ledger))
    emergency = next(c for c in listed if c["id"] == "cat-emergency")
    assert emergency["group_name"] == "Savings"
    assert emergency["is_savings_or_investment"] is True

    grouped = asyncio.run(categories.get_grouped_categories(ledger))
    assert [g["name"] for g in grouped] == ["Living", "Income", "Savings"]
    assert [c["name"] for c in grouped[0]["categories"]] == ["Food", "Rent"]

    assert asyncio.run(categories.create_category(ledger, "Fuel", "g-living"))["success"] is True
    assert asyncio.run(categories.create_category(ledger, "Fuel", ""))["success"] is False
    assert asyncio.run(categories.update_category_group(ledger, "g-living"))["success"] is False

    payee_list = asyncio.run(payees.list_payees(ledger))
    transfer = next(p for p in payee_list if p["id"] == "p-transfer")
    assert transfer["transfer_account_id"] == "acc-card"

    assert asyncio.run(rules.list_rules(ledger))[0]["id"] == "r1"
    incomplete = asyncio.run(rules.create_rule(ledger, {"stage": "pre", "conditions": []}))
    assert incomplete["success"] is False
    assert "conditionsOp" in incomplete["error"]
    print("✓ Categories, payees and rules")


if __name__ == "__main__":
    test_list_accounts()
    test_spending_by_category_all_accounts()
    test_spending_by_category_single_account()
    test_spending_by_category_rejects_bad_dates()
    test_monthly_summary()
    test_monthly_summary_breakdown()
    test_balance_history_single_account()
    test_balance_history_past_end_date()
    test_balance_history_all_accounts()
    test_list_transactions_filters()
    test_transaction_mutations()
    test_account_mutations()
    test_categories_payees_and_rules()
    print("All tool tests passed.")
