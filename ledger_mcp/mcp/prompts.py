"""
Prompt templates offered to the agent.
"""
from typing import Optional

from ledger_mcp.mcp.dependencies import get_date_range


def financial_insights(start_date: Optional[str] = None, end_date: Optional[str] = None) -> str:
    start, end = get_date_range(start_date, end_date)
    return f"""Please analyze my financial data and provide insights and recommendations. Focus on spending patterns, savings rate, and potential areas to optimize my budget. Analyze data from {start} to {end}.

You can use these tools to gather the data you need:
1. Use the spending_by_category tool to analyze my spending breakdown
2. Use the monthly_summary tool to get my income, expenses, and savings rate
3. Use the get_transactions tool to examine specific transactions if needed

Based on this analysis, please provide:
1. A summary of my financial situation
2. Key insights about my spending patterns
3. Areas where I might be overspending
4. Recommendations to improve my savings rate
5. Any other relevant financial advice
"""


def budget_review(months: int = 3) -> str:
    if months <= 0:
        months = 3
    return f"""Please review my budget and spending for the past {months} months. I'd like to understand how well I'm sticking to my budget and where I might be able to make adjustments.

To gather this data:
1. Use the spending_by_category tool to see my spending breakdown
2. Use the monthly_summary tool with months={months} to get my overall income and expenses
3. Use the get_transactions tool if you need to look at specific transactions

Please provide:
1. An analysis of my top spending categories
2. Whether my spending is consistent month-to-month
3. Areas where I might be able to reduce spending
4. Suggestions for realistic budget adjustments
"""
