# frontend/dashboard.py
"""Aggregations behind the dashboard cards, charts and filter selects."""
import pandas as pd

UNCATEGORIZED = "Uncategorized"
TX_COLUMNS = ['id', 'date', 'type', 'category', 'amount', 'description']


def transactions_frame(transactions):
    """DataFrame of transactions with parsed dates and numeric amounts."""
    if not transactions:
        return pd.DataFrame(columns=TX_COLUMNS)
    df = pd.DataFrame(transactions)
    for col in TX_COLUMNS:
        if col not in df.columns:
            df[col] = None
    df['date'] = pd.to_datetime(df['date'], errors='coerce')
    df['amount'] = pd.to_numeric(df['amount'], errors='coerce')
    df = df.dropna(subset=['date', 'amount'])
    return df[TX_COLUMNS + [c for c in df.columns if c not in TX_COLUMNS]]


def summarize(transactions):
    """Totals for the summary cards; the sign is applied by type only here."""
    df = transactions_frame(transactions)
    if df.empty:
        return {"total_income": 0.0, "total_expense": 0.0, "balance": 0.0, "count": 0}
    total_income = float(df.loc[df['type'] == 'income', 'amount'].sum())
    total_expense = float(df.loc[df['type'] == 'expense', 'amount'].sum())
    return {
        "total_income": round(total_income, 2),
        "total_expense": round(total_expense, 2),
        "balance": round(total_income - total_expense, 2),
        "count": int(len(df)),
    }


def income_expense_split(transactions):
    """Income vs expense totals, one row per type, for the split chart."""
    summary = summarize(transactions)
    return pd.DataFrame({
        'type': ['income', 'expense'],
        'total': [summary['total_income'], summary['total_expense']],
    })


def expense_breakdown(transactions):
    """Expense totals per category, largest first, with their share in percent."""
    df = transactions_frame(transactions)
    expense_df = df[df['type'] == 'expense']
    if expense_df.empty:
        return pd.DataFrame(columns=['category', 'total', 'percent'])
    totals = (expense_df.groupby('category')['amount'].sum()
              .reset_index()
              .rename(columns={'amount': 'total'})
              .sort_values('total', ascending=False)
              .reset_index(drop=True))
    grand_total = totals['total'].sum()
    totals['percent'] = (totals['total'] / grand_total * 100).round(2)
    return totals


def categories_for_type(categories, tx_type):
    """Category names usable for a transaction of ``tx_type``, sentinel last."""
    names = sorted(c['name'] for c in categories if c.get('type') == tx_type)
    return names + [UNCATEGORIZED]


def filter_options(categories):
    names = sorted({c['name'] for c in categories})
    return ["All", UNCATEGORIZED] + names
