# budgly/core/charts.py
import io
from typing import Iterable, List, Optional

import matplotlib.pyplot as plt
import matplotlib.ticker as mticker
import pandas as pd

from budgly.core.models import EXPENSE, INCOME, Budget, Transaction
from budgly.core.settings import Currency, format_currency

# Global chart look
plt.style.use('seaborn-v0_8-darkgrid')
plt.rcParams['font.family'] = 'sans-serif'
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['xtick.labelsize'] = 10
plt.rcParams['ytick.labelsize'] = 10
plt.rcParams['legend.fontsize'] = 10

COLORS = {
    'Income': '#28a745',
    'Expenses': '#dc3545',
    'Balance': '#007bff',
    'Budgeted': '#6c757d',
    'Spent': '#fd7e14',
}

CHART_DPI = 150


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """One row per transaction with a parsed ``date`` column."""
    rows = [
        {
            'id': t.id,
            'amount': t.amount,
            'category': t.category,
            'type': t.type,
            'date': t.date,
        }
        for t in transactions
    ]
    df = pd.DataFrame(rows, columns=['id', 'amount', 'category', 'type', 'date'])
    if not df.empty:
        df['date'] = pd.to_datetime(df['date'], utc=True)
    return df


def _currency_formatter(currency: Currency) -> mticker.FuncFormatter:
    return mticker.FuncFormatter(lambda value, _pos: format_currency(value, currency, decimals=0))


def _to_png(fig) -> io.BytesIO:
    fig.tight_layout()
    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=CHART_DPI)
    buf.seek(0)
    plt.close(fig)
    return buf


def generate_budget_chart(summary: Optional[Budget], currency: Currency) -> Optional[io.BytesIO]:
    """Budgeted vs. spent bars per category; None when there is nothing to draw."""
    if summary is None or not summary.category_budgets:
        return None

    df = pd.DataFrame(
        [c.to_record() for c in summary.category_budgets],
        columns=['category', 'budgeted', 'spent'],
    ).set_index('category')
    if df[['budgeted', 'spent']].to_numpy().sum() == 0:
        return None

    fig, ax = plt.subplots(figsize=(12, 7))
    df[['budgeted', 'spent']].plot(
        kind='bar',
        ax=ax,
        color=[COLORS['Budgeted'], COLORS['Spent']],
    )

    ax.set_title(f"Budget {summary.month}: Budgeted vs. Spent", fontsize=16, fontweight='bold')
    ax.set_ylabel(f"Amount ({currency.symbol})")
    ax.set_xlabel('Category')
    ax.legend(['Budgeted', 'Spent'])
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')
    ax.grid(axis='y', linestyle='--', alpha=0.7)

    for container in ax.containers:
        ax.bar_label(container, labels=[format_currency(v, currency) for v in container.datavalues],
                     fontsize=8, padding=3)

    for i, (budgeted, spent) in enumerate(zip(df['budgeted'], df['spent'])):
        if budgeted > 0 and spent > budgeted:
            ax.text(i, spent * 1.05, 'OVER!', ha='center', va='bottom', color='red', fontsize=9, weight='bold')

    ax.yaxis.set_major_formatter(_currency_formatter(currency))
    return _to_png(fig)


def monthly_balance(transactions: Iterable[Transaction]) -> pd.DataFrame:
    """Income, expenses and balance per calendar month, oldest month first."""
    df = transactions_frame(transactions)
    columns: List[str] = ['Income', 'Expenses', 'Balance']
    if df.empty:
        return pd.DataFrame(columns=columns)

    df['month'] = df['date'].dt.strftime('%Y-%m')
    summary = df.groupby(['month', 'type'])['amount'].sum().unstack(fill_value=0)
    result = pd.DataFrame(index=summary.index)
    result['Income'] = summary[INCOME] if INCOME in summary else 0.0
    result['Expenses'] = summary[EXPENSE] if EXPENSE in summary else 0.0
    result['Balance'] = result['Income'] - result['Expenses']
    return result.sort_index()[columns]


def generate_balance_chart(transactions: Iterable[Transaction], currency: Currency) -> Optional[io.BytesIO]:
    """Monthly income vs. expenses bars, with the balance as a third series."""
    monthly = monthly_balance(transactions)
    if monthly.empty:
        return None

    fig, ax = plt.subplots(figsize=(12, 7))
    monthly.plot(
        kind='bar',
        ax=ax,
        color=[COLORS['Income'], COLORS['Expenses'], COLORS['Balance']],
    )

    ax.set_title('Monthly Balance: Income vs. Expenses', fontsize=16, fontweight='bold')
    ax.set_ylabel(f"Amount ({currency.symbol})")
    ax.set_xlabel('Month')
    plt.setp(ax.get_xticklabels(), rotation=45, ha='right')
    ax.legend(title='Type', fontsize=10, title_fontsize=11)
    ax.grid(axis='y', linestyle='--', alpha=0.7)

    for container in ax.containers:
        ax.bar_label(container, labels=[format_currency(v, currency) for v in container.datavalues],
                     fontsize=8, padding=3)

    ax.yaxis.set_major_formatter(_currency_formatter(currency))
    return _to_png(fig)
