import asyncio
import logging
from typing import List, Optional

from telegram import Update
from telegram.ext import ContextTypes

from budgly.bot.commands.transactions import format_transaction
from budgly.bot.session import get_client, get_settings, money, require_user
from budgly.core import budgets, charts, ledger
from budgly.core.budgets import BudgetDraft
from budgly.core.exceptions import BudgetConflictError, ValidationError
from budgly.core.models import Budget, User
from budgly.utils.text_utils import parse_number

logger = logging.getLogger(__name__)

RECENT_COUNT = 5


def _category_lines(update: Update, context: ContextTypes.DEFAULT_TYPE, budget: Budget) -> List[str]:
    lines = []
    for entry in budget.category_budgets:
        flag = " ⚠️" if entry.budgeted > 0 and entry.spent > entry.budgeted else ""
        lines.append(
            f"• {entry.category}: {money(update, context, entry.spent)} / "
            f"{money(update, context, entry.budgeted)}{flag}"
        )
    return lines


async def home_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """This month: totals, budget per category and the latest transactions."""
    user = await require_user(update, context)
    if user is None:
        return

    client = get_client(context)
    month = budgets.current_month()
    try:
        transactions, summary = await asyncio.gather(
            asyncio.to_thread(ledger.get_transactions, client, user.uid),
            asyncio.to_thread(budgets.compute_summary, client, user.uid, month),
        )
    except Exception as e:
        logger.exception("Failed to load home data for %s", user.uid)
        await update.message.reply_text(f"❌ Failed to load your data: {e}")
        return

    totals = ledger.calculate_totals(ledger.filter_by_month(transactions, month))
    lines = [
        f"🏠 Welcome, {user.display_name or user.email}",
        "",
        f"📅 {month}",
        f"Income: {money(update, context, totals['income'])}",
        f"Expenses: {money(update, context, totals['expenses'])}",
        f"Balance: {money(update, context, totals['balance'])}",
        "",
    ]

    if summary is None:
        lines.append("No budget for this month yet. Set one up with /budget.")
    else:
        lines.append(f"💰 Monthly budget (income {money(update, context, summary.total_income)})")
        lines.extend(_category_lines(update, context, summary))
        lines.append(f"Remaining: {money(update, context, budgets.remaining(summary))}")

    lines.append("")
    if transactions:
        lines.append("🧾 Recent transactions:")
        lines.extend(format_transaction(update, context, t) for t in transactions[:RECENT_COUNT])
    else:
        lines.append("No transactions yet. Use /add to record one.")

    await update.message.reply_text("\n".join(lines))


def _describe_draft(update: Update, context: ContextTypes.DEFAULT_TYPE, draft: BudgetDraft) -> str:
    lines = [
        f"📝 Budget {draft.budget.month}",
        f"Monthly income: {money(update, context, draft.total_income)}",
        "",
    ]
    for entry in draft.category_budgets:
        lines.append(
            f"• {entry.category}: {money(update, context, entry.budgeted)} "
            f"(spent {money(update, context, entry.spent)})"
        )
    lines.append("")
    lines.append(f"Total budgeted: {money(update, context, draft.total_budgeted)}")
    lines.append(f"Unallocated: {money(update, context, draft.total_income - draft.total_budgeted)}")
    lines.append("")
    lines.append("Edit with /setincome value and /setbudget category value, then /savebudget.")
    return "\n".join(lines)


async def _open_draft(update: Update, context: ContextTypes.DEFAULT_TYPE, user: User) -> Optional[BudgetDraft]:
    """The draft being edited, opening this month's budget when there is none."""
    draft: Optional[BudgetDraft] = context.user_data.get("budget_draft")
    month = budgets.current_month()
    if draft is not None and draft.budget.user_id == user.uid and draft.budget.month == month:
        return draft
    try:
        budget = await asyncio.to_thread(budgets.get_or_create_budget, get_client(context), user.uid, month)
    except Exception as e:
        logger.exception("Failed to load budget for %s", user.uid)
        await update.message.reply_text(f"❌ Failed to load budget: {e}")
        return None
    draft = BudgetDraft(budget)
    context.user_data["budget_draft"] = draft
    return draft


async def budget_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = await require_user(update, context)
    if user is None:
        return
    context.user_data.pop("budget_draft", None)
    draft = await _open_draft(update, context, user)
    if draft is not None:
        await update.message.reply_text(_describe_draft(update, context, draft))


async def set_income_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/setincome value"""
    user = await require_user(update, context)
    if user is None:
        return
    if not context.args:
        await update.message.reply_text("Usage: /setincome value (e.g. /setincome 3000)")
        return
    draft = await _open_draft(update, context, user)
    if draft is None:
        return
    try:
        draft.set_income(parse_number(context.args[0]))
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    await update.message.reply_text(
        f"Income set to {money(update, context, draft.total_income)}. /savebudget to keep it."
    )


async def set_budget_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/setbudget category value"""
    user = await require_user(update, context)
    if user is None:
        return
    if len(context.args or []) < 2:
        await update.message.reply_text("Usage: /setbudget category value (e.g. /setbudget Groceries 400)")
        return
    draft = await _open_draft(update, context, user)
    if draft is None:
        return
    category = " ".join(context.args[:-1]).strip()
    try:
        draft.set_category_budgeted(category, parse_number(context.args[-1]))
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return
    entry = draft.find_category(category)
    await update.message.reply_text(
        f"{entry.category}: {money(update, context, entry.budgeted)}. /savebudget to keep it."
    )


async def save_budget_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    user = await require_user(update, context)
    if user is None:
        return
    draft: Optional[BudgetDraft] = context.user_data.get("budget_draft")
    if draft is None:
        await update.message.reply_text("Nothing to save. Open your budget with /budget first.")
        return
    try:
        await asyncio.to_thread(draft.save, get_client(context))
    except BudgetConflictError:
        logger.warning("Gave up saving budget %s for %s", draft.budget.id, user.uid)
        await update.message.reply_text("⚠️ Your budget keeps changing elsewhere. Open it again with /budget.")
        return
    except Exception as e:
        logger.exception("Failed to save budget %s", draft.budget.id)
        await update.message.reply_text(f"❌ Failed to save budget: {e}")
        return
    context.user_data.pop("budget_draft", None)
    await update.message.reply_text("✅ Budget settings saved!")


async def chart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends the budgeted vs. spent chart for this month."""
    user = await require_user(update, context)
    if user is None:
        return
    month = budgets.current_month()
    try:
        summary = await asyncio.to_thread(budgets.compute_summary, get_client(context), user.uid, month)
    except Exception as e:
        logger.exception("Failed to compute summary for %s", user.uid)
        await update.message.reply_text(f"❌ Failed to load your budget: {e}")
        return

    chart_buffer = charts.generate_budget_chart(summary, get_settings(update, context).currency)
    if chart_buffer is None:
        await update.message.reply_text("Nothing to chart yet. Set allocations with /budget first!")
        return
    chart_buffer.name = "budget_chart.png"
    await update.message.reply_photo(photo=chart_buffer, caption=f"Budgeted vs. spent, {month}")


async def balance_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends the monthly income vs. expenses chart."""
    user = await require_user(update, context)
    if user is None:
        return
    try:
        transactions = await asyncio.to_thread(ledger.get_transactions, get_client(context), user.uid)
    except Exception as e:
        logger.exception("Failed to load transactions for %s", user.uid)
        await update.message.reply_text(f"❌ Failed to load transactions: {e}")
        return

    chart_buffer = charts.generate_balance_chart(transactions, get_settings(update, context).currency)
    if chart_buffer is None:
        await update.message.reply_text("Not enough data for a balance yet. Record some transactions first!")
        return
    chart_buffer.name = "balance_chart.png"
    await update.message.reply_photo(photo=chart_buffer, caption="Here is your monthly balance:")
