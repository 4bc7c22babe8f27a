import asyncio
import logging
from typing import List

from telegram import Update
from telegram.ext import ContextTypes

from budgly.bot.session import get_client, money, require_user
from budgly.core import ledger
from budgly.core.exceptions import ValidationError
from budgly.core.models import EXPENSE, Transaction
from budgly.utils.text_utils import parse_month

logger = logging.getLogger(__name__)

MAX_LISTED = 40


def format_transaction(update: Update, context: ContextTypes.DEFAULT_TYPE, transaction: Transaction) -> str:
    sign = "-" if transaction.type == EXPENSE else "+"
    description = f" {transaction.description}" if transaction.description else ""
    return (
        f"• {transaction.date.strftime('%Y-%m-%d')} {sign}{money(update, context, transaction.amount)}"
        f" {transaction.category}{description} [id {transaction.id}]"
    )


async def transactions_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/transactions [YYYY-MM]: newest first, optionally one month only."""
    user = await require_user(update, context)
    if user is None:
        return

    month = None
    if context.args:
        try:
            month = parse_month(context.args[0])
        except ValidationError as e:
            await update.message.reply_text(f"⚠️ {e}\nUsage: /transactions [YYYY-MM]")
            return

    try:
        transactions: List[Transaction] = await asyncio.to_thread(
            ledger.get_transactions, get_client(context), user.uid
        )
    except Exception as e:
        logger.exception("Failed to load transactions for %s", user.uid)
        await update.message.reply_text(f"❌ Failed to load transactions: {e}")
        return

    if month:
        transactions = ledger.filter_by_month(transactions, month)
    period = f" for {month}" if month else ""
    if not transactions:
        await update.message.reply_text(f"No transactions{period} yet. Use /add to record one.")
        return

    lines = [format_transaction(update, context, t) for t in transactions[:MAX_LISTED]]
    if len(transactions) > MAX_LISTED:
        lines.append(f"…and {len(transactions) - MAX_LISTED} more.")
    totals = ledger.calculate_totals(transactions)
    lines.append("")
    lines.append(
        f"Income {money(update, context, totals['income'])} · "
        f"Expenses {money(update, context, totals['expenses'])} · "
        f"Balance {money(update, context, totals['balance'])}"
    )
    await update.message.reply_text(f"🧾 Transactions{period}:\n\n" + "\n".join(lines))


async def delete_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/delete id"""
    user = await require_user(update, context)
    if user is None:
        return
    if not context.args:
        await update.message.reply_text("Usage: /delete id (ids are shown by /transactions)")
        return

    transaction_id = context.args[0].strip()
    client = get_client(context)
    try:
        owned = {t.id for t in await asyncio.to_thread(ledger.get_transactions, client, user.uid)}
        if transaction_id not in owned:
            await update.message.reply_text(f"Transaction {transaction_id} not found.")
            return
        await asyncio.to_thread(ledger.delete_transaction, client, transaction_id)
    except Exception as e:
        logger.exception("Failed to delete transaction %s", transaction_id)
        await update.message.reply_text(f"❌ Failed to delete transaction: {e}")
        return

    await update.message.reply_text("🗑️ Transaction deleted. /home shows the updated spending.")
