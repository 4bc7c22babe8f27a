import asyncio
import logging
from typing import Any, Dict

from telegram import ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes

from budgly.bot.session import get_client, money, require_user
from budgly.core import budgets, ledger
from budgly.core.models import EXPENSE, utc_now

logger = logging.getLogger(__name__)


async def register_transaction(
    update: Update, context: ContextTypes.DEFAULT_TYPE, transaction_info: Dict[str, Any]
) -> bool:
    """Saves the confirmed transaction and tells the user how it went."""
    user = await require_user(update, context)
    if user is None:
        return False

    client = get_client(context)
    data = {
        "amount": transaction_info["amount"],
        "description": transaction_info["description"],
        "category": transaction_info["category"],
        "type": transaction_info["type"],
        "date": transaction_info.get("date") or utc_now(),
    }
    try:
        await asyncio.to_thread(ledger.add_transaction, client, user.uid, data, update_budget=False)
    except Exception as e:
        logger.exception("Failed to record transaction for %s", user.uid)
        await update.message.reply_text(f"❌ Error: {e}", reply_markup=ReplyKeyboardRemove())
        return False

    summary = (
        f"{data['type'].capitalize()} of {money(update, context, data['amount'])} "
        f"({data['description']}) in '{data['category']}'"
    )
    if data["type"] == EXPENSE:
        try:
            await asyncio.to_thread(
                budgets.increment_category_spent, client, user.uid, data["category"], float(data["amount"])
            )
        except Exception as e:
            logger.exception("Recorded transaction but could not update budget for %s", user.uid)
            await update.message.reply_text(
                f"⚠️ {summary} was saved, but this month's budget total could not be updated ({e}). "
                "Don't add it again: /home recomputes spending from your transactions.",
                reply_markup=ReplyKeyboardRemove(),
            )
            return True

    await update.message.reply_text(f"✅ {summary} added successfully! 🎉", reply_markup=ReplyKeyboardRemove())
    return True
