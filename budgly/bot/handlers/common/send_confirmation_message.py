from typing import Any, Dict

from telegram import ReplyKeyboardMarkup, Update
from telegram.ext import ContextTypes
from telegram.helpers import escape_markdown

from budgly.bot.session import money
from budgly.core.models import EXPENSE

CONFIRM_KEYBOARD = [["Yes ✅", "No ❌"]]


async def send_confirmation_message(
    update: Update, context: ContextTypes.DEFAULT_TYPE, transaction_info: Dict[str, Any]
) -> None:
    """Shows the pending transaction and asks the user to confirm it."""
    if transaction_info["type"] == EXPENSE:
        header = "Confirm this *expense*? 💸"
    else:
        header = "Confirm this *income*? 💰"

    message_text = (
        f"{header}\n"
        f"💰 Amount: {money(update, context, transaction_info['amount'])}\n"
        f"🏷️ Category: {escape_markdown(transaction_info['category'])}\n"
        f"📝 Description: {escape_markdown(transaction_info['description'])}"
    )
    reply_markup = ReplyKeyboardMarkup(CONFIRM_KEYBOARD, one_time_keyboard=True, resize_keyboard=True)
    await update.message.reply_text(message_text, reply_markup=reply_markup, parse_mode="Markdown")
