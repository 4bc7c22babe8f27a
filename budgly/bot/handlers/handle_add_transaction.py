import asyncio
import logging
from typing import List

from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes, ConversationHandler

from budgly.bot.handlers.common import send_confirmation_message
from budgly.bot.handlers.states import (
    ASKING_AMOUNT,
    ASKING_CATEGORY,
    ASKING_CONFIRMATION,
    ASKING_DESCRIPTION,
    ASKING_TYPE,
)
from budgly.bot.session import get_client, require_user
from budgly.core import budgets
from budgly.core.exceptions import ValidationError
from budgly.core.ledger import TRANSACTION_CATEGORIES
from budgly.core.models import User
from budgly.utils.text_utils import parse_amount, parse_transaction_type

logger = logging.getLogger(__name__)

TYPE_KEYBOARD = [["Expense 💸", "Income 💰"]]


def _keyboard(options: List[str], per_row: int = 3) -> ReplyKeyboardMarkup:
    rows = [options[i:i + per_row] for i in range(0, len(options), per_row)]
    return ReplyKeyboardMarkup(rows, one_time_keyboard=True, resize_keyboard=True)


def category_options(context: ContextTypes.DEFAULT_TYPE, user: User) -> List[str]:
    """Standard categories followed by the ones allocated in this month's budget."""
    options = list(TRANSACTION_CATEGORIES)
    try:
        budget = budgets.get_budget(get_client(context), user.uid, budgets.current_month())
    except Exception as e:
        # the keyboard is only a convenience; typing a category still works
        logger.warning("Could not load budget categories for %s: %s", user.uid, e)
        return options
    if budget is not None:
        for entry in budget.category_budgets:
            if entry.category not in options:
                options.append(entry.category)
    return options


async def start_add_transaction(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Entry point of /add. With arguments, skips straight to confirmation."""
    user = await require_user(update, context)
    if user is None:
        return ConversationHandler.END

    context.user_data["pending_transaction"] = {}
    if context.args:
        return await _quick_add(update, context)

    await update.message.reply_text(
        "➕ New transaction. Is it an expense or an income?",
        reply_markup=ReplyKeyboardMarkup(TYPE_KEYBOARD, one_time_keyboard=True, resize_keyboard=True),
    )
    return ASKING_TYPE


async def _quick_add(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """/add type amount category description..."""
    args = context.args
    if len(args) < 4:
        await update.message.reply_text(
            "Usage: /add expense 50 Food Lunch with friends\n"
            "Or just /add and I'll ask step by step."
        )
        return ConversationHandler.END
    try:
        transaction_type = parse_transaction_type(args[0])
        amount = parse_amount(args[1])
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e}")
        return ConversationHandler.END

    context.user_data["pending_transaction"].update({
        "type": transaction_type,
        "amount": amount,
        "category": args[2],
        "description": " ".join(args[3:]),
    })
    await send_confirmation_message(update, context, context.user_data["pending_transaction"])
    return ASKING_CONFIRMATION


async def handle_type(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    text = (update.message.text or "").split()
    try:
        transaction_type = parse_transaction_type(text[0] if text else "")
    except ValidationError:
        await update.message.reply_text(
            "Please answer 'Expense' or 'Income'.",
            reply_markup=ReplyKeyboardMarkup(TYPE_KEYBOARD, one_time_keyboard=True, resize_keyboard=True),
        )
        return ASKING_TYPE

    context.user_data.setdefault("pending_transaction", {})["type"] = transaction_type
    await update.message.reply_text("💰 How much?", reply_markup=ReplyKeyboardRemove())
    return ASKING_AMOUNT


async def handle_amount(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    try:
        amount = parse_amount(update.message.text)
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e} (e.g. 12.50)")
        return ASKING_AMOUNT

    context.user_data.setdefault("pending_transaction", {})["amount"] = amount
    user = await require_user(update, context)
    if user is None:
        return ConversationHandler.END
    options = await asyncio.to_thread(category_options, context, user)
    await update.message.reply_text(
        "🏷️ Which category? Pick one or type your own.",
        reply_markup=_keyboard(options),
    )
    return ASKING_CATEGORY


async def handle_category(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    category = (update.message.text or "").strip()
    if not category:
        await update.message.reply_text("Please type a category name.")
        return ASKING_CATEGORY

    context.user_data.setdefault("pending_transaction", {})["category"] = category
    await update.message.reply_text("📝 Add a short description.", reply_markup=ReplyKeyboardRemove())
    return ASKING_DESCRIPTION


async def handle_description(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    description = (update.message.text or "").strip()
    if not description:
        await update.message.reply_text("Please fill in a description.")
        return ASKING_DESCRIPTION

    pending = context.user_data.setdefault("pending_transaction", {})
    pending["description"] = description
    await send_confirmation_message(update, context, pending)
    return ASKING_CONFIRMATION
