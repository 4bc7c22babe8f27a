from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.ext import ContextTypes, ConversationHandler

from budgly.bot.handlers.common import CONFIRM_KEYBOARD, register_transaction
from budgly.bot.handlers.states import ASKING_CONFIRMATION


async def handle_confirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    """Handles the Yes/No answer to the pending transaction."""
    user_response = (update.message.text or "").strip().lower()
    pending_transaction = context.user_data.get("pending_transaction")

    if not pending_transaction:
        await update.message.reply_text(
            "Oops! 😬 There is no pending transaction to confirm. Start again with /add.",
            reply_markup=ReplyKeyboardRemove(),
        )
        return ConversationHandler.END

    if user_response in ("yes ✅", "yes", "y"):
        await register_transaction(update, context, pending_transaction)
        context.user_data.pop("pending_transaction", None)
        return ConversationHandler.END

    if user_response in ("no ❌", "no", "n"):
        return await cancel_add_transaction(update, context)

    reply_markup = ReplyKeyboardMarkup(CONFIRM_KEYBOARD, one_time_keyboard=True, resize_keyboard=True)
    await update.message.reply_text("Please answer 'Yes ✅' or 'No ❌'.", reply_markup=reply_markup)
    return ASKING_CONFIRMATION


async def cancel_add_transaction(update: Update, context: ContextTypes.DEFAULT_TYPE) -> int:
    context.user_data.pop("pending_transaction", None)
    await update.message.reply_text(
        "Cancelled. Nothing was saved. 👍", reply_markup=ReplyKeyboardRemove()
    )
    return ConversationHandler.END
