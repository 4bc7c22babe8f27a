import asyncio
import logging

from telegram import Update
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from budgly.bot.session import get_auth
from budgly.core.exceptions import ValidationError
from budgly.utils.text_utils import validate_login, validate_registration

logger = logging.getLogger(__name__)


async def _forget_credentials(update: Update) -> None:
    """Deletes the message that carried a password, when the bot is allowed to."""
    try:
        await update.message.delete()
    except TelegramError as e:
        logger.debug("Could not delete credentials message: %s", e)


def _args(context: ContextTypes.DEFAULT_TYPE, count: int) -> list:
    args = list(context.args or [])
    return (args + [None] * count)[:count]


async def register_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/register email password confirm"""
    email, password, confirm_password = _args(context, 3)
    chat = update.effective_chat
    await _forget_credentials(update)

    try:
        validate_registration(email, password, confirm_password)
    except ValidationError as e:
        await chat.send_message(f"⚠️ {e}\nUsage: /register email password confirm")
        return

    try:
        user = await asyncio.to_thread(get_auth(context).sign_up, email, password)
    except Exception as e:
        logger.exception("Sign-up failed for %s", email)
        await chat.send_message(f"❌ Registration error: {e}")
        return

    if get_auth(context).current_user is None:
        await chat.send_message(
            f"🎉 Account created for {user.email if user else email}! "
            "Confirm your email, then /login."
        )
    else:
        await chat.send_message("🎉 Account created successfully! You are signed in. Try /budget or /add.")


async def login_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/login email password"""
    email, password = _args(context, 2)
    chat = update.effective_chat
    await _forget_credentials(update)

    try:
        validate_login(email, password)
    except ValidationError as e:
        await chat.send_message(f"⚠️ {e}\nUsage: /login email password")
        return

    try:
        user = await asyncio.to_thread(get_auth(context).sign_in, email, password)
    except Exception as e:
        logger.exception("Sign-in failed for %s", email)
        await chat.send_message(f"❌ Login error: {e}")
        return

    await chat.send_message(f"👋 Welcome, {user.display_name or user.email}!")


async def logout_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    auth = get_auth(context)
    if auth.current_user is None:
        await update.message.reply_text("You are not signed in.")
        return
    try:
        await asyncio.to_thread(auth.sign_out)
    except Exception as e:
        logger.exception("Sign-out failed")
        await update.message.reply_text(f"❌ Logout error: {e}")
        return
    context.user_data.pop("budget_draft", None)
    context.user_data.pop("pending_transaction", None)
    await update.message.reply_text("👋 Signed out. See you soon!")
