# budgly/bot/session.py
from typing import Optional

from telegram import Update
from telegram.ext import ContextTypes

from budgly.core.auth import AuthGateway
from budgly.core.models import User
from budgly.core.settings import SETTINGS_STORAGE_KEY, SettingsStore, format_currency

# Everything a command needs comes from context: the client factory and the
# settings path live in bot_data, the per-user gateway and stores in user_data.


def get_auth(context: ContextTypes.DEFAULT_TYPE) -> AuthGateway:
    """This user's auth gateway, with a Supabase client of its own."""
    auth = context.user_data.get("auth")
    if auth is None:
        client_factory = context.bot_data["client_factory"]
        auth = AuthGateway(client_factory())
        context.user_data["auth"] = auth
    return auth


def get_client(context: ContextTypes.DEFAULT_TYPE):
    """Supabase client of the signed-in user (requests carry their token)."""
    return get_auth(context).client


def get_settings(update: Update, context: ContextTypes.DEFAULT_TYPE) -> SettingsStore:
    store = context.user_data.get("settings")
    if store is None:
        key = f"{SETTINGS_STORAGE_KEY}:{update.effective_user.id}"
        store = SettingsStore(context.bot_data["settings_path"], key=key)
        context.user_data["settings"] = store
    return store


def money(update: Update, context: ContextTypes.DEFAULT_TYPE, amount: float) -> str:
    return format_currency(amount, get_settings(update, context).currency)


async def require_user(update: Update, context: ContextTypes.DEFAULT_TYPE) -> Optional[User]:
    """Signed-in user, or None after telling them to sign in."""
    user = get_auth(context).current_user
    if user is None:
        await update.effective_chat.send_message("🔒 Please /login or /register first.")
    return user
