import logging

from telegram import Update
from telegram.ext import ContextTypes

from budgly.bot.session import get_settings
from budgly.core.exceptions import SettingsStorageError, ValidationError
from budgly.core.settings import CURRENCIES, LANGUAGES

logger = logging.getLogger(__name__)


async def currency_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/currency [code]: lists the catalog, or picks one."""
    store = get_settings(update, context)
    if not context.args:
        lines = ["💱 Currencies:"]
        for currency in CURRENCIES.values():
            marker = " ✅" if currency == store.currency else ""
            lines.append(f"• {currency.code} {currency.symbol} {currency.name}{marker}")
        lines.append("")
        lines.append("Change with /currency code (e.g. /currency EUR)")
        await update.message.reply_text("\n".join(lines))
        return

    try:
        currency = store.set_currency(context.args[0])
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e}. Use /currency to see the options.")
        return
    except SettingsStorageError:
        logger.exception("Failed to save currency for %s", store.key)
        await update.message.reply_text("❌ Could not save your settings right now. Please try again later.")
        return
    await update.message.reply_text(f"Currency set to {currency.name} ({currency.symbol}).")


async def language_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """/language [code]: lists the catalog, or picks one."""
    store = get_settings(update, context)
    if not context.args:
        lines = ["🌐 Languages:"]
        for language in LANGUAGES.values():
            marker = " ✅" if language == store.language else ""
            lines.append(f"• {language.code} {language.native_name} ({language.name}){marker}")
        lines.append("")
        lines.append("Change with /language code (e.g. /language pt)")
        await update.message.reply_text("\n".join(lines))
        return

    try:
        language = store.set_language(context.args[0])
    except ValidationError as e:
        await update.message.reply_text(f"⚠️ {e}. Use /language to see the options.")
        return
    except SettingsStorageError:
        logger.exception("Failed to save language for %s", store.key)
        await update.message.reply_text("❌ Could not save your settings right now. Please try again later.")
        return
    await update.message.reply_text(f"Language set to {language.native_name}.")
