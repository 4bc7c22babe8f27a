# budgly/bot/bot_setup.py
import logging

from telegram.ext import Application, CommandHandler, ConversationHandler, MessageHandler, filters

from budgly.bot.commands import ALL_COMMANDS
from budgly.bot.handlers import (
    ASKING_AMOUNT,
    ASKING_CATEGORY,
    ASKING_CONFIRMATION,
    ASKING_DESCRIPTION,
    ASKING_TYPE,
    cancel_add_transaction,
    handle_amount,
    handle_category,
    handle_confirmation,
    handle_description,
    handle_type,
    start_add_transaction,
)

logger = logging.getLogger(__name__)

TEXT_ONLY = filters.TEXT & ~filters.COMMAND


def setup_bot(config: dict) -> Application:
    """
    Builds the Telegram application: commands plus the /add conversation.
    Returns it ready for polling or for a webhook server.
    """
    application = Application.builder().token(config["TELEGRAM_BOT_TOKEN"]).build()

    # Each Telegram user gets a Supabase client of their own, so sessions never mix
    application.bot_data["client_factory"] = config["CLIENT_FACTORY"]
    application.bot_data["settings_path"] = config["SETTINGS_PATH"]

    for name, callback in ALL_COMMANDS.items():
        application.add_handler(CommandHandler(name, callback))

    conv_handler = ConversationHandler(
        entry_points=[CommandHandler("add", start_add_transaction)],
        states={
            ASKING_TYPE: [MessageHandler(TEXT_ONLY, handle_type)],
            ASKING_AMOUNT: [MessageHandler(TEXT_ONLY, handle_amount)],
            ASKING_CATEGORY: [MessageHandler(TEXT_ONLY, handle_category)],
            ASKING_DESCRIPTION: [MessageHandler(TEXT_ONLY, handle_description)],
            ASKING_CONFIRMATION: [MessageHandler(TEXT_ONLY, handle_confirmation)],
        },
        fallbacks=[CommandHandler("cancel", cancel_add_transaction)],
    )
    application.add_handler(conv_handler)

    logger.info("Telegram bot configured with %d commands and the /add conversation", len(ALL_COMMANDS))
    return application
