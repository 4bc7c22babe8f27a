# budgly/main.py
import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Coroutine, Optional

from flask import Flask, jsonify, request
from telegram import Update
from telegram.ext import Application

from budgly import config
from budgly.bot.bot_setup import setup_bot
from budgly.core.db import get_supabase_client

logger = logging.getLogger(__name__)


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # httpx logs every Telegram/Supabase request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_config() -> dict:
    if not config.TELEGRAM_BOT_TOKEN:
        raise RuntimeError("TELEGRAM_BOT_TOKEN is not set")
    if not config.SUPABASE_URL or not config.SUPABASE_KEY:
        raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
    return {
        "TELEGRAM_BOT_TOKEN": config.TELEGRAM_BOT_TOKEN,
        "CLIENT_FACTORY": get_supabase_client,
        "SETTINGS_PATH": config.SETTINGS_PATH,
    }


class BotLoop:
    """Event loop, on its own thread, that the bot application lives on.

    Flask runs each async view in a fresh loop; updates are handed over to
    this one, where the application was initialized.
    """

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, name="bot-loop", daemon=True)
        self._thread.start()

    def submit(self, coro: Coroutine) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self) -> None:
        self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join()
        self.loop.close()


def create_app(
    ptb_application: Application,
    webhook_path: str = config.WEBHOOK_PATH,
    bot_loop: Optional[BotLoop] = None,
) -> Flask:
    """Flask app that feeds Telegram webhook updates to the bot.

    With ``bot_loop`` the updates are processed there; otherwise in the
    request's own loop.
    """
    flask_app = Flask(__name__)

    @flask_app.route(webhook_path, methods=["POST"])
    async def telegram_webhook():
        if not request.is_json:
            logger.error("Webhook received non-JSON request")
            return jsonify({"status": "error", "message": "Request must be JSON"}), 400

        update_json = request.get_json()
        try:
            update = Update.de_json(update_json, ptb_application.bot)
            if bot_loop is None:
                await ptb_application.process_update(update)
            else:
                await asyncio.wrap_future(bot_loop.submit(ptb_application.process_update(update)))
        except Exception:
            logger.exception("Failed to process Telegram update")
            return jsonify({"status": "error", "message": "Failed to process update"}), 500
        return jsonify({"status": "ok"}), 200

    return flask_app


def create_wsgi_app() -> Flask:
    """Entry point for a WSGI server, e.g. gunicorn 'budgly.main:create_wsgi_app()'."""
    configure_logging()
    ptb_application = setup_bot(build_config())
    bot_loop = BotLoop()
    bot_loop.submit(ptb_application.initialize()).result()
    logger.info("Webhook app ready on %s", config.WEBHOOK_PATH)
    return create_app(ptb_application, bot_loop=bot_loop)


def main() -> None:
    """Runs the bot with long polling."""
    configure_logging()
    ptb_application = setup_bot(build_config())
    logger.info("Starting polling")
    ptb_application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
