# budgly/config.py
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Telegram
TELEGRAM_BOT_TOKEN = os.getenv("TELEGRAM_BOT_TOKEN")
WEBHOOK_PATH = os.getenv("WEBHOOK_PATH", "/webhook")

# Supabase
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")

TRANSACTIONS_TABLE = "transactions"
BUDGETS_TABLE = "budgets"

# Local settings (currency/language), one JSON blob per chat
SETTINGS_PATH = Path(
    os.getenv("BUDGLY_SETTINGS_PATH", Path(__file__).resolve().parents[1] / "data" / "settings.json")
)

LOG_LEVEL = os.getenv("BUDGLY_LOG_LEVEL", "INFO").upper()
