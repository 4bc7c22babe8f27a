from telegram import Update
from telegram.ext import ContextTypes

HELP_TEXT = (
    "*Account:*\n"
    "- `/register email password confirm`: create an account.\n"
    "- `/login email password`: sign in.\n"
    "- `/logout`: sign out.\n\n"
    "*Transactions:*\n"
    "- `/add`: record an income or expense step by step (`/cancel` stops).\n"
    "- `/add expense 50 Food Lunch`: same thing in one line.\n"
    "- `/transactions [YYYY-MM]`: list your transactions, newest first.\n"
    "- `/delete id`: delete a transaction.\n\n"
    "*Budget:*\n"
    "- `/home`: this month at a glance.\n"
    "- `/budget`: open this month's budget for editing.\n"
    "- `/setincome value`: monthly income.\n"
    "- `/setbudget category value`: allocation for one category.\n"
    "- `/savebudget`: save your budget edits.\n"
    "- `/chart`: budgeted vs. spent per category.\n"
    "- `/balance`: income vs. expenses per month.\n\n"
    "*Settings:*\n"
    "- `/currency [code]`: show or change the currency.\n"
    "- `/language [code]`: show or change the language."
)


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Sends a welcome message for /start."""
    await update.message.reply_text(
        "Hi! I'm Budgly, your monthly budget keeper. 💰\n\n"
        "Create an account with `/register email password password` "
        "or sign in with `/login email password`, then record what you spend with /add.\n\n"
        "Use /help to see everything I can do.",
        parse_mode="Markdown",
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    await update.message.reply_text(HELP_TEXT, parse_mode="Markdown")
