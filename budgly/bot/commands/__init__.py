# budgly/bot/commands/__init__.py

from .utils import start_command, help_command
from .account import login_command, logout_command, register_command
from .transactions import delete_command, transactions_command
from .budget import (
    balance_command,
    budget_command,
    chart_command,
    home_command,
    save_budget_command,
    set_budget_command,
    set_income_command,
)
from .settings import currency_command, language_command

# command name -> callback, registered in this order
ALL_COMMANDS = {
    "start": start_command,
    "help": help_command,
    "register": register_command,
    "login": login_command,
    "logout": logout_command,
    "transactions": transactions_command,
    "delete": delete_command,
    "home": home_command,
    "budget": budget_command,
    "setincome": set_income_command,
    "setbudget": set_budget_command,
    "savebudget": save_budget_command,
    "chart": chart_command,
    "balance": balance_command,
    "currency": currency_command,
    "language": language_command,
}
