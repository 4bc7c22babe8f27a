# tests/test_bot_commands.py
import tempfile
import threading
import unittest
from unittest.mock import MagicMock, patch

import matplotlib

matplotlib.use("Agg")

from bot_helpers import USER, make_context, make_update, replies  # noqa: E402

from budgly.bot.commands import ALL_COMMANDS  # noqa: E402
from budgly.bot.commands.account import login_command, logout_command, register_command  # noqa: E402
from budgly.bot.commands.budget import (  # noqa: E402
    budget_command,
    chart_command,
    home_command,
    save_budget_command,
    set_budget_command,
    set_income_command,
)
from budgly.bot.commands.settings import currency_command, language_command  # noqa: E402
from budgly.bot.commands.transactions import delete_command, transactions_command  # noqa: E402
from budgly.bot.commands.utils import help_command, start_command  # noqa: E402
from budgly.core import budgets, ledger  # noqa: E402


class BotTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.context = make_context(self.tmp.name)
        self.client = self.context.user_data["auth"].client

    def tearDown(self):
        self.tmp.cleanup()

    async def run_command(self, command, *args, text=None):
        self.context.args = list(args)
        update = make_update(text)
        await command(update, self.context)
        return update

    def add(self, amount, category, type="expense", description="test"):
        return ledger.add_transaction(self.client, USER.uid, {
            "amount": amount, "category": category, "type": type, "description": description,
        })


class TestGeneralCommands(BotTestCase):
    async def test_start_and_help(self):
        update = await self.run_command(start_command)
        self.assertIn("/login", replies(update)[0])

        update = await self.run_command(help_command)
        self.assertIn("/savebudget", replies(update)[0])

    def test_every_command_registered(self):
        self.assertEqual(
            set(ALL_COMMANDS),
            {"start", "help", "register", "login", "logout", "transactions", "delete", "home", "budget",
             "setincome", "setbudget", "savebudget", "chart", "balance", "currency", "language"},
        )

    async def test_signed_out_user_is_asked_to_login(self):
        self.context.user_data["auth"].current_user = None

        update = await self.run_command(home_command)

        update.effective_chat.send_message.assert_awaited_once()
        self.assertIn("/login", replies(update)[0])


class TestAccountCommands(BotTestCase):
    def setUp(self):
        super().setUp()
        self.auth = self.context.user_data["auth"]

    async def test_login_deletes_message_and_signs_in(self):
        self.auth.sign_in.return_value = USER

        update = await self.run_command(login_command, "ana@example.com", "secret1")

        update.message.delete.assert_awaited_once()
        self.auth.sign_in.assert_called_once_with("ana@example.com", "secret1")
        self.assertIn("Welcome, Ana", replies(update)[0])

    async def test_login_missing_fields(self):
        update = await self.run_command(login_command, "ana@example.com")

        self.auth.sign_in.assert_not_called()
        self.assertIn("Please fill in all fields", replies(update)[0])

    async def test_login_backend_error_reported(self):
        self.auth.sign_in.side_effect = Exception("Invalid login credentials")

        update = await self.run_command(login_command, "ana@example.com", "nope12")

        self.assertIn("Login error", replies(update)[0])

    async def test_register_password_mismatch(self):
        update = await self.run_command(register_command, "ana@example.com", "secret1", "secret2")

        self.auth.sign_up.assert_not_called()
        self.assertIn("Passwords do not match", replies(update)[0])

    async def test_register_success(self):
        self.auth.sign_up.return_value = USER

        update = await self.run_command(register_command, "ana@example.com", "secret1", "secret1")

        self.auth.sign_up.assert_called_once_with("ana@example.com", "secret1")
        self.assertIn("Account created", replies(update)[0])

    async def test_logout_clears_drafts(self):
        self.context.user_data["budget_draft"] = MagicMock()

        update = await self.run_command(logout_command)

        self.auth.sign_out.assert_called_once()
        self.assertNotIn("budget_draft", self.context.user_data)
        self.assertIn("Signed out", replies(update)[0])


class TestTransactionCommands(BotTestCase):
    async def test_transactions_empty(self):
        update = await self.run_command(transactions_command)
        self.assertIn("No transactions", replies(update)[0])

    async def test_transactions_lists_with_totals(self):
        self.add(1000, "Salary", type="income")
        self.add(40, "Food", description="Market")

        update = await self.run_command(transactions_command)

        text = replies(update)[0]
        self.assertIn("-$40.00 Food Market", text)
        self.assertIn("+$1,000.00 Salary", text)
        self.assertIn("Balance $960.00", text)

    async def test_transactions_bad_month(self):
        update = await self.run_command(transactions_command, "May")
        self.assertIn("YYYY-MM", replies(update)[0])

    async def test_transactions_other_month_is_empty(self):
        self.add(40, "Food")
        update = await self.run_command(transactions_command, "1999-01")
        self.assertIn("No transactions for 1999-01", replies(update)[0])

    async def test_store_calls_run_off_the_event_loop(self):
        threads = []

        def recording_get_transactions(client, user_id):
            threads.append(threading.current_thread())
            return []

        with patch("budgly.core.ledger.get_transactions", side_effect=recording_get_transactions):
            await self.run_command(transactions_command)
            await self.run_command(delete_command, "t1")

        self.assertEqual(len(threads), 2)
        self.assertTrue(all(t is not threading.current_thread() for t in threads))

    async def test_delete_own_transaction(self):
        transaction_id = self.add(40, "Food")

        update = await self.run_command(delete_command, transaction_id)

        self.assertEqual(ledger.get_transactions(self.client, USER.uid), [])
        self.assertIn("deleted", replies(update)[0])

    async def test_delete_unknown_transaction(self):
        other_id = ledger.add_transaction(self.client, "someone-else", {
            "amount": 1, "category": "x", "type": "income",
        })

        update = await self.run_command(delete_command, other_id)

        self.assertEqual(len(self.client.rows("transactions")), 1)
        self.assertIn("not found", replies(update)[0])


class TestBudgetCommands(BotTestCase):
    async def test_home_without_budget(self):
        self.add(12, "Food")

        update = await self.run_command(home_command)

        text = replies(update)[0]
        self.assertIn("Welcome, Ana", text)
        self.assertIn("No budget for this month yet", text)
        self.assertIn("Recent transactions", text)

    async def test_budget_edit_and_save_flow(self):
        await self.run_command(budget_command)
        await self.run_command(set_income_command, "3000")
        await self.run_command(set_budget_command, "Eating", "out", "400")
        update = await self.run_command(save_budget_command)

        self.assertIn("Budget settings saved", replies(update)[0])
        stored = budgets.get_budget(self.client, USER.uid, budgets.current_month())
        self.assertEqual(stored.total_income, 3000)
        self.assertEqual(stored.find_category("Eating out").budgeted, 400)
        self.assertNotIn("budget_draft", self.context.user_data)

    async def test_home_shows_recomputed_spending(self):
        await self.run_command(budget_command)
        await self.run_command(set_income_command, "3000")
        await self.run_command(set_budget_command, "Food", "400")
        await self.run_command(save_budget_command)
        self.add(50, "Food")
        self.add(30, "Food")

        update = await self.run_command(home_command)

        text = replies(update)[0]
        self.assertIn("Food: $80.00 / $400.00", text)
        self.assertIn("Remaining: $2,920.00", text)

    async def test_set_income_rejects_negative(self):
        update = await self.run_command(set_income_command, "-5")
        self.assertIn("cannot be negative", replies(update)[0])

    async def test_save_without_draft(self):
        update = await self.run_command(save_budget_command)
        self.assertIn("Nothing to save", replies(update)[0])

    async def test_chart_without_budget(self):
        update = await self.run_command(chart_command)
        self.assertIn("Nothing to chart", replies(update)[0])
        update.message.reply_photo.assert_not_awaited()

    async def test_chart_sends_photo(self):
        await self.run_command(set_budget_command, "Food", "400")
        await self.run_command(save_budget_command)

        update = await self.run_command(chart_command)

        update.message.reply_photo.assert_awaited_once()


class TestSettingsCommands(BotTestCase):
    async def test_currency_list_and_change(self):
        update = await self.run_command(currency_command)
        self.assertIn("USD $ US Dollar ✅", replies(update)[0])

        update = await self.run_command(currency_command, "eur")
        self.assertIn("Euro", replies(update)[0])

        self.add(12.5, "Food")
        update = await self.run_command(transactions_command)
        self.assertIn("-12.50 €", replies(update)[0])

    async def test_currency_not_saved_over_unreadable_file(self):
        settings_path = self.context.bot_data["settings_path"]
        settings_path.write_text("{broken", encoding="utf-8")

        update = await self.run_command(currency_command, "EUR")

        self.assertIn("Could not save your settings", replies(update)[0])
        self.assertEqual(settings_path.read_text(encoding="utf-8"), "{broken")

    async def test_currency_unknown(self):
        update = await self.run_command(currency_command, "XYZ")
        self.assertIn("Unknown currency", replies(update)[0])

    async def test_language_change(self):
        update = await self.run_command(language_command, "PT")
        self.assertIn("Português", replies(update)[0])


if __name__ == "__main__":
    unittest.main()
