# tests/test_db.py
import unittest
from unittest.mock import MagicMock

from supabase import Client

from budgly.core import db


class TestDatabase(unittest.TestCase):
    def setUp(self):
        # Mock Supabase client shared by every test
        self.mock_supabase_client = MagicMock(spec=Client)

        # What .execute() returns
        self.mock_execute = MagicMock(data=[])

        # Stands for the object returned by .table("..."); every chainable
        # method returns it again so .select().eq().order().execute() works
        self.mock_table_methods = MagicMock()
        self.mock_table_methods.insert.return_value = self.mock_table_methods
        self.mock_table_methods.select.return_value = self.mock_table_methods
        self.mock_table_methods.update.return_value = self.mock_table_methods
        self.mock_table_methods.delete.return_value = self.mock_table_methods
        self.mock_table_methods.eq.return_value = self.mock_table_methods
        self.mock_table_methods.order.return_value = self.mock_table_methods
        self.mock_table_methods.limit.return_value = self.mock_table_methods
        self.mock_table_methods.execute.return_value = self.mock_execute

        self.mock_supabase_client.table.return_value = self.mock_table_methods

    # --- transactions ---
    def test_insert_transaction_returns_generated_id(self):
        self.mock_execute.data = [{"id": 42, "amount": 50.0}]

        result = db.insert_transaction(self.mock_supabase_client, {"userId": "u1", "amount": 50.0})

        self.assertEqual(result, "42")
        self.mock_supabase_client.table.assert_called_with("transactions")
        args, _ = self.mock_table_methods.insert.call_args
        self.assertEqual(args[0], {"userId": "u1", "amount": 50.0})

    def test_insert_transaction_propagates_backend_errors(self):
        self.mock_table_methods.execute.side_effect = Exception("Permission denied")

        with self.assertRaises(Exception):
            db.insert_transaction(self.mock_supabase_client, {"userId": "u1"})

    def test_select_transactions_filters_by_user_newest_first(self):
        rows = [{"id": "t2"}, {"id": "t1"}]
        self.mock_execute.data = rows

        result = db.select_transactions(self.mock_supabase_client, "u1")

        self.assertEqual(result, rows)
        self.mock_table_methods.eq.assert_called_once_with("userId", "u1")
        self.mock_table_methods.order.assert_called_once_with("date", desc=True)

    def test_select_transactions_empty(self):
        self.mock_execute.data = None
        self.assertEqual(db.select_transactions(self.mock_supabase_client, "u1"), [])

    def test_delete_transaction_counts_rows(self):
        self.mock_execute.data = [{"id": "t1"}]

        self.assertEqual(db.delete_transaction(self.mock_supabase_client, "t1"), 1)
        self.mock_table_methods.delete.assert_called_once()
        self.mock_table_methods.eq.assert_called_once_with("id", "t1")

    # --- budgets ---
    def test_select_budget_oldest_first_single_row(self):
        self.mock_execute.data = [{"id": "b1", "month": "2024-05"}]

        result = db.select_budget(self.mock_supabase_client, "u1", "2024-05")

        self.assertEqual(result, {"id": "b1", "month": "2024-05"})
        self.mock_supabase_client.table.assert_called_with("budgets")
        self.mock_table_methods.eq.assert_any_call("userId", "u1")
        self.mock_table_methods.eq.assert_any_call("month", "2024-05")
        self.mock_table_methods.order.assert_called_once_with("createdAt")
        self.mock_table_methods.limit.assert_called_once_with(1)

    def test_select_budget_none_when_missing(self):
        self.mock_execute.data = []
        self.assertIsNone(db.select_budget(self.mock_supabase_client, "u1", "2024-05"))

    def test_insert_budget(self):
        self.mock_execute.data = [{"id": "b9"}]
        self.assertEqual(db.insert_budget(self.mock_supabase_client, {"userId": "u1"}), "b9")

    def test_update_budget_stamps_updated_at(self):
        self.mock_execute.data = [{"id": "b1"}]

        self.assertTrue(db.update_budget(self.mock_supabase_client, "b1", {"totalIncome": 3000}))

        args, _ = self.mock_table_methods.update.call_args
        self.assertEqual(args[0]["totalIncome"], 3000)
        self.assertIn("updatedAt", args[0])
        self.mock_table_methods.eq.assert_called_once_with("id", "b1")

    def test_update_budget_conditional_on_version(self):
        self.mock_execute.data = [{"id": "b1"}]

        db.update_budget(self.mock_supabase_client, "b1", {"totalIncome": 1}, expected_updated_at="v1")

        self.mock_table_methods.eq.assert_any_call("id", "b1")
        self.mock_table_methods.eq.assert_any_call("updatedAt", "v1")

    def test_update_budget_no_match_returns_false(self):
        self.mock_execute.data = []
        self.assertFalse(
            db.update_budget(self.mock_supabase_client, "b1", {"totalIncome": 1}, expected_updated_at="old")
        )


if __name__ == "__main__":
    unittest.main()
