# tests/test_text_utils.py
import unittest

from budgly.core.exceptions import ValidationError
from budgly.utils.text_utils import (
    parse_amount,
    parse_month,
    parse_number,
    parse_transaction_type,
    validate_login,
    validate_registration,
)


class TestTextUtils(unittest.TestCase):
    def test_parse_number(self):
        self.assertEqual(parse_number("50"), 50.0)
        self.assertEqual(parse_number(" 12,50 "), 12.5)
        self.assertEqual(parse_number("0"), 0.0)

    def test_parse_number_empty(self):
        with self.assertRaisesRegex(ValidationError, "Please enter an amount"):
            parse_number("   ")
        with self.assertRaisesRegex(ValidationError, "Please enter an amount"):
            parse_number(None)

    def test_parse_number_invalid(self):
        for text in ["abc", "R$ 7", "nan", "inf", "1.2.3"]:
            with self.assertRaisesRegex(ValidationError, "valid amount"):
                parse_number(text)

    def test_parse_amount_rejects_zero_and_negative(self):
        with self.assertRaises(ValidationError):
            parse_amount("0")
        with self.assertRaises(ValidationError):
            parse_amount("-3")
        self.assertEqual(parse_amount("0", allow_zero=True), 0.0)

    def test_parse_month(self):
        self.assertEqual(parse_month("2024-05"), "2024-05")
        for text in ["2024-5", "2024-13", "May", "", None]:
            with self.assertRaisesRegex(ValidationError, "YYYY-MM"):
                parse_month(text)

    def test_parse_transaction_type(self):
        self.assertEqual(parse_transaction_type(" Expense "), "expense")
        self.assertEqual(parse_transaction_type("INCOME"), "income")
        with self.assertRaises(ValidationError):
            parse_transaction_type("transfer")

    def test_validate_login(self):
        validate_login("a@b.c", "secret")
        with self.assertRaisesRegex(ValidationError, "fill in all fields"):
            validate_login("", "secret")

    def test_validate_registration(self):
        validate_registration("a@b.c", "secret", "secret")
        with self.assertRaisesRegex(ValidationError, "fill in all fields"):
            validate_registration("a@b.c", "secret", "")
        with self.assertRaisesRegex(ValidationError, "do not match"):
            validate_registration("a@b.c", "secret", "secreT")
        with self.assertRaisesRegex(ValidationError, "at least 6"):
            validate_registration("a@b.c", "abc", "abc")


if __name__ == "__main__":
    unittest.main()
