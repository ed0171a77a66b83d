"""Unit tests for the accounts User model."""
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import IntegrityError
from django.test import TestCase

from marketplace.test_factories import make_item

User = get_user_model()


class UserModelTests(TestCase):
    def test_full_name_falls_back_to_username(self):
        user = User.objects.create_user(username="alice", email="alice@example.com", password="secret123")
        self.assertEqual(user.full_name, "alice")
        user.first_name, user.last_name = "Alice", "Rao"
        self.assertEqual(user.full_name, "Alice Rao")

    def test_pincode_must_be_six_digits(self):
        user = User(username="bob", email="bob@example.com", pincode="40001")
        user.set_password("secret123")
        with self.assertRaises(ValidationError) as ctx:
            user.full_clean()
        self.assertIn("pincode", ctx.exception.message_dict)

        user.pincode = "400001"
        user.full_clean()

    def test_email_is_unique(self):
        User.objects.create_user(username="carol", email="carol@example.com", password="x")
        with self.assertRaises(IntegrityError):
            User.objects.create_user(username="carol2", email="carol@example.com", password="x")

    def test_reference_lists_hold_each_item_once(self):
        seller = User.objects.create_user(username="dev", email="dev@example.com", password="x")
        item = make_item(seller=seller)
        seller.active_listings.add(item)
        seller.watchlist.add(item)
        seller.watchlist.add(item)
        self.assertEqual(seller.active_listings.count(), 1)
        self.assertEqual(seller.watchlist.count(), 1)
        self.assertEqual(list(item.active_listed_by.all()), [seller])
