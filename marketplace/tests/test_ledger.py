from datetime import timedelta
from unittest import mock

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone

from marketplace import ledger
from marketplace.exceptions import NotAvailable, NotOwner, SelfPurchase, SyncFailure
from marketplace.models import Item, ItemStatus
from marketplace.test_factories import item_fields, make_item, make_raw_item, make_user


def ids(manager):
    return set(manager.values_list("pk", flat=True))


class CreateTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")

    def test_new_item_is_available_and_in_active_listings(self):
        item = make_item(seller=self.seller)
        self.assertEqual(item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(item.buyer)
        self.assertIsNone(item.sold_at)
        self.assertEqual(ids(self.seller.active_listings), {item.pk})

    def test_status_and_buyer_cannot_be_supplied(self):
        other = make_user("other")
        item = ledger.create(self.seller, **item_fields(status=ItemStatus.SOLD, buyer=other))
        self.assertEqual(item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(item.buyer_id)

    def test_devices_need_working_status(self):
        with self.assertRaises(ValidationError) as ctx:
            ledger.create(self.seller, **item_fields(category="Devices"))
        self.assertIn("working_status", ctx.exception.message_dict)
        self.assertFalse(Item.objects.exists())

        item = ledger.create(self.seller, **item_fields(category="Devices", working_status="Works fine"))
        self.assertEqual(item.category, "Devices")

    def test_books_do_not_need_working_status(self):
        item = ledger.create(self.seller, **item_fields(category="Books", working_status=""))
        self.assertTrue(item.pk)

    def test_photo_count_is_enforced(self):
        for photos in ([], ["a.jpg", "b.jpg", "c.jpg", "d.jpg", "e.jpg"]):
            with self.assertRaises(ValidationError):
                ledger.create(self.seller, **item_fields(photos=photos))
        self.assertFalse(Item.objects.exists())

    def test_unknown_category_is_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.create(self.seller, **item_fields(category="Furniture"))

    def test_create_rolled_back_when_reference_update_fails(self):
        with mock.patch("marketplace.sync.on_create", side_effect=DatabaseError("boom")):
            with self.assertRaises(SyncFailure):
                make_item(seller=self.seller)
        self.assertFalse(Item.objects.exists())


class PurchaseTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.buyer = make_user("buyer")
        self.item = make_item(seller=self.seller)

    def test_purchase_marks_item_sold_and_moves_references(self):
        self.buyer.watchlist.add(self.item)

        ledger.purchase(self.item, self.buyer)

        self.item.refresh_from_db()
        self.assertEqual(self.item.status, ItemStatus.SOLD)
        self.assertEqual(self.item.buyer, self.buyer)
        self.assertIsNotNone(self.item.sold_at)
        self.assertEqual(ids(self.seller.sold_items), {self.item.pk})
        self.assertEqual(ids(self.seller.active_listings), set())
        self.assertEqual(ids(self.buyer.bought_items), {self.item.pk})
        self.assertEqual(ids(self.buyer.watchlist), set())

    def test_second_purchase_fails_and_leaves_loser_untouched(self):
        loser = make_user("loser")
        ledger.purchase(self.item, self.buyer)
        stale = Item.objects.get(pk=self.item.pk)

        with self.assertRaises(NotAvailable):
            ledger.purchase(stale, loser)

        self.item.refresh_from_db()
        self.assertEqual(self.item.buyer, self.buyer)
        self.assertEqual(ids(loser.bought_items), set())

    def test_purchase_with_stale_instance_sees_committed_state(self):
        stale = Item.objects.get(pk=self.item.pk)
        ledger.purchase(self.item, self.buyer)
        self.assertEqual(stale.status, ItemStatus.AVAILABLE)
        with self.assertRaises(NotAvailable):
            ledger.purchase(stale, make_user("late"))

    def test_self_purchase_rejected(self):
        with self.assertRaises(SelfPurchase):
            ledger.purchase(self.item, self.seller)
        self.item.refresh_from_db()
        self.assertEqual(self.item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(self.item.buyer_id)

    def test_delisted_item_cannot_be_bought(self):
        ledger.delist(self.item, self.seller)
        with self.assertRaises(NotAvailable):
            ledger.purchase(self.item, self.buyer)

    def test_failed_reference_update_rolls_back_sale(self):
        self.buyer.watchlist.add(self.item)
        with mock.patch("marketplace.sync.on_purchase", side_effect=DatabaseError("boom")):
            with self.assertRaises(SyncFailure) as ctx:
                ledger.purchase(self.item, self.buyer)
        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)

        self.assertEqual(self.item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(self.item.buyer_id)
        row = Item.objects.get(pk=self.item.pk)
        self.assertEqual(row.status, ItemStatus.AVAILABLE)
        self.assertIsNone(row.buyer_id)
        self.assertIsNone(row.sold_at)
        self.assertEqual(ids(self.seller.active_listings), {self.item.pk})
        self.assertEqual(ids(self.buyer.bought_items), set())
        self.assertEqual(ids(self.buyer.watchlist), {self.item.pk})

    def test_partial_reference_update_is_rolled_back(self):
        def half_sync(item, buyer):
            buyer.bought_items.add(item)
            raise RuntimeError("seller row unavailable")

        with mock.patch("marketplace.sync.on_purchase", side_effect=half_sync):
            with self.assertRaises(SyncFailure):
                ledger.purchase(self.item, self.buyer)
        self.assertEqual(ids(self.buyer.bought_items), set())
        self.assertEqual(Item.objects.get(pk=self.item.pk).status, ItemStatus.AVAILABLE)


class DelistRelistTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.item = make_item(seller=self.seller)

    def test_delist_and_relist(self):
        ledger.delist(self.item, self.seller)
        self.assertEqual(Item.objects.get(pk=self.item.pk).status, ItemStatus.UNAVAILABLE)
        self.assertEqual(ids(self.seller.active_listings), set())

        ledger.relist(self.item, self.seller)
        self.assertEqual(Item.objects.get(pk=self.item.pk).status, ItemStatus.AVAILABLE)
        self.assertEqual(ids(self.seller.active_listings), {self.item.pk})

    def test_only_seller_may_delist_or_relist(self):
        stranger = make_user("stranger")
        with self.assertRaises(NotOwner):
            ledger.delist(self.item, stranger)
        ledger.delist(self.item, self.seller)
        with self.assertRaises(NotOwner):
            ledger.relist(self.item, stranger)

    def test_status_preconditions(self):
        with self.assertRaises(NotAvailable):
            ledger.relist(self.item, self.seller)
        ledger.delist(self.item, self.seller)
        with self.assertRaises(NotAvailable):
            ledger.delist(self.item, self.seller)

    def test_sold_item_cannot_be_delisted(self):
        ledger.purchase(self.item, make_user("buyer"))
        with self.assertRaises(NotAvailable):
            ledger.delist(self.item, self.seller)

    def test_failed_delist_sync_keeps_item_available(self):
        with mock.patch("marketplace.sync.on_delist", side_effect=RuntimeError("boom")):
            with self.assertRaises(SyncFailure):
                ledger.delist(self.item, self.seller)
        self.assertEqual(self.item.status, ItemStatus.AVAILABLE)
        self.assertEqual(Item.objects.get(pk=self.item.pk).status, ItemStatus.AVAILABLE)
        self.assertEqual(ids(self.seller.active_listings), {self.item.pk})


class RepairStatusTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.buyer = make_user("buyer")

    def test_sold_without_buyer_becomes_available(self):
        item = make_raw_item(seller=self.seller, status=ItemStatus.SOLD, sold_at=timezone.now())
        ledger.repair_status(item)
        item.refresh_from_db()
        self.assertEqual(item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(item.sold_at)
        self.assertIsNone(item.buyer_id)

    def test_buyer_without_sold_status_becomes_sold(self):
        item = make_raw_item(seller=self.seller, buyer=self.buyer, status=ItemStatus.AVAILABLE)
        ledger.repair_status(item)
        item.refresh_from_db()
        self.assertEqual(item.status, ItemStatus.SOLD)
        self.assertIsNotNone(item.sold_at)
        self.assertEqual(item.buyer, self.buyer)

    def test_existing_sold_at_is_kept(self):
        when = timezone.now() - timedelta(days=3)
        item = make_raw_item(seller=self.seller, buyer=self.buyer, status=ItemStatus.PENDING, sold_at=when)
        ledger.repair_status(item)
        item.refresh_from_db()
        self.assertEqual(item.sold_at, when)

    def test_idempotent(self):
        item = make_raw_item(seller=self.seller, status=ItemStatus.SOLD)
        ledger.repair_status(item)
        with mock.patch.object(Item, "save") as save:
            ledger.repair_status(item)
        save.assert_not_called()

    def test_fix_status_reports_change_and_resyncs_lists(self):
        item = make_raw_item(seller=self.seller, status=ItemStatus.UNAVAILABLE)
        self.seller.sold_items.add(item)

        _, changed = ledger.fix_status(item, self.seller)
        self.assertTrue(changed)
        self.assertEqual(item.status, ItemStatus.AVAILABLE)
        self.assertEqual(ids(self.seller.active_listings), {item.pk})
        self.assertEqual(ids(self.seller.sold_items), set())

        _, changed = ledger.fix_status(item, self.seller)
        self.assertFalse(changed)

    def test_fix_status_is_seller_only(self):
        item = make_raw_item(seller=self.seller)
        with self.assertRaises(NotOwner):
            ledger.fix_status(item, self.buyer)


class UpdateTests(TestCase):
    def setUp(self):
        self.seller = make_user("seller")
        self.item = make_item(seller=self.seller)

    def test_update_ignores_lifecycle_fields(self):
        other = make_user("other")
        ledger.update(self.item, self.seller, name="Calculus", status=ItemStatus.SOLD, buyer=other, photos=[])
        self.item.refresh_from_db()
        self.assertEqual(self.item.name, "Calculus")
        self.assertEqual(self.item.status, ItemStatus.AVAILABLE)
        self.assertIsNone(self.item.buyer_id)
        self.assertEqual(len(self.item.photos), 1)

    def test_update_revalidates(self):
        with self.assertRaises(ValidationError):
            ledger.update(self.item, self.seller, category="Art", working_status="")

    def test_update_is_seller_only(self):
        with self.assertRaises(NotOwner):
            ledger.update(self.item, make_user("other"), name="Mine now")

    @override_settings(MARKETPLACE_MAX_PHOTOS=4)
    def test_add_photos_truncates(self):
        ledger.add_photos(self.item, self.seller, ["b.jpg", "c.jpg", "d.jpg", "e.jpg"])
        self.item.refresh_from_db()
        self.assertEqual(self.item.photos, ["items/maths-front.jpg", "b.jpg", "c.jpg", "d.jpg"])

    def test_add_photos_needs_photos(self):
        with self.assertRaises(ValidationError):
            ledger.add_photos(self.item, self.seller, [])

    def test_update_from_stale_copy_keeps_sale(self):
        buyer = make_user("buyer")
        stale = Item.objects.get(pk=self.item.pk)
        ledger.purchase(self.item, buyer)

        ledger.update(stale, self.seller, name="Renamed")

        row = Item.objects.get(pk=self.item.pk)
        self.assertEqual(row.name, "Renamed")
        self.assertEqual(row.status, ItemStatus.SOLD)
        self.assertEqual(row.buyer, buyer)
        self.assertIsNotNone(row.sold_at)
        self.assertEqual(stale.status, ItemStatus.SOLD)
        self.assertEqual(ids(buyer.bought_items), {self.item.pk})
        self.assertEqual(ids(self.seller.sold_items), {self.item.pk})

    def test_add_photos_from_stale_copy_keeps_sale(self):
        stale = Item.objects.get(pk=self.item.pk)
        ledger.purchase(self.item, make_user("buyer"))
        ledger.add_photos(stale, self.seller, ["b.jpg"])
        row = Item.objects.get(pk=self.item.pk)
        self.assertEqual(row.status, ItemStatus.SOLD)
        self.assertEqual(len(row.photos), 2)
