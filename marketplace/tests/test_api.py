from django.contrib.auth.models import Group
from django.test import TestCase
from django.urls import reverse
from rest_framework.test import APIClient

from marketplace import ledger
from marketplace.models import Item, ItemStatus
from marketplace.test_factories import make_item, make_raw_item, make_user


def item_url(item, action=None):
    if action:
        return reverse(f"marketplace:item-{action}", args=[item.pk])
    return reverse("marketplace:item-detail", args=[item.pk])


class ItemApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.seller = make_user("sam", first_name="Sam", last_name="Seller")
        self.buyer = make_user("bea", first_name="Bea", last_name="Buyer")

    def test_create_item(self):
        self.client.force_authenticate(self.seller)
        payload = {
            "name": "Scientific calculator",
            "category": "Devices",
            "photos": ["items/calc.jpg"],
            "age": "2 years",
            "condition": "Good",
            "working_status": "All keys work",
            "missing_parts": "Cover",
            "price": "450.00",
            "mrp": "1200.00",
            "location": "Library",
            "is_original_owner": True,
            "warranty_status": "Expired",
            "has_receipt": False,
            "terms_accepted": True,
            "status": "sold",
        }
        response = self.client.post(reverse("marketplace:item-list"), payload, format="json")
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.data["status"], ItemStatus.AVAILABLE)
        self.assertEqual(response.data["seller"]["username"], "sam")
        item = Item.objects.get(pk=response.data["id"])
        self.assertTrue(self.seller.active_listings.filter(pk=item.pk).exists())

    def test_create_rejects_missing_working_status(self):
        self.client.force_authenticate(self.seller)
        payload = {
            "name": "Cricket bat",
            "category": "Sports Accessories",
            "photos": ["items/bat.jpg"],
            "age": "1 year",
            "condition": "Used",
            "missing_parts": "None",
            "price": "300",
            "mrp": "900",
            "location": "Ground",
            "is_original_owner": True,
            "warranty_status": "None",
            "has_receipt": False,
        }
        response = self.client.post(reverse("marketplace:item-list"), payload, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertIn("working_status", response.data["errors"])

    def test_anonymous_can_browse_but_not_create(self):
        make_item(seller=self.seller)
        sold = make_item(seller=self.seller, name="Sold one")
        ledger.purchase(sold, self.buyer)

        response = self.client.get(reverse("marketplace:item-list"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data), 1)
        self.assertIn("X-Request-ID", response)

        response = self.client.post(reverse("marketplace:item-list"), {}, format="json")
        self.assertIn(response.status_code, (401, 403))

    def test_missing_item_is_404(self):
        response = self.client.get(reverse("marketplace:item-detail", args=[999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_buy(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.buyer)
        response = self.client.post(item_url(item, "buy"))
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.data["message"], "Item purchased successfully. This item is sold to Bea Buyer")
        self.assertEqual(response.data["item"]["status"], ItemStatus.SOLD)
        self.assertEqual(response.data["buyer"]["username"], "bea")

        detail = self.client.get(item_url(item))
        self.assertEqual(detail.data["soldToMessage"], "This item is sold to Bea Buyer")

        self.client.force_authenticate(make_user("late"))
        response = self.client.post(item_url(item, "buy"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data, {"status": "error", "message": "Item is no longer available", "code": "not_available"})

    def test_self_purchase(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.seller)
        response = self.client.post(item_url(item, "buy"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["code"], "self_purchase")

    def test_delist_relist(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.buyer)
        self.assertEqual(self.client.put(item_url(item, "delist")).status_code, 403)

        self.client.force_authenticate(self.seller)
        response = self.client.put(item_url(item, "delist"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["item"]["status"], ItemStatus.UNAVAILABLE)
        self.assertEqual([i["id"] for i in self.client.get(reverse("marketplace:my_delisted")).data], [item.pk])

        response = self.client.put(item_url(item, "relist"))
        self.assertEqual(response.data["item"]["status"], ItemStatus.AVAILABLE)
        self.assertEqual([i["id"] for i in self.client.get(reverse("marketplace:my_active")).data], [item.pk])

    def test_patch_cannot_change_status(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.seller)
        response = self.client.patch(item_url(item), {"price": "199.00", "status": "sold"}, format="json")
        self.assertEqual(response.status_code, 200)
        item.refresh_from_db()
        self.assertEqual(str(item.price), "199.00")
        self.assertEqual(item.status, ItemStatus.AVAILABLE)

    def test_fix_status(self):
        item = make_raw_item(seller=self.seller, status=ItemStatus.SOLD)
        self.client.force_authenticate(self.seller)
        response = self.client.post(item_url(item, "fix-status"))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.data["changed"])
        self.assertEqual(response.data["item"]["status"], ItemStatus.AVAILABLE)

    def test_add_photos(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.seller)
        response = self.client.post(item_url(item, "photos"), {"photos": ["b.jpg", "c.jpg"]}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.data["item"]["photos"]), 3)

    def test_watchlist(self):
        item = make_item(seller=self.seller)
        self.client.force_authenticate(self.buyer)
        self.assertTrue(self.client.post(item_url(item, "watchlist")).data["watching"])
        self.assertTrue(self.client.post(item_url(item, "watchlist")).data["watching"])
        self.assertEqual(len(self.client.get(reverse("marketplace:my_watchlist")).data), 1)

        self.client.post(item_url(item, "buy"))
        self.assertEqual(self.client.get(reverse("marketplace:my_watchlist")).data, [])
        self.assertEqual([i["id"] for i in self.client.get(reverse("marketplace:my_bought")).data], [item.pk])

    def test_fix_all_items(self):
        make_raw_item(seller=self.seller, status=ItemStatus.UNAVAILABLE, name="Drifted")
        self.client.force_authenticate(self.seller)
        response = self.client.post(reverse("marketplace:fix_all_items"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["fixedCount"], 1)
        self.assertEqual(len(response.data["activeListings"]), 1)


class SyncAllApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("marketplace:sync_all")

    def test_requires_marketplace_admin(self):
        self.client.force_authenticate(make_user("regular"))
        response = self.client.post(self.url)
        self.assertEqual(response.status_code, 403)

    def test_admin_runs_sweep(self):
        admin = make_user("mp_admin")
        admin.groups.add(Group.objects.get_or_create(name="Marketplace Admin")[0])
        make_raw_item(seller=admin)
        self.client.force_authenticate(admin)
        response = self.client.post(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["users"], 1)
        self.assertEqual(response.data["fixedUserReferences"], 1)
        self.assertEqual(response.data["errors"], [])


class DistanceApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("marketplace:distance")
        self.user = make_user("bea", pincode="400001")
        self.client.force_authenticate(self.user)

    def test_explicit_pincodes(self):
        response = self.client.post(self.url, {"fromPincode": "400001", "toPincode": "400050"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["note"], "(Mumbai traffic adjustment)")
        self.assertGreater(response.data["distance"], response.data["exactDistance"])

    def test_seller_and_requester_pincodes(self):
        seller = make_user("sam", pincode="400050")
        response = self.client.post(self.url, {"sellerId": seller.pk}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["from"]["pincode"], "400001")
        self.assertEqual(response.data["to"]["pincode"], "400050")

    def test_seller_without_pincode(self):
        seller = make_user("sam")
        response = self.client.post(self.url, {"sellerId": seller.pk}, format="json")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.data["code"], "not_found")

    def test_malformed_pincode_rejected(self):
        for bad in ("4000", "40000a", "4000011"):
            response = self.client.post(self.url, {"fromPincode": bad, "toPincode": "400050"}, format="json")
            self.assertEqual(response.status_code, 400, bad)

    def test_requester_without_pincode(self):
        self.client.force_authenticate(make_user("nopin"))
        response = self.client.post(self.url, {"toPincode": "400050"}, format="json")
        self.assertEqual(response.status_code, 404)


class ProfileApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.url = reverse("marketplace:my_profile")
        self.user = make_user("bea", first_name="Bea", last_name="Buyer")
        self.client.force_authenticate(self.user)

    def test_read_profile(self):
        item = make_item(seller=self.user)
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["name"], "Bea Buyer")
        self.assertEqual(response.data["active_listings"], [item.pk])

    def test_update_pincode_feeds_distance_quote(self):
        response = self.client.patch(self.url, {"pincode": "400001", "college_name": "IIT Bombay"}, format="json")
        self.assertEqual(response.status_code, 200, response.content)
        self.user.refresh_from_db()
        self.assertEqual(self.user.pincode, "400001")
        self.assertEqual(self.user.college_name, "IIT Bombay")

        response = self.client.post(reverse("marketplace:distance"), {"toPincode": "400050"}, format="json")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.data["from"]["pincode"], "400001")

    def test_malformed_pincode_rejected(self):
        for bad in ("40001", "4000011", "40000a", "४००००१"):
            response = self.client.patch(self.url, {"pincode": bad}, format="json")
            self.assertEqual(response.status_code, 400, bad)
        self.user.refresh_from_db()
        self.assertEqual(self.user.pincode, "")

    def test_reference_lists_and_username_are_read_only(self):
        item = make_item(seller=make_user("sam"))
        response = self.client.put(
            self.url, {"username": "mallory", "bought_items": [item.pk], "watchlist": [item.pk]}, format="json"
        )
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.username, "bea")
        self.assertFalse(self.user.bought_items.exists())
        self.assertFalse(self.user.watchlist.exists())

    def test_requires_login(self):
        self.client.force_authenticate(None)
        self.assertIn(self.client.get(self.url).status_code, (401, 403))
