# products/tests/test_movement_api.py

import uuid
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from products.models import Product, StockMovement
from products.services.exceptions import PersistenceFailureError

User = get_user_model()


class StockMovementAPITests(TestCase):
    """
    Stock movement HTTP boundary.

    GUARANTEES:
    - POST records a movement as the authenticated user (201)
    - Domain errors map to 400 / 404 / 500 with a stable error code
    - Listings are paginated and newest first
    """

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(
            email="staff@example.com",
            password="password123",
            name="Store Staff",
        )
        self.client.force_authenticate(self.user)

        self.product = Product.objects.create(name="Widget", stock=10, min_stock=2)
        self.list_url = reverse("movements-list")

    def _post(self, **payload):
        body = {"product_id": str(self.product.id), "kind": "IN", "quantity": 1}
        body.update(payload)
        return self.client.post(self.list_url, body, format="json")

    def _stock(self):
        self.product.refresh_from_db()
        return self.product.stock

    # --------------------------------------------------
    # POST
    # --------------------------------------------------

    def test_record_in_movement(self):
        response = self._post(kind="IN", quantity=5, reason="delivery")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["new_stock"], 15)
        self.assertEqual(response.data["message"], "Movement recorded")

        movement = response.data["movement"]
        self.assertEqual(movement["kind"], "IN")
        self.assertEqual(movement["quantity"], 5)
        self.assertEqual(movement["reason"], "delivery")
        self.assertEqual(str(movement["performed_by"]), str(self.user.id))
        self.assertEqual(movement["user_name"], "Store Staff")
        self.assertEqual(movement["product_name"], "Widget")
        self.assertEqual(self._stock(), 15)

    def test_actor_comes_from_request_user(self):
        other = User.objects.create_user(
            email="other@example.com", password="password123", name="Other"
        )
        response = self._post(performed_by=str(other.id))

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(
            StockMovement.objects.get().performed_by_id,
            self.user.id,
        )

    def test_legacy_type_field_is_accepted(self):
        response = self.client.post(
            self.list_url,
            {"product_id": str(self.product.id), "type": "OUT", "quantity": 4},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["movement"]["kind"], "OUT")
        self.assertEqual(response.data["new_stock"], 6)

    def test_insufficient_stock(self):
        response = self._post(kind="OUT", quantity=11)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INSUFFICIENT_STOCK")
        self.assertEqual(response.data["data"]["available"], 10)
        self.assertIn("Available: 10", response.data["detail"])
        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_invalid_quantity(self):
        for qty in (0, -3):
            response = self._post(quantity=qty)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertEqual(response.data["code"], "INVALID_QUANTITY")

        self.assertFalse(StockMovement.objects.exists())

    def test_invalid_kind(self):
        response = self._post(kind="MOVE")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_KIND")

    def test_kind_is_case_and_whitespace_sensitive(self):
        for kind in ("out", "in", " OUT ", "IN "):
            response = self._post(kind=kind)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, kind)
            self.assertEqual(response.data["code"], "INVALID_KIND")

        legacy = self.client.post(
            self.list_url,
            {"product_id": str(self.product.id), "type": "out", "quantity": 1},
            format="json",
        )
        self.assertEqual(legacy.status_code, status.HTTP_400_BAD_REQUEST)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_quantity_beyond_stock_range(self):
        for qty in (10**20, Product.MAX_STOCK + 1):
            response = self._post(kind="IN", quantity=qty)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
            self.assertIn("quantity", response.data)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_in_past_stock_ceiling(self):
        Product.objects.filter(pk=self.product.pk).update(stock=Product.MAX_STOCK)

        response = self._post(kind="IN", quantity=1)

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["code"], "INVALID_QUANTITY")
        self.assertEqual(self._stock(), Product.MAX_STOCK)

    def test_unknown_product(self):
        response = self._post(product_id=str(uuid.uuid4()))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data["code"], "PRODUCT_NOT_FOUND")

    def test_malformed_payload(self):
        response = self.client.post(
            self.list_url,
            {"product_id": "not-a-uuid", "kind": "IN", "quantity": "many"},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("product_id", response.data)
        self.assertIn("quantity", response.data)

    def test_missing_kind(self):
        response = self.client.post(
            self.list_url,
            {"product_id": str(self.product.id), "quantity": 1},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(StockMovement.objects.exists())

    def test_persistence_failure_is_500(self):
        with patch(
            "products.views.stock_movement.record_movement",
            side_effect=PersistenceFailureError(product_id=self.product.id),
        ):
            response = self._post()

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["code"], "PERSISTENCE_FAILURE")
        self.assertEqual(response.data["data"]["product_id"], str(self.product.id))

    def test_requires_authentication(self):
        anon = APIClient()
        response = anon.post(
            self.list_url,
            {"product_id": str(self.product.id), "kind": "IN", "quantity": 1},
            format="json",
        )

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(self._stock(), 10)

    def test_movements_are_read_only_resources(self):
        response = self._post()
        movement_id = response.data["movement"]["id"]

        detail = f"{self.list_url}{movement_id}/"
        self.assertEqual(
            self.client.delete(detail).status_code, status.HTTP_404_NOT_FOUND
        )
        self.assertEqual(StockMovement.objects.count(), 1)

    # --------------------------------------------------
    # GET
    # --------------------------------------------------

    def test_list_newest_first(self):
        ids = [self._post(quantity=q).data["movement"]["id"] for q in (1, 2, 3)]

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 3)
        self.assertEqual([m["id"] for m in response.data["results"]], ids[::-1])

    def test_list_filter_by_kind(self):
        self._post(kind="IN", quantity=2)
        self._post(kind="OUT", quantity=1)

        response = self.client.get(self.list_url, {"kind": "OUT"})

        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["kind"], "OUT")

    def test_list_for_product(self):
        other = Product.objects.create(name="Gadget", stock=3)
        mine = self._post(quantity=2).data["movement"]["id"]
        self._post(product_id=str(other.id), quantity=1)

        url = reverse("movements-for-product", kwargs={"product_id": str(self.product.id)})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)
        self.assertEqual(response.data["results"][0]["id"], mine)

    def test_list_for_product_without_movements(self):
        url = reverse("movements-for-product", kwargs={"product_id": str(uuid.uuid4())})
        response = self.client.get(url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 0)
