# products/tests/test_movement_processor.py

import uuid
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase, override_settings

from products.models import Product, StockMovement
from products.services import stock_repository
from products.services.exceptions import (
    InsufficientStockError,
    InvalidKindError,
    InvalidQuantityError,
    PersistenceFailureError,
    ProductNotFoundError,
)
from products.services.movements import record_movement

User = get_user_model()


@override_settings(STOCK_MOVEMENT_RETRY_BACKOFF=0)
class MovementProcessorTests(TestCase):
    """
    Movement processor tests.

    GUARANTEES:
    - stock == initial + sum(IN) - sum(OUT) for accepted movements
    - Rejections leave no ledger row and no stock change
    - Bad quantity / kind is rejected before the product is looked up
    - Ledger row + stock write commit together or not at all
    """

    def setUp(self):
        self.user = User.objects.create_user(
            email="clerk@example.com",
            password="password123",
            name="Clerk",
        )
        self.product = Product.objects.create(name="Widget", stock=10, min_stock=2)

    def _record(self, kind, quantity, *, product_id=None, reason=""):
        return record_movement(
            product_id=product_id or self.product.id,
            actor_id=self.user.id,
            kind=kind,
            quantity=quantity,
            reason=reason,
        )

    def _stock(self) -> int:
        self.product.refresh_from_db()
        return self.product.stock

    # --------------------------------------------------
    # Happy path + scenario
    # --------------------------------------------------

    def test_in_then_out_scenario(self):
        result = self._record("IN", 5)
        self.assertEqual(result.new_stock, 15)
        self.assertEqual(result.movement.kind, StockMovement.Kind.IN)
        self.assertEqual(result.movement.quantity, 5)
        self.assertEqual(self._stock(), 15)

        with self.assertRaises(InsufficientStockError) as ctx:
            self._record("OUT", 20)
        self.assertEqual(ctx.exception.data["available"], 15)
        self.assertEqual(ctx.exception.data["requested"], 20)
        self.assertEqual(self._stock(), 15)

        result = self._record("OUT", 15)
        self.assertEqual(result.new_stock, 0)
        self.assertEqual(self._stock(), 0)

        with self.assertRaises(InsufficientStockError):
            self._record("OUT", 1)
        self.assertEqual(self._stock(), 0)

        self.assertEqual(StockMovement.objects.filter(product=self.product).count(), 2)

    def test_final_stock_matches_ledger_sum(self):
        operations = [
            ("IN", 3),
            ("OUT", 4),
            ("IN", 10),
            ("OUT", 1),
            ("OUT", 7),
            ("IN", 2),
            ("OUT", 13),
        ]
        for kind, qty in operations:
            self._record(kind, qty)

        expected = 10 + sum(q if k == "IN" else -q for k, q in operations)
        ledger_total = sum(
            m.signed_quantity for m in StockMovement.objects.filter(product=self.product)
        )

        self.assertEqual(self._stock(), expected)
        self.assertEqual(self._stock(), 10 + ledger_total)

    def test_exact_stock_out_reaches_zero(self):
        result = self._record("OUT", 10)
        self.assertEqual(result.new_stock, 0)

    def test_actor_and_reason_are_recorded(self):
        result = self._record("IN", 1, reason="  supplier delivery  ")

        movement = StockMovement.objects.get(pk=result.movement.pk)
        self.assertEqual(movement.performed_by_id, self.user.id)
        self.assertEqual(movement.reason, "supplier delivery")
        self.assertEqual(movement.product_id, self.product.id)

    def test_kind_must_match_exactly(self):
        with self.assertNumQueries(0):
            for bad in ("in", "out", "Out", " OUT ", "IN\n"):
                with self.assertRaises(InvalidKindError):
                    self._record(bad, 2)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    # --------------------------------------------------
    # Rejections (side-effect free)
    # --------------------------------------------------

    def test_insufficient_stock_leaves_no_trace(self):
        with self.assertRaises(InsufficientStockError):
            self._record("OUT", 11)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_invalid_quantity_rejected_before_lookup(self):
        missing = uuid.uuid4()
        with self.assertNumQueries(0):
            for bad in (0, -1, "3", 1.5, True, None):
                with self.assertRaises(InvalidQuantityError):
                    self._record("IN", bad, product_id=missing)

    def test_invalid_kind_rejected_before_lookup(self):
        missing = uuid.uuid4()
        with self.assertNumQueries(0):
            for bad in ("", "MOVE", "INOUT", None, 1):
                with self.assertRaises(InvalidKindError):
                    self._record(bad, 1, product_id=missing)

    def test_quantity_above_stock_range_rejected_before_lookup(self):
        with self.assertNumQueries(0):
            for bad in (Product.MAX_STOCK + 1, 10**20):
                with self.assertRaises(InvalidQuantityError):
                    self._record("IN", bad)

    def test_in_past_stock_ceiling_leaves_no_trace(self):
        product = Product.objects.create(name="Bulk", stock=Product.MAX_STOCK - 1)

        with self.assertRaises(InvalidQuantityError) as ctx:
            self._record("IN", 2, product_id=product.id)

        self.assertEqual(ctx.exception.data["available"], Product.MAX_STOCK - 1)
        product.refresh_from_db()
        self.assertEqual(product.stock, Product.MAX_STOCK - 1)
        self.assertFalse(StockMovement.objects.exists())

        result = self._record("IN", 1, product_id=product.id)
        self.assertEqual(result.new_stock, Product.MAX_STOCK)

    def test_quantity_checked_before_kind(self):
        with self.assertRaises(InvalidQuantityError):
            self._record("MOVE", 0)

    def test_unknown_product(self):
        with self.assertRaises(ProductNotFoundError):
            self._record("IN", 1, product_id=uuid.uuid4())

        self.assertFalse(StockMovement.objects.exists())

    def test_malformed_product_id(self):
        for bad in ("not-a-uuid", "12345", 42):
            with self.assertRaises(ProductNotFoundError) as ctx:
                self._record("IN", 1, product_id=bad)
            self.assertEqual(ctx.exception.code, "PRODUCT_NOT_FOUND")

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    # --------------------------------------------------
    # Atomicity + retries
    # --------------------------------------------------

    def test_ledger_failure_rolls_back_stock_write(self):
        with patch(
            "products.services.ledger.append_movement",
            side_effect=DatabaseError("disk full"),
        ):
            with self.assertRaises(PersistenceFailureError):
                self._record("OUT", 4)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_stock_write_failure_leaves_no_movement(self):
        with patch.object(
            stock_repository,
            "_compare_and_swap",
            side_effect=DatabaseError("connection lost"),
        ):
            with self.assertRaises(PersistenceFailureError):
                self._record("IN", 4)

        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())

    def test_stale_write_is_retried(self):
        real_cas = stock_repository._compare_and_swap
        calls = []

        def flaky(*args):
            calls.append(args)
            if len(calls) == 1:
                return 0
            return real_cas(*args)

        with patch.object(stock_repository, "_compare_and_swap", side_effect=flaky):
            result = self._record("OUT", 3)

        self.assertEqual(len(calls), 2)
        self.assertEqual(result.new_stock, 7)
        self.assertEqual(self._stock(), 7)
        self.assertEqual(StockMovement.objects.count(), 1)

    @override_settings(STOCK_MOVEMENT_MAX_RETRIES=3)
    def test_retries_exhausted_surface_persistence_failure(self):
        with patch.object(stock_repository, "_compare_and_swap", return_value=0) as cas:
            with self.assertRaises(PersistenceFailureError) as ctx:
                self._record("OUT", 3)

        self.assertEqual(cas.call_count, 3)
        self.assertEqual(ctx.exception.data["attempts"], 3)
        self.assertEqual(self._stock(), 10)
        self.assertFalse(StockMovement.objects.exists())
