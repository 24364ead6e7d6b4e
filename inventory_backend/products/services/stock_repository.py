# products/services/stock_repository.py

"""
PRODUCT STOCK REPOSITORY

The only code path that writes Product.stock after creation.

Concurrency:
- with_product_for_update() runs under transaction.atomic()
- Locks the product row with select_for_update() (Postgres: row lock held
  until the OUTERMOST transaction commits, so callers can add writes that
  commit with it)
- Writes with compare-and-swap on the value that was read; a mismatch means
  another writer got in (backend without row locks) -> StaleStockError
- SQLite has no row locks; settings open its transactions IMMEDIATE so the
  whole read-check-write runs under the database write lock
"""

from __future__ import annotations

from typing import Callable

from django.core.exceptions import ValidationError
from django.db import transaction

from products.models import Product
from products.services.exceptions import InsufficientStockError, ProductNotFoundError


class StaleStockError(Exception):
    """Stock changed between the locked read and the write (retryable)."""


def get_product(product_id) -> Product | None:
    try:
        return Product.objects.filter(pk=product_id).first()
    except (ValidationError, ValueError):
        # not a UUID
        return None


def _compare_and_swap(product_id, expected: int, new_stock: int) -> int:
    return Product.objects.filter(pk=product_id, stock=expected).update(stock=new_stock)


def with_product_for_update(product_id, fn: Callable[[Product], int]) -> Product:
    """
    Run fn(product) against a locked product and commit the stock it returns.

    fn receives the locked Product (current stock in product.stock) and returns
    the new stock value, or raises to reject. A raise leaves stock untouched.
    A negative result is rejected with InsufficientStockError; an id that is
    absent or not a valid UUID raises ProductNotFoundError.

    Returns the product with .stock set to the committed value.
    """
    with transaction.atomic():
        try:
            product = (
                Product.objects.select_for_update()
                .filter(pk=product_id)
                .first()
            )
        except (ValidationError, ValueError) as exc:
            raise ProductNotFoundError(product_id=product_id) from exc
        if product is None:
            raise ProductNotFoundError(product_id=product_id)

        current = int(product.stock)
        new_stock = int(fn(product))

        if new_stock < 0:
            raise InsufficientStockError(
                available=current,
                requested=current - new_stock,
            )

        if _compare_and_swap(product.pk, current, new_stock) != 1:
            raise StaleStockError(
                f"Product {product.pk} stock changed during update (expected {current})"
            )

        product.stock = new_stock
        return product
