# products/services/ledger.py

"""
STOCK LEDGER STORE

Append-only log of StockMovement rows.

Rules:
- append_movement() only runs inside an open atomic block: the row must
  commit (or roll back) together with the product stock write.
- Identifiers come from the database sequence, so for one product (whose
  writes are serialized by the stock repository) id order == commit order.
- Reads are always newest first (-id).
"""

from __future__ import annotations

from django.db import transaction
from django.db.models import QuerySet

from products.models import Product, StockMovement


def append_movement(
    *,
    product: Product,
    actor_id,
    kind: str,
    quantity: int,
    reason: str = "",
) -> StockMovement:
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError(
            "append_movement() must run inside the stock update transaction"
        )

    return StockMovement.objects.create(
        product=product,
        performed_by_id=actor_id,
        kind=kind,
        quantity=quantity,
        reason=reason or "",
    )


def _ledger() -> QuerySet[StockMovement]:
    return StockMovement.objects.select_related("product", "performed_by").order_by("-id")


def list_movements() -> QuerySet[StockMovement]:
    """Full ledger, most recent first."""
    return _ledger()


def list_movements_for_product(product_id) -> QuerySet[StockMovement]:
    """One product's movements, most recent first."""
    return _ledger().filter(product_id=product_id)
