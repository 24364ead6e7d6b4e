# products/services/movements.py

"""
MOVEMENT PROCESSOR

Purpose:
- Record an IN/OUT movement against one product and move its stock counter,
  as ONE atomic unit (ledger row + stock write commit together or not at all).

Rules:
- quantity must be an integer in 1..Product.MAX_STOCK and kind exactly the
  string IN or OUT; both are checked before the product is even looked up
  (no queries on bad input)
- OUT may not drive stock below zero; the rejection happens inside the
  locked scope and before any write
- Conflicts (stale compare-and-swap, SQLite busy) retry the whole unit a
  bounded number of times, then surface as PersistenceFailureError
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError, OperationalError, transaction

from products.models import Product, StockMovement
from products.services import ledger, stock_repository
from products.services.exceptions import (
    InsufficientStockError,
    InvalidKindError,
    InvalidQuantityError,
    PersistenceFailureError,
    StockMovementError,
)
from products.services.stock_repository import StaleStockError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MovementResult:
    movement: StockMovement
    new_stock: int


def _to_quantity(value) -> int:
    # bool is an int subclass in Python
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(requested=value)
    if value <= 0 or value > Product.MAX_STOCK:
        raise InvalidQuantityError(requested=value)
    return value


def _to_kind(value) -> str:
    if not isinstance(value, str) or value not in StockMovement.Kind.values:
        raise InvalidKindError(kind=value)
    return value


def _max_attempts() -> int:
    return max(1, int(getattr(settings, "STOCK_MOVEMENT_MAX_RETRIES", 3)))


def _backoff() -> float:
    return float(getattr(settings, "STOCK_MOVEMENT_RETRY_BACKOFF", 0.05))


def _apply_once(*, product_id, actor_id, kind: str, quantity: int, reason: str) -> MovementResult:
    def next_stock(product: Product) -> int:
        current = int(product.stock)
        if kind == StockMovement.Kind.IN:
            candidate = current + quantity
            if candidate > Product.MAX_STOCK:
                raise InvalidQuantityError(
                    f"Stock cannot exceed {Product.MAX_STOCK}. "
                    f"Available: {current}, Requested IN: {quantity}",
                    available=current,
                    requested=quantity,
                )
            return candidate

        candidate = current - quantity
        if candidate < 0:
            raise InsufficientStockError(
                f"Insufficient stock. Available: {current}, Requested OUT: {quantity}",
                available=current,
                requested=quantity,
            )
        return candidate

    with transaction.atomic():
        product = stock_repository.with_product_for_update(product_id, next_stock)
        movement = ledger.append_movement(
            product=product,
            actor_id=actor_id,
            kind=kind,
            quantity=quantity,
            reason=reason,
        )

    return MovementResult(movement=movement, new_stock=product.stock)


def record_movement(
    *,
    product_id,
    actor_id,
    kind,
    quantity,
    reason: str = "",
) -> MovementResult:
    """
    Record one stock movement.

    Raises:
        InvalidQuantityError, InvalidKindError: bad input (no query issued)
        ProductNotFoundError: unknown product_id
        InsufficientStockError: OUT larger than current stock
        PersistenceFailureError: commit failed; nothing was applied
    """
    quantity = _to_quantity(quantity)
    kind = _to_kind(kind)
    reason = (reason or "").strip()

    attempts = _max_attempts()

    for attempt in range(1, attempts + 1):
        try:
            result = _apply_once(
                product_id=product_id,
                actor_id=actor_id,
                kind=kind,
                quantity=quantity,
                reason=reason,
            )
        except (StaleStockError, OperationalError) as exc:
            logger.warning(
                "stock.movement.conflict",
                extra={
                    "product_id": str(product_id),
                    "attempt": attempt,
                    "max_attempts": attempts,
                    "error": str(exc),
                },
            )
            if attempt == attempts:
                raise PersistenceFailureError(
                    "Stock movement could not be saved after retries",
                    product_id=product_id,
                    attempts=attempts,
                ) from exc
            time.sleep(_backoff() * attempt)
            continue
        except StockMovementError as exc:
            logger.info(
                "stock.movement.rejected",
                extra={
                    "product_id": str(product_id),
                    "kind": kind,
                    "qty": quantity,
                    "code": exc.code,
                },
            )
            raise
        except DatabaseError as exc:
            logger.exception(
                "stock.movement.persistence_failure",
                extra={"product_id": str(product_id), "kind": kind, "qty": quantity},
            )
            raise PersistenceFailureError(product_id=product_id) from exc

        logger.info(
            "stock.movement.recorded",
            extra={
                "movement_id": result.movement.pk,
                "product_id": str(product_id),
                "actor_id": str(actor_id),
                "kind": kind,
                "qty": quantity,
                "new_stock": result.new_stock,
            },
        )
        return result
