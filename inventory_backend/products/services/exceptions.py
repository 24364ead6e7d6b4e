# products/services/exceptions.py

"""
STOCK MOVEMENT ERRORS

Centralized domain errors for the movement engine.

Every error carries a structured code for programmatic handling:

    try:
        record_movement(...)
    except StockMovementError as e:
        if e.code == "INSUFFICIENT_STOCK":
            print(f"Only {e.data['available']} left")

Client-input errors (INVALID_*, PRODUCT_NOT_FOUND, INSUFFICIENT_STOCK) are
raised before any write. PERSISTENCE_FAILURE means the atomic unit was rolled
back (storage error or retries exhausted).
"""

from __future__ import annotations

from typing import Any


class StockMovementError(Exception):
    """Base exception for all stock movement failures."""

    code = "STOCK_MOVEMENT_ERROR"
    default_message = "Stock movement failed"

    def __init__(self, message: str | None = None, **data: Any):
        self.message = message or self.default_message
        self.data = data
        super().__init__(self.message)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            "detail": self.message,
            "code": self.code,
            "data": {
                k: v if isinstance(v, (int, str)) else str(v)
                for k, v in self.data.items()
            },
        }


class InvalidQuantityError(StockMovementError):
    """Quantity is not a positive integer."""

    code = "INVALID_QUANTITY"
    default_message = "quantity must be an integer greater than 0"


class InvalidKindError(StockMovementError):
    """Kind is not IN or OUT."""

    code = "INVALID_KIND"
    default_message = "kind must be IN or OUT"


class ProductNotFoundError(StockMovementError):
    code = "PRODUCT_NOT_FOUND"
    default_message = "Product does not exist"


class InsufficientStockError(StockMovementError):
    """OUT movement would drive stock below zero."""

    code = "INSUFFICIENT_STOCK"
    default_message = "Insufficient stock"


class PersistenceFailureError(StockMovementError):
    """The movement + stock write could not be committed."""

    code = "PERSISTENCE_FAILURE"
    default_message = "Stock movement could not be saved"
