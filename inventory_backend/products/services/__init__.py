from .exceptions import (
    InsufficientStockError,
    InvalidKindError,
    InvalidQuantityError,
    PersistenceFailureError,
    ProductNotFoundError,
    StockMovementError,
)
from .movements import MovementResult, record_movement

__all__ = [
    "record_movement",
    "MovementResult",
    "StockMovementError",
    "InvalidQuantityError",
    "InvalidKindError",
    "ProductNotFoundError",
    "InsufficientStockError",
    "PersistenceFailureError",
]
