# products/serializers/__init__.py

from .category import CategorySerializer
from .product import ProductSerializer
from .stock_movement import StockMovementCreateSerializer, StockMovementSerializer

__all__ = [
    "CategorySerializer",
    "ProductSerializer",
    "StockMovementSerializer",
    "StockMovementCreateSerializer",
]
