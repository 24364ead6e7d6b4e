# products/urls.py

"""
PRODUCTS URLS

Purpose:
- Register product domain routes under /api/products/
    /products/categories/
    /products/products/            (+ low-stock/)
    /products/movements/           (+ product/<product_id>/)
"""

from django.urls import include, path
from rest_framework.routers import SimpleRouter

from products.views import CategoryViewSet, ProductViewSet, StockMovementViewSet

# SimpleRouter: the project already owns "api-root" (backend/urls.py)
router = SimpleRouter()

router.register(r"categories", CategoryViewSet, basename="categories")
router.register(r"products", ProductViewSet, basename="products")
router.register(r"movements", StockMovementViewSet, basename="movements")

urlpatterns = [
    path("", include(router.urls)),
]
