"""
PRODUCT VIEWSET

Purpose:
- Catalog endpoints (CRUD) for products
- Low stock report (stock <= min_stock)

Key rules:
- stock is seeded on create and read-only afterwards (movements only)
- products referenced by the ledger cannot be deleted
"""

from django.db.models import F, ProtectedError
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from products.models import Product
from products.serializers.product import ProductSerializer


class ProductViewSet(viewsets.ModelViewSet):
    """
    Product endpoints.

    - CRUD
    - GET /products/products/low-stock/
    """

    serializer_class = ProductSerializer
    filterset_fields = ["category"]

    def get_queryset(self):
        return Product.objects.select_related("category").order_by("-created_at")

    # -----------------------------
    # Delete (ledger-safe)
    # -----------------------------
    @extend_schema(
        responses={
            204: OpenApiResponse(description="Deleted"),
            409: OpenApiResponse(description="Product has stock movements"),
        }
    )
    def destroy(self, request, *args, **kwargs):
        product = self.get_object()
        try:
            product.delete()
        except ProtectedError:
            return Response(
                {"detail": "Product has stock movements and cannot be deleted."},
                status=status.HTTP_409_CONFLICT,
            )
        return Response(status=status.HTTP_204_NO_CONTENT)

    # -----------------------------
    # Report: Low stock
    # -----------------------------
    @extend_schema(responses={200: ProductSerializer(many=True)})
    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        """
        GET /products/products/low-stock/

        Products at or below their min_stock, lowest stock first.
        """
        qs = (
            self.get_queryset()
            .filter(stock__lte=F("min_stock"))
            .order_by("stock", "name")
        )

        data = self.get_serializer(qs, many=True).data
        return Response({"count": len(data), "results": data})
