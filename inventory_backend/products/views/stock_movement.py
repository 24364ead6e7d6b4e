"""
STOCK MOVEMENT VIEWSET

Thin HTTP boundary over products.services.movements:
- POST   /products/movements/                       record IN/OUT
- GET    /products/movements/                       full ledger (newest first)
- GET    /products/movements/product/<product_id>/  one product's ledger

The actor is always the authenticated user. Domain errors are mapped to HTTP
status codes here; the service layer knows nothing about HTTP.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from products.serializers.stock_movement import (
    StockMovementCreateSerializer,
    StockMovementSerializer,
)
from products.services import ledger
from products.services.exceptions import (
    InsufficientStockError,
    InvalidKindError,
    InvalidQuantityError,
    PersistenceFailureError,
    ProductNotFoundError,
    StockMovementError,
)
from products.services.movements import record_movement

ERROR_STATUS = {
    InvalidQuantityError.code: status.HTTP_400_BAD_REQUEST,
    InvalidKindError.code: status.HTTP_400_BAD_REQUEST,
    ProductNotFoundError.code: status.HTTP_404_NOT_FOUND,
    InsufficientStockError.code: status.HTTP_400_BAD_REQUEST,
    PersistenceFailureError.code: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class StockMovementViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = StockMovementSerializer
    filterset_fields = ["kind", "product"]

    def get_queryset(self):
        return ledger.list_movements()

    def get_serializer_class(self):
        if self.action == "create":
            return StockMovementCreateSerializer
        return StockMovementSerializer

    @extend_schema(
        request=StockMovementCreateSerializer,
        responses={
            201: OpenApiResponse(description="Movement recorded; body has movement + new_stock"),
            400: OpenApiResponse(description="Invalid quantity/kind or insufficient stock"),
            404: OpenApiResponse(description="Product not found"),
            500: OpenApiResponse(description="Movement could not be persisted"),
        },
    )
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        v = serializer.validated_data

        try:
            result = record_movement(
                product_id=v["product_id"],
                actor_id=request.user.pk,
                kind=v["kind"],
                quantity=v["quantity"],
                reason=v.get("reason", ""),
            )
        except StockMovementError as exc:
            return Response(
                exc.as_dict(),
                status=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            )

        return Response(
            {
                "message": "Movement recorded",
                "movement": StockMovementSerializer(result.movement).data,
                "new_stock": result.new_stock,
            },
            status=status.HTTP_201_CREATED,
        )

    @extend_schema(responses={200: StockMovementSerializer(many=True)})
    @action(
        detail=False,
        methods=["get"],
        url_path=r"product/(?P<product_id>[0-9a-fA-F-]{36})",
    )
    def for_product(self, request, product_id=None):
        qs = self.filter_queryset(ledger.list_movements_for_product(product_id))

        page = self.paginate_queryset(qs)
        if page is not None:
            serializer = StockMovementSerializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        return Response(StockMovementSerializer(qs, many=True).data)
