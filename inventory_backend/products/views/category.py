# products/views/category.py

from rest_framework import viewsets

from products.models import Category
from products.serializers.category import CategorySerializer


class CategoryViewSet(viewsets.ModelViewSet):
    """
    Category API

    Policy:
    - Any authenticated user can read and manage categories
    - Delete only detaches products (Product.category -> NULL)
    """

    queryset = Category.objects.all().order_by("name", "created_at")
    serializer_class = CategorySerializer
