from core_backend.base import BaseViewSet
from .models import Category, Product
from .serializers import CategorySerializer, ProductSerializer


class CategoryViewSet(BaseViewSet):
    queryset = Category.objects.all()
    serializer_class = CategorySerializer
    ordering = ["order", "name"]


class ProductViewSet(BaseViewSet):
    """
    Catalog CRUD. Each product carries its computed `available_quantity`.
    """

    queryset = Product.objects.all()
    serializer_class = ProductSerializer
    filterset_fields = ["category", "is_active", "is_available"]
    search_fields = ["name"]
    ordering = ["name"]
