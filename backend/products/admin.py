from django.contrib import admin
from mptt.admin import DraggableMPTTAdmin
from .models import Category, Product


@admin.register(Category)
class CategoryAdmin(DraggableMPTTAdmin):
    list_display = ("tree_actions", "indented_title", "order", "is_active")
    list_display_links = ("indented_title",)
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price", "stock_quantity", "is_active", "is_available")
    list_filter = ("category", "is_active", "is_available")
    search_fields = ("name",)
