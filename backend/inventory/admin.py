from django.contrib import admin
from .models import Ingredient, ProductIngredient, StockMovement


class ProductIngredientInline(admin.TabularInline):
    model = ProductIngredient
    extra = 1
    autocomplete_fields = ["product"]


@admin.register(Ingredient)
class IngredientAdmin(admin.ModelAdmin):
    list_display = ("name", "quantity", "unit", "min_quantity", "is_active")
    search_fields = ("name",)
    inlines = [ProductIngredientInline]


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = ("created_at", "operation", "ingredient", "product", "quantity_change", "reference")
    list_filter = ("operation",)
    readonly_fields = [f.name for f in StockMovement._meta.fields]
