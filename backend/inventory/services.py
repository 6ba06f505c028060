from collections import OrderedDict
from decimal import Decimal
import logging
import math

from django.db import transaction
from django.db.models import F

from core_backend.exceptions import InsufficientStock, ValidationError
from products.models import Product
from .models import Ingredient, ProductIngredient, StockMovement

logger = logging.getLogger(__name__)


class InventoryService:
    """
    Stock ledger for products and ingredients.

    A product whose recipe has at least one entry with a positive
    `quantity_required` is recipe-tracked: its availability and deductions go
    through the ingredients. Otherwise the product's own `stock_quantity` is used.
    Deduct/restore never reject; callers validate availability first.
    """

    @staticmethod
    def _log_stock_operation(operation, previous_quantity, new_quantity, *, ingredient=None, product=None, reference=""):
        StockMovement.objects.create(
            ingredient=ingredient,
            product=product,
            operation=operation,
            quantity_change=Decimal(new_quantity) - Decimal(previous_quantity),
            previous_quantity=previous_quantity,
            new_quantity=new_quantity,
            reference=reference,
        )

    @staticmethod
    def get_recipe_entries(product: Product):
        """Recipe entries that limit production (positive requirement only)."""
        return [
            entry
            for entry in product.recipe.all()
            if entry.quantity_required is not None and entry.quantity_required > 0
        ]

    @staticmethod
    def compute_available_quantity(product: Product) -> int:
        """
        How many units of `product` can be sold right now.

        With a recipe: the scarcest ingredient decides, floor(on_hand / required).
        Without one: the product's direct stock count.
        """
        entries = InventoryService.get_recipe_entries(product)
        if not entries:
            return product.stock_quantity

        return min(
            math.floor(entry.ingredient.quantity / entry.quantity_required)
            for entry in entries
        )

    @staticmethod
    def check_availability(product: Product, quantity: int) -> int:
        """
        Raises InsufficientStock when fewer than `quantity` units are available.
        Returns the available quantity otherwise.
        """
        available = InventoryService.compute_available_quantity(product)
        if quantity > available:
            raise InsufficientStock(product, quantity, available)
        return available

    @staticmethod
    @transaction.atomic
    def ensure_lines_available(lines):
        """
        Validate a whole set of (product, quantity) lines before any mutation.

        Demand is summed per product for direct stock and per ingredient for
        recipe-tracked products, so a paid line and a bonus line of one
        product, or two products sharing an ingredient, are checked together.
        Quantities are read from locked rows, not from the passed instances.
        """
        demand = OrderedDict()
        for product, quantity in lines:
            if quantity is None or quantity <= 0:
                raise ValidationError(
                    f"Quantity for '{product.name}' must be greater than zero.",
                    product_id=product.pk,
                )
            if product.pk in demand:
                demand[product.pk] = (product, demand[product.pk][1] + quantity)
            else:
                demand[product.pk] = (product, quantity)

        if not demand:
            return

        entries_by_product = {}
        for entry in ProductIngredient.objects.filter(
            product_id__in=list(demand), quantity_required__gt=0
        ):
            entries_by_product.setdefault(entry.product_id, []).append(entry)

        ingredient_ids = {
            entry.ingredient_id for entries in entries_by_product.values() for entry in entries
        }
        on_hand = {
            ingredient.pk: ingredient.quantity
            for ingredient in Ingredient.objects.select_for_update().filter(pk__in=ingredient_ids)
        }
        direct_stock = {
            row.pk: row.stock_quantity
            for row in Product.objects.select_for_update().filter(
                pk__in=[pk for pk in demand if pk not in entries_by_product]
            )
        }

        ingredient_demand = {}
        for product_id, entries in entries_by_product.items():
            quantity = demand[product_id][1]
            for entry in entries:
                ingredient_demand[entry.ingredient_id] = (
                    ingredient_demand.get(entry.ingredient_id, Decimal("0"))
                    + entry.quantity_required * Decimal(quantity)
                )

        for product_id, (product, quantity) in demand.items():
            entries = entries_by_product.get(product_id)
            if not entries:
                available = direct_stock.get(product_id, 0)
                if quantity > available:
                    raise InsufficientStock(product, quantity, available)
                continue

            if all(ingredient_demand[e.ingredient_id] <= on_hand[e.ingredient_id] for e in entries):
                continue

            # What this product could still take once the other lines have theirs.
            available = min(
                math.floor(
                    max(
                        Decimal("0"),
                        on_hand[e.ingredient_id]
                        - (ingredient_demand[e.ingredient_id] - e.quantity_required * Decimal(quantity)),
                    )
                    / e.quantity_required
                )
                for e in entries
            )
            logger.warning(
                f"Ingredient shortage for {product.name} x{quantity}, {available} available"
            )
            raise InsufficientStock(product, quantity, available)

    @staticmethod
    def _apply(product: Product, quantity: int, sign: int, operation, reference=""):
        entries = InventoryService.get_recipe_entries(product)

        if entries:
            for entry in entries:
                ingredient = Ingredient.objects.select_for_update().get(pk=entry.ingredient_id)
                previous = ingredient.quantity
                change = entry.quantity_required * Decimal(quantity)
                ingredient.quantity = max(Decimal("0"), previous + sign * change)
                ingredient.save(update_fields=["quantity", "updated_at"])
                entry.ingredient.quantity = ingredient.quantity
                InventoryService._log_stock_operation(
                    operation, previous, ingredient.quantity,
                    ingredient=ingredient, reference=reference,
                )
            return

        locked = Product.objects.select_for_update().get(pk=product.pk)
        previous = locked.stock_quantity
        locked.stock_quantity = max(0, previous + sign * quantity)
        locked.save(update_fields=["stock_quantity", "updated_at"])
        product.stock_quantity = locked.stock_quantity
        InventoryService._log_stock_operation(
            operation, previous, locked.stock_quantity,
            product=locked, reference=reference,
        )

    @staticmethod
    @transaction.atomic
    def deduct(product: Product, quantity: int, reference=""):
        """
        Remove `quantity` units worth of stock, clamped at zero.
        Recipe-tracked products leave their own stock_quantity untouched.
        """
        InventoryService._apply(
            product, quantity, -1, StockMovement.Operation.ORDER_DEDUCTION, reference
        )
        logger.debug(f"Deducted stock for {product.name} x{quantity} ({reference})")

    @staticmethod
    @transaction.atomic
    def restore(product: Product, quantity: int, reference=""):
        """Inverse of deduct."""
        InventoryService._apply(
            product, quantity, 1, StockMovement.Operation.ORDER_RESTORATION, reference
        )
        logger.debug(f"Restored stock for {product.name} x{quantity} ({reference})")

    @staticmethod
    @transaction.atomic
    def deduct_order_items(items, reference=""):
        for item in items:
            InventoryService.deduct(item.product, item.quantity, reference)

    @staticmethod
    @transaction.atomic
    def restore_order_items(items, reference=""):
        for item in items:
            InventoryService.restore(item.product, item.quantity, reference)

    @staticmethod
    @transaction.atomic
    def adjust_ingredient_quantity(ingredient: Ingredient, new_quantity, reference="manual"):
        """
        Manual stock count correction. Negative quantities are rejected.
        """
        new_quantity = Decimal(str(new_quantity))
        if new_quantity < 0:
            raise ValidationError(
                "Ingredient quantity cannot be negative.", ingredient_id=ingredient.pk
            )

        locked = Ingredient.objects.select_for_update().get(pk=ingredient.pk)
        previous = locked.quantity
        locked.quantity = new_quantity
        locked.save(update_fields=["quantity", "updated_at"])
        InventoryService._log_stock_operation(
            StockMovement.Operation.MANUAL_ADJUSTMENT, previous, new_quantity,
            ingredient=locked, reference=reference,
        )
        logger.info(f"Adjusted {locked.name} from {previous} to {new_quantity}")
        return locked

    @staticmethod
    def get_product_availability(product: Product, requested: int = 1) -> dict:
        available = InventoryService.compute_available_quantity(product)
        return {
            "product_id": product.pk,
            "product_name": product.name,
            "available_quantity": available,
            "requested": requested,
            "is_available": product.is_orderable and available >= requested,
        }

    @staticmethod
    def get_low_stock_ingredients():
        return Ingredient.objects.filter(is_active=True, quantity__lte=F("min_quantity"))
