from .models import Discount
from .strategies import (
    DiscountStrategy,
    PercentageDiscountStrategy,
    FixedAmountDiscountStrategy,
    BuyXGetYDiscountStrategy,
)


class DiscountStrategyFactory:
    """
    Factory for creating a discount strategy based on the discount's type.
    """

    _strategies = {
        Discount.DiscountType.PERCENTAGE: PercentageDiscountStrategy,
        Discount.DiscountType.FIXED_AMOUNT: FixedAmountDiscountStrategy,
        Discount.DiscountType.BUY_X_GET_Y: BuyXGetYDiscountStrategy,
    }

    @staticmethod
    def get_strategy(discount: Discount) -> DiscountStrategy:
        strategy_class = DiscountStrategyFactory._strategies.get(discount.type)

        if strategy_class:
            return strategy_class()

        raise NotImplementedError(
            f"No strategy implemented for discount type '{discount.type}'"
        )
