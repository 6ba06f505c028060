"""
Centralized configuration management using the Singleton pattern.
Business logic reads tax rate, delivery fee and policy flags from
`app_settings` instead of querying GlobalSettings directly.
"""

from decimal import Decimal
from typing import Optional, Any
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError
import logging

logger = logging.getLogger(__name__)


class AppSettings:
    """
    A LAZY singleton that defers database loading until the first setting is
    accessed, so management commands like 'migrate' can run before the
    settings table exists.
    """

    _instance: Optional["AppSettings"] = None
    _initialized: bool = False

    def __new__(cls) -> "AppSettings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def _setup(self):
        if not self._initialized:
            self.load_settings()
            self._initialized = True

    def __getattr__(self, name: str) -> Any:
        if not self._initialized:
            self._setup()

        try:
            return self.__dict__[name]
        except KeyError:
            raise AttributeError(f"'AppSettings' object has no attribute '{name}'")

    def load_settings(self) -> None:
        """
        Load the GlobalSettings row, creating it with defaults if missing.
        """
        from .models import GlobalSettings

        try:
            settings_obj, created = GlobalSettings.objects.get_or_create(pk=1)
        except DatabaseError as e:
            raise ImproperlyConfigured(f"Failed to load settings: {e}")

        self.tax_rate: Decimal = settings_obj.tax_rate
        self.delivery_fee: Decimal = settings_obj.delivery_fee
        self.currency: str = settings_obj.currency
        self.order_number_prefix: str = settings_obj.order_number_prefix
        self.refund_discount_usage_on_cancel: bool = (
            settings_obj.refund_discount_usage_on_cancel
        )

        if created:
            logger.info("Created default GlobalSettings instance")

    def reload(self) -> None:
        """
        Reload settings from the database. Called when GlobalSettings is saved.
        """
        self.load_settings()
        self._initialized = True
        logger.info("AppSettings cache reloaded")

    def invalidate(self) -> None:
        """
        Drop the loaded values; the next attribute access reloads them.
        """
        for key in list(self.__dict__):
            del self.__dict__[key]
        self._initialized = False

    def __str__(self) -> str:
        return (
            f"AppSettings(tax_rate={self.tax_rate}, "
            f"delivery_fee={self.delivery_fee}, currency={self.currency})"
        )


# Create the singleton instance at module level
app_settings = AppSettings()
