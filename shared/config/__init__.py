"""
Configuration module: Settings, logging, constants.
"""

from shared.config.settings import settings, get_settings
from shared.config.logging import get_logger, setup_logging
from shared.config.constants import (
    OrderStatus,
    PaymentMethod,
    ShippingMethod,
    ProductStatus,
    StockBand,
    UserType,
    AccountState,
    Limits,
)

__all__ = [
    # settings
    "settings",
    "get_settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "OrderStatus",
    "PaymentMethod",
    "ShippingMethod",
    "ProductStatus",
    "StockBand",
    "UserType",
    "AccountState",
    "Limits",
]
