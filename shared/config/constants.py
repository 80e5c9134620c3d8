"""
Centralized constants for the admin listing screens.
Avoid magic strings and repeated constants.

Values match the backend's enums verbatim, so they can be sent as query
parameters and compared against entity fields without translation.

Usage:
    from shared.config.constants import OrderStatus, StockBand, Limits

    if order["estado"] == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# Order Constants
# =============================================================================


class OrderStatus:
    """Order (pedido) status constants."""

    PENDING: Final[str] = "PENDIENTE"
    CONFIRMED: Final[str] = "CONFIRMADO"
    PROCESSING: Final[str] = "PROCESANDO"
    SHIPPED: Final[str] = "ENVIADO"
    DELIVERED: Final[str] = "ENTREGADO"
    CANCELED: Final[str] = "CANCELADO"

    ALL: Final[list[str]] = [PENDING, CONFIRMED, PROCESSING, SHIPPED, DELIVERED, CANCELED]


class PaymentMethod:
    """Payment method constants."""

    CASH: Final[str] = "EFECTIVO"
    CREDIT_CARD: Final[str] = "TARJETA_CREDITO"
    DEBIT_CARD: Final[str] = "TARJETA_DEBITO"
    TRANSFER: Final[str] = "TRANSFERENCIA"
    YAPE: Final[str] = "YAPE"
    PLIN: Final[str] = "PLIN"

    ALL: Final[list[str]] = [CASH, CREDIT_CARD, DEBIT_CARD, TRANSFER, YAPE, PLIN]


class ShippingMethod:
    """Shipping method constants."""

    STORE_PICKUP: Final[str] = "RECOJO_TIENDA"
    DELIVERY: Final[str] = "DELIVERY"
    NATIONAL: Final[str] = "ENVIO_NACIONAL"

    ALL: Final[list[str]] = [STORE_PICKUP, DELIVERY, NATIONAL]


# =============================================================================
# Product Constants
# =============================================================================


class ProductStatus:
    """Product status constants."""

    ACTIVE: Final[str] = "ACTIVO"
    INACTIVE: Final[str] = "INACTIVO"
    SOLD_OUT: Final[str] = "AGOTADO"

    ALL: Final[list[str]] = [ACTIVE, INACTIVE, SOLD_OUT]


class StockBand:
    """Derived stock bands used by the product stock filter."""

    OUT_OF_STOCK: Final[str] = "sin_stock"  # stock == 0
    LOW_STOCK: Final[str] = "stock_bajo"  # 0 < stock <= stockMinimo
    IN_STOCK: Final[str] = "con_stock"  # stock > 0

    ALL: Final[list[str]] = [OUT_OF_STOCK, LOW_STOCK, IN_STOCK]


# =============================================================================
# User Constants
# =============================================================================


class UserType:
    """Account type constants."""

    CUSTOMER: Final[str] = "CLIENTE"
    ADMIN: Final[str] = "ADMIN"

    ALL: Final[list[str]] = [CUSTOMER, ADMIN]


class AccountState:
    """Account state values used by the user status filter."""

    ACTIVE: Final[str] = "ACTIVO"
    INACTIVE: Final[str] = "INACTIVO"

    ALL: Final[list[str]] = [ACTIVE, INACTIVE]


# =============================================================================
# Validation Limits
# =============================================================================


class Limits:
    """Validation limits."""

    # String lengths
    MAX_SEARCH_TERM_LENGTH: Final[int] = 100

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 10
    BULK_PAGE_SIZE: Final[int] = 50  # Backend rejects larger pages
    MAX_PAGE_SIZE: Final[int] = 50
