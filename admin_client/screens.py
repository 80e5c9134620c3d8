"""
Static configuration of the three admin list screens.

Search and single-category selects are evaluated by the backend; status
tiles, flags, derived stock bands, date ranges and secondary enums are not
exposed as paginated query parameters, so they are evaluated locally.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from admin_client.http import ApiClient
from admin_client.repositories import (
    OrdersRepository,
    ProductsRepository,
    RestListingRepository,
    UsersRepository,
)
from listing_engine.capabilities import (
    Capability,
    EntityCapability,
    FieldSpec,
    MatchKind,
    register,
)
from listing_engine.engine import ListingEngine
from listing_engine.predicates import resolve
from listing_engine.stats import StatCounter
from shared.config.constants import AccountState, OrderStatus, ProductStatus, StockBand, UserType
from shared.config.settings import settings

SERVER = Capability.SERVER
LOCAL = Capability.LOCAL


# =============================================================================
# Derived bands
# =============================================================================


def stock_band(product: Mapping[str, Any], band: str) -> bool:
    """
    Match a product against a stock band.

    Products without stockMinimo use the configured default threshold.
    """
    stock = resolve(product, "stock") or 0
    minimum = resolve(product, "stockMinimo") or settings.default_stock_minimum
    if band == StockBand.OUT_OF_STOCK:
        return stock == 0
    if band == StockBand.LOW_STOCK:
        return 0 < stock <= minimum
    if band == StockBand.IN_STOCK:
        return stock > 0
    return False


def _is_active_user(user: Mapping[str, Any]) -> bool:
    # Accounts created before the flag existed have no `activo`
    return resolve(user, "activo") is not False


def account_state(user: Mapping[str, Any], state: str) -> bool:
    """Match a user against ACTIVO/INACTIVO."""
    if state == AccountState.ACTIVE:
        return _is_active_user(user)
    if state == AccountState.INACTIVE:
        return not _is_active_user(user)
    return False


# =============================================================================
# Pedidos
# =============================================================================


ORDERS = register(EntityCapability.build("pedidos", [
    FieldSpec(
        "busqueda", SERVER, MatchKind.SEARCH,
        search_attributes=("numero", "usuario.nombres", "usuario.apellidos", "usuario.email"),
    ),
    FieldSpec("estado", LOCAL, MatchKind.EXACT),
    FieldSpec("metodoPago", LOCAL, MatchKind.EXACT),
    FieldSpec("metodoEnvio", LOCAL, MatchKind.EXACT),
    FieldSpec("fecha", LOCAL, MatchKind.DATE_RANGE, attribute="creadoEn"),
]))

ORDER_STATS: dict[str, StatCounter] = {
    status: (lambda order, status=status: resolve(order, "estado") == status)
    for status in OrderStatus.ALL
}


# =============================================================================
# Productos
# =============================================================================


PRODUCTS = register(EntityCapability.build("productos", [
    FieldSpec(
        "busqueda", SERVER, MatchKind.SEARCH,
        search_attributes=("nombre", "sku", "descripcion"),
    ),
    FieldSpec("categoriaId", SERVER, MatchKind.EXACT, attribute="categoria.id"),
    FieldSpec("estado", LOCAL, MatchKind.EXACT),
    FieldSpec("destacado", LOCAL, MatchKind.FLAG),
    FieldSpec("stock", LOCAL, MatchKind.BAND, band=stock_band),
]))

PRODUCT_STATS: dict[str, StatCounter] = {
    "activos": lambda p: resolve(p, "estado") == ProductStatus.ACTIVE,
    "inactivos": lambda p: resolve(p, "estado") == ProductStatus.INACTIVE,
    "agotados": lambda p: resolve(p, "estado") == ProductStatus.SOLD_OUT,
    "enStock": lambda p: stock_band(p, StockBand.IN_STOCK),
    "sinStock": lambda p: stock_band(p, StockBand.OUT_OF_STOCK),
    "stockBajo": lambda p: stock_band(p, StockBand.LOW_STOCK),
    "destacados": lambda p: bool(resolve(p, "destacado")),
}


# =============================================================================
# Usuarios
# =============================================================================


USERS = register(EntityCapability.build("usuarios", [
    FieldSpec(
        "busqueda", SERVER, MatchKind.SEARCH,
        search_attributes=("email", "nombres", "apellidos"),
    ),
    FieldSpec("tipoUsuario", LOCAL, MatchKind.EXACT),
    FieldSpec("estado", LOCAL, MatchKind.BAND, band=account_state),
    FieldSpec("fechaRegistro", LOCAL, MatchKind.DATE_RANGE, attribute="creadoEn"),
]))

USER_STATS: dict[str, StatCounter] = {
    "activos": _is_active_user,
    "inactivos": lambda u: not _is_active_user(u),
    "admins": lambda u: resolve(u, "tipoUsuario") == UserType.ADMIN,
    "clientes": lambda u: resolve(u, "tipoUsuario") == UserType.CUSTOMER,
}


# =============================================================================
# Screens
# =============================================================================


@dataclass(frozen=True)
class Screen:
    """Everything needed to build the listing engine of one admin screen."""

    capability: EntityCapability
    counters: Mapping[str, StatCounter]
    repository_class: type[RestListingRepository]
    columns: tuple[str, ...]

    @property
    def entity(self) -> str:
        return self.capability.entity


SCREENS: dict[str, Screen] = {
    "pedidos": Screen(
        ORDERS, ORDER_STATS, OrdersRepository,
        columns=("id", "numero", "estado", "metodoPago", "total", "creadoEn"),
    ),
    "productos": Screen(
        PRODUCTS, PRODUCT_STATS, ProductsRepository,
        columns=("id", "nombre", "sku", "estado", "stock", "destacado"),
    ),
    "usuarios": Screen(
        USERS, USER_STATS, UsersRepository,
        columns=("id", "email", "nombres", "apellidos", "tipoUsuario", "activo"),
    ),
}


def get_screen(entity: str) -> Screen:
    try:
        return SCREENS[entity]
    except KeyError:
        available = ", ".join(sorted(SCREENS))
        raise KeyError(f"Pantalla desconocida '{entity}' (disponibles: {available})") from None


def build_engine(entity: str, client: ApiClient, **engine_options: Any) -> ListingEngine[dict[str, Any]]:
    """
    Build the listing engine for one admin screen.

    Usage:
        async with ApiClient() as client:
            engine = build_engine("productos", client)
            await engine.start()
    """
    screen = get_screen(entity)
    return ListingEngine(
        screen.repository_class(client),
        screen.capability,
        screen.counters,
        **engine_options,
    )
