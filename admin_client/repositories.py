"""
REST repositories for the admin list screens.

The backend lists every resource with `GET /<resource>?page=&limit=&...`
and answers `{"data": [...], "total": n, "page": p}`. Query parameters with
empty values are never sent. Mutations answer `{"mensaje": ..., "data": {...}}`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from admin_client.http import ApiClient
from listing_engine.filters import FilterSet
from listing_engine.repository import ListingRepository, MutationOp, PagedResult
from shared.utils.exceptions import FetchFailure, MalformedResponseError, MutationFailure

Entity = dict[str, Any]


class PagedEnvelope(BaseModel):
    """Body of a paginated list response."""

    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]]
    total: int | None = None
    page: int | None = None


class ItemEnvelope(BaseModel):
    """Body of a create/update/status response."""

    model_config = ConfigDict(extra="ignore")

    mensaje: str | None = None
    data: dict[str, Any] | None = None


class RestListingRepository(ListingRepository[Entity]):
    """
    Generic REST repository. Subclasses set `resource` and, where the backend
    has a dedicated endpoint, override `_status_route`.
    """

    resource: str = ""

    def __init__(self, client: ApiClient):
        if not self.resource:
            raise ValueError(f"{type(self).__name__} must define a resource")
        self._client = client

    @property
    def entity(self) -> str:
        return self.resource

    # =========================================================================
    # Queries
    # =========================================================================

    async def list_paged(
        self,
        page: int,
        page_size: int,
        server_filters: FilterSet,
    ) -> PagedResult[Entity]:
        params = {"page": str(page), "limit": str(page_size)}
        params.update(server_filters.as_query_params())

        body = await self._client.request(
            "GET",
            f"/{self.resource}",
            entity=self.entity,
            params=params,
        )
        try:
            envelope = PagedEnvelope.model_validate(body)
        except PydanticValidationError as exc:
            raise MalformedResponseError(self.entity, f"{exc.error_count()} errores de validación", page=page) from exc

        # Some list endpoints omit the total; a page without one is the last page
        if envelope.total is None:
            total = (page - 1) * page_size + len(envelope.data)
        else:
            total = envelope.total
        return PagedResult(items=envelope.data, total=total, page=envelope.page or page)

    # =========================================================================
    # Commands
    # =========================================================================

    async def mutate(self, op: MutationOp, payload: dict[str, Any]) -> Entity | None:
        method, path, body = self._route(op, payload)
        try:
            response = await self._client.request(method, path, entity=self.entity, json=body)
        except FetchFailure as exc:
            raise MutationFailure(self.entity, op.value, exc.reason or exc.detail, path=path) from exc

        if response is None:
            return None
        try:
            return ItemEnvelope.model_validate(response).data
        except PydanticValidationError as exc:
            raise MutationFailure(self.entity, op.value, "respuesta inválida", path=path) from exc

    def _route(self, op: MutationOp, payload: dict[str, Any]) -> tuple[str, str, dict[str, Any] | None]:
        if op is MutationOp.CREATE:
            return "POST", f"/{self.resource}", payload

        entity_id = payload.get("id")
        if entity_id is None:
            raise MutationFailure(self.entity, op.value, "falta el campo 'id'")

        if op is MutationOp.UPDATE:
            body = {k: v for k, v in payload.items() if k != "id"}
            return "PATCH", f"/{self.resource}/{entity_id}", body
        if op is MutationOp.DELETE:
            return "DELETE", f"/{self.resource}/{entity_id}", None
        return self._status_route(entity_id, payload)

    def _status_route(self, entity_id: Any, payload: dict[str, Any]) -> tuple[str, str, dict[str, Any] | None]:
        if "estado" not in payload:
            raise MutationFailure(self.entity, MutationOp.CHANGE_STATUS.value, "falta el campo 'estado'")
        return "PATCH", f"/{self.resource}/{entity_id}", {"estado": payload["estado"]}


class OrdersRepository(RestListingRepository):
    resource = "pedidos"

    def _status_route(self, entity_id: Any, payload: dict[str, Any]) -> tuple[str, str, dict[str, Any] | None]:
        if "estado" not in payload:
            raise MutationFailure(self.entity, MutationOp.CHANGE_STATUS.value, "falta el campo 'estado'")
        return "PATCH", f"/pedidos/{entity_id}/estado", {"estado": payload["estado"]}


class ProductsRepository(RestListingRepository):
    resource = "productos"


class UsersRepository(RestListingRepository):
    resource = "usuarios"

    def _status_route(self, entity_id: Any, payload: dict[str, Any]) -> tuple[str, str, dict[str, Any] | None]:
        if "activo" not in payload:
            raise MutationFailure(self.entity, MutationOp.CHANGE_STATUS.value, "falta el campo 'activo'")
        action = "activar" if payload["activo"] else "desactivar"
        return "PATCH", f"/usuarios/{entity_id}/{action}", None
