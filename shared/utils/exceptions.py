"""
Centralized listing exceptions for consistent error handling.

Every exception logs itself with its context when raised, so the engine
boundary only has to decide what the user sees.

Usage:
    from shared.utils.exceptions import FetchFailure, BackendResponseError

    raise BackendResponseError("pedidos", status_code=502, message="Bad gateway")
    raise MutationFailure("productos", "delete", entity_id=12)
"""

from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class ListingError(Exception):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and message format.
    """

    def __init__(
        self,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        self.detail = detail
        self.context = log_context

        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, error=type(self).__name__, **log_context)

        super().__init__(detail)


# =============================================================================
# Fetch Errors
# =============================================================================


class FetchFailure(ListingError):
    """
    Network or backend error while listing a page or the full collection.

    Usage:
        raise FetchFailure("pedidos", "Connection refused")
    """

    def __init__(self, entity: str, reason: str | None = None, **log_context: Any):
        if reason:
            detail = f"Error al cargar {entity}: {reason}"
        else:
            detail = f"Error al cargar {entity}"

        self.entity = entity
        self.reason = reason
        super().__init__(detail, log_level="warning", entity=entity, **log_context)


class BackendResponseError(FetchFailure):
    """The backend answered with a non-2xx status."""

    def __init__(
        self,
        entity: str,
        status_code: int,
        message: str | None = None,
        **log_context: Any,
    ):
        self.status_code = status_code
        self.message = message
        reason = message or f"HTTP {status_code}"
        super().__init__(entity, reason, status_code=status_code, **log_context)


class MalformedResponseError(FetchFailure):
    """The response body is not a valid paged envelope."""

    def __init__(self, entity: str, reason: str, **log_context: Any):
        super().__init__(entity, f"respuesta inválida ({reason})", **log_context)


class PaginationBoundExceeded(FetchFailure):
    """A full-collection fetch needed more pages than allowed."""

    def __init__(self, entity: str, max_pages: int, **log_context: Any):
        self.max_pages = max_pages
        super().__init__(
            entity,
            f"se superó el límite de {max_pages} páginas",
            max_pages=max_pages,
            **log_context,
        )


# =============================================================================
# Mutation Errors
# =============================================================================


class MutationFailure(ListingError):
    """
    Create/update/delete/status change failed.

    Usage:
        raise MutationFailure("usuarios", "change_status", entity_id=4)
    """

    def __init__(
        self,
        entity: str,
        operation: str,
        reason: str | None = None,
        **log_context: Any,
    ):
        self.entity = entity
        self.operation = operation
        detail = f"Error al ejecutar {operation} en {entity}"
        if reason:
            detail = f"{detail}: {reason}"

        super().__init__(
            detail,
            log_level="error",
            entity=entity,
            operation=operation,
            **log_context,
        )


# =============================================================================
# Configuration Errors
# =============================================================================


class UnknownFilterFieldError(ListingError, ValueError):
    """A filter field is not declared for the entity."""

    def __init__(self, entity: str, field: str, **log_context: Any):
        self.entity = entity
        self.field = field
        super().__init__(
            f"El campo de filtro '{field}' no existe para {entity}",
            log_level="warning",
            entity=entity,
            field=field,
            **log_context,
        )
