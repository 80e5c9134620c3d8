"""
Shared module for common utilities across the listing engine and the admin client.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Order/product/user enums, limits

- shared.utils: Utilities
  - exceptions.py: Listing and mutation exceptions with auto-logging

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.logging import get_logger
    from shared.config.constants import OrderStatus, Limits
    from shared.utils.exceptions import FetchFailure, MutationFailure
"""
