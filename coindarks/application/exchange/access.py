"""Role checks shared by the admin use cases."""

import logging

from coindarks.domain.exchange.entities import Caller
from coindarks.domain.exchange.errors import PermissionDeniedError

logger = logging.getLogger(__name__)


def require_admin(caller: Caller) -> None:
    """Raise PermissionDeniedError unless the caller is an administrator."""
    if not caller.is_admin:
        logger.warning(
            "Admin operation denied for user=%s role=%s",
            caller.user_id,
            caller.role.value,
        )
        raise PermissionDeniedError()
