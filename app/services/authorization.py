"""
Ownership checks.

There are no roles and no admin override: a caller may mutate a resource
only when its id equals the resource owner's id.
"""
import logging

from app.errors import ForbiddenError

logger = logging.getLogger(__name__)


def authorize(caller_id: str, owner_id: str) -> bool:
    return caller_id is not None and caller_id == owner_id


def ensure_owner(caller_id: str, owner_id: str, entity: str, entity_id: str) -> None:
    """Raise ``ForbiddenError`` unless *caller_id* owns the resource."""
    if not authorize(caller_id, owner_id):
        logger.warning(
            "Ownership check denied: user %s on %s %s", caller_id, entity, entity_id
        )
        raise ForbiddenError(f"You are not allowed to modify this {entity}")
