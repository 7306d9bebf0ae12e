from __future__ import annotations

import logging

from messaging_hub.application.dto.principal import Principal
from messaging_hub.application.exceptions import AuthenticationError
from messaging_hub.application.ports.auth import TokenVerifier
from messaging_hub.application.uow import UnitOfWork
from messaging_hub.domain.value_objects.enums import Role

logger = logging.getLogger(__name__)


async def authenticate(
    token: str | None,
    verifier: TokenVerifier,
    uow: UnitOfWork,
) -> Principal:
    """Turn a bearer token into a Principal backed by a stored user."""
    if not token:
        raise AuthenticationError("Authentication required")

    claims = await verifier.verify(token)
    user = await uow.users.get_by_id(claims.user_id)
    if user is None:
        logger.info("Token for unknown user %s", claims.user_id)
        raise AuthenticationError("User not found")

    role = Role(user.role) if user.role in Role.__members__.values() else Role.USER
    return Principal(user_id=user.id, role=role, display_name=user.display_name)
