"""
Actor identity for incoming requests

Authentication happens upstream; the gateway forwards the verified user id
in the X-User-Id header.
"""
from typing import Optional
from uuid import UUID

from fastapi import Header

from decisionlog.core.exceptions import AuthenticationError
from decisionlog.core.logging_config import LoggingConfig


async def get_current_actor_id(x_user_id: Optional[str] = Header(default=None)) -> UUID:
    """
    Get the acting user id from the request

    Raises:
        AuthenticationError: header missing or not a UUID
    """
    if not x_user_id:
        raise AuthenticationError("User ID is required")
    try:
        actor_id = UUID(x_user_id)
    except ValueError:
        raise AuthenticationError("User ID is malformed")

    LoggingConfig.set_context(actor_id=str(actor_id))
    return actor_id
