"""Authentication utilities."""

import uuid

from fastapi import Header

from insights.config import API_KEY_PREFIX
from insights.exceptions import InvalidAPIKeyError
from insights.repositories.user_repository import UserRepository


def generate_api_key() -> str:
    """
    Generate a new API Key with the configured prefix.

    Returns:
        API Key string in format: {prefix}{uuid4}
    """
    return f"{API_KEY_PREFIX}{uuid.uuid4()}"


async def get_current_user(authorization: str = Header(...)) -> str:
    """
    FastAPI dependency to validate API Key and extract user_id.

    Args:
        authorization: Authorization header value (format: "Bearer <api_key>")

    Returns:
        user_id of the authenticated user (the principal)

    Raises:
        InvalidAPIKeyError: If the header is malformed or the key is unknown
    """
    if not authorization.startswith("Bearer "):
        raise InvalidAPIKeyError("Invalid authorization header format")

    api_key = authorization[len("Bearer "):].strip()
    if not api_key.startswith(API_KEY_PREFIX):
        raise InvalidAPIKeyError("Invalid API key")

    user = UserRepository.get_by_api_key(api_key)
    if user is None:
        raise InvalidAPIKeyError("Invalid API key")

    return user.user_id
