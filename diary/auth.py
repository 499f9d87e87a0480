"""Request identity resolution."""

from typing import Optional

from fastapi import Depends, Header, Request

from common.logging_config import get_logger
from diary.config import Settings, get_settings
from diary.exceptions import UnauthorizedError

logger = get_logger(__name__)


def extract_token(authorization: Optional[str], cookie_value: Optional[str]) -> Optional[str]:
    """
    Pick the API key from the Authorization header, falling back to the session cookie.

    Args:
        authorization: Authorization header value (format: "Bearer <api_key>")
        cookie_value: Value of the session cookie

    Returns:
        The API key, or None when neither source carries one
    """
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2 and parts[0] == "Bearer" and parts[1]:
            return parts[1]
    if cookie_value:
        return cookie_value
    return None


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
) -> str:
    """
    FastAPI dependency to validate the API key and extract user_id.

    Returns:
        user_id of the authenticated user

    Raises:
        UnauthorizedError: 401 if the key is missing or unknown
    """
    token = extract_token(authorization, request.cookies.get(settings.cookie_name))
    if token is None:
        raise UnauthorizedError("unauthorized")

    user_id = settings.api_keys.get(token)
    if user_id is None:
        logger.warning(f"Invalid API key for {request.method} {request.url.path}")
        raise UnauthorizedError("invalid token")

    request.state.user_id = user_id
    logger.debug(f"Request authenticated [user_id={user_id}] path={request.url.path}")
    return user_id
