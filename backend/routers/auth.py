"""
Authentication dependency.

Sign-in happens in the frontend (Google OAuth with the drive.file scope).
The browser then sends the Google access token as a bearer token and this
backend forwards it to Drive untouched. There is no session here: the
token is extracted per request and passed explicitly to every operation.
"""

import logging
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from errors import AuthError

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Dependency returning the caller's Google access token.

    Raises:
        AuthError: If no bearer token was sent. Whether Google accepts the
            token is only known once the first Drive call is made.
    """
    if credentials is None or not credentials.credentials:
        logger.debug("Request without bearer token")
        raise AuthError()
    return credentials.credentials
