# app/core/security.py
from uuid import UUID
import logging
import os

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

logger = logging.getLogger(__name__)

JWT_SECRET = os.getenv("JWT_SECRET", "change-me-in-production-not-a-real-secret")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")

bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> UUID:
    """ Resolve a bearer token to the caller's user id (`_id` claim, `sub` as fallback). """
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    subject = payload.get("_id") or payload.get("sub")
    if not subject:
        raise jwt.InvalidTokenError("Token has no subject")
    try:
        return UUID(str(subject))
    except ValueError:
        raise jwt.InvalidTokenError("Token subject is not a user id")


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> UUID:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=401, detail="No token provided or invalid format")

    try:
        return decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=403, detail="Token expired. Please login again.")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected bearer token: %s", e)
        raise HTTPException(status_code=403, detail="Invalid token. Authentication failed.")
