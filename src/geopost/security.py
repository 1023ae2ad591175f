from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from . import config

JWT_ALGORITHM = "HS256"
USERNAME_CLAIM = "username"

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing token",
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str | None) -> str:
    """Verify a bearer token and return the username it was issued to."""
    secret = config.get_jwt_secret()
    if not secret or not token:
        raise _unauthorized()
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except JWTError:
        raise _unauthorized()
    username = claims.get(USERNAME_CLAIM)
    if not isinstance(username, str) or not username:
        raise _unauthorized()
    return username


async def require_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str:
    token = credentials.credentials if credentials is not None else None
    return verify_token(token)


CurrentUser = Annotated[str, Depends(require_user)]
