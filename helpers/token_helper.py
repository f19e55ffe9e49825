import jwt
import datetime
from typing import Any, Dict, List, Optional

from config.settings import settings  # must define SECRET_KEY and ALGORITHM
from middlewares.auth_middleware import PrincipalKind

def create_access_token(
    payload: Dict[str, Any],
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Generate a JWT access token with the given payload and expiration.
    """
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    expire = datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=minutes)
    to_encode = payload.copy()
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_principal_token(
    principal_id: int,
    kind: PrincipalKind = PrincipalKind.member,
    name: Optional[str] = None,
    permissions: Optional[List[str]] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """
    Token for a member or an admin principal. Login lives outside this
    service; this is used by tooling and tests.
    """
    token_payload: Dict[str, Any] = {
        "id":          principal_id,
        "kind":        PrincipalKind(kind).value,
        "name":        name,
        "permissions": permissions or [],
    }
    return create_access_token(token_payload, expires_minutes)
