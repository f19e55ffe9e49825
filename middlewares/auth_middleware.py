import enum
from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import jwt
from sqlalchemy.orm import Session
from config.settings import settings
from config.database import get_db
from api.members.members_model import Member

security = HTTPBearer()


class PrincipalKind(str, enum.Enum):
    member     = "member"
    admin      = "admin"
    admin_user = "admin_user"


ADMIN_KINDS = (PrincipalKind.admin, PrincipalKind.admin_user)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def auth_middleware(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
):
    """
    Decode the bearer token into a principal dict. The `kind` claim is
    resolved here once; downstream code only checks `principal["kind"]`.
    """
    token = credentials.credentials
    try:
        decoded = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid token")

    principal_id = decoded.get("id")
    try:
        kind = PrincipalKind(decoded.get("kind", PrincipalKind.member.value))
    except ValueError:
        raise _unauthorized("Invalid token payload")
    if not principal_id:
        raise _unauthorized("Invalid token payload")

    if kind is PrincipalKind.member:
        member = (
            db.query(Member)
            .filter(Member.id == principal_id, Member.is_deleted.is_(False))
            .first()
        )
        if not member:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Member not found"
            )
        if not member.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Member inactive"
            )

    return {
        "id": principal_id,
        "kind": kind,
        "name": decoded.get("name"),
        "permissions": decoded.get("permissions", []),
    }
