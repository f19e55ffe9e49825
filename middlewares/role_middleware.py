from fastapi import HTTPException, Depends
from typing import List, Dict, Any
from middlewares.auth_middleware import auth_middleware, PrincipalKind, ADMIN_KINDS

def role_middleware(
    required_kinds: List[PrincipalKind] = None,
    required_permissions: List[str] = None
):
    # avoid mutable default args
    required_kinds = list(required_kinds or ADMIN_KINDS)
    required_permissions = required_permissions or []

    def dependency(user: Dict[str, Any] = Depends(auth_middleware)):
        # auth_middleware already raises 401 for bad tokens, so user is guaranteed
        if user.get("kind") not in required_kinds:
            raise HTTPException(
                status_code=403,
                detail=f"Forbidden: requires one of {[k.value for k in required_kinds]}"
            )

        user_permissions = user.get("permissions", [])
        if required_permissions and not all(p in user_permissions for p in required_permissions):
            raise HTTPException(
                status_code=403,
                detail=f"Forbidden: requires permissions {required_permissions}"
            )

        return user

    return dependency
