from fastapi import Depends, HTTPException, status

from app.core.security import Identity, get_current_identity

MANAGER = "manager"


def require_roles(*required: str):
    """
    Usage:
      Depends(require_roles("manager"))
      Depends(require_roles("manager", "member"))  # any-of
    """
    required_set = set(required)

    def _dep(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in required_set:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Forbidden. Requires one of: {sorted(required_set)}",
            )
        return identity

    return _dep
