"""FastAPI dependencies for injection into route handlers."""

from fastapi import Depends, HTTPException, Path, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from clubreserva.core.auth import user_id_from_token
from clubreserva.core.database import get_db
from clubreserva.models.member import ClubRole
from clubreserva.services.store import PricingStore

bearer_scheme = HTTPBearer(auto_error=False)


def get_pricing_store(db: AsyncSession = Depends(get_db)) -> PricingStore:
    return PricingStore(db)


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


async def get_optional_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int | None:
    """Caller identity if a bearer token was sent, None for anonymous callers.

    A token that is present but invalid is rejected rather than treated as anonymous.
    """
    if credentials is None:
        return None
    try:
        return user_id_from_token(credentials.credentials)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


async def get_current_user_id(user_id: int | None = Depends(get_optional_user_id)) -> int:
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return user_id


# ---------------------------------------------------------------------------
# Club-level RBAC
# ---------------------------------------------------------------------------


async def require_club_admin(
    club_id: int = Path(...),
    user_id: int = Depends(get_current_user_id),
    store: PricingStore = Depends(get_pricing_store),
) -> int:
    """Require the caller to hold the admin role in the club named by the URL."""
    if not await store.has_club_role(user_id, club_id, ClubRole.ADMIN):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Club admin access required")
    return user_id
