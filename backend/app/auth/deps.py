"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_token_claims  → decoded JWT claims, {} for anonymous or invalid tokens
  get_is_admin      → capability flag for read endpoints (visibility)
  require_admin     → raise UnauthorizedError (403) unless admin
  get_store         → request-scoped CatalogStore
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.jwt import decode_token
from app.auth.permissions import is_admin
from app.database import get_db
from app.middleware.exceptions import UnauthorizedError
from app.services.catalog_store import CatalogStore

bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    """Decode the bearer token if one was sent.

    Reads are open to anonymous callers, so a missing or bad token is not
    an error here; it just carries no capabilities.
    """
    if credentials is None:
        return {}
    return decode_token(credentials.credentials)


async def get_is_admin(claims: dict = Depends(get_token_claims)) -> bool:
    return is_admin(claims)


async def require_admin(claims: dict = Depends(get_token_claims)) -> dict:
    """Restrict an endpoint to admins. Checked before any work is done."""
    if not is_admin(claims):
        raise UnauthorizedError()
    return claims


async def get_store(db: AsyncSession = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)
