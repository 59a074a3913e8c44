"""Shared FastAPI dependencies."""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.errors import AuthenticationFailed, PermissionDenied
from app.core.security import Identity, decode_token
from app.db.session import get_db, store_errors
from app.services.cache import QueryCache
from app.services.toilets import ToiletService
from app.services.users import is_admin

bearer_scheme = HTTPBearer(auto_error=False)


def get_cache(request: Request) -> QueryCache:
    """The query cache created at startup (see app.main)."""
    return request.app.state.query_cache


def get_toilet_service(db: Session = Depends(get_db), cache: QueryCache = Depends(get_cache)) -> ToiletService:
    return ToiletService(db, cache, settings)


def get_optional_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity | None:
    if credentials is None:
        return None
    try:
        return decode_token(credentials.credentials)
    except AuthenticationFailed:
        return None


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    if credentials is None:
        raise AuthenticationFailed("No token provided")
    return decode_token(credentials.credentials)


def require_admin(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Identity:
    """Admin gate; the role comes from the users table, not the token."""
    with store_errors(db):
        allowed = is_admin(db, identity.external_id)
    if not allowed:
        raise PermissionDenied("Admin role required")
    return identity
