"""User endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_identity, require_admin
from app.core.security import Identity
from app.db.session import get_db, store_errors
from app.schemas.user import RoleUpdate, UserOut
from app.services import users

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserOut)
def get_me(identity: Identity = Depends(get_current_identity), db: Session = Depends(get_db)) -> UserOut:
    """The caller's local record, with the authoritative role."""
    with store_errors(db):
        return UserOut.model_validate(users.get_or_create_user(db, identity.external_id, identity.email))


@router.get("", response_model=list[UserOut])
def list_users(_admin: Identity = Depends(require_admin), db: Session = Depends(get_db)) -> list[UserOut]:
    with store_errors(db):
        return [UserOut.model_validate(u) for u in users.list_users(db)]


@router.post("/{external_id}/role", response_model=UserOut)
def update_role(
    external_id: str,
    payload: RoleUpdate,
    _admin: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
) -> UserOut:
    with store_errors(db):
        return UserOut.model_validate(users.set_role(db, external_id, payload.role))
